# backend/tests/test_validators.py
import copy
import logging

import pytest

from billsplit.api.validators import (
    SnapshotValidationError,
    bill_data_to_json,
    load_bill_data_or_default,
    parse_bill_data,
    parse_tax_input,
)
from billsplit.domain.models import (
    Assignment,
    BillData,
    CustomSplitEntry,
    ExactTax,
    Item,
    Person,
    RateTax,
)


def _snapshot():
    return {
        "people": [{"id": "p1", "name": "Alice"}, {"id": "p2", "name": "Bob"}],
        "items": [
            {"id": "i1", "name": "Burger", "priceInCents": 1200},
            {"id": "i2", "name": "Wine", "priceInCents": 1000},
        ],
        "assignments": {
            "i1": {"itemId": "i1", "personIds": ["p1"]},
            "i2": {
                "itemId": "i2",
                "personIds": ["p1", "p2"],
                "customSplit": [
                    {"personId": "p1", "amountInCents": 600},
                    {"personId": "p2", "amountInCents": 400},
                ],
            },
        },
        "taxInput": {"type": "rate", "rate": 0.1},
        "tipRate": 0.18,
    }


def test_parse_bill_data_happy_path():
    bill = parse_bill_data(_snapshot())

    assert bill.people == (Person("p1", "Alice"), Person("p2", "Bob"))
    assert bill.items == (Item("i1", "Burger", 1200), Item("i2", "Wine", 1000))
    assert bill.assignments["i1"] == Assignment("i1", ("p1",))
    assert bill.assignments["i2"].custom_split == (
        CustomSplitEntry("p1", 600),
        CustomSplitEntry("p2", 400),
    )
    assert bill.tax_input == RateTax(0.1)
    assert bill.tip_rate == 0.18


def test_parse_default_state():
    raw = {"people": [], "items": [], "assignments": {}, "taxInput": None, "tipRate": 0.18}
    assert parse_bill_data(raw) == BillData()


def test_parse_tax_input_variants():
    assert parse_tax_input(None) is None
    assert parse_tax_input({"type": "exact", "amount": 250}) == ExactTax(250)
    assert parse_tax_input({"type": "rate", "rate": 0}) == RateTax(0)


def test_serialization_matches_incoming_snapshot():
    raw = _snapshot()
    assert bill_data_to_json(parse_bill_data(raw)) == raw


def _mutated(mutate):
    raw = copy.deepcopy(_snapshot())
    mutate(raw)
    return raw


@pytest.mark.parametrize(
    "mutate, fragment",
    [
        (lambda r: r["people"][0].update(name=""), "people[0].name"),
        (lambda r: r["people"].append("Carol"), "people[2]"),
        (lambda r: r["items"][0].update(priceInCents=-1), "items[0].priceInCents"),
        (lambda r: r["items"][0].update(priceInCents=12.5), "items[0].priceInCents"),
        (lambda r: r["items"][0].update(priceInCents=True), "items[0].priceInCents"),
        (lambda r: r["items"][1].update(name=""), "items[1].name"),
        (lambda r: r["assignments"]["i1"].update(personIds="p1"), "assignments.i1.personIds"),
        (lambda r: r["assignments"]["i1"].update(personIds=[1]), "assignments.i1.personIds[0]"),
        (lambda r: r["assignments"]["i2"]["customSplit"][0].update(amountInCents=-5), "customSplit[0].amountInCents"),
        (lambda r: r.update(taxInput={"type": "percent", "rate": 0.1}), "taxInput.type"),
        (lambda r: r.update(taxInput={"type": "rate", "rate": 1.5}), "taxInput.rate"),
        (lambda r: r.update(taxInput={"type": "exact", "amount": 1.5}), "taxInput.amount"),
        (lambda r: r.update(tipRate=-0.1), "tipRate"),
        (lambda r: r.update(tipRate="0.2"), "tipRate"),
        (lambda r: r.pop("taxInput"), "taxInput"),
        (lambda r: r.update(assignments=[]), "assignments"),
    ],
)
def test_parse_bill_data_rejects_invalid_snapshots(mutate, fragment):
    with pytest.raises(SnapshotValidationError) as exc_info:
        parse_bill_data(_mutated(mutate))
    assert fragment in str(exc_info.value)


def test_parse_bill_data_rejects_non_object():
    with pytest.raises(SnapshotValidationError):
        parse_bill_data(["not", "a", "bill"])


def test_load_bill_data_or_default_resets_invalid_state(caplog):
    raw = _mutated(lambda r: r.update(tipRate=2))

    with caplog.at_level(logging.WARNING, logger="billsplit.api.validators"):
        bill = load_bill_data_or_default(raw)

    assert bill == BillData()
    assert "resetting to defaults" in caplog.text


def test_load_bill_data_or_default_keeps_valid_state():
    assert load_bill_data_or_default(_snapshot()) == parse_bill_data(_snapshot())

