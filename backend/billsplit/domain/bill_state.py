# backend/billsplit/domain/bill_state.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterable, Optional, Sequence
from uuid import uuid4

from billsplit.domain.models import (
    Assignment,
    BillData,
    CustomSplitEntry,
    Item,
    Person,
    TaxInput,
)
from billsplit.domain.money import Cents

# Edits to the bill the UI layer holds. Each one returns a new BillData and
# keeps assignments consistent with the current people and items, so the
# result can go straight into compute_bill_summary.


def _new_id() -> str:
    return str(uuid4())


def add_person(bill: BillData, name: str, *, person_id: Optional[str] = None) -> BillData:
    """
    Append a person. Blank names are ignored and the bill is returned as is.
    """
    trimmed = name.strip()
    if not trimmed:
        return bill
    person = Person(id=person_id or _new_id(), name=trimmed)
    return replace(bill, people=bill.people + (person,))


def remove_person(bill: BillData, person_id: str) -> BillData:
    """
    Drop a person and take them out of every assignment.

    An assignment left with nobody is deleted, so the item goes back to
    being unassigned instead of keeping a slot for a missing person.
    """
    people = tuple(p for p in bill.people if p.id != person_id)

    assignments: Dict[str, Assignment] = {}
    for item_id, assignment in bill.assignments.items():
        person_ids = tuple(pid for pid in assignment.person_ids if pid != person_id)
        if not person_ids:
            continue
        if person_ids == assignment.person_ids:
            assignments[item_id] = assignment
        else:
            assignments[item_id] = replace(assignment, person_ids=person_ids)

    return replace(bill, people=people, assignments=assignments)


def add_item(
    bill: BillData, name: str, price_cents: Cents, *, item_id: Optional[str] = None
) -> BillData:
    """
    Append an item. Blank names and negative prices are ignored.
    """
    trimmed = name.strip()
    if not trimmed or price_cents < 0:
        return bill
    item = Item(id=item_id or _new_id(), name=trimmed, price_cents=price_cents)
    return replace(bill, items=bill.items + (item,))


def remove_item(bill: BillData, item_id: str) -> BillData:
    items = tuple(it for it in bill.items if it.id != item_id)
    assignments = {k: a for k, a in bill.assignments.items() if k != item_id}
    return replace(bill, items=items, assignments=assignments)


def assign_item(bill: BillData, item_id: str, person_ids: Sequence[str]) -> BillData:
    """
    Replace who shares an item. An empty list unassigns it.
    Any custom split on the item is discarded.
    """
    assignments = dict(bill.assignments)
    if not person_ids:
        assignments.pop(item_id, None)
    else:
        assignments[item_id] = Assignment(item_id=item_id, person_ids=tuple(person_ids))
    return replace(bill, assignments=assignments)


def set_custom_split(
    bill: BillData, item_id: str, custom_split: Iterable[CustomSplitEntry]
) -> BillData:
    """
    Override the equal split of an assigned item. No-op for unassigned items.
    """
    assignment = bill.assignments.get(item_id)
    if assignment is None:
        return bill
    assignments = dict(bill.assignments)
    assignments[item_id] = replace(assignment, custom_split=tuple(custom_split))
    return replace(bill, assignments=assignments)


def clear_custom_split(bill: BillData, item_id: str) -> BillData:
    assignment = bill.assignments.get(item_id)
    if assignment is None:
        return bill
    assignments = dict(bill.assignments)
    assignments[item_id] = replace(assignment, custom_split=None)
    return replace(bill, assignments=assignments)


def set_tax_input(bill: BillData, tax_input: Optional[TaxInput]) -> BillData:
    return replace(bill, tax_input=tax_input)


def set_tip_rate(bill: BillData, rate: float) -> BillData:
    """
    Set the tip rate, clamped to [0, 1].
    """
    return replace(bill, tip_rate=max(0, min(1, rate)))


def reset() -> BillData:
    return BillData()
