# backend/tests/test_bill_state.py
from billsplit.domain.bill_state import (
    add_item,
    add_person,
    assign_item,
    clear_custom_split,
    remove_item,
    remove_person,
    reset,
    set_custom_split,
    set_tax_input,
    set_tip_rate,
)
from billsplit.domain.models import Assignment, BillData, CustomSplitEntry, RateTax
from billsplit.domain.person_totals import compute_bill_summary


def _bill():
    bill = BillData()
    bill = add_person(bill, "Alice", person_id="alice")
    bill = add_person(bill, "Bob", person_id="bob")
    bill = add_person(bill, "Carol", person_id="carol")
    bill = add_item(bill, "Pizza", 1000, item_id="pizza")
    bill = add_item(bill, "Soda", 300, item_id="soda")
    bill = assign_item(bill, "pizza", ["alice", "bob", "carol"])
    bill = assign_item(bill, "soda", ["bob"])
    return bill


def test_add_person_trims_name():
    bill = add_person(BillData(), "  Alice  ", person_id="alice")
    assert [(p.id, p.name) for p in bill.people] == [("alice", "Alice")]


def test_add_person_generates_unique_ids():
    bill = add_person(add_person(BillData(), "Alice"), "Alice")
    ids = [p.id for p in bill.people]
    assert len(set(ids)) == 2
    assert all(ids)


def test_add_person_ignores_blank_names():
    bill = BillData()
    assert add_person(bill, "   ") is bill


def test_add_item_ignores_blank_names_and_negative_prices():
    bill = BillData()
    assert add_item(bill, "", 100) is bill
    assert add_item(bill, "Fries", -1) is bill

    bill = add_item(bill, " Fries ", 0, item_id="fries")
    assert [(i.id, i.name, i.price_cents) for i in bill.items] == [("fries", "Fries", 0)]


def test_edits_leave_the_original_bill_untouched():
    bill = _bill()
    remove_person(bill, "alice")
    assert len(bill.people) == 3
    assert bill.assignments["pizza"].person_ids == ("alice", "bob", "carol")


def test_remove_person_cleans_up_assignments():
    bill = remove_person(_bill(), "alice")

    assert [p.id for p in bill.people] == ["bob", "carol"]
    assert bill.assignments["pizza"].person_ids == ("bob", "carol")
    assert bill.assignments["soda"].person_ids == ("bob",)


def test_remove_person_deletes_emptied_assignments():
    bill = remove_person(_bill(), "bob")
    assert "soda" not in bill.assignments
    assert bill.assignments["pizza"].person_ids == ("alice", "carol")


def test_remove_person_keeps_every_assigned_cent_charged():
    bill = remove_person(_bill(), "alice")
    summary = compute_bill_summary(set_tip_rate(bill, 0))

    # pizza is now split two ways instead of keeping a slot for Alice
    assert [b.items_subtotal for b in summary.person_breakdowns] == [800, 500]
    assert summary.grand_total == summary.bill_subtotal == 1300


def test_remove_item_drops_its_assignment():
    bill = remove_item(_bill(), "pizza")
    assert [i.id for i in bill.items] == ["soda"]
    assert list(bill.assignments) == ["soda"]


def test_assign_item_with_empty_list_unassigns():
    bill = assign_item(_bill(), "soda", [])
    assert "soda" not in bill.assignments


def test_assign_item_replaces_people_and_clears_custom_split():
    bill = set_custom_split(_bill(), "soda", [CustomSplitEntry("bob", 300)])
    bill = assign_item(bill, "soda", ["carol", "alice"])
    assert bill.assignments["soda"] == Assignment("soda", ("carol", "alice"))


def test_set_custom_split_only_on_assigned_items():
    bill = assign_item(_bill(), "soda", [])
    assert set_custom_split(bill, "soda", [CustomSplitEntry("bob", 300)]) is bill

    entries = [CustomSplitEntry("alice", 500), CustomSplitEntry("bob", 300), CustomSplitEntry("carol", 200)]
    bill = set_custom_split(bill, "pizza", entries)
    assert bill.assignments["pizza"].custom_split == tuple(entries)
    assert bill.assignments["pizza"].person_ids == ("alice", "bob", "carol")


def test_clear_custom_split():
    bill = set_custom_split(_bill(), "soda", [CustomSplitEntry("bob", 300)])
    bill = clear_custom_split(bill, "soda")
    assert bill.assignments["soda"].custom_split is None

    unassigned = assign_item(bill, "soda", [])
    assert clear_custom_split(unassigned, "soda") is unassigned


def test_set_tax_input():
    bill = set_tax_input(_bill(), RateTax(0.1))
    assert bill.tax_input == RateTax(0.1)
    assert set_tax_input(bill, None).tax_input is None


def test_set_tip_rate_clamps():
    bill = _bill()
    assert set_tip_rate(bill, 0.2).tip_rate == 0.2
    assert set_tip_rate(bill, 1.5).tip_rate == 1
    assert set_tip_rate(bill, -0.1).tip_rate == 0


def test_reset_restores_defaults():
    assert reset() == BillData()
    assert reset().tip_rate == 0.18
