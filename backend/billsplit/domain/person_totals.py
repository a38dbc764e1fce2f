# backend/billsplit/domain/person_totals.py
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Sequence, Union

from billsplit.domain.models import (
    Assignment,
    BillData,
    BillSummary,
    Item,
    Person,
    PersonBreakdown,
    PersonItemDetail,
    TaxInput,
)
from billsplit.domain.money import Cents
from billsplit.domain.split_logic import split_equally
from billsplit.domain.tax import calculate_tax, distribute_tax
from billsplit.domain.tip import calculate_tip, distribute_tip

Assignments = Union[Mapping[str, Assignment], Iterable[Assignment]]


def _index_assignments(assignments: Assignments) -> Mapping[str, Assignment]:
    if isinstance(assignments, Mapping):
        return assignments
    return {a.item_id: a for a in assignments}


def _share_for(person_id: str, item: Item, assignment: Assignment) -> Cents:
    if assignment.custom_split is not None:
        amount = assignment.custom_amount_for(person_id)
        # An assigned person without a custom entry pays nothing for the item.
        return 0 if amount is None else amount

    shares = split_equally(item.price_cents, len(assignment.person_ids))
    return shares[assignment.person_ids.index(person_id)]


def _item_details_for(
    person: Person, items: Sequence[Item], assignments: Mapping[str, Assignment]
) -> List[PersonItemDetail]:
    details: List[PersonItemDetail] = []
    for item in items:
        assignment = assignments.get(item.id)
        if assignment is None or person.id not in assignment.person_ids:
            continue

        details.append(
            PersonItemDetail(
                item_id=item.id,
                item_name=item.name,
                full_price_cents=item.price_cents,
                share_cents=_share_for(person.id, item, assignment),
                split_count=len(assignment.person_ids),
                is_custom_split=assignment.custom_split is not None,
            )
        )
    return details


def compute_person_totals(
    people: Sequence[Person],
    items: Sequence[Item],
    assignments: Assignments,
    tax_input: Optional[TaxInput],
    tip_rate: float,
) -> BillSummary:
    """
    Build the per-person breakdown for a bill.

    Steps:
    1. Each person's items subtotal: their custom-split amount, or their
       positional share of split_equally over the assignment's person_ids.
    2. Bill subtotal over every item, assigned or not. Tax and tip are
       computed on it.
    3. Tax and tip are distributed proportionally to the items subtotals.
       When nobody has a nonzero subtotal every share is zero.

    Unassigned items raise the tax/tip base but their price is not charged
    to anyone, so grand_total only equals bill_subtotal + total_tax +
    total_tip when every item is assigned.
    """
    by_item = _index_assignments(assignments)

    details_by_person = [_item_details_for(person, items, by_item) for person in people]
    subtotals: List[Cents] = [sum(d.share_cents for d in details) for details in details_by_person]

    bill_subtotal = sum(item.price_cents for item in items)
    total_tax = calculate_tax(bill_subtotal, tax_input) if tax_input is not None else 0
    total_tip = calculate_tip(bill_subtotal, tip_rate)

    if any(s != 0 for s in subtotals):
        tax_shares = distribute_tax(total_tax, subtotals)
        tip_shares = distribute_tip(total_tip, subtotals)
    else:
        tax_shares = [0] * len(subtotals)
        tip_shares = [0] * len(subtotals)

    breakdowns: List[PersonBreakdown] = []
    for person, details, subtotal, tax_share, tip_share in zip(
        people, details_by_person, subtotals, tax_shares, tip_shares, strict=True
    ):
        breakdowns.append(
            PersonBreakdown(
                person_id=person.id,
                person_name=person.name,
                items=tuple(details),
                items_subtotal=subtotal,
                tax_share=tax_share,
                tip_share=tip_share,
                total=subtotal + tax_share + tip_share,
            )
        )

    return BillSummary(
        person_breakdowns=tuple(breakdowns),
        bill_subtotal=bill_subtotal,
        total_tax=total_tax,
        total_tip=total_tip,
        grand_total=sum(b.total for b in breakdowns),
    )


def compute_bill_summary(bill: BillData) -> BillSummary:
    return compute_person_totals(
        bill.people, bill.items, bill.assignments, bill.tax_input, bill.tip_rate
    )
