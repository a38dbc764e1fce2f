# backend/billsplit/domain/tax.py
from __future__ import annotations

from typing import List, Sequence

from billsplit.domain.models import ExactTax, RateTax, TaxInput
from billsplit.domain.money import Cents, apply_rate
from billsplit.domain.split_logic import allocate_proportionally


def calculate_tax(subtotal: Cents, tax_input: TaxInput) -> Cents:
    """
    Total tax for the bill.

    RateTax rounds subtotal * rate to the nearest cent (half up).
    ExactTax is returned as entered; it is not checked against the subtotal.
    """
    if isinstance(tax_input, RateTax):
        return apply_rate(subtotal, tax_input.rate)
    if isinstance(tax_input, ExactTax):
        return tax_input.amount_cents
    raise TypeError(f"unsupported tax input: {tax_input!r}")


def distribute_tax(total_tax: Cents, person_subtotals: Sequence[Cents]) -> List[Cents]:
    return allocate_proportionally(total_tax, person_subtotals)
