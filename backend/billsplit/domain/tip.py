# backend/billsplit/domain/tip.py
from __future__ import annotations

from typing import List, Sequence

from billsplit.domain.money import Cents, apply_rate
from billsplit.domain.split_logic import allocate_proportionally


def calculate_tip(subtotal: Cents, rate: float) -> Cents:
    """
    Tip on the pre-tax subtotal, rounded to the nearest cent (half up).
    """
    return apply_rate(subtotal, rate)


def distribute_tip(total_tip: Cents, person_subtotals: Sequence[Cents]) -> List[Cents]:
    return allocate_proportionally(total_tip, person_subtotals)
