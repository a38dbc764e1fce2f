# backend/billsplit/domain/split_logic.py
from __future__ import annotations

import math
from fractions import Fraction
from typing import List, Sequence

from billsplit.domain.money import Cents


class SplitLogicError(ValueError):
    """Raised when split inputs are invalid."""


class InvalidArgument(SplitLogicError):
    """Raised when an allocator is called with arguments it cannot split over."""


def split_equally(total: Cents, num_people: int) -> List[Cents]:
    """
    Split an integer number of cents into num_people shares:

      base = total // n
      remainder = total % n
      first 'remainder' shares get base + 1, rest get base

    The extra cents always land on the earliest positions, so callers must
    pass people in a stable order to get a stable share per person.
    """
    if num_people <= 0:
        raise InvalidArgument(f"num_people must be > 0, got {num_people}")

    base = total // num_people
    remainder = total % num_people
    return [base + 1 if i < remainder else base for i in range(num_people)]


def allocate_proportionally(amount: Cents, weights: Sequence[Cents]) -> List[Cents]:
    """
    Split amount across weights using the largest-remainder method.

    Each weight gets floor(amount * w / sum(weights)); the cents lost to
    flooring are then handed out one at a time to the shares with the
    largest fractional remainder. Equal remainders go to the lower index.

    The result always sums to amount and every share is within one cent of
    its exact proportional value.
    """
    if len(weights) == 0:
        raise InvalidArgument("weights must contain at least 1 entry")

    total = sum(weights)
    if total == 0:
        raise InvalidArgument("weights must not sum to zero")

    exact = [Fraction(amount * w, total) for w in weights]
    floored = [math.floor(x) for x in exact]
    leftover = amount - sum(floored)

    ranked = sorted(range(len(weights)), key=lambda i: (-(exact[i] - floored[i]), i))
    for idx in ranked[:leftover]:
        floored[idx] += 1

    return floored
