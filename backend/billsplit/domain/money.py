# backend/billsplit/domain/money.py
from __future__ import annotations

import math
from decimal import Decimal, InvalidOperation
from fractions import Fraction

Cents = int


class MoneyError(ValueError):
    """Raised when a value cannot be converted to or from cents."""


def _to_decimal(value: int | float | str | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise MoneyError("money values must be numbers, not bools")
    if isinstance(value, Decimal):
        return value
    # str() of a float is its shortest repr, so 10.005 stays 10.005
    # instead of the binary 10.00499999...
    try:
        d = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as e:
        raise MoneyError(f"invalid money value: {value!r}") from e
    if not d.is_finite():
        raise MoneyError(f"money value must be finite: {value!r}")
    return d


def to_cents(dollars: int | float | str | Decimal) -> Cents:
    """
    Convert a dollar amount to integer cents, rounding half away from zero.

    Examples:
      12.5 -> 1250
      10.005 -> 1001
      "0.1" -> 10
    """
    return round_half_up(Fraction(_to_decimal(dollars)) * 100)


def to_dollars(cents: Cents) -> float:
    return cents / 100


def format_currency(cents: Cents, *, symbol: str = "$") -> str:
    """
    Format cents as a string like "$12.50".
    """
    if isinstance(cents, bool) or not isinstance(cents, int):
        raise MoneyError("cents must be an int")
    sign = "-" if cents < 0 else ""
    dollars, rem = divmod(abs(cents), 100)
    return f"{sign}{symbol}{dollars}.{rem:02d}"


def round_half_up(value: Fraction) -> Cents:
    """
    Round an exact cents quantity to the nearest whole cent, halves away
    from zero. Exact at any magnitude.
    """
    whole = math.floor(abs(value) + Fraction(1, 2))
    return -whole if value < 0 else whole


def apply_rate(subtotal: Cents, rate: int | float | str | Decimal) -> Cents:
    """
    subtotal * rate rounded to the nearest cent. The rate is taken at its
    decimal value, so 1050 * 0.1 gives exactly 105.
    """
    return round_half_up(subtotal * Fraction(_to_decimal(rate)))
