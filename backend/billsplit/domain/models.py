# backend/billsplit/domain/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple, Union

from billsplit.domain.money import Cents

DEFAULT_TIP_RATE = 0.18


class ModelValidationError(ValueError):
    """Raised when a model is constructed from malformed values."""


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Person:
    """
    A person at the table.
    IDs are generated by the caller; the core only compares them.
    """
    id: str
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise ModelValidationError("Person.id must be a string")
        if not isinstance(self.name, str):
            raise ModelValidationError("Person.name must be a string")


@dataclass(frozen=True)
class Item:
    """
    A receipt line item.
    price_cents is integer cents (USD).
    """
    id: str
    name: str
    price_cents: Cents

    def __post_init__(self) -> None:
        if not isinstance(self.id, str):
            raise ModelValidationError("Item.id must be a string")
        if not isinstance(self.name, str):
            raise ModelValidationError("Item.name must be a string")
        if not _is_int(self.price_cents) or self.price_cents < 0:
            raise ModelValidationError("Item.price_cents must be an int >= 0")


@dataclass(frozen=True)
class CustomSplitEntry:
    person_id: str
    amount_cents: Cents

    def __post_init__(self) -> None:
        if not isinstance(self.person_id, str):
            raise ModelValidationError("CustomSplitEntry.person_id must be a string")
        if not _is_int(self.amount_cents) or self.amount_cents < 0:
            raise ModelValidationError("CustomSplitEntry.amount_cents must be an int >= 0")


@dataclass(frozen=True)
class Assignment:
    """
    Which people share an item.

    person_ids order decides who gets the remainder cents of an equal split.
    custom_split, when set, overrides the equal split with explicit amounts;
    keeping it consistent with person_ids and the item price is up to the
    producer.
    """
    item_id: str
    person_ids: Tuple[str, ...]
    custom_split: Optional[Tuple[CustomSplitEntry, ...]] = None

    def __post_init__(self) -> None:
        if not isinstance(self.item_id, str):
            raise ModelValidationError("Assignment.item_id must be a string")
        # Accept lists from callers but store tuples so the model stays hashable.
        object.__setattr__(self, "person_ids", tuple(self.person_ids))
        if any(not isinstance(pid, str) for pid in self.person_ids):
            raise ModelValidationError("Assignment.person_ids must be strings")
        if self.custom_split is not None:
            object.__setattr__(self, "custom_split", tuple(self.custom_split))
            if any(not isinstance(e, CustomSplitEntry) for e in self.custom_split):
                raise ModelValidationError("Assignment.custom_split must hold CustomSplitEntry values")

    def custom_amount_for(self, person_id: str) -> Optional[Cents]:
        if self.custom_split is None:
            return None
        for entry in self.custom_split:
            if entry.person_id == person_id:
                return entry.amount_cents
        return None


@dataclass(frozen=True)
class RateTax:
    """Tax as a fraction of the bill subtotal, e.g. 0.0875."""
    rate: float

    def __post_init__(self) -> None:
        if not _is_number(self.rate):
            raise ModelValidationError("RateTax.rate must be a number")


@dataclass(frozen=True)
class ExactTax:
    """Tax as a fixed amount copied off the receipt."""
    amount_cents: Cents

    def __post_init__(self) -> None:
        if not _is_int(self.amount_cents):
            raise ModelValidationError("ExactTax.amount_cents must be an int")


TaxInput = Union[RateTax, ExactTax]


@dataclass(frozen=True)
class BillData:
    """
    Complete bill state as the UI layer holds and persists it.

    assignments maps item_id -> Assignment.
    """
    people: Tuple[Person, ...] = ()
    items: Tuple[Item, ...] = ()
    assignments: Dict[str, Assignment] = field(default_factory=dict)
    tax_input: Optional[TaxInput] = None
    tip_rate: float = DEFAULT_TIP_RATE

    def __post_init__(self) -> None:
        object.__setattr__(self, "people", tuple(self.people))
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "assignments", dict(self.assignments))
        if not _is_number(self.tip_rate):
            raise ModelValidationError("BillData.tip_rate must be a number")


@dataclass(frozen=True)
class SavedBill:
    """
    A bill snapshot kept in history.

    timestamp is milliseconds since the epoch; total_cents is the grand total
    at save time, cached for list display.
    """
    id: str
    timestamp: int
    bill: BillData
    total_cents: Cents
    label: Optional[str] = None


@dataclass(frozen=True)
class PersonItemDetail:
    item_id: str
    item_name: str
    full_price_cents: Cents
    share_cents: Cents
    split_count: int
    is_custom_split: bool


@dataclass(frozen=True)
class PersonBreakdown:
    person_id: str
    person_name: str
    items: Tuple[PersonItemDetail, ...]
    items_subtotal: Cents
    tax_share: Cents
    tip_share: Cents
    total: Cents


@dataclass(frozen=True)
class BillSummary:
    """
    Output of compute_person_totals.

    grand_total == sum(b.total for b in person_breakdowns), and equals
    bill_subtotal + total_tax + total_tip whenever every item is assigned.
    """
    person_breakdowns: Tuple[PersonBreakdown, ...]
    bill_subtotal: Cents
    total_tax: Cents
    total_tip: Cents
    grand_total: Cents

    def breakdown_for(self, person_id: str) -> Optional[PersonBreakdown]:
        for breakdown in self.person_breakdowns:
            if breakdown.person_id == person_id:
                return breakdown
        return None
