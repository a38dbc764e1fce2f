from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from billsplit.domain.models import (
    Assignment,
    BillData,
    BillSummary,
    CustomSplitEntry,
    ExactTax,
    Item,
    Person,
    RateTax,
    SavedBill,
    TaxInput,
)

logger = logging.getLogger(__name__)


class ApiValidationError(ValueError):
    """Raised when request payload validation fails."""


class SnapshotValidationError(ApiValidationError):
    """Raised when a bill snapshot does not match the persisted shape."""


def is_uuid(value: str) -> bool:
    try:
        UUID(value)
    except (ValueError, TypeError):
        return False
    return True


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _require_dict(value: object, path: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SnapshotValidationError(f"'{path}' must be an object.")
    return value


def _require_list(value: object, path: str) -> List[Any]:
    if not isinstance(value, list):
        raise SnapshotValidationError(f"'{path}' must be a list.")
    return value


def _require_str(raw: Dict[str, Any], key: str, path: str, *, non_empty: bool = False) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise SnapshotValidationError(f"'{path}.{key}' must be a string.")
    if non_empty and not value:
        raise SnapshotValidationError(f"'{path}.{key}' must be a non-empty string.")
    return value


def _require_non_negative_int(raw: Dict[str, Any], key: str, path: str) -> int:
    value = raw.get(key)
    if not _is_int(value) or value < 0:
        raise SnapshotValidationError(f"'{path}.{key}' must be an int >= 0.")
    return value


def _require_rate(raw: Dict[str, Any], key: str, path: str) -> float:
    value = raw.get(key)
    if not _is_number(value) or not 0 <= value <= 1:
        raise SnapshotValidationError(f"'{path}.{key}' must be a number between 0 and 1.")
    return value


def parse_person(raw: object, path: str) -> Person:
    data = _require_dict(raw, path)
    return Person(
        id=_require_str(data, "id", path),
        name=_require_str(data, "name", path, non_empty=True),
    )


def parse_item(raw: object, path: str) -> Item:
    data = _require_dict(raw, path)
    return Item(
        id=_require_str(data, "id", path),
        name=_require_str(data, "name", path, non_empty=True),
        price_cents=_require_non_negative_int(data, "priceInCents", path),
    )


def parse_assignment(raw: object, path: str) -> Assignment:
    data = _require_dict(raw, path)
    item_id = _require_str(data, "itemId", path)

    person_ids = _require_list(data.get("personIds"), f"{path}.personIds")
    for idx, pid in enumerate(person_ids):
        if not isinstance(pid, str):
            raise SnapshotValidationError(f"'{path}.personIds[{idx}]' must be a string.")

    custom_split: Optional[List[CustomSplitEntry]] = None
    if data.get("customSplit") is not None:
        raw_split = _require_list(data["customSplit"], f"{path}.customSplit")
        custom_split = []
        for idx, raw_entry in enumerate(raw_split):
            entry_path = f"{path}.customSplit[{idx}]"
            entry = _require_dict(raw_entry, entry_path)
            custom_split.append(
                CustomSplitEntry(
                    person_id=_require_str(entry, "personId", entry_path),
                    amount_cents=_require_non_negative_int(entry, "amountInCents", entry_path),
                )
            )

    return Assignment(item_id=item_id, person_ids=tuple(person_ids), custom_split=custom_split)


def parse_tax_input(raw: object, path: str = "taxInput") -> Optional[TaxInput]:
    if raw is None:
        return None

    data = _require_dict(raw, path)
    kind = data.get("type")
    if kind == "rate":
        return RateTax(rate=_require_rate(data, "rate", path))
    if kind == "exact":
        return ExactTax(amount_cents=_require_non_negative_int(data, "amount", path))
    raise SnapshotValidationError(f"'{path}.type' must be 'rate' or 'exact'.")


def parse_bill_data(raw: object) -> BillData:
    """
    Validate a persisted/posted bill snapshot and build a BillData.

    Shape (camelCase, as written by the UI layer):
      people:      [{id, name}]
      items:       [{id, name, priceInCents}]
      assignments: {item_id: {itemId, personIds, customSplit?}}
      taxInput:    null | {type: "rate", rate} | {type: "exact", amount}
      tipRate:     number in [0, 1]
    """
    data = _require_dict(raw, "bill")

    people = [
        parse_person(p, f"people[{idx}]")
        for idx, p in enumerate(_require_list(data.get("people"), "people"))
    ]
    items = [
        parse_item(it, f"items[{idx}]")
        for idx, it in enumerate(_require_list(data.get("items"), "items"))
    ]

    assignments: Dict[str, Assignment] = {}
    for item_id, raw_assignment in _require_dict(data.get("assignments"), "assignments").items():
        assignments[item_id] = parse_assignment(raw_assignment, f"assignments.{item_id}")

    if "taxInput" not in data:
        raise SnapshotValidationError("'taxInput' is required (use null for no tax).")

    return BillData(
        people=tuple(people),
        items=tuple(items),
        assignments=assignments,
        tax_input=parse_tax_input(data["taxInput"]),
        tip_rate=_require_rate(data, "tipRate", "bill"),
    )


def load_bill_data_or_default(raw: object) -> BillData:
    """
    Rehydrate a stored snapshot; anything invalid falls back to an empty bill.
    """
    try:
        return parse_bill_data(raw)
    except SnapshotValidationError as e:
        logger.warning("Invalid persisted bill state, resetting to defaults: %s", e)
        return BillData()


def parse_label(raw: object) -> Optional[str]:
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ApiValidationError("'label' must be a string.")
    label = raw.strip()
    return label or None


# Serialization back to the wire shape.


def tax_input_to_json(tax_input: Optional[TaxInput]) -> Optional[Dict[str, Any]]:
    if tax_input is None:
        return None
    if isinstance(tax_input, RateTax):
        return {"type": "rate", "rate": tax_input.rate}
    return {"type": "exact", "amount": tax_input.amount_cents}


def assignment_to_json(assignment: Assignment) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "itemId": assignment.item_id,
        "personIds": list(assignment.person_ids),
    }
    if assignment.custom_split is not None:
        out["customSplit"] = [
            {"personId": e.person_id, "amountInCents": e.amount_cents}
            for e in assignment.custom_split
        ]
    return out


def bill_data_to_json(bill: BillData) -> Dict[str, Any]:
    return {
        "people": [{"id": p.id, "name": p.name} for p in bill.people],
        "items": [
            {"id": it.id, "name": it.name, "priceInCents": it.price_cents}
            for it in bill.items
        ],
        "assignments": {
            item_id: assignment_to_json(a) for item_id, a in bill.assignments.items()
        },
        "taxInput": tax_input_to_json(bill.tax_input),
        "tipRate": bill.tip_rate,
    }


def saved_bill_to_json(saved: SavedBill) -> Dict[str, Any]:
    out = bill_data_to_json(saved.bill)
    out.update(
        {
            "id": saved.id,
            "timestamp": saved.timestamp,
            "totalInCents": saved.total_cents,
        }
    )
    if saved.label is not None:
        out["label"] = saved.label
    return out


def bill_summary_to_json(summary: BillSummary) -> Dict[str, Any]:
    return {
        "personBreakdowns": [
            {
                "personId": b.person_id,
                "personName": b.person_name,
                "items": [
                    {
                        "itemId": d.item_id,
                        "itemName": d.item_name,
                        "fullPriceInCents": d.full_price_cents,
                        "shareInCents": d.share_cents,
                        "splitCount": d.split_count,
                        "isCustomSplit": d.is_custom_split,
                    }
                    for d in b.items
                ],
                "itemsSubtotal": b.items_subtotal,
                "taxShare": b.tax_share,
                "tipShare": b.tip_share,
                "total": b.total,
            }
            for b in summary.person_breakdowns
        ],
        "billSubtotal": summary.bill_subtotal,
        "totalTax": summary.total_tax,
        "totalTip": summary.total_tip,
        "grandTotal": summary.grand_total,
    }
