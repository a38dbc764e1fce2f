from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify, request

from billsplit.api.validators import (
    ApiValidationError,
    bill_summary_to_json,
    is_uuid,
    parse_bill_data,
    parse_label,
    saved_bill_to_json,
)
from billsplit.db.repository import DEFAULT_HISTORY_MAX_SIZE, HistoryRepository
from billsplit.domain.person_totals import compute_bill_summary

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")


def _json_error(message: str, *, status: int = 400, code: str = "bad_request"):
    return jsonify({"error": {"code": code, "message": message}}), status


def _repo() -> HistoryRepository:
    return HistoryRepository(
        current_app.config.get("DATABASE_URL", ""),
        max_size=current_app.config.get("HISTORY_MAX_SIZE", DEFAULT_HISTORY_MAX_SIZE),
    )


def _db_unavailable():
    return _json_error("Bill history requires a configured database.", status=503, code="db_unavailable")


@api_bp.get("/health")
def health():
    return jsonify({"status": "ok"}), 200


@api_bp.post("/calculate")
def calculate_endpoint():
    """
    JSON body: a bill snapshot {people, items, assignments, taxInput, tipRate}
    Response: the per-person breakdown and bill totals, all in cents.
    """
    data = request.get_json(silent=True)
    if data is None:
        return _json_error("Request body must be JSON.", status=400)

    try:
        bill = parse_bill_data(data)
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    summary = compute_bill_summary(bill)
    return jsonify(bill_summary_to_json(summary)), 200


@api_bp.get("/bills")
def list_bills_endpoint():
    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        bills = repo.list_bills()
    except Exception:
        logger.exception("Failed to load bill history")
        return _json_error("Failed to load bill history.", status=500, code="db_error")

    return jsonify({"bills": [saved_bill_to_json(b) for b in bills]}), 200


@api_bp.post("/bills")
def save_bill_endpoint():
    """
    JSON body: a bill snapshot plus an optional 'label'.
    The grand total is computed here; clients do not send it.
    """
    data = request.get_json(silent=True)
    if data is None:
        return _json_error("Request body must be JSON.", status=400)

    try:
        bill = parse_bill_data(data)
        label = parse_label(data.get("label"))
    except ApiValidationError as e:
        return _json_error(str(e), status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        saved = repo.save_bill(bill=bill, label=label)
    except Exception:
        logger.exception("Failed to save bill")
        return _json_error("Failed to save bill.", status=500, code="db_error")

    logger.info("Saved bill %s (total %d cents)", saved.id, saved.total_cents)
    return jsonify(saved_bill_to_json(saved)), 201


@api_bp.get("/bills/<bill_id>")
def get_bill_endpoint(bill_id: str):
    if not is_uuid(bill_id):
        return _json_error("Bill id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        saved = repo.get_bill(bill_id=bill_id)
    except Exception:
        logger.exception("Failed to load bill %s", bill_id)
        return _json_error("Failed to load bill.", status=500, code="db_error")

    if saved is None:
        return _json_error("Bill not found.", status=404, code="not_found")

    body = saved_bill_to_json(saved)
    body["summary"] = bill_summary_to_json(compute_bill_summary(saved.bill))
    return jsonify(body), 200


@api_bp.delete("/bills/<bill_id>")
def delete_bill_endpoint(bill_id: str):
    if not is_uuid(bill_id):
        return _json_error("Bill id must be a valid UUID.", status=400)

    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        deleted = repo.delete_bill(bill_id=bill_id)
    except Exception:
        logger.exception("Failed to delete bill %s", bill_id)
        return _json_error("Failed to delete bill.", status=500, code="db_error")

    if not deleted:
        return _json_error("Bill not found.", status=404, code="not_found")
    return "", 204


@api_bp.delete("/bills")
def clear_history_endpoint():
    repo = _repo()
    if not repo.enabled:
        return _db_unavailable()

    try:
        deleted = repo.clear_history()
    except Exception:
        logger.exception("Failed to clear bill history")
        return _json_error("Failed to clear bill history.", status=500, code="db_error")

    return jsonify({"deleted": deleted}), 200
