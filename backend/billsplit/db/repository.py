from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

try:
    import psycopg
    from psycopg.types.json import Jsonb
except ImportError:  # pragma: no cover
    psycopg = None
    Jsonb = None

from billsplit.api.validators import (
    SnapshotValidationError,
    bill_data_to_json,
    parse_bill_data,
)
from billsplit.domain.models import BillData, SavedBill
from billsplit.domain.person_totals import compute_bill_summary

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_MAX_SIZE = 50

# Expected schema:
#
#   CREATE TABLE saved_bills (
#       id uuid PRIMARY KEY DEFAULT gen_random_uuid(),
#       created_at timestamptz NOT NULL DEFAULT now(),
#       label text,
#       total_cents integer NOT NULL CHECK (total_cents >= 0),
#       snapshot jsonb NOT NULL
#   );


def _to_millis(created_at: datetime) -> int:
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return int(created_at.timestamp() * 1000)


def _row_to_saved_bill(row: Sequence[Any]) -> Optional[SavedBill]:
    bill_id, created_at, label, total_cents, snapshot = row
    try:
        bill = parse_bill_data(snapshot)
    except SnapshotValidationError as e:
        logger.warning("Skipping saved bill %s with invalid snapshot: %s", bill_id, e)
        return None

    return SavedBill(
        id=str(bill_id),
        timestamp=_to_millis(created_at),
        bill=bill,
        total_cents=int(total_cents),
        label=label,
    )


class HistoryRepository:
    def __init__(self, database_url: str, *, max_size: int = DEFAULT_HISTORY_MAX_SIZE):
        self.database_url = database_url.strip()
        self.max_size = max_size

    @property
    def enabled(self) -> bool:
        return bool(self.database_url)

    def _connect(self):
        if not self.enabled:
            raise RuntimeError("DATABASE_URL not configured")
        if psycopg is None:
            raise RuntimeError("psycopg is not installed")
        return psycopg.connect(self.database_url)

    def save_bill(self, *, bill: BillData, label: Optional[str] = None) -> SavedBill:
        """
        Store a snapshot with its grand total and keep only the newest
        max_size bills.
        """
        total_cents = compute_bill_summary(bill).grand_total

        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                INSERT INTO saved_bills (label, total_cents, snapshot)
                VALUES (%s, %s, %s)
                RETURNING id::text, created_at
                """,
                (label, total_cents, Jsonb(bill_data_to_json(bill))),
            )
            bill_id, created_at = cur.fetchone()

            cur.execute(
                """
                DELETE FROM saved_bills
                WHERE id NOT IN (
                    SELECT id
                    FROM saved_bills
                    ORDER BY created_at DESC, id DESC
                    LIMIT %s
                )
                """,
                (self.max_size,),
            )
            trimmed = cur.rowcount
            conn.commit()

        if trimmed > 0:
            logger.info("Trimmed %d saved bill(s) beyond history limit %d", trimmed, self.max_size)

        return SavedBill(
            id=bill_id,
            timestamp=_to_millis(created_at),
            bill=bill,
            total_cents=total_cents,
            label=label,
        )

    def list_bills(self) -> list[SavedBill]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, created_at, label, total_cents, snapshot
                FROM saved_bills
                ORDER BY created_at DESC, id DESC
                LIMIT %s
                """,
                (self.max_size,),
            )
            rows = cur.fetchall()

        bills = [_row_to_saved_bill(row) for row in rows]
        return [b for b in bills if b is not None]

    def get_bill(self, *, bill_id: str) -> Optional[SavedBill]:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                SELECT id::text, created_at, label, total_cents, snapshot
                FROM saved_bills
                WHERE id = %s
                """,
                (bill_id,),
            )
            row = cur.fetchone()

        if row is None:
            return None
        return _row_to_saved_bill(row)

    def delete_bill(self, *, bill_id: str) -> bool:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute(
                """
                DELETE FROM saved_bills
                WHERE id = %s
                """,
                (bill_id,),
            )
            deleted = cur.rowcount > 0
            conn.commit()
            return deleted

    def clear_history(self) -> int:
        with self._connect() as conn, conn.cursor() as cur:
            cur.execute("DELETE FROM saved_bills")
            deleted = cur.rowcount
            conn.commit()
            return deleted
