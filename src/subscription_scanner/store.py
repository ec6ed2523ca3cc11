"""SQLite store for scan history and imported subscriptions."""

from __future__ import annotations

import sqlite3
from datetime import date
from decimal import Decimal
from pathlib import Path

from . import constants
from .models import BillingCycle, ExtractedSubscription, ScanResult, Subscription

_CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS scans (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    query TEXT,
    total_messages INTEGER,
    skipped INTEGER,
    threshold REAL,
    scan_date TEXT
);

CREATE TABLE IF NOT EXISTS candidates (
    scan_id INTEGER,
    position INTEGER,
    message_id TEXT,
    name TEXT,
    provider TEXT,
    price TEXT,
    billing_cycle TEXT,
    renewal_date TEXT,
    confidence REAL,
    accepted INTEGER,
    FOREIGN KEY (scan_id) REFERENCES scans(id)
);

CREATE TABLE IF NOT EXISTS subscriptions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    price TEXT NOT NULL,
    billing_cycle TEXT NOT NULL,
    start_date TEXT NOT NULL,
    next_billing_date TEXT NOT NULL,
    category TEXT NOT NULL,
    status TEXT,
    auto_renew INTEGER,
    description TEXT,
    provider TEXT,
    source_message_id TEXT
);
"""


def _opt_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


def _row_to_candidate(row: sqlite3.Row) -> ExtractedSubscription:
    return ExtractedSubscription(
        name=row["name"],
        provider=row["provider"],
        confidence=row["confidence"],
        price=Decimal(row["price"]) if row["price"] is not None else None,
        billing_cycle=BillingCycle(row["billing_cycle"]) if row["billing_cycle"] else None,
        renewal_date=_opt_date(row["renewal_date"]),
        message_id=row["message_id"],
    )


def _row_to_subscription(row: sqlite3.Row) -> Subscription:
    return Subscription(
        id=row["id"],
        name=row["name"],
        price=Decimal(row["price"]),
        billing_cycle=BillingCycle(row["billing_cycle"]),
        start_date=date.fromisoformat(row["start_date"]),
        next_billing_date=date.fromisoformat(row["next_billing_date"]),
        category=row["category"],
        status=row["status"],
        auto_renew=bool(row["auto_renew"]),
        description=row["description"] or "",
        provider=row["provider"] or "",
        source_message_id=row["source_message_id"] or "",
    )


class SubscriptionStore:
    """Persistent SQLite store for scans and imported subscriptions."""

    def __init__(self, db_path: Path | None = None) -> None:
        self.db_path = Path(db_path or constants.STORE_DB_PATH)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self.db_path))
        self._conn.row_factory = sqlite3.Row
        self._create_tables()

    def _create_tables(self) -> None:
        self._conn.executescript(_CREATE_TABLES_SQL)

    # --- scans ---

    def save_scan(self, scan_result: ScanResult) -> int:
        """Save a scan and all of its candidates in a single transaction."""
        accepted = set(scan_result.accepted)
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO scans (query, total_messages, skipped, threshold, scan_date) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    scan_result.query,
                    scan_result.total_messages,
                    scan_result.skipped,
                    scan_result.threshold,
                    scan_result.scan_date,
                ),
            )
            scan_id = cursor.lastrowid

            for position, c in enumerate(scan_result.candidates):
                self._conn.execute(
                    "INSERT INTO candidates (scan_id, position, message_id, name, provider, price, "
                    "billing_cycle, renewal_date, confidence, accepted) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        scan_id,
                        position,
                        c.message_id,
                        c.name,
                        c.provider,
                        str(c.price) if c.price is not None else None,
                        c.billing_cycle.value if c.billing_cycle else None,
                        c.renewal_date.isoformat() if c.renewal_date else None,
                        c.confidence,
                        int(c in accepted),
                    ),
                )
        return scan_id

    def load_latest_scan(self) -> ScanResult | None:
        """Load the most recent scan, or None when nothing was saved."""
        row = self._conn.execute("SELECT * FROM scans ORDER BY id DESC LIMIT 1").fetchone()
        if row is None:
            return None

        candidate_rows = self._conn.execute(
            "SELECT * FROM candidates WHERE scan_id = ? ORDER BY position", (row["id"],)
        ).fetchall()

        candidates: list[ExtractedSubscription] = []
        accepted: list[ExtractedSubscription] = []
        for r in candidate_rows:
            candidate = _row_to_candidate(r)
            candidates.append(candidate)
            if r["accepted"]:
                accepted.append(candidate)

        return ScanResult(
            total_messages=row["total_messages"],
            candidates=candidates,
            accepted=accepted,
            skipped=row["skipped"],
            threshold=row["threshold"],
            scan_date=row["scan_date"],
            query=row["query"] or "",
        )

    # --- subscriptions ---

    def _is_duplicate(self, sub: Subscription) -> bool:
        if sub.source_message_id:
            row = self._conn.execute(
                "SELECT 1 FROM subscriptions WHERE source_message_id = ?",
                (sub.source_message_id,),
            ).fetchone()
            if row is not None:
                return True
        row = self._conn.execute(
            "SELECT 1 FROM subscriptions WHERE lower(name) = ? AND price = ? AND billing_cycle = ?",
            (sub.name.lower(), str(sub.price), sub.billing_cycle.value),
        ).fetchone()
        return row is not None

    def import_subscriptions(self, subs: list[Subscription]) -> list[Subscription]:
        """Insert subscriptions that are not already stored; return the inserted ones."""
        inserted: list[Subscription] = []
        with self._conn:
            for sub in subs:
                if self._is_duplicate(sub):
                    continue
                cursor = self._conn.execute(
                    "INSERT INTO subscriptions (name, price, billing_cycle, start_date, "
                    "next_billing_date, category, status, auto_renew, description, provider, "
                    "source_message_id) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        sub.name,
                        str(sub.price),
                        sub.billing_cycle.value,
                        sub.start_date.isoformat(),
                        sub.next_billing_date.isoformat(),
                        sub.category,
                        sub.status,
                        int(sub.auto_renew),
                        sub.description,
                        sub.provider,
                        sub.source_message_id,
                    ),
                )
                sub.id = cursor.lastrowid
                inserted.append(sub)
        return inserted

    def list_subscriptions(self) -> list[Subscription]:
        """Return stored subscriptions ordered by next billing date."""
        rows = self._conn.execute(
            "SELECT * FROM subscriptions ORDER BY next_billing_date, id"
        ).fetchall()
        return [_row_to_subscription(r) for r in rows]

    def delete_subscription(self, subscription_id: int) -> bool:
        """Delete a subscription by id; return False if it did not exist."""
        with self._conn:
            cursor = self._conn.execute(
                "DELETE FROM subscriptions WHERE id = ?", (subscription_id,)
            )
        return cursor.rowcount > 0

    # --- housekeeping ---

    def clear(self) -> None:
        """Drop and recreate all tables."""
        self._conn.executescript(
            "DROP TABLE IF EXISTS candidates;"
            "DROP TABLE IF EXISTS scans;"
            "DROP TABLE IF EXISTS subscriptions;"
        )
        self._create_tables()

    def get_info(self) -> dict:
        """Return store statistics."""
        file_size = self.db_path.stat().st_size if self.db_path.exists() else 0

        last_scan_row = self._conn.execute(
            "SELECT scan_date FROM scans ORDER BY id DESC LIMIT 1"
        ).fetchone()
        last_scan_date = last_scan_row["scan_date"] if last_scan_row else None

        scan_count = self._conn.execute("SELECT COUNT(*) AS c FROM scans").fetchone()["c"]
        subscription_count = self._conn.execute(
            "SELECT COUNT(*) AS c FROM subscriptions"
        ).fetchone()["c"]

        return {
            "db_file_size": file_size,
            "last_scan_date": last_scan_date,
            "scan_count": scan_count,
            "subscription_count": subscription_count,
        }

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    # --- context manager ---

    def __enter__(self) -> SubscriptionStore:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        self.close()
