"""Append-only, hash-chained event journal backed by SQLite.

The journal is a durable record of every notification the marketplace
emitted, for indexers that were not subscribed at the time.  It is not the
marketplace state; it is a witness to it.

Design:
- Append-only: only `append()` writes; no update, no delete.
- Hash-chained: each record seals the hash of the previous record.
- WAL journal mode for concurrent readers.
- event_hash UNIQUE constraint for tamper detection.
- asset_id stored as TEXT: asset ids are unbounded and overflow SQLite
  INTEGER above 2**63 - 1.
- The previous-hash read and the insert share one IMMEDIATE transaction,
  so two writers on the same file cannot chain to the same predecessor.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

from marketledger.core.event_bus import EventBus
from marketledger.core.hasher import compute_record_hash
from marketledger.models.events import EventKind, MarketEvent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_JOURNAL = """
CREATE TABLE IF NOT EXISTS event_journal (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id              TEXT NOT NULL UNIQUE,
    event_kind            TEXT NOT NULL,
    collection            TEXT NOT NULL,
    asset_id              TEXT NOT NULL,
    event_json            TEXT NOT NULL,
    previous_event_hash   TEXT NOT NULL DEFAULT '',
    event_hash            TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_ASSET = """
CREATE INDEX IF NOT EXISTS idx_asset ON event_journal(collection, asset_id, id);
"""

_CREATE_IDX_KIND = """
CREATE INDEX IF NOT EXISTS idx_kind ON event_journal(event_kind, id);
"""


class JournalIntegrityError(RuntimeError):
    """Raised when the hash chain is broken."""


class EventJournal:
    """Append-only, hash-chained event journal.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_JOURNAL)
            conn.execute(_CREATE_IDX_ASSET)
            conn.execute(_CREATE_IDX_KIND)
            conn.commit()

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    def append(self, event: MarketEvent) -> str:
        """Append *event* and return the hash that seals it.

        Usable directly as an ``EventBus`` handler.
        """
        event_json = EventBus.serialize(event).decode("utf-8")
        with self._connect() as conn:
            conn.execute("BEGIN IMMEDIATE")
            row = conn.execute(
                "SELECT event_hash FROM event_journal ORDER BY id DESC LIMIT 1"
            ).fetchone()
            previous_hash = row[0] if row else ""
            event_hash = compute_record_hash(
                {"event_json": event_json, "previous_event_hash": previous_hash}
            )
            conn.execute(
                """
                INSERT INTO event_journal
                    (event_id, event_kind, collection, asset_id, event_json,
                     previous_event_hash, event_hash)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    event.event_id,
                    event.event_kind.value,
                    event.collection,
                    str(event.asset_id),
                    event_json,
                    previous_hash,
                    event_hash,
                ),
            )
            conn.commit()
        logger.debug("Journaled %s event %s.", event.event_kind.value, event.event_id)
        return event_hash

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def get_events(
        self,
        kind: EventKind | None = None,
        collection: str | None = None,
        asset_id: int | None = None,
    ) -> list[MarketEvent]:
        """Return journaled events in append order, optionally filtered."""
        clauses: list[str] = []
        params: list[object] = []
        if kind is not None:
            clauses.append("event_kind = ?")
            params.append(kind.value)
        if collection is not None:
            clauses.append("collection = ?")
            params.append(collection)
        if asset_id is not None:
            clauses.append("asset_id = ?")
            params.append(str(asset_id))
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT event_json FROM event_journal {where} ORDER BY id ASC",
                params,
            ).fetchall()
        return [EventBus.receive(row[0]) for row in rows]

    def get_latest(self) -> MarketEvent | None:
        """Return the most recently journaled event, or None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT event_json FROM event_journal ORDER BY id DESC LIMIT 1"
            ).fetchone()
        return EventBus.receive(row[0]) if row else None

    def count(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM event_journal").fetchone()
        return n

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self) -> bool:
        """Verify the hash chain integrity of the whole journal.

        Returns True if the chain is valid, raises JournalIntegrityError otherwise.
        """
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT event_id, event_json, previous_event_hash, event_hash "
                "FROM event_journal ORDER BY id ASC"
            ).fetchall()

        prev_hash = ""
        for event_id, event_json, previous_event_hash, event_hash in rows:
            if previous_event_hash != prev_hash:
                raise JournalIntegrityError(
                    f"Chain broken at event {event_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {previous_event_hash!r}"
                )

            expected_hash = compute_record_hash(
                {"event_json": event_json, "previous_event_hash": previous_event_hash}
            )
            if event_hash != expected_hash:
                raise JournalIntegrityError(
                    f"Tampered event {event_id}: "
                    f"expected hash={expected_hash!r}, got {event_hash!r}"
                )

            prev_hash = event_hash

        return True
