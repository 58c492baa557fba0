"""Best-effort event recorder backed by SQLite.

The recorder keeps a durable copy of every accepted work order.  It is a
side channel: a failed write is logged and reported as ``False`` but never
raised into the dispatcher, and the dispatcher runs it off the accept
path so a slow disk cannot delay the caller's acknowledgment.

Design:
- Insert-only ``event_log`` table; no update, no delete.
- WAL journal mode for concurrent readers (``workrelay events``).
- One short-lived connection per call, safe across worker threads.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from workrelay.core.hasher import payload_fingerprint
from workrelay.models.events import WorkOrderEvent

logger = logging.getLogger(__name__)


_CREATE_EVENT_LOG = """
CREATE TABLE IF NOT EXISTS event_log (
    id            INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id      TEXT NOT NULL UNIQUE,
    path_id       TEXT NOT NULL DEFAULT '',
    received_at   TEXT NOT NULL,
    payload_json  TEXT NOT NULL,
    payload_hash  TEXT NOT NULL
);
"""

_CREATE_IDX_PATH = """
CREATE INDEX IF NOT EXISTS idx_event_path ON event_log(path_id, id);
"""


class RecordingError(RuntimeError):
    """Raised internally when the event store rejects a write."""


@runtime_checkable
class EventRecorder(Protocol):
    """Anything that can durably record an accepted event.

    ``record`` must return ``False`` rather than raise on failure.
    """

    def record(self, event: WorkOrderEvent) -> bool:
        ...


class NullRecorder:
    """Recorder used when event recording is disabled."""

    def record(self, event: WorkOrderEvent) -> bool:
        return True


class SqliteEventRecorder:
    """Insert-only SQLite event log.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.  Created if it does not exist.
    """

    def __init__(self, db_path: Path | str) -> None:
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
            conn.execute(_CREATE_EVENT_LOG)
            conn.execute(_CREATE_IDX_PATH)
            conn.commit()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def record(self, event: WorkOrderEvent) -> bool:
        """Record *event*; return ``True`` on success, ``False`` on failure."""
        try:
            self._insert(event)
        except RecordingError as exc:
            logger.error("Failed to record event %s: %s", event.event_id, exc)
            return False
        logger.debug("Recorded event %s (path id %s)", event.event_id, event.path_id)
        return True

    def _insert(self, event: WorkOrderEvent) -> None:
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO event_log
                            (event_id, path_id, received_at, payload_json, payload_hash)
                        VALUES (?, ?, ?, ?, ?)
                        """,
                        (
                            event.event_id,
                            event.path_id,
                            event.received_at.isoformat(),
                            json.dumps(event.payload, sort_keys=True),
                            payload_fingerprint(event.payload),
                        ),
                    )
            finally:
                conn.close()
        except (sqlite3.Error, TypeError, ValueError) as exc:
            raise RecordingError(str(exc)) from exc

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list_events(self, limit: int = 20) -> list[dict[str, Any]]:
        """Return the most recent events, newest first."""
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT event_id, path_id, received_at, payload_json, payload_hash "
                "FROM event_log ORDER BY id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        finally:
            conn.close()
        return [
            {
                "event_id": row[0],
                "path_id": row[1],
                "received_at": row[2],
                "payload": json.loads(row[3]),
                "payload_hash": row[4],
            }
            for row in rows
        ]

    def count(self) -> int:
        conn = self._connect()
        try:
            row = conn.execute("SELECT COUNT(*) FROM event_log").fetchone()
        finally:
            conn.close()
        return row[0] if row else 0
