"""SQLite-backed journal entry store.

Serves immutable, chronologically ascending snapshots to the pattern engine.
Tag collections are stored as JSON arrays; timestamps as UTC ISO strings so
range queries can compare them lexically.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from reverie.errors import SnapshotProviderError
from reverie.models.entry import Entry, ensure_utc

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS entries (
    id TEXT NOT NULL,
    user_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    title TEXT NOT NULL DEFAULT '',
    narrative TEXT NOT NULL DEFAULT '',
    symbols TEXT NOT NULL DEFAULT '[]',
    emotions TEXT NOT NULL DEFAULT '[]',
    themes TEXT NOT NULL DEFAULT '[]',
    colors TEXT NOT NULL DEFAULT '[]',
    context_tags TEXT NOT NULL DEFAULT '[]',
    sleep_quality REAL,
    lucidity REAL,
    vividness REAL,
    PRIMARY KEY (user_id, id)
);

CREATE INDEX IF NOT EXISTS idx_entries_user_time ON entries(user_id, timestamp);
"""

COLUMNS = (
    "id, user_id, timestamp, title, narrative, symbols, emotions, themes, colors, "
    "context_tags, sleep_quality, lucidity, vividness"
)


def format_timestamp(value: datetime) -> str:
    return ensure_utc(value).astimezone(timezone.utc).isoformat(timespec="microseconds")


class EntryStore:
    """SQLite implementation of the entry snapshot provider."""

    def __init__(self, path: Path) -> None:
        """Initialize the entry store.

        Args:
            path: Path to the SQLite database file.
        """
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(self._path, check_same_thread=False)
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(SCHEMA)
        self._lock = threading.Lock()

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.commit()
            self._conn.close()

    def __enter__(self) -> "EntryStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def add(self, entry: Entry) -> Entry:
        """Insert or replace an entry. Ids are scoped per user."""
        self.add_many([entry])
        return entry

    def add_many(self, entries: Iterable[Entry]) -> int:
        rows = [self._entry_to_row(entry) for entry in entries]
        with self._lock, self._conn:
            self._conn.executemany(
                f"INSERT OR REPLACE INTO entries({COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
        logger.debug(f"Stored {len(rows)} entries")
        return len(rows)

    def list_entries(self, user_id: str, start: datetime, end: datetime) -> List[Entry]:
        """Entries in [start, end], oldest first."""
        return self._query(
            f"SELECT {COLUMNS} FROM entries WHERE user_id = ? AND timestamp >= ? AND timestamp <= ? "
            "ORDER BY timestamp ASC, id ASC",
            (user_id, format_timestamp(start), format_timestamp(end)),
        )

    def recent_entries(self, user_id: str, limit: int = 10) -> List[Entry]:
        """Latest entries, newest first."""
        return self._query(
            f"SELECT {COLUMNS} FROM entries WHERE user_id = ? ORDER BY timestamp DESC, id ASC LIMIT ?",
            (user_id, limit),
        )

    def get(self, user_id: str, entry_id: str) -> Optional[Entry]:
        entries = self._query(
            f"SELECT {COLUMNS} FROM entries WHERE user_id = ? AND id = ?", (user_id, entry_id)
        )
        return entries[0] if entries else None

    def count(self, user_id: str) -> int:
        with self._lock:
            cur = self._conn.execute("SELECT COUNT(*) FROM entries WHERE user_id = ?", (user_id,))
            return int(cur.fetchone()[0])

    def _query(self, sql: str, params: Sequence[Any]) -> List[Entry]:
        try:
            with self._lock:
                cur = self._conn.cursor()
                cur.execute(sql, tuple(params))
                rows = cur.fetchall()
            return [self._row_to_entry(row) for row in rows]
        except (sqlite3.Error, ValueError) as exc:
            raise SnapshotProviderError(f"Failed to read entries: {exc}") from exc

    @staticmethod
    def _entry_to_row(entry: Entry) -> Tuple[Any, ...]:
        return (
            entry.id,
            entry.user_id,
            format_timestamp(entry.timestamp),
            entry.title,
            entry.narrative,
            json.dumps(list(entry.symbols)),
            json.dumps(list(entry.emotions)),
            json.dumps(list(entry.themes)),
            json.dumps(list(entry.colors)),
            json.dumps(list(entry.context_tags)),
            entry.sleep_quality,
            entry.lucidity,
            entry.vividness,
        )

    @staticmethod
    def _row_to_entry(row: Tuple[Any, ...]) -> Entry:
        return Entry(
            id=row[0],
            user_id=row[1],
            timestamp=datetime.fromisoformat(row[2]),
            title=row[3],
            narrative=row[4],
            symbols=json.loads(row[5]),
            emotions=json.loads(row[6]),
            themes=json.loads(row[7]),
            colors=json.loads(row[8]),
            context_tags=json.loads(row[9]),
            sleep_quality=row[10],
            lucidity=row[11],
            vividness=row[12],
        )
