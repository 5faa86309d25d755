"""SQLite-backed pattern repository.

Patterns are keyed by (user_id, pattern_type, name). Re-detecting a pattern
updates the stored row in place, re-activates it and keeps its id and the
earliest first_occurrence seen. Patterns are never removed automatically.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple
from uuid import uuid4

from reverie.errors import PersistenceError, StorageError
from reverie.models.pattern import Correlation, Pattern, PatternSource, PatternType
from reverie.storage.entry_store import format_timestamp

logger = logging.getLogger(__name__)


SCHEMA = """
CREATE TABLE IF NOT EXISTS patterns (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    pattern_type TEXT NOT NULL,
    name TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    frequency INTEGER NOT NULL,
    confidence REAL NOT NULL,
    related_symbols TEXT NOT NULL DEFAULT '[]',
    related_emotions TEXT NOT NULL DEFAULT '[]',
    related_themes TEXT NOT NULL DEFAULT '[]',
    time_range_days INTEGER NOT NULL DEFAULT 0,
    first_occurrence TEXT NOT NULL,
    last_occurrence TEXT NOT NULL,
    correlation TEXT,
    insight TEXT NOT NULL DEFAULT '',
    is_active INTEGER NOT NULL DEFAULT 1,
    sample_size INTEGER NOT NULL DEFAULT 0,
    source TEXT NOT NULL DEFAULT 'local',
    updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(user_id, pattern_type, name)
);

CREATE INDEX IF NOT EXISTS idx_patterns_user_active ON patterns(user_id, is_active, last_occurrence);
"""

COLUMNS = (
    "id, pattern_type, name, description, frequency, confidence, related_symbols, "
    "related_emotions, related_themes, time_range_days, first_occurrence, last_occurrence, "
    "correlation, insight, is_active, sample_size, source"
)

# Shortest id prefix accepted in place of a full id.
MIN_ID_PREFIX = 4


class SQLitePatternStore:
    """Persist detected patterns per user."""

    def __init__(self, path: Path) -> None:
        """Initialize the pattern store.

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

    def __enter__(self) -> "SQLitePatternStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def upsert(self, user_id: str, pattern: Pattern) -> Pattern:
        """Insert a pattern or update the row with the same key.

        Raises:
            PersistenceError: The write failed
        """
        correlation = pattern.correlation.model_dump_json() if pattern.correlation else None
        try:
            with self._lock, self._conn:
                self._conn.execute(
                    """
                    INSERT INTO patterns(
                        id, user_id, pattern_type, name, description, frequency, confidence,
                        related_symbols, related_emotions, related_themes, time_range_days,
                        first_occurrence, last_occurrence, correlation, insight, is_active,
                        sample_size, source, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, ?, ?, CURRENT_TIMESTAMP)
                    ON CONFLICT(user_id, pattern_type, name) DO UPDATE SET
                        description=excluded.description,
                        frequency=excluded.frequency,
                        confidence=excluded.confidence,
                        related_symbols=excluded.related_symbols,
                        related_emotions=excluded.related_emotions,
                        related_themes=excluded.related_themes,
                        time_range_days=excluded.time_range_days,
                        first_occurrence=MIN(patterns.first_occurrence, excluded.first_occurrence),
                        last_occurrence=excluded.last_occurrence,
                        correlation=excluded.correlation,
                        insight=excluded.insight,
                        is_active=1,
                        sample_size=excluded.sample_size,
                        source=excluded.source,
                        updated_at=CURRENT_TIMESTAMP
                    """,
                    (
                        pattern.id or uuid4().hex,
                        user_id,
                        pattern.pattern_type.value,
                        pattern.name,
                        pattern.description,
                        pattern.frequency,
                        pattern.confidence,
                        json.dumps(pattern.related_symbols),
                        json.dumps(pattern.related_emotions),
                        json.dumps(pattern.related_themes),
                        pattern.time_range_days,
                        format_timestamp(pattern.first_occurrence),
                        format_timestamp(pattern.last_occurrence),
                        correlation,
                        pattern.insight,
                        pattern.sample_size,
                        pattern.source.value,
                    ),
                )
                cur = self._conn.execute(
                    f"SELECT {COLUMNS} FROM patterns WHERE user_id = ? AND pattern_type = ? AND name = ?",
                    (user_id, pattern.pattern_type.value, pattern.name),
                )
                row = cur.fetchone()
        except sqlite3.Error as exc:
            raise PersistenceError(pattern.name, details={"error": str(exc)}) from exc

        if row is None:
            raise PersistenceError(pattern.name, message=f"Pattern '{pattern.name}' vanished after write")
        return self._row_to_pattern(row)

    def list_active(self, user_id: str, since: Optional[datetime] = None) -> List[Pattern]:
        """Active patterns, strongest first."""
        sql = f"SELECT {COLUMNS} FROM patterns WHERE user_id = ? AND is_active = 1"
        params: List[Any] = [user_id]
        if since is not None:
            sql += " AND last_occurrence >= ?"
            params.append(format_timestamp(since))
        sql += " ORDER BY confidence DESC, name ASC"
        return self._query(sql, params)

    def list_all(self, user_id: str) -> List[Pattern]:
        return self._query(
            f"SELECT {COLUMNS} FROM patterns WHERE user_id = ? ORDER BY confidence DESC, name ASC",
            (user_id,),
        )

    def get(self, user_id: str, pattern_id: str) -> Optional[Pattern]:
        """Look up a pattern by full id or by an unambiguous id prefix."""
        patterns = self._query(
            f"SELECT {COLUMNS} FROM patterns WHERE user_id = ? AND id = ?",
            (user_id, pattern_id),
        )
        if patterns or len(pattern_id) < MIN_ID_PREFIX:
            return patterns[0] if patterns else None

        escaped = pattern_id.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        matches = self._query(
            f"SELECT {COLUMNS} FROM patterns WHERE user_id = ? AND id LIKE ? ESCAPE '\\' LIMIT 2",
            (user_id, escaped + "%"),
        )
        return matches[0] if len(matches) == 1 else None

    def set_active(self, user_id: str, pattern_id: str, is_active: bool) -> Optional[Pattern]:
        self._write(
            "UPDATE patterns SET is_active = ?, updated_at = CURRENT_TIMESTAMP WHERE user_id = ? AND id = ?",
            (1 if is_active else 0, user_id, pattern_id),
        )
        return self.get(user_id, pattern_id)

    def update_insight(self, user_id: str, pattern_id: str, insight: str) -> Optional[Pattern]:
        self._write(
            "UPDATE patterns SET insight = ?, updated_at = CURRENT_TIMESTAMP WHERE user_id = ? AND id = ?",
            (insight, user_id, pattern_id),
        )
        return self.get(user_id, pattern_id)

    def delete(self, user_id: str, pattern_id: str) -> bool:
        """Remove a pattern. Returns False when it did not exist."""
        return self._write(
            "DELETE FROM patterns WHERE user_id = ? AND id = ?",
            (user_id, pattern_id),
        ) > 0

    def _write(self, sql: str, params: Sequence[Any]) -> int:
        try:
            with self._lock, self._conn:
                cur = self._conn.execute(sql, tuple(params))
                return cur.rowcount
        except sqlite3.Error as exc:
            raise StorageError(f"Pattern store write failed: {exc}") from exc

    def _query(self, sql: str, params: Sequence[Any]) -> List[Pattern]:
        try:
            with self._lock:
                cur = self._conn.cursor()
                cur.execute(sql, tuple(params))
                rows = cur.fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"Pattern store read failed: {exc}") from exc
        return [self._row_to_pattern(row) for row in rows]

    @staticmethod
    def _row_to_pattern(row: Tuple[Any, ...]) -> Pattern:
        return Pattern(
            id=row[0],
            pattern_type=PatternType(row[1]),
            name=row[2],
            description=row[3],
            frequency=row[4],
            confidence=row[5],
            related_symbols=json.loads(row[6]),
            related_emotions=json.loads(row[7]),
            related_themes=json.loads(row[8]),
            time_range_days=row[9],
            first_occurrence=datetime.fromisoformat(row[10]),
            last_occurrence=datetime.fromisoformat(row[11]),
            correlation=Correlation.model_validate_json(row[12]) if row[12] else None,
            insight=row[13],
            is_active=bool(row[14]),
            sample_size=row[15],
            source=PatternSource(row[16]),
        )
