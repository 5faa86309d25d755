"""Interfaces the pattern engine expects from its storage collaborators."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from reverie.models.entry import Entry
from reverie.models.pattern import Pattern


class EntrySnapshotProvider(Protocol):
    """Read access to a user's journal entries."""

    def list_entries(self, user_id: str, start: datetime, end: datetime) -> Sequence[Entry]:
        """Entries with start <= timestamp <= end, oldest first.

        Raises:
            SnapshotProviderError: Entries could not be read
        """
        ...

    def recent_entries(self, user_id: str, limit: int = 10) -> Sequence[Entry]:
        """Latest entries regardless of window, newest first."""
        ...


class PatternRepository(Protocol):
    """Persistence for detected patterns, keyed by (user, type, name)."""

    def upsert(self, user_id: str, pattern: Pattern) -> Pattern:
        """Update the pattern with the same key in place, or insert it.

        Updating re-activates the pattern and keeps its id and
        first_occurrence.

        Raises:
            PersistenceError: The write failed
        """
        ...

    def list_active(self, user_id: str, since: Optional[datetime] = None) -> List[Pattern]:
        """Active patterns, optionally only those last seen at or after ``since``."""
        ...

    def get(self, user_id: str, pattern_id: str) -> Optional[Pattern]:
        """Look up by full id; implementations may also accept a unique id prefix."""
        ...

    def set_active(self, user_id: str, pattern_id: str, is_active: bool) -> Optional[Pattern]:
        ...

    def update_insight(self, user_id: str, pattern_id: str, insight: str) -> Optional[Pattern]:
        ...

    def delete(self, user_id: str, pattern_id: str) -> bool:
        ...
