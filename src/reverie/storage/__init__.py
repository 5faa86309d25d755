"""Storage collaborators: journal entries in, detected patterns out."""

from .base import EntrySnapshotProvider, PatternRepository
from .entry_store import EntryStore
from .pattern_store import SQLitePatternStore

__all__ = [
    "EntrySnapshotProvider",
    "PatternRepository",
    "EntryStore",
    "SQLitePatternStore",
]
