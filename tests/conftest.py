"""Shared fixtures for the Reverie test suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, List

import pytest

from reverie.models.entry import Entry
from reverie.storage.entry_store import EntryStore
from reverie.storage.pattern_store import SQLitePatternStore


# A Monday
BASE_TIME = datetime(2024, 3, 4, 7, 30, tzinfo=timezone.utc)


@pytest.fixture
def base_time() -> datetime:
    return BASE_TIME


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Factory for entries offset from BASE_TIME by whole days."""

    def _make(day: float = 0, user_id: str = "alice", **fields) -> Entry:
        fields.setdefault("title", f"Dream on day {day:g}")
        return Entry(user_id=user_id, timestamp=BASE_TIME + timedelta(days=day), **fields)

    return _make


@pytest.fixture
def water_snapshot(make_entry) -> List[Entry]:
    """Five entries, water in four of them, each of those tagged work-stress."""
    return [
        make_entry(0, symbols=["water", "boat"], emotions=["calm"], context_tags=["work-stress"]),
        make_entry(1, symbols=["water"], emotions=["fear"], context_tags=["work-stress"]),
        make_entry(2, symbols=["house"], emotions=["joy"]),
        make_entry(3, symbols=["water", "boat"], emotions=["calm"], context_tags=["work-stress"]),
        make_entry(4, symbols=["water"], emotions=["fear"], context_tags=["work-stress", "travel"]),
    ]


@pytest.fixture
def entry_store(tmp_path: Path):
    store = EntryStore(tmp_path / "reverie.db")
    yield store
    store.close()


@pytest.fixture
def pattern_store(tmp_path: Path):
    store = SQLitePatternStore(tmp_path / "reverie.db")
    yield store
    store.close()
