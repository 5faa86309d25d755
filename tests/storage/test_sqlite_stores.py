"""Tests for the SQLite entry store and pattern repository."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from reverie.models.entry import Entry
from reverie.models.pattern import Correlation, Pattern, PatternSource, PatternType
from reverie.storage.entry_store import EntryStore
from reverie.storage.pattern_store import SQLitePatternStore

WHEN = datetime(2024, 3, 4, 7, 30, tzinfo=timezone.utc)


def _pattern(name: str = "Recurring Symbol: water", confidence: float = 0.77, **extra) -> Pattern:
    data = dict(
        pattern_type=PatternType.SYMBOL_FREQUENCY,
        name=name,
        description="water recurs",
        frequency=4,
        confidence=confidence,
        related_symbols=["water", "boat"],
        first_occurrence=WHEN,
        last_occurrence=WHEN + timedelta(days=4),
        correlation=Correlation(event_type="work-stress", strength=1.0, description="Very strong"),
        insight="insight",
        sample_size=5,
    )
    data.update(extra)
    return Pattern(**data)


# ---------------------------------------------------------------------------
# Entries
# ---------------------------------------------------------------------------


def test_entry_round_trip(entry_store: EntryStore, make_entry):
    entry = make_entry(
        0,
        narrative="I was flying over the sea",
        symbols=["water", "flying"],
        emotions=["joy"],
        colors=["blue"],
        context_tags=["travel"],
        lucidity=8,
        sleep_quality=6.5,
    )
    entry_store.add(entry)

    loaded = entry_store.get("alice", entry.id)

    assert loaded == entry
    assert entry_store.get("bob", entry.id) is None


def test_list_entries_is_inclusive_and_chronological(entry_store: EntryStore, make_entry):
    entries = [make_entry(day) for day in (3, 0, 2, 1, 5)]
    entry_store.add_many(entries)

    window = entry_store.list_entries("alice", WHEN, WHEN + timedelta(days=3))

    assert [e.timestamp for e in window] == [WHEN + timedelta(days=d) for d in range(4)]


def test_same_entry_id_is_kept_per_user(entry_store: EntryStore, make_entry):
    entry_store.add(make_entry(0, user_id="alice", id="e1", symbols=["water"]))
    entry_store.add(make_entry(1, user_id="bob", id="e1", symbols=["fire"]))

    assert [e.symbols for e in entry_store.recent_entries("alice")] == [("water",)]
    assert [e.symbols for e in entry_store.recent_entries("bob")] == [("fire",)]
    assert entry_store.get("alice", "e1").user_id == "alice"


def test_reimport_replaces_only_own_entry(entry_store: EntryStore, make_entry):
    entry_store.add_many([make_entry(0, id="e1"), make_entry(0, user_id="bob", id="e1")])
    entry_store.add(make_entry(0, id="e1", title="Edited"))

    assert entry_store.count("alice") == 1
    assert entry_store.get("alice", "e1").title == "Edited"
    assert entry_store.get("bob", "e1").title != "Edited"


def test_list_entries_filters_by_user(entry_store: EntryStore, make_entry):
    entry_store.add_many([make_entry(0), make_entry(1, user_id="bob")])

    assert len(entry_store.list_entries("alice", WHEN - timedelta(days=1), WHEN + timedelta(days=2))) == 1
    assert entry_store.count("bob") == 1


def test_naive_bounds_are_treated_as_utc(entry_store: EntryStore, make_entry):
    entry_store.add(make_entry(0))
    naive_start = datetime(2024, 3, 4, 7, 30)

    assert len(entry_store.list_entries("alice", naive_start, naive_start)) == 1


def test_recent_entries_newest_first(entry_store: EntryStore, make_entry):
    entry_store.add_many([make_entry(day) for day in range(12)])

    recent = entry_store.recent_entries("alice", limit=10)

    assert len(recent) == 10
    assert recent[0].timestamp == WHEN + timedelta(days=11)
    assert recent[-1].timestamp == WHEN + timedelta(days=2)


def test_entry_store_persists_across_connections(tmp_path: Path, make_entry):
    path = tmp_path / "nested" / "reverie.db"
    with EntryStore(path) as store:
        store.add(make_entry(0))
    with EntryStore(path) as store:
        assert store.count("alice") == 1


# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------


def test_upsert_inserts_with_id(pattern_store: SQLitePatternStore):
    stored = pattern_store.upsert("alice", _pattern())

    assert stored.id
    assert stored.is_active
    assert stored.correlation.event_type == "work-stress"
    assert stored.related_symbols == ["water", "boat"]
    assert pattern_store.get("alice", stored.id) == stored


def test_upsert_updates_in_place_and_reactivates(pattern_store: SQLitePatternStore):
    original = pattern_store.upsert("alice", _pattern())
    pattern_store.set_active("alice", original.id, False)

    later = WHEN + timedelta(days=10)
    updated = pattern_store.upsert(
        "alice",
        _pattern(
            confidence=0.9,
            frequency=6,
            first_occurrence=WHEN + timedelta(days=2),
            last_occurrence=later,
        ),
    )

    assert updated.id == original.id
    assert updated.is_active
    assert updated.confidence == pytest.approx(0.9)
    assert updated.frequency == 6
    assert updated.first_occurrence == WHEN
    assert updated.last_occurrence == later
    assert len(pattern_store.list_all("alice")) == 1


def test_same_name_is_scoped_by_user_and_type(pattern_store: SQLitePatternStore):
    pattern_store.upsert("alice", _pattern())
    pattern_store.upsert("bob", _pattern())
    pattern_store.upsert("alice", _pattern(pattern_type=PatternType.THEME_EVOLUTION))

    assert len(pattern_store.list_active("alice")) == 2
    assert len(pattern_store.list_active("bob")) == 1


def test_list_active_since_and_order(pattern_store: SQLitePatternStore):
    pattern_store.upsert("alice", _pattern("old", 0.9, last_occurrence=WHEN))
    pattern_store.upsert("alice", _pattern("recent", 0.5, last_occurrence=WHEN + timedelta(days=30)))
    pattern_store.upsert("alice", _pattern("strong", 0.8, last_occurrence=WHEN + timedelta(days=30)))

    assert [p.name for p in pattern_store.list_active("alice")] == ["old", "strong", "recent"]
    since = WHEN + timedelta(days=20)
    assert [p.name for p in pattern_store.list_active("alice", since=since)] == ["strong", "recent"]


def test_deactivated_patterns_are_not_listed(pattern_store: SQLitePatternStore):
    stored = pattern_store.upsert("alice", _pattern())

    result = pattern_store.set_active("alice", stored.id, False)

    assert result is not None and not result.is_active
    assert pattern_store.list_active("alice") == []


def test_update_insight(pattern_store: SQLitePatternStore):
    stored = pattern_store.upsert("alice", _pattern())
    assert pattern_store.update_insight("alice", stored.id, "My own note").insight == "My own note"


def test_suggested_pattern_without_correlation(pattern_store: SQLitePatternStore):
    stored = pattern_store.upsert(
        "alice", _pattern("Work Anxiety", correlation=None, source=PatternSource.SUGGESTED)
    )
    assert stored.correlation is None
    assert stored.source == PatternSource.SUGGESTED


def test_delete_and_unknown_ids(pattern_store: SQLitePatternStore):
    stored = pattern_store.upsert("alice", _pattern())

    assert pattern_store.get("bob", stored.id) is None
    assert not pattern_store.delete("bob", stored.id)
    assert pattern_store.delete("alice", stored.id)
    assert pattern_store.get("alice", stored.id) is None
    assert pattern_store.set_active("alice", stored.id, True) is None


def test_stores_share_one_database(tmp_path: Path, make_entry):
    path = tmp_path / "reverie.db"
    with EntryStore(path) as entries, SQLitePatternStore(path) as patterns:
        entries.add(make_entry(0))
        patterns.upsert("alice", _pattern())
        assert entries.count("alice") == 1
        assert len(patterns.list_active("alice")) == 1


def test_get_accepts_unique_id_prefix(pattern_store: SQLitePatternStore):
    stored = pattern_store.upsert("alice", _pattern())

    assert pattern_store.get("alice", stored.id[:8]) == stored
    assert pattern_store.get("bob", stored.id[:8]) is None
    assert pattern_store.get("alice", stored.id[:3]) is None
    assert pattern_store.get("alice", "%%%%") is None


def test_get_rejects_ambiguous_prefix(pattern_store: SQLitePatternStore):
    first = pattern_store.upsert("alice", _pattern(id="abcd-1111"))
    pattern_store.upsert("alice", _pattern("other", id="abcd-2222"))

    assert pattern_store.get("alice", "abcd") is None
    assert pattern_store.get("alice", "abcd-1") == first
