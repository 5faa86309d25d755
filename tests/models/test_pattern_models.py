"""Tests for entry and pattern models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from reverie.models.entry import Entry
from reverie.models.pattern import Correlation, Pattern, PatternType


def _pattern(**overrides) -> Pattern:
    first = datetime(2024, 3, 4, tzinfo=timezone.utc)
    data = dict(
        pattern_type=PatternType.SYMBOL_FREQUENCY,
        name="Recurring Symbol: water",
        frequency=4,
        confidence=0.77,
        first_occurrence=first,
        last_occurrence=first + timedelta(days=4),
    )
    data.update(overrides)
    return Pattern(**data)


def test_entry_deduplicates_and_strips_tags():
    entry = Entry(
        timestamp=datetime(2024, 3, 4),
        symbols=["water", " water ", "", "boat"],
        emotions="fear",
        themes=None,
    )

    assert entry.symbols == ("water", "boat")
    assert entry.emotions == ("fear",)
    assert entry.themes == ()


def test_entry_naive_timestamp_is_utc():
    entry = Entry(timestamp=datetime(2024, 3, 4, 7, 30))
    assert entry.timestamp.tzinfo == timezone.utc


def test_entry_rejects_out_of_range_lucidity():
    with pytest.raises(ValidationError):
        Entry(timestamp=datetime(2024, 3, 4), lucidity=11)


def test_entry_is_frozen():
    entry = Entry(timestamp=datetime(2024, 3, 4))
    with pytest.raises(ValidationError):
        entry.title = "changed"


def test_entry_summary_is_bounded():
    entry = Entry(
        timestamp=datetime(2024, 3, 4),
        title="Long",
        symbols=[f"s{i}" for i in range(8)],
        emotions=[f"e{i}" for i in range(5)],
        themes=[f"t{i}" for i in range(5)],
    )

    summary = entry.summary()
    assert summary["date"] == "2024-03-04"
    assert len(summary["symbols"]) == 5
    assert len(summary["emotions"]) == 3
    assert len(summary["themes"]) == 3


def test_entry_values_for_rejects_unknown_attribute():
    entry = Entry(timestamp=datetime(2024, 3, 4))
    with pytest.raises(ValueError):
        entry.values_for("colors")


def test_pattern_confidence_is_clamped():
    assert _pattern(confidence=1.7).confidence == 1.0
    assert _pattern(confidence=-0.3).confidence == 0.0
    assert _pattern(confidence=float("nan")).confidence == 0.0
    assert _pattern(confidence=float("inf")).confidence == 0.0


def test_pattern_rejects_inverted_occurrence_range():
    first = datetime(2024, 3, 10, tzinfo=timezone.utc)
    with pytest.raises(ValidationError):
        _pattern(first_occurrence=first, last_occurrence=first - timedelta(days=1))


def test_pattern_related_lists_are_capped():
    pattern = _pattern(related_symbols=[f"s{i}" for i in range(9)])
    assert pattern.related_symbols == ["s0", "s1", "s2", "s3", "s4"]


def test_pattern_rejects_empty_name():
    with pytest.raises(ValidationError):
        _pattern(name="")


def test_pattern_key_and_serialization():
    pattern = _pattern(
        correlation=Correlation(event_type="work-stress", strength=1.0, description="Very strong")
    )

    assert pattern.key == (PatternType.SYMBOL_FREQUENCY, "Recurring Symbol: water")
    data = pattern.to_dict()
    assert data["pattern_type"] == "SYMBOL_FREQUENCY"
    assert data["source"] == "local"
    assert data["correlation"]["event_type"] == "work-stress"


def test_correlation_strength_bounds():
    with pytest.raises(ValidationError):
        Correlation(event_type="general", strength=1.5)
