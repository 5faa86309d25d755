"""Tests for recurring symbol, emotion and theme recognition."""

from __future__ import annotations

import pytest

from reverie.analysis.pattern_recognition import PatternRecognizer
from reverie.models.pattern import PatternType


@pytest.fixture
def recognizer() -> PatternRecognizer:
    return PatternRecognizer()


def test_fewer_than_three_entries_yield_nothing(recognizer, make_entry):
    entries = [make_entry(0, symbols=["water"]), make_entry(1, symbols=["water"])]
    assert recognizer.recognize_patterns(entries) == []


def test_recurring_symbol_with_context_correlation(recognizer, water_snapshot):
    patterns = recognizer.recognize_patterns(water_snapshot)

    assert len(patterns) == 1
    water = patterns[0]
    assert water.pattern_type == PatternType.SYMBOL_FREQUENCY
    assert water.name == "Recurring Symbol: water"
    assert water.frequency == 4
    assert water.sample_size == 5
    assert water.correlation is not None
    assert water.correlation.event_type == "work-stress"
    assert water.correlation.strength == pytest.approx(1.0)
    assert water.confidence == pytest.approx(0.77)
    assert water.confidence > 0.6
    assert water.first_occurrence == water_snapshot[0].timestamp
    assert water.last_occurrence == water_snapshot[4].timestamp
    assert water.time_range_days == 4


def test_related_values_come_from_contributing_entries(recognizer, water_snapshot):
    water = recognizer.recognize_patterns(water_snapshot)[0]

    assert water.related_symbols == ["water", "boat"]
    assert water.related_emotions == ["calm", "fear"]
    assert water.related_themes == []


def test_insight_mentions_strong_correlation(recognizer, water_snapshot):
    water = recognizer.recognize_patterns(water_snapshot)[0]

    assert "very frequently" in water.insight
    assert "work-stress" in water.insight
    assert "emotional processing and the unconscious mind" in water.insight


def test_value_needs_three_occurrences(recognizer, make_entry):
    entries = [
        make_entry(0, emotions=["fear"]),
        make_entry(1, emotions=["fear"]),
        make_entry(2, emotions=["joy"]),
    ]
    assert recognizer.recognize_patterns(entries) == []


def test_value_needs_minimum_relative_frequency(recognizer, make_entry):
    entries = [make_entry(day, themes=["chase"] if day < 3 else ["travel"]) for day in range(16)]

    names = [p.name for p in recognizer.recognize_patterns(entries)]

    # chase: 3 of 16 is below 20%; travel: 13 of 16
    assert "Recurring Theme: chase" not in names
    assert "Recurring Theme: travel" in names


def test_emotions_and_themes_map_to_their_types(recognizer, make_entry):
    entries = [make_entry(day, emotions=["fear"], themes=["chase"]) for day in range(3)]

    by_name = {p.name: p for p in recognizer.recognize_patterns(entries)}

    assert by_name["Recurring Emotion: fear"].pattern_type == PatternType.EMOTIONAL_CYCLE
    assert by_name["Recurring Theme: chase"].pattern_type == PatternType.THEME_EVOLUTION


def test_untagged_entries_fall_back_to_general_correlation(recognizer, make_entry):
    entries = [make_entry(day, symbols=["door"]) for day in range(4)]

    door = recognizer.recognize_patterns(entries)[0]

    assert door.correlation.event_type == "general"
    assert door.correlation.strength == pytest.approx(0.1)
    # 0.4 * 1.0 + 0.4 * 0.1 + 0.2 * (4 / 20)
    assert door.confidence == pytest.approx(0.48)


def test_results_are_deterministic(recognizer, water_snapshot):
    first = recognizer.recognize_patterns(water_snapshot)
    second = recognizer.recognize_patterns(water_snapshot)
    assert [p.model_dump() for p in first] == [p.model_dump() for p in second]
