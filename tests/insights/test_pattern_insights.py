"""Tests for read-time insight derivation and the insight report."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from reverie.insights.pattern_insights import (
    analyze_recent_trends,
    build_insight_report,
    calculate_severity,
    derive_insight,
    generate_recommendations,
    summarize_patterns,
)
from reverie.models.pattern import Correlation, Pattern, PatternType, Severity

WHEN = datetime(2024, 3, 4, tzinfo=timezone.utc)


def _pattern(
    name: str,
    pattern_type: PatternType = PatternType.SYMBOL_FREQUENCY,
    frequency: int = 4,
    sample_size: int = 5,
    confidence: float = 0.77,
    strength: float | None = 1.0,
    event_type: str = "work-stress",
) -> Pattern:
    return Pattern(
        pattern_type=pattern_type,
        name=name,
        description=f"{name} description",
        frequency=frequency,
        confidence=confidence,
        first_occurrence=WHEN,
        last_occurrence=WHEN,
        correlation=None if strength is None else Correlation(event_type=event_type, strength=strength),
        sample_size=sample_size,
    )


def test_severity_bands():
    # 0.4 * 0.8 + 0.3 * 0.77 + 0.3 * 1.0 = 0.851
    assert calculate_severity(_pattern("Recurring Symbol: water")) == Severity.HIGH
    # 0.4 * 0.2 + 0.3 * 0.5 + 0.3 * 0.5 = 0.38
    assert calculate_severity(_pattern("x", frequency=1, confidence=0.5, strength=0.5)) == Severity.LOW
    # 0.4 * 0.5 + 0.3 * 0.6 + 0.3 * 0.3 = 0.47
    assert (
        calculate_severity(_pattern("y", frequency=2, sample_size=4, confidence=0.6, strength=0.3))
        == Severity.MEDIUM
    )


def test_water_pattern_gets_processing_recommendation():
    insight = derive_insight(_pattern("Recurring Symbol: water"))

    assert insight.actionable
    assert insight.recommendation == "Engage in emotional processing activities like journaling or meditation"


def test_fear_emotion_gets_stress_recommendation():
    insight = derive_insight(_pattern("Recurring Emotion: fear", PatternType.EMOTIONAL_CYCLE))
    assert insight.recommendation == "Consider stress management techniques for work-stress situations"


def test_lucidity_trigger_recommendation():
    insight = derive_insight(_pattern("Lucidity Triggers", PatternType.LUCIDITY_TRIGGER, strength=0.9))
    assert "dream signs" in insight.recommendation


def test_generic_recommendation_names_context():
    insight = derive_insight(_pattern("Recurring Symbol: door", event_type="exams"))
    assert insight.recommendation == "Reflect on how exams influences your dream patterns"


def test_weak_correlation_is_not_actionable():
    insight = derive_insight(_pattern("Recurring Symbol: door", strength=0.6))
    assert not insight.actionable
    assert insight.recommendation is None


def test_suggested_pattern_without_correlation():
    insight = derive_insight(_pattern("Work Anxiety", PatternType.STRESS_RESPONSE, strength=None))
    assert not insight.actionable


def test_summarize_patterns():
    summary = summarize_patterns(
        [_pattern("a", confidence=0.9), _pattern("b", confidence=0.5, strength=0.2)]
    )

    assert summary.total_patterns == 2
    assert summary.significant_patterns == 1
    assert summary.strong_correlations == 1
    assert summary.average_confidence == pytest.approx(0.7)


def test_recent_trends(make_entry):
    entries = [
        make_entry(0, symbols=["water"], emotions=["fear"], lucidity=8),
        make_entry(1, symbols=["water", "house"], emotions=["fear", "joy"]),
        make_entry(2, symbols=["house"], emotions=["fear"], lucidity=4),
    ]

    trends = analyze_recent_trends(entries)

    assert trends.entry_count == 3
    assert trends.average_lucidity == pytest.approx(4.0)
    assert trends.common_emotions == ["fear", "joy"]
    assert set(trends.common_symbols) == {"water", "house"}


def test_recommendations_depend_on_pattern_types():
    assert generate_recommendations([]) == ["Keep recording dreams regularly to help identify patterns"]

    recommendations = generate_recommendations(
        [_pattern("a"), _pattern("Lucidity Triggers", PatternType.LUCIDITY_TRIGGER)]
    )
    assert len(recommendations) == 3


def test_build_insight_report(make_entry):
    patterns = [_pattern("Recurring Symbol: water"), _pattern("b", confidence=0.4)]

    report = build_insight_report(patterns, [make_entry(0, emotions=["fear"])])

    assert report.strongest_pattern == patterns[0]
    assert len(report.insights) == 2
    assert report.summary.total_patterns == 2
    assert report.recent_trends.entry_count == 1


def test_empty_report():
    report = build_insight_report([], [])
    assert report.strongest_pattern is None
    assert report.summary.total_patterns == 0
    assert report.recent_trends.entry_count == 0
