"""Read-time insights derived from active patterns.

PatternInsight values are never persisted. They are recomputed from a pattern
whenever a consumer asks for them:

- severity blends how much of the snapshot the pattern covers, its confidence
  and its correlation strength
- a pattern is actionable when its life-context correlation is strong
- actionable patterns carry a short recommendation

The insight report bundles the strongest active patterns with summary
statistics, recent entry trends and general recommendations.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from reverie.analysis.correlation_detector import STRONG_CORRELATION
from reverie.models.entry import Entry
from reverie.models.pattern import Pattern, PatternInsight, PatternType, Severity

logger = logging.getLogger(__name__)


SIGNIFICANT_CONFIDENCE = 0.6
STRESS_EMOTIONS = {"fear", "anxiety", "anger"}


class PatternSummary(BaseModel):
    """Aggregate statistics over a set of patterns."""

    total_patterns: int = 0
    significant_patterns: int = 0
    strong_correlations: int = 0
    average_confidence: float = 0.0


class RecentTrends(BaseModel):
    """What the most recent entries look like."""

    entry_count: int = 0
    average_lucidity: float = 0.0
    common_emotions: List[str] = Field(default_factory=list)
    common_symbols: List[str] = Field(default_factory=list)


class InsightReport(BaseModel):
    """Everything the insights view needs in one object."""

    patterns: List[Pattern] = Field(default_factory=list)
    insights: List[PatternInsight] = Field(default_factory=list)
    strongest_pattern: Optional[Pattern] = None
    summary: PatternSummary = Field(default_factory=PatternSummary)
    recent_trends: RecentTrends = Field(default_factory=RecentTrends)
    recommendations: List[str] = Field(default_factory=list)


def _strength(pattern: Pattern) -> float:
    return pattern.correlation.strength if pattern.correlation else 0.0


def calculate_severity(pattern: Pattern) -> Severity:
    """Blend coverage, confidence and correlation into a severity band."""
    coverage = pattern.frequency / pattern.sample_size if pattern.sample_size else 0.0
    score = coverage * 0.4 + pattern.confidence * 0.3 + _strength(pattern) * 0.3

    if score > 0.7:
        return Severity.HIGH
    if score > 0.4:
        return Severity.MEDIUM
    return Severity.LOW


def _subject(pattern: Pattern) -> str:
    """The value a pattern is about, e.g. 'water' for 'Recurring Symbol: water'."""
    return pattern.name.split(":", 1)[-1].strip().lower()


def generate_recommendation(pattern: Pattern) -> str:
    event_type = pattern.correlation.event_type if pattern.correlation else "daily life"
    subject = _subject(pattern)

    if pattern.pattern_type == PatternType.STRESS_RESPONSE or (
        pattern.pattern_type == PatternType.EMOTIONAL_CYCLE and subject in STRESS_EMOTIONS
    ):
        return f"Consider stress management techniques for {event_type} situations"

    if pattern.pattern_type == PatternType.SYMBOL_FREQUENCY and subject == "water":
        return "Engage in emotional processing activities like journaling or meditation"

    if pattern.pattern_type == PatternType.THEME_EVOLUTION and subject == "chase":
        return f"Address avoidance patterns related to {event_type}"

    if pattern.pattern_type == PatternType.LUCIDITY_TRIGGER:
        return "Use these elements as dream signs during reality-check practice"

    return f"Reflect on how {event_type} influences your dream patterns"


def derive_insight(pattern: Pattern) -> PatternInsight:
    """Compute the read-time insight for one pattern."""
    actionable = _strength(pattern) > STRONG_CORRELATION
    return PatternInsight(
        pattern=pattern,
        severity=calculate_severity(pattern),
        actionable=actionable,
        description=pattern.insight or pattern.description,
        recommendation=generate_recommendation(pattern) if actionable else None,
    )


def summarize_patterns(patterns: Sequence[Pattern]) -> PatternSummary:
    if not patterns:
        return PatternSummary()
    return PatternSummary(
        total_patterns=len(patterns),
        significant_patterns=sum(1 for p in patterns if p.confidence > SIGNIFICANT_CONFIDENCE),
        strong_correlations=sum(1 for p in patterns if _strength(p) > STRONG_CORRELATION),
        average_confidence=sum(p.confidence for p in patterns) / len(patterns),
    )


def _top_values(entries: Sequence[Entry], attribute: str, limit: int) -> List[str]:
    counts: Counter[str] = Counter()
    for entry in entries:
        counts.update(entry.values_for(attribute))
    return [value for value, _ in counts.most_common(limit)]


def analyze_recent_trends(recent_entries: Sequence[Entry]) -> RecentTrends:
    """Describe the latest entries; entries without lucidity count as 0."""
    if not recent_entries:
        return RecentTrends()
    return RecentTrends(
        entry_count=len(recent_entries),
        average_lucidity=sum(e.lucidity or 0 for e in recent_entries) / len(recent_entries),
        common_emotions=_top_values(recent_entries, "emotions", 3),
        common_symbols=_top_values(recent_entries, "symbols", 3),
    )


def generate_recommendations(patterns: Sequence[Pattern]) -> List[str]:
    if not patterns:
        return ["Keep recording dreams regularly to help identify patterns"]

    recommendations = ["Continue tracking your dreams to strengthen pattern recognition"]
    types = {pattern.pattern_type for pattern in patterns}
    if PatternType.SYMBOL_FREQUENCY in types:
        recommendations.append(
            "Pay attention to recurring symbols in your waking life for deeper insights"
        )
    if PatternType.LUCIDITY_TRIGGER in types:
        recommendations.append(
            "Use identified lucidity triggers for dream sign recognition practice"
        )
    return recommendations


def build_insight_report(
    patterns: Sequence[Pattern],
    recent_entries: Sequence[Entry],
) -> InsightReport:
    """Assemble the report from ranked active patterns and recent entries.

    Args:
        patterns: Active patterns, strongest first
        recent_entries: Latest entries, any order
    """
    report = InsightReport(
        patterns=list(patterns),
        insights=[derive_insight(pattern) for pattern in patterns],
        strongest_pattern=patterns[0] if patterns else None,
        summary=summarize_patterns(patterns),
        recent_trends=analyze_recent_trends(recent_entries),
        recommendations=generate_recommendations(patterns),
    )
    logger.debug(f"Built insight report over {len(patterns)} patterns")
    return report
