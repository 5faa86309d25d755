"""Life-context correlation detection.

Given the entries behind a candidate pattern, find the self-reported context
tag that shows up most often among them and how strongly it is associated.

Example:
    "water" appears in 4 entries and all 4 are tagged "work-stress":

        detector = ContextCorrelationDetector()
        correlation = detector.analyze(water_entries)
        correlation.event_type   # "work-stress"
        correlation.strength     # 1.0
        correlation.description  # "Very strong correlation with work-stress"

Strength bands only shape the description text; they never gate a pattern.
"""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from reverie.models.entry import Entry
from reverie.models.pattern import Correlation


GENERAL_EVENT_TYPE = "general"
NO_CORRELATION_STRENGTH = 0.1
STRONG_CORRELATION = 0.6


def strength_label(strength: float) -> str:
    """Qualitative band for a correlation strength."""
    if strength > 0.8:
        return "very strong"
    if strength > 0.6:
        return "strong"
    if strength > 0.4:
        return "moderate"
    return "weak"


def describe_correlation(event_type: str, strength: float) -> str:
    return f"{strength_label(strength).capitalize()} correlation with {event_type}"


class ContextCorrelationDetector:
    """Finds the dominant life-context tag for a subset of entries.

    The detector is stateless; one instance is shared by every analyzer in
    a run.
    """

    def analyze(self, entries: Sequence[Entry]) -> Correlation:
        """Correlate an entry subset with its most common context tag.

        Ties between equally common tags go to the tag encountered first in
        chronological order.

        Args:
            entries: Entries contributing to one candidate pattern

        Returns:
            Correlation with strength in [0, 1]; a weak 'general' correlation
            when no entry carries a tag
        """
        tag_counts: Counter[str] = Counter()
        for entry in entries:
            tag_counts.update(entry.context_tags)

        if not tag_counts or not entries:
            return Correlation(
                event_type=GENERAL_EVENT_TYPE,
                strength=NO_CORRELATION_STRENGTH,
                description="No specific life context correlation found",
            )

        tag, count = tag_counts.most_common(1)[0]
        strength = min(1.0, count / len(entries))
        return Correlation(
            event_type=tag,
            strength=strength,
            description=describe_correlation(tag, strength),
        )


def is_strong(correlation: Correlation) -> bool:
    """Whether a correlation is strong enough to mention in insight text."""
    return correlation.strength > STRONG_CORRELATION
