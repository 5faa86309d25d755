"""Recurring content pattern recognition.

Counts how many entries carry each symbol, emotion and theme, and turns the
values that recur often enough into patterns.

Example Patterns:
- "Recurring Symbol: water" - water appears in 4 of 5 entries, all of them
  tagged work-stress
- "Recurring Emotion: fear" - fear appears in a third of the entries
- "Recurring Theme: chase" - chase narratives appear in 6 of 20 entries
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from reverie.analysis.confidence import calculate_confidence, frequency_word
from reverie.analysis.correlation_detector import ContextCorrelationDetector, is_strong
from reverie.analysis.counting import (
    common_values,
    entries_by_value,
    occurrence_range,
    time_range_days,
)
from reverie.analysis.meanings import meaning_for
from reverie.models.entry import CATEGORICAL_FIELDS, Entry
from reverie.models.pattern import Correlation, Pattern, PatternType

logger = logging.getLogger(__name__)


ATTRIBUTE_PATTERNS: Dict[str, tuple[PatternType, str, str]] = {
    # attribute: (pattern type, name prefix, singular noun)
    "symbols": (PatternType.SYMBOL_FREQUENCY, "Recurring Symbol", "symbol"),
    "emotions": (PatternType.EMOTIONAL_CYCLE, "Recurring Emotion", "emotion"),
    "themes": (PatternType.THEME_EVOLUTION, "Recurring Theme", "theme"),
}


class PatternRecognizer:
    """Recognizes recurring symbols, emotions and themes in a snapshot.

    Each attribute is analyzed independently. A value qualifies when it is
    carried by at least ``min_occurrences`` entries and by at least
    ``min_relative_frequency`` of the snapshot.

    Example Usage:
        recognizer = PatternRecognizer()
        patterns = recognizer.recognize_patterns(snapshot)
        for pattern in patterns:
            print(f"{pattern.name}: {pattern.confidence:.0%}")
    """

    def __init__(
        self,
        correlation_detector: Optional[ContextCorrelationDetector] = None,
        min_entries: int = 3,
        min_occurrences: int = 3,
        min_relative_frequency: float = 0.2,
        max_related: int = 5,
    ):
        """Initialize pattern recognizer.

        Args:
            correlation_detector: Shared context-tag correlation detector
            min_entries: Snapshot size below which nothing is reported
            min_occurrences: Minimum entries carrying a value
            min_relative_frequency: Minimum share of entries carrying a value
            max_related: Cap on each related_* list
        """
        self.correlation_detector = correlation_detector or ContextCorrelationDetector()
        self.min_entries = min_entries
        self.min_occurrences = min_occurrences
        self.min_relative_frequency = min_relative_frequency
        self.max_related = max_related

    def recognize_patterns(
        self,
        entries: Sequence[Entry],
        attributes: Sequence[str] = CATEGORICAL_FIELDS,
    ) -> List[Pattern]:
        """Recognize recurring values across the snapshot.

        Args:
            entries: Chronologically ordered snapshot
            attributes: Which of symbols/emotions/themes to analyze

        Returns:
            Patterns in attribute order, then first-appearance order
        """
        if len(entries) < self.min_entries:
            return []

        patterns: List[Pattern] = []
        for attribute in attributes:
            patterns.extend(self.detect_recurring_values(entries, attribute))
        return patterns

    def detect_recurring_values(self, entries: Sequence[Entry], attribute: str) -> List[Pattern]:
        """Detect recurring values of one attribute."""
        total = len(entries)
        if total < self.min_entries:
            return []

        patterns: List[Pattern] = []
        for value, contributing in entries_by_value(entries, attribute).items():
            occurrences = len(contributing)
            relative = occurrences / total
            if occurrences < self.min_occurrences or relative < self.min_relative_frequency:
                continue

            correlation = self.correlation_detector.analyze(contributing)
            patterns.append(
                self._build_pattern(attribute, value, contributing, total, correlation)
            )

        logger.debug(f"Found {len(patterns)} recurring {attribute} in {total} entries")
        return patterns

    def _build_pattern(
        self,
        attribute: str,
        value: str,
        contributing: Sequence[Entry],
        total: int,
        correlation: Correlation,
    ) -> Pattern:
        pattern_type, prefix, noun = ATTRIBUTE_PATTERNS[attribute]
        occurrences = len(contributing)
        relative = occurrences / total
        first, last = occurrence_range(contributing)

        return Pattern(
            pattern_type=pattern_type,
            name=f"{prefix}: {value}",
            description=(
                f'The {noun} "{value}" appears frequently in your entries '
                f"({occurrences} times, {relative * 100:.1f}% of entries)"
            ),
            frequency=occurrences,
            confidence=calculate_confidence(occurrences, total, correlation),
            related_symbols=self._related(contributing, "symbols"),
            related_emotions=self._related(contributing, "emotions"),
            related_themes=self._related(contributing, "themes"),
            time_range_days=time_range_days(contributing),
            first_occurrence=first,
            last_occurrence=last,
            correlation=correlation,
            insight=generate_insight(attribute, value, relative, correlation),
            sample_size=total,
        )

    def _related(self, contributing: Sequence[Entry], attribute: str) -> List[str]:
        return common_values(contributing, attribute, min_count=2, limit=self.max_related)


def generate_insight(attribute: str, value: str, relative: float, correlation: Correlation) -> str:
    """Insight text for a recurring value."""
    how_often = frequency_word(relative)
    meaning = meaning_for(attribute, value)

    if attribute == "emotions":
        tail = f" and strongly correlates with {correlation.event_type}" if is_strong(correlation) else ""
        return (
            f"You experience {value.lower()} {how_often} in your dreams{tail}. "
            f"This suggests {meaning}."
        )
    if attribute == "themes":
        tail = f" particularly when dealing with {correlation.event_type}" if is_strong(correlation) else ""
        return f"Dreams about {value} occur {how_often}{tail}. This pattern may indicate {meaning}."

    tail = (
        f" and strongly correlates with {correlation.event_type} in your waking life"
        if is_strong(correlation)
        else ""
    )
    return f'The symbol "{value}" appears {how_often} in your dreams{tail}. This may represent {meaning}.'
