"""Theme evolution between the early and late halves of a window.

The chronological snapshot is split at its midpoint. A theme is evolving when
its count in the late half differs from the early half by at least two
entries and by at least 50% of the early count. Themes that only show up in
the late half count as a full (100%) change.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from reverie.analysis.confidence import calculate_confidence
from reverie.analysis.correlation_detector import ContextCorrelationDetector
from reverie.analysis.counting import (
    common_values,
    entries_by_value,
    occurrence_range,
    time_range_days,
)
from reverie.analysis.meanings import meaning_for
from reverie.models.entry import Entry
from reverie.models.pattern import Pattern, PatternType

logger = logging.getLogger(__name__)


class ThemeEvolutionAnalyzer:
    """Detects themes that emerge or fade across the window."""

    def __init__(
        self,
        correlation_detector: Optional[ContextCorrelationDetector] = None,
        min_entries: int = 3,
        min_absolute_change: int = 2,
        min_relative_change: float = 0.5,
        max_related: int = 5,
    ):
        self.correlation_detector = correlation_detector or ContextCorrelationDetector()
        self.min_entries = min_entries
        self.min_absolute_change = min_absolute_change
        self.min_relative_change = min_relative_change
        self.max_related = max_related

    def detect_evolving_themes(self, entries: Sequence[Entry]) -> List[Pattern]:
        """Compare per-theme counts in the early and late halves."""
        total = len(entries)
        if total < self.min_entries:
            return []

        midpoint = total // 2
        early = entries_by_value(entries[:midpoint], "themes")
        late = entries_by_value(entries[midpoint:], "themes")

        patterns: List[Pattern] = []
        # early themes first, then themes new to the late half
        themes = list(early) + [theme for theme in late if theme not in early]

        for theme in themes:
            early_entries = early.get(theme, [])
            late_entries = late.get(theme, [])
            early_count, late_count = len(early_entries), len(late_entries)
            change = late_count - early_count

            if abs(change) < self.min_absolute_change:
                continue
            relative_change = abs(change) / early_count if early_count else 1.0
            if relative_change < self.min_relative_change:
                continue

            contributing = early_entries + late_entries
            correlation = self.correlation_detector.analyze(contributing)
            first, last = occurrence_range(contributing)
            direction = "emerging" if change > 0 else "fading"

            patterns.append(
                Pattern(
                    pattern_type=PatternType.THEME_EVOLUTION,
                    name=f"Evolving Theme: {theme}",
                    description=(
                        f'The theme "{theme}" is {direction}: {early_count} entries in the '
                        f"earlier half of this period vs. {late_count} in the later half"
                    ),
                    frequency=len(contributing),
                    confidence=calculate_confidence(len(contributing), total, correlation),
                    related_symbols=common_values(contributing, "symbols", limit=self.max_related),
                    related_emotions=common_values(contributing, "emotions", limit=self.max_related),
                    related_themes=[theme],
                    time_range_days=time_range_days(contributing),
                    first_occurrence=first,
                    last_occurrence=last,
                    correlation=correlation,
                    insight=(
                        f'"{theme}" is {"becoming more" if change > 0 else "becoming less"} '
                        f"present in your dreams. This theme often reflects "
                        f"{meaning_for('themes', theme)}."
                    ),
                    sample_size=total,
                )
            )

        logger.debug(f"Found {len(patterns)} evolving themes in {total} entries")
        return patterns
