"""Day-of-week timing analysis.

Entries are bucketed by weekday. A weekday stands out when its count deviates
from the weekly average (|snapshot| / 7) by more than half of that average and
it holds at least three entries. Timing is weaker evidence than content, so
confidence is capped at 0.9.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Sequence

from reverie.analysis.confidence import timing_confidence
from reverie.analysis.correlation_detector import ContextCorrelationDetector, is_strong
from reverie.analysis.counting import occurrence_range, time_range_days
from reverie.models.entry import Entry
from reverie.models.pattern import Correlation, Pattern, PatternType

logger = logging.getLogger(__name__)


DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class TemporalPatternAnalyzer:
    """Detects weekdays with unusually many (or few) entries."""

    def __init__(
        self,
        correlation_detector: Optional[ContextCorrelationDetector] = None,
        min_entries: int = 3,
        min_day_count: int = 3,
        min_deviation: float = 0.5,
    ):
        self.correlation_detector = correlation_detector or ContextCorrelationDetector()
        self.min_entries = min_entries
        self.min_day_count = min_day_count
        self.min_deviation = min_deviation

    def detect_day_of_week_patterns(self, entries: Sequence[Entry]) -> List[Pattern]:
        """Detect weekday timing anomalies.

        Args:
            entries: Chronologically ordered snapshot

        Returns:
            One TIMING_PATTERN per qualifying weekday, Monday first
        """
        total = len(entries)
        if total < self.min_entries:
            return []

        by_day: Dict[int, List[Entry]] = defaultdict(list)
        for entry in entries:
            by_day[entry.timestamp.weekday()].append(entry)

        average = total / 7
        patterns: List[Pattern] = []

        for day_num in range(7):
            day_entries = by_day.get(day_num, [])
            count = len(day_entries)
            if count < self.min_day_count:
                continue

            deviation = abs(count - average) / average
            if deviation <= self.min_deviation:
                continue

            day = DAY_NAMES[day_num]
            correlation = self.correlation_detector.analyze(day_entries)
            first, last = occurrence_range(day_entries)
            comparison = "more" if count > average else "fewer"

            patterns.append(
                Pattern(
                    pattern_type=PatternType.TIMING_PATTERN,
                    name=f"{day} Timing Pattern",
                    description=(
                        f"You record {comparison} entries on {day}s "
                        f"({count} vs. {average:.1f} per weekday on average)"
                    ),
                    frequency=count,
                    confidence=timing_confidence(deviation),
                    time_range_days=time_range_days(day_entries),
                    first_occurrence=first,
                    last_occurrence=last,
                    correlation=correlation,
                    insight=_timing_insight(day, comparison, correlation),
                    sample_size=total,
                )
            )

        logger.debug(f"Found {len(patterns)} weekday anomalies in {total} entries")
        return patterns


def _timing_insight(day: str, comparison: str, correlation: Correlation) -> str:
    text = f"You have {comparison} vivid dreams on {day}s than other days of the week."
    if is_strong(correlation):
        text += f" This may relate to {correlation.event_type} activities on {day}s."
    return text
