"""Weekly emotional cycle detection.

Entries are grouped into calendar weeks (Monday start) covering the whole span
of the snapshot, empty weeks included. An emotion is cyclic when it keeps
coming back: its weekly presence forms at least two separate runs of weeks,
with at least one week without it in between.

Example:
    fear present in weeks 1-2, absent in week 3, back in week 5:
    two runs starting at weeks 1 and 5 -> recurs roughly every 4 weeks.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

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


def week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def active_runs(presence: Sequence[bool]) -> List[int]:
    """Indexes where a run of consecutive active weeks begins."""
    starts: List[int] = []
    previous = False
    for index, active in enumerate(presence):
        if active and not previous:
            starts.append(index)
        previous = active
    return starts


class EmotionalCycleAnalyzer:
    """Detects emotions that recur in weekly waves."""

    def __init__(
        self,
        correlation_detector: Optional[ContextCorrelationDetector] = None,
        min_entries: int = 3,
        min_weeks: int = 4,
        min_occurrences: int = 3,
        min_runs: int = 2,
        max_related: int = 5,
    ):
        self.correlation_detector = correlation_detector or ContextCorrelationDetector()
        self.min_entries = min_entries
        self.min_weeks = min_weeks
        self.min_occurrences = min_occurrences
        self.min_runs = min_runs
        self.max_related = max_related

    def detect_cycles(self, entries: Sequence[Entry]) -> List[Pattern]:
        total = len(entries)
        if total < self.min_entries:
            return []

        first_week = week_start(entries[0].timestamp.date())
        last_week = week_start(entries[-1].timestamp.date())
        week_count = (last_week - first_week).days // 7 + 1
        if week_count < self.min_weeks:
            return []

        patterns: List[Pattern] = []
        for emotion, contributing in entries_by_value(entries, "emotions").items():
            if len(contributing) < self.min_occurrences:
                continue

            weekly: Dict[int, int] = defaultdict(int)
            for entry in contributing:
                weekly[(week_start(entry.timestamp.date()) - first_week).days // 7] += 1
            presence = [weekly.get(index, 0) > 0 for index in range(week_count)]

            starts = active_runs(presence)
            if len(starts) < self.min_runs:
                continue

            gaps = [later - earlier for earlier, later in zip(starts, starts[1:])]
            period = sum(gaps) / len(gaps)
            correlation = self.correlation_detector.analyze(contributing)
            first, last = occurrence_range(contributing)

            patterns.append(
                Pattern(
                    pattern_type=PatternType.EMOTIONAL_CYCLE,
                    name=f"Emotional Cycle: {emotion}",
                    description=(
                        f'"{emotion}" returns in waves: {len(starts)} separate stretches '
                        f"over {week_count} weeks, roughly every {period:.1f} weeks"
                    ),
                    frequency=len(contributing),
                    confidence=calculate_confidence(len(contributing), total, correlation),
                    related_symbols=common_values(contributing, "symbols", limit=self.max_related),
                    related_emotions=[emotion],
                    related_themes=common_values(contributing, "themes", limit=self.max_related),
                    time_range_days=time_range_days(contributing),
                    first_occurrence=first,
                    last_occurrence=last,
                    correlation=correlation,
                    insight=(
                        f"{emotion.capitalize()} comes and goes in a weekly rhythm. "
                        f"Recurring waves like this often point to {meaning_for('emotions', emotion)}."
                    ),
                    sample_size=total,
                )
            )

        logger.debug(f"Found {len(patterns)} emotional cycles across {week_count} weeks")
        return patterns
