"""Lucidity trigger detection.

Looks at high-lucidity entries only and reports the symbols, emotions and
themes they share. These recurring elements can serve as dream signs.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from reverie.analysis.confidence import lucidity_confidence
from reverie.analysis.correlation_detector import ContextCorrelationDetector
from reverie.analysis.counting import common_values, occurrence_range, time_range_days
from reverie.models.entry import Entry
from reverie.models.pattern import Pattern, PatternType

logger = logging.getLogger(__name__)


class LucidityTriggerDetector:
    """Finds elements co-occurring in high-lucidity entries."""

    PATTERN_NAME = "Lucidity Triggers"

    def __init__(
        self,
        correlation_detector: Optional[ContextCorrelationDetector] = None,
        min_entries: int = 3,
        lucidity_threshold: float = 7,
        min_lucid_entries: int = 2,
        max_related: int = 5,
    ):
        self.correlation_detector = correlation_detector or ContextCorrelationDetector()
        self.min_entries = min_entries
        self.lucidity_threshold = lucidity_threshold
        self.min_lucid_entries = min_lucid_entries
        self.max_related = max_related

    def detect_triggers(self, entries: Sequence[Entry]) -> List[Pattern]:
        """Emit at most one LUCIDITY_TRIGGER pattern for the snapshot."""
        total = len(entries)
        if total < self.min_entries:
            return []

        lucid = [
            entry
            for entry in entries
            if entry.lucidity is not None and entry.lucidity >= self.lucidity_threshold
        ]
        if len(lucid) < self.min_lucid_entries:
            return []

        symbols = common_values(lucid, "symbols", limit=self.max_related)
        emotions = common_values(lucid, "emotions", limit=self.max_related)
        themes = common_values(lucid, "themes", limit=self.max_related)
        if not (symbols or emotions or themes):
            return []

        first, last = occurrence_range(lucid)
        elements = ", ".join((symbols + emotions + themes)[:5])
        logger.debug(f"{len(lucid)} lucid entries share: {elements}")

        return [
            Pattern(
                pattern_type=PatternType.LUCIDITY_TRIGGER,
                name=self.PATTERN_NAME,
                description=(
                    f"Elements that recur in your {len(lucid)} most lucid entries: {elements}"
                ),
                frequency=len(lucid),
                confidence=lucidity_confidence(len(lucid), total),
                related_symbols=symbols,
                related_emotions=emotions,
                related_themes=themes,
                time_range_days=time_range_days(lucid),
                first_occurrence=first,
                last_occurrence=last,
                correlation=self.correlation_detector.analyze(lucid),
                insight="These elements may serve as dream signs to help increase lucidity awareness.",
                sample_size=total,
            )
        ]
