"""Merge externally suggested patterns into the local candidate pool.

Suggestions are trusted at face value: their confidence, frequency and insight
text pass through without re-validation by the local analyzers. Only the
category is checked, by mapping it onto the closed pattern taxonomy with an
explicit default.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from pydantic import BaseModel, Field, ValidationError

from reverie.errors import CollaboratorUnavailableError, MalformedCollaboratorResponse
from reverie.models.entry import Entry
from reverie.models.pattern import Pattern, PatternSource, PatternType
from reverie.suggestions.client import SuggestionClient

logger = logging.getLogger(__name__)


CATEGORY_MAP: Mapping[str, PatternType] = {
    "symbol": PatternType.SYMBOL_FREQUENCY,
    "emotion": PatternType.EMOTIONAL_CYCLE,
    "timing": PatternType.TIMING_PATTERN,
    "theme": PatternType.THEME_EVOLUTION,
    "stress": PatternType.STRESS_RESPONSE,
    "seasonal": PatternType.SEASONAL_PATTERN,
}
DEFAULT_PATTERN_TYPE = PatternType.SYMBOL_FREQUENCY


def map_category(category: Optional[str]) -> PatternType:
    """Map a coarse suggestion category onto the pattern taxonomy."""
    if not category:
        return DEFAULT_PATTERN_TYPE
    return CATEGORY_MAP.get(category.strip().lower(), DEFAULT_PATTERN_TYPE)


class SuggestedPattern(BaseModel):
    """One candidate as returned by the suggestion service."""

    type: Optional[str] = None
    name: str = Field(..., min_length=1)
    description: str = ""
    frequency: int = 0
    confidence: float = 0.0
    insight: str = ""


class SuggestionMerger:
    """Collects suggestion candidates and converts them to patterns.

    Any failure of the collaborator degrades to an empty list; the run never
    aborts because of it.
    """

    def __init__(
        self,
        client: Optional[SuggestionClient],
        min_entries: int = 5,
        timeout: float = 30.0,
    ):
        self.client = client
        self.min_entries = min_entries
        self.timeout = timeout

    async def collect(self, entries: Sequence[Entry], window_days: int) -> List[Pattern]:
        """Request suggestions for the snapshot and convert them.

        Args:
            entries: Chronologically ordered snapshot
            window_days: Requested analysis window, reported as time range

        Returns:
            Converted patterns, or an empty list when skipped or degraded
        """
        if self.client is None or len(entries) < self.min_entries:
            return []

        summaries = [entry.summary() for entry in entries]
        try:
            raw = await asyncio.wait_for(self.client.suggest_patterns(summaries), self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Suggestion service timed out after {self.timeout}s; using local analysis only")
            return []
        except CollaboratorUnavailableError as e:
            logger.warning(f"Suggestion service unavailable: {e}; using local analysis only")
            return []
        except MalformedCollaboratorResponse as e:
            logger.debug(f"Discarding malformed suggestion response: {e.details}")
            return []

        return self.convert(raw, entries, window_days)

    def convert(
        self,
        raw_candidates: Sequence[Dict[str, Any]],
        entries: Sequence[Entry],
        window_days: int,
    ) -> List[Pattern]:
        """Turn raw candidate dictionaries into patterns, dropping invalid ones."""
        if not entries:
            return []

        total = len(entries)
        first = entries[0].timestamp
        last = entries[-1].timestamp
        patterns: List[Pattern] = []

        for raw in raw_candidates:
            try:
                candidate = SuggestedPattern.model_validate(raw)
            except ValidationError as e:
                logger.debug(f"Dropping malformed suggestion: {e.error_count()} validation errors")
                continue

            patterns.append(
                Pattern(
                    pattern_type=map_category(candidate.type),
                    name=candidate.name,
                    description=candidate.description,
                    frequency=max(0, min(candidate.frequency, total)),
                    confidence=candidate.confidence,
                    time_range_days=window_days,
                    first_occurrence=first,
                    last_occurrence=last,
                    insight=candidate.insight,
                    sample_size=total,
                    source=PatternSource.SUGGESTED,
                )
            )

        logger.debug(f"Accepted {len(patterns)} of {len(raw_candidates)} suggested patterns")
        return patterns
