"""Pattern engine orchestration.

Ties the analyzers, the suggestion merger and the storage collaborators
together:

1. Validate the requested window
2. Serve active patterns from the repository when they cover the window
3. Otherwise take one snapshot, run every local analyzer concurrently in
   worker threads alongside the suggestion call
4. Pool the candidates in a fixed order, deduplicate, rank and truncate
5. Upsert each ranked pattern, collecting per-pattern failures

Cache state is derived from persisted data on every call; the only
in-memory state is the set of users with a run in flight.

Example:
    engine = build_engine(bootstrap_settings())
    result = await engine.get_patterns("alice", window_days=30)
    for pattern in result.patterns:
        print(pattern.name, pattern.confidence)
"""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from reverie.analysis.correlation_detector import ContextCorrelationDetector
from reverie.analysis.counting import require_entries
from reverie.analysis.emotional_cycles import EmotionalCycleAnalyzer
from reverie.analysis.lucidity import LucidityTriggerDetector
from reverie.analysis.pattern_recognition import PatternRecognizer
from reverie.analysis.ranking import rank_patterns
from reverie.analysis.temporal import TemporalPatternAnalyzer
from reverie.analysis.theme_evolution import ThemeEvolutionAnalyzer
from reverie.configuration.settings import AnalysisSettings, Settings
from reverie.errors import (
    InsufficientDataError,
    InvalidWindowError,
    PatternNotFoundError,
    PersistenceError,
    ReverieError,
)
from reverie.insights.pattern_insights import InsightReport, build_insight_report
from reverie.models.entry import CATEGORICAL_FIELDS, Entry
from reverie.models.pattern import Pattern
from reverie.storage.base import EntrySnapshotProvider, PatternRepository
from reverie.storage.entry_store import EntryStore
from reverie.storage.pattern_store import SQLitePatternStore
from reverie.suggestions.client import OllamaSuggestionClient
from reverie.suggestions.merger import SuggestionMerger

logger = logging.getLogger(__name__)


DETAIL_ENTRY_LIMIT = 10
REPORT_PATTERN_LIMIT = 5
REPORT_RECENT_ENTRIES = 10
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PatternCacheState(str, Enum):
    """Per-user lifecycle of persisted patterns."""

    NO_PATTERNS = "no_patterns"
    COMPUTING = "computing"
    CACHED = "cached"
    STALE = "stale"


class PatternRunResult(BaseModel):
    """Outcome of one get_patterns call."""

    patterns: List[Pattern] = Field(default_factory=list)
    cached: bool = False
    state: PatternCacheState = PatternCacheState.NO_PATTERNS
    window_days: int
    snapshot_size: Optional[int] = Field(None, description="None when served from cache")
    failed_upserts: List[str] = Field(default_factory=list)
    message: Optional[str] = None


class PatternDetail(BaseModel):
    """A stored pattern with the latest entries that share its elements."""

    pattern: Pattern
    related_entries: List[Entry] = Field(default_factory=list)


class PatternEngine:
    """Detects, caches and manages patterns for each user.

    All collaborators are passed in explicitly; nothing is looked up from
    module state. Local analyzers must be pure functions of the snapshot.
    """

    def __init__(
        self,
        entries: EntrySnapshotProvider,
        repository: PatternRepository,
        *,
        analysis: Optional[AnalysisSettings] = None,
        recognizer: Optional[PatternRecognizer] = None,
        emotional_cycles: Optional[EmotionalCycleAnalyzer] = None,
        temporal: Optional[TemporalPatternAnalyzer] = None,
        theme_evolution: Optional[ThemeEvolutionAnalyzer] = None,
        lucidity: Optional[LucidityTriggerDetector] = None,
        suggestions: Optional[SuggestionMerger] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.entries = entries
        self.repository = repository
        self.analysis = analysis or AnalysisSettings()
        self.clock = clock

        correlation = ContextCorrelationDetector()
        settings = self.analysis
        self.recognizer = recognizer or PatternRecognizer(
            correlation,
            min_entries=settings.min_entries,
            min_occurrences=settings.min_occurrences,
            min_relative_frequency=settings.min_relative_frequency,
            max_related=settings.max_related,
        )
        self.emotional_cycles = emotional_cycles or EmotionalCycleAnalyzer(
            correlation, min_entries=settings.min_entries, max_related=settings.max_related
        )
        self.temporal = temporal or TemporalPatternAnalyzer(
            correlation, min_entries=settings.min_entries
        )
        self.theme_evolution = theme_evolution or ThemeEvolutionAnalyzer(
            correlation, min_entries=settings.min_entries, max_related=settings.max_related
        )
        self.lucidity = lucidity or LucidityTriggerDetector(
            correlation,
            min_entries=settings.min_entries,
            lucidity_threshold=settings.lucidity_threshold,
            max_related=settings.max_related,
        )
        self.suggestions = suggestions

        self._in_flight: Counter[str] = Counter()

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def validate_window(self, window_days: Optional[int]) -> int:
        """Resolve the window, raising InvalidWindowError when out of range."""
        days = self.analysis.default_window_days if window_days is None else window_days
        if not self.analysis.min_window_days <= days <= self.analysis.max_window_days:
            raise InvalidWindowError(days, self.analysis.min_window_days, self.analysis.max_window_days)
        return days

    def cache_state(self, user_id: str, window_days: Optional[int] = None) -> PatternCacheState:
        """Derive the user's cache state from persisted patterns."""
        if self._in_flight[user_id]:
            return PatternCacheState.COMPUTING
        active = self.repository.list_active(user_id)
        if not active:
            return PatternCacheState.NO_PATTERNS
        since = self.clock() - timedelta(days=self.validate_window(window_days))
        if any(pattern.last_occurrence >= since for pattern in active):
            return PatternCacheState.CACHED
        return PatternCacheState.STALE

    async def get_patterns(
        self,
        user_id: str,
        window_days: Optional[int] = None,
        refresh: bool = False,
    ) -> PatternRunResult:
        """Return the user's patterns for the window, computing them if needed.

        Args:
            user_id: Whose entries to analyze
            window_days: Window length in days; defaults to the configured one
            refresh: Bypass cached patterns and recompute

        Returns:
            PatternRunResult; failures inside the run yield an empty result
            with ``message`` set

        Raises:
            InvalidWindowError: window_days is outside the allowed range
        """
        days = self.validate_window(window_days)
        now = self.clock()
        since = now - timedelta(days=days)

        self._in_flight[user_id] += 1
        try:
            if not refresh:
                cached = await asyncio.to_thread(self.repository.list_active, user_id, since)
                if cached:
                    logger.info(f"Serving {len(cached)} cached patterns for {user_id}")
                    return PatternRunResult(
                        patterns=rank_patterns(cached, self.analysis.max_patterns),
                        cached=True,
                        state=PatternCacheState.CACHED,
                        window_days=days,
                    )
            return await self._compute(user_id, days, since, now)
        except InsufficientDataError as e:
            logger.info(f"Skipping pattern detection for {user_id}: {e}")
            return PatternRunResult(window_days=days, snapshot_size=e.available, message=e.user_message)
        except ReverieError as e:
            logger.error(f"Pattern run for {user_id} failed: {e}")
            return PatternRunResult(window_days=days, message=e.user_message)
        except Exception as e:
            logger.exception(f"Unexpected failure while detecting patterns for {user_id}")
            return PatternRunResult(window_days=days, message=f"Pattern detection failed: {e}")
        finally:
            self._in_flight[user_id] -= 1
            if self._in_flight[user_id] <= 0:
                del self._in_flight[user_id]

    async def _compute(
        self,
        user_id: str,
        days: int,
        since: datetime,
        now: datetime,
    ) -> PatternRunResult:
        snapshot: Tuple[Entry, ...] = tuple(
            await asyncio.to_thread(self.entries.list_entries, user_id, since, now)
        )
        logger.info(f"Detecting patterns for {user_id} over {len(snapshot)} entries ({days} days)")
        require_entries(snapshot, self.analysis.min_entries)

        pooled = await self._detect(snapshot, days)
        ranked = rank_patterns(pooled, self.analysis.max_patterns)

        patterns: List[Pattern] = []
        failed: List[str] = []
        for pattern in ranked:
            try:
                patterns.append(await asyncio.to_thread(self.repository.upsert, user_id, pattern))
            except PersistenceError as e:
                logger.warning(f"Failed to persist pattern '{pattern.name}': {e}")
                failed.append(pattern.name)
                patterns.append(pattern)

        logger.info(f"Detected {len(patterns)} patterns for {user_id}")
        return PatternRunResult(
            patterns=patterns,
            cached=False,
            state=PatternCacheState.CACHED if patterns else PatternCacheState.NO_PATTERNS,
            window_days=days,
            snapshot_size=len(snapshot),
            failed_upserts=failed,
        )

    async def _detect(self, snapshot: Sequence[Entry], days: int) -> List[Pattern]:
        """Run every analyzer and pool the candidates in merge order."""
        stages: List[Tuple[str, Awaitable[List[Pattern]]]] = [
            (
                "frequency",
                asyncio.to_thread(self.recognizer.recognize_patterns, snapshot, CATEGORICAL_FIELDS),
            ),
            ("emotional cycles", asyncio.to_thread(self.emotional_cycles.detect_cycles, snapshot)),
            ("timing", asyncio.to_thread(self.temporal.detect_day_of_week_patterns, snapshot)),
            (
                "theme evolution",
                asyncio.to_thread(self.theme_evolution.detect_evolving_themes, snapshot),
            ),
            ("lucidity", asyncio.to_thread(self.lucidity.detect_triggers, snapshot)),
        ]
        if self.suggestions is not None:
            stages.append(("suggestions", self.suggestions.collect(snapshot, days)))

        results = await asyncio.gather(*(stage for _, stage in stages), return_exceptions=True)

        pooled: List[Pattern] = []
        for (name, _), result in zip(stages, results):
            if isinstance(result, BaseException):
                logger.error(f"{name} analysis failed: {result!r}")
                continue
            logger.debug(f"{name} analysis produced {len(result)} candidates")
            pooled.extend(result)
        return pooled

    # ------------------------------------------------------------------
    # Management
    # ------------------------------------------------------------------

    def _require_pattern(self, user_id: str, pattern_id: str) -> Pattern:
        pattern = self.repository.get(user_id, pattern_id)
        if pattern is None:
            raise PatternNotFoundError(pattern_id)
        return pattern

    def get_pattern_detail(self, user_id: str, pattern_id: str) -> PatternDetail:
        """Fetch a pattern plus the latest entries sharing any of its elements."""
        pattern = self._require_pattern(user_id, pattern_id)
        symbols = set(pattern.related_symbols)
        emotions = set(pattern.related_emotions)
        themes = set(pattern.related_themes)

        related = [
            entry
            for entry in self.entries.list_entries(user_id, _EPOCH, self.clock())
            if symbols.intersection(entry.symbols)
            or emotions.intersection(entry.emotions)
            or themes.intersection(entry.themes)
        ]
        related.reverse()
        return PatternDetail(pattern=pattern, related_entries=related[:DETAIL_ENTRY_LIMIT])

    def update_pattern(
        self,
        user_id: str,
        pattern_id: str,
        is_active: Optional[bool] = None,
        insight: Optional[str] = None,
    ) -> Pattern:
        """Toggle a pattern's active flag and/or replace its insight text."""
        pattern = self._require_pattern(user_id, pattern_id)
        stored_id = pattern.id
        if is_active is not None:
            pattern = self.repository.set_active(user_id, stored_id, is_active) or pattern
        if insight is not None:
            pattern = self.repository.update_insight(user_id, stored_id, insight) or pattern
        logger.info(f"Updated pattern {stored_id} for {user_id}")
        return pattern

    def delete_pattern(self, user_id: str, pattern_id: str) -> None:
        pattern = self._require_pattern(user_id, pattern_id)
        if not self.repository.delete(user_id, pattern.id):
            raise PatternNotFoundError(pattern_id)
        logger.info(f"Deleted pattern {pattern.id} for {user_id}")

    def insight_report(self, user_id: str) -> InsightReport:
        """Build the insight report over the strongest active patterns."""
        active = self.repository.list_active(user_id)
        top = sorted(active, key=lambda p: (-p.confidence, -p.frequency, p.name))[
            :REPORT_PATTERN_LIMIT
        ]
        recent = self.entries.recent_entries(user_id, REPORT_RECENT_ENTRIES)
        return build_insight_report(top, recent)


def build_engine(settings: Settings) -> Tuple[PatternEngine, EntryStore, SQLitePatternStore]:
    """Wire an engine against the configured SQLite database.

    Returns the engine and both stores so the caller can close them.
    """
    workspace = settings.workspace
    entry_store = EntryStore(workspace.storage.database_path)
    pattern_store = SQLitePatternStore(workspace.storage.database_path)

    merger: Optional[SuggestionMerger] = None
    if workspace.suggestions.enabled:
        api_key = workspace.suggestions.api_key
        client = OllamaSuggestionClient(
            model=workspace.suggestions.model,
            base_url=workspace.suggestions.base_url,
            timeout=workspace.suggestions.timeout_seconds,
            api_key=api_key.get_secret_value() if api_key else None,
        )
        merger = SuggestionMerger(
            client,
            min_entries=workspace.analysis.suggestion_min_entries,
            timeout=workspace.suggestions.timeout_seconds,
        )

    engine = PatternEngine(
        entry_store,
        pattern_store,
        analysis=workspace.analysis,
        suggestions=merger,
    )
    return engine, entry_store, pattern_store
