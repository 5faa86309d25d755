"""Pattern models produced by the analysis engine.

Defines Pydantic models for detected patterns:
- PatternType: closed taxonomy of pattern kinds
- Correlation: dominant life-context tag behind a pattern
- Pattern: one detected recurring structure with a confidence score
- PatternInsight: read-time interpretation of an active pattern
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from reverie.models.entry import ensure_utc


MAX_RELATED = 5


class PatternType(str, Enum):
    """Closed set of pattern categories."""

    SYMBOL_FREQUENCY = "SYMBOL_FREQUENCY"
    EMOTIONAL_CYCLE = "EMOTIONAL_CYCLE"
    TIMING_PATTERN = "TIMING_PATTERN"
    THEME_EVOLUTION = "THEME_EVOLUTION"
    LUCIDITY_TRIGGER = "LUCIDITY_TRIGGER"
    STRESS_RESPONSE = "STRESS_RESPONSE"
    SEASONAL_PATTERN = "SEASONAL_PATTERN"


class PatternSource(str, Enum):
    """Where a pattern came from."""

    LOCAL = "local"
    SUGGESTED = "suggested"


class Severity(str, Enum):
    """How prominent a pattern is for the user."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def clamp01(value: float) -> float:
    """Clamp a score into [0, 1]. Non-finite scores count as 0."""
    value = float(value)
    if not math.isfinite(value):
        return 0.0
    return max(0.0, min(1.0, value))


class Correlation(BaseModel):
    """Association between a pattern's entries and one life-context tag."""

    event_type: str = Field(..., description="Dominant context tag, or 'general'")
    strength: float = Field(..., ge=0.0, le=1.0)
    description: str = ""


class Pattern(BaseModel):
    """A detected recurring structure across journal entries.

    Example:
        >>> pattern = Pattern(
        ...     pattern_type=PatternType.SYMBOL_FREQUENCY,
        ...     name="Recurring Symbol: water",
        ...     frequency=4,
        ...     confidence=0.77,
        ...     first_occurrence=first,
        ...     last_occurrence=last,
        ... )
    """

    id: Optional[str] = Field(None, description="Assigned by the pattern repository")
    pattern_type: PatternType
    name: str = Field(..., min_length=1)
    description: str = ""
    frequency: int = Field(..., ge=0)
    confidence: float = Field(..., description="Always clamped to [0, 1]")
    related_symbols: List[str] = Field(default_factory=list)
    related_emotions: List[str] = Field(default_factory=list)
    related_themes: List[str] = Field(default_factory=list)
    time_range_days: int = Field(0, ge=0)
    first_occurrence: datetime
    last_occurrence: datetime
    correlation: Optional[Correlation] = None
    insight: str = ""
    is_active: bool = True
    sample_size: int = Field(0, ge=0, description="Snapshot size the pattern was computed on")
    source: PatternSource = PatternSource.LOCAL

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        return clamp01(value)

    @field_validator("related_symbols", "related_emotions", "related_themes", mode="before")
    @classmethod
    def _bound_related(cls, value: Any) -> List[str]:
        if value is None:
            return []
        return [str(item) for item in list(value)[:MAX_RELATED]]

    @field_validator("first_occurrence", "last_occurrence")
    @classmethod
    def _normalize_dates(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _check_occurrence_order(self) -> "Pattern":
        if self.first_occurrence > self.last_occurrence:
            raise ValueError("first_occurrence must not be after last_occurrence")
        return self

    @property
    def key(self) -> Tuple[PatternType, str]:
        """Identity of a pattern within one result set."""
        return (self.pattern_type, self.name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        return self.model_dump(mode="json")


class PatternInsight(BaseModel):
    """Interpretation of an active pattern, computed at read time."""

    pattern: Pattern
    severity: Severity
    actionable: bool
    description: str
    recommendation: Optional[str] = None
