"""Journal entry models.

An entry is one dream journal record: free-text narrative plus tagged symbols,
emotions, themes, colors, self-reported life-context tags and quality metrics.
Entries are immutable once fetched into a snapshot; the pattern engine only
reads them.

Example:
    >>> entry = Entry(
    ...     id="e1",
    ...     user_id="u1",
    ...     timestamp=datetime(2024, 3, 4, 7, 30, tzinfo=timezone.utc),
    ...     title="Ocean flight",
    ...     symbols=["water", "flying"],
    ...     context_tags=["work-stress"],
    ...     lucidity=8,
    ... )
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator


CATEGORICAL_FIELDS = ("symbols", "emotions", "themes")


def ensure_utc(value: datetime) -> datetime:
    """Interpret naive datetimes as UTC so snapshots compare consistently."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class Entry(BaseModel):
    """A single journal entry.

    Tag collections are stored as ordered tuples of unique values: a value
    is counted at most once per entry no matter how often it was tagged.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid4()))
    user_id: str = Field(default="", description="Owner of the entry")
    timestamp: datetime = Field(..., description="When the entry was recorded")
    title: str = ""
    narrative: str = Field(default="", description="Free-text account")
    symbols: Tuple[str, ...] = ()
    emotions: Tuple[str, ...] = ()
    themes: Tuple[str, ...] = ()
    colors: Tuple[str, ...] = ()
    context_tags: Tuple[str, ...] = Field(
        default=(),
        description="Self-reported life-situation labels, e.g. 'work-stress'",
    )
    sleep_quality: Optional[float] = Field(None, ge=0.0, le=10.0)
    lucidity: Optional[float] = Field(None, ge=0.0, le=10.0)
    vividness: Optional[float] = Field(None, ge=0.0, le=10.0)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @field_validator("symbols", "emotions", "themes", "colors", "context_tags", mode="before")
    @classmethod
    def _unique_tags(cls, value: Any) -> Tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        seen: Dict[str, None] = {}
        for item in value:
            tag = str(item).strip()
            if tag:
                seen.setdefault(tag, None)
        return tuple(seen)

    def values_for(self, attribute: str) -> Tuple[str, ...]:
        """Return the tag tuple for one of symbols/emotions/themes."""
        if attribute not in CATEGORICAL_FIELDS:
            raise ValueError(f"Unknown categorical attribute: {attribute}")
        return getattr(self, attribute)

    def summary(self) -> Dict[str, Any]:
        """Bounded summary sent to the suggestion service."""
        return {
            "date": self.timestamp.date().isoformat(),
            "title": self.title,
            "symbols": list(self.symbols[:5]),
            "emotions": list(self.emotions[:3]),
            "themes": list(self.themes[:3]),
        }
