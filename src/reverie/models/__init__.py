"""Core data models for journal entries and detected patterns."""

from .entry import CATEGORICAL_FIELDS, Entry, ensure_utc
from .pattern import (
    Correlation,
    Pattern,
    PatternInsight,
    PatternSource,
    PatternType,
    Severity,
    clamp01,
)

__all__ = [
    "CATEGORICAL_FIELDS",
    "Entry",
    "ensure_utc",
    "Correlation",
    "Pattern",
    "PatternInsight",
    "PatternSource",
    "PatternType",
    "Severity",
    "clamp01",
]
