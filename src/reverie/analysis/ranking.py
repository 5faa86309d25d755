"""Deduplication and ranking of pooled pattern candidates."""

from __future__ import annotations

from typing import Iterable, List, Set, Tuple

from reverie.models.pattern import Pattern, PatternType


MAX_PATTERNS = 10


def deduplicate_patterns(patterns: Iterable[Pattern]) -> List[Pattern]:
    """Keep the first pattern seen for each (type, name) key."""
    seen: Set[Tuple[PatternType, str]] = set()
    unique: List[Pattern] = []
    for pattern in patterns:
        if pattern.key in seen:
            continue
        seen.add(pattern.key)
        unique.append(pattern)
    return unique


def sort_patterns(patterns: Iterable[Pattern]) -> List[Pattern]:
    """Confidence descending; equal confidence falls back to name, then type."""
    return sorted(
        patterns,
        key=lambda pattern: (-pattern.confidence, pattern.name, pattern.pattern_type.value),
    )


def rank_patterns(patterns: Iterable[Pattern], limit: int = MAX_PATTERNS) -> List[Pattern]:
    """Deduplicate, sort and truncate the pooled candidates.

    Args:
        patterns: Candidates in merge order; earlier wins on duplicate keys
        limit: Maximum patterns to keep

    Returns:
        Final ranked result
    """
    return sort_patterns(deduplicate_patterns(patterns))[:limit]
