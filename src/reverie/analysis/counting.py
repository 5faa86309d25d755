"""Counting helpers shared by the analyzers."""

from __future__ import annotations

import math
from collections import Counter, defaultdict
from datetime import datetime
from typing import Dict, List, Sequence, Tuple

from reverie.errors import InsufficientDataError
from reverie.models.entry import Entry


def entries_by_value(entries: Sequence[Entry], attribute: str) -> Dict[str, List[Entry]]:
    """Group entries under every value of one categorical attribute.

    Insertion order follows first appearance, so iteration is deterministic
    for a given snapshot.
    """
    grouped: Dict[str, List[Entry]] = defaultdict(list)
    for entry in entries:
        for value in entry.values_for(attribute):
            grouped[value].append(entry)
    return dict(grouped)


def value_counts(entries: Sequence[Entry], attribute: str) -> Counter[str]:
    counts: Counter[str] = Counter()
    for entry in entries:
        counts.update(entry.values_for(attribute))
    return counts


def common_values(
    entries: Sequence[Entry],
    attribute: str,
    min_count: int = 2,
    limit: int | None = 5,
) -> List[str]:
    """Values seen in at least ``min_count`` entries, most common first.

    Ties are ordered by name so the output is stable.
    """
    counts = value_counts(entries, attribute)
    ranked = sorted(
        ((value, count) for value, count in counts.items() if count >= min_count),
        key=lambda item: (-item[1], item[0]),
    )
    values = [value for value, _ in ranked]
    return values if limit is None else values[:limit]


def occurrence_range(entries: Sequence[Entry]) -> Tuple[datetime, datetime]:
    """First and last timestamp of a non-empty entry subset."""
    timestamps = [entry.timestamp for entry in entries]
    return min(timestamps), max(timestamps)


def time_range_days(entries: Sequence[Entry]) -> int:
    """Whole days spanned by the subset, rounded up."""
    if len(entries) < 2:
        return 0
    first, last = occurrence_range(entries)
    return math.ceil((last - first).total_seconds() / 86400)


def require_entries(entries: Sequence[Entry], minimum: int) -> None:
    """Raise InsufficientDataError when the snapshot is too small to analyze."""
    if len(entries) < minimum:
        raise InsufficientDataError(available=len(entries), required=minimum)
