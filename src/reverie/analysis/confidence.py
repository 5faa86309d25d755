"""Confidence scoring shared by the pattern analyzers.

Content-based patterns combine three signals:

    confidence = 0.4 * frequency_score + 0.4 * correlation_score + 0.2 * sample_size_score

where frequency_score is the share of entries behind the pattern,
correlation_score is the strength of the dominant life-context tag, and
sample_size_score grows with the snapshot until it reaches 20 entries.

Timing patterns and lucidity triggers are weaker evidence and use their own
capped formulas.
"""

from __future__ import annotations

from reverie.models.pattern import Correlation, clamp01


FREQUENCY_WEIGHT = 0.4
CORRELATION_WEIGHT = 0.4
SAMPLE_SIZE_WEIGHT = 0.2
FULL_SAMPLE_SIZE = 20

TIMING_CONFIDENCE_CAP = 0.9
LUCIDITY_CONFIDENCE_CAP = 0.9


def calculate_confidence(occurrences: int, total_entries: int, correlation: Correlation) -> float:
    """Composite confidence for frequency, evolution and cycle patterns."""
    if total_entries <= 0:
        return 0.0
    frequency_score = min(1.0, occurrences / total_entries)
    sample_size_score = min(1.0, total_entries / FULL_SAMPLE_SIZE)
    return clamp01(
        FREQUENCY_WEIGHT * frequency_score
        + CORRELATION_WEIGHT * correlation.strength
        + SAMPLE_SIZE_WEIGHT * sample_size_score
    )


def timing_confidence(deviation: float) -> float:
    return clamp01(min(TIMING_CONFIDENCE_CAP, deviation))


def lucidity_confidence(lucid_entries: int, total_entries: int) -> float:
    if total_entries <= 0:
        return 0.0
    return clamp01(min(LUCIDITY_CONFIDENCE_CAP, 2 * lucid_entries / total_entries))


def frequency_word(relative_frequency: float) -> str:
    """Describe how often something shows up."""
    if relative_frequency > 0.7:
        return "very frequently"
    if relative_frequency > 0.5:
        return "frequently"
    return "regularly"
