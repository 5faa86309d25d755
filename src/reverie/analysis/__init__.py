"""Pattern analysis over journal entry snapshots.

Every analyzer is a pure function of an immutable, chronologically ordered
snapshot; they share nothing but a stateless correlation detector, so the
orchestrator can run them concurrently and merge in a fixed order.

Capabilities:
- **Frequency analysis**: recurring symbols, emotions and themes
- **Context correlation**: dominant life-context tag behind a pattern
- **Timing**: weekdays with unusually many or few entries
- **Theme evolution**: themes emerging or fading across the window
- **Emotional cycles**: emotions that return in weekly waves
- **Lucidity triggers**: elements shared by high-lucidity entries
- **Ranking**: deduplication, confidence ordering, truncation
"""

from .confidence import calculate_confidence, lucidity_confidence, timing_confidence
from .correlation_detector import ContextCorrelationDetector
from .emotional_cycles import EmotionalCycleAnalyzer
from .lucidity import LucidityTriggerDetector
from .pattern_recognition import PatternRecognizer
from .ranking import deduplicate_patterns, rank_patterns, sort_patterns
from .temporal import TemporalPatternAnalyzer
from .theme_evolution import ThemeEvolutionAnalyzer

__all__ = [
    "calculate_confidence",
    "lucidity_confidence",
    "timing_confidence",
    "ContextCorrelationDetector",
    "EmotionalCycleAnalyzer",
    "LucidityTriggerDetector",
    "PatternRecognizer",
    "deduplicate_patterns",
    "rank_patterns",
    "sort_patterns",
    "TemporalPatternAnalyzer",
    "ThemeEvolutionAnalyzer",
]
