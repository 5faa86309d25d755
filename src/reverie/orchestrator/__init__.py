"""Pattern engine orchestration and cache state."""

from .pattern_engine import (
    PatternCacheState,
    PatternDetail,
    PatternEngine,
    PatternRunResult,
    build_engine,
)

__all__ = [
    "PatternCacheState",
    "PatternDetail",
    "PatternEngine",
    "PatternRunResult",
    "build_engine",
]
