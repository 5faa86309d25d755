"""Read-time interpretation of detected patterns."""

from .pattern_insights import (
    InsightReport,
    PatternSummary,
    RecentTrends,
    analyze_recent_trends,
    build_insight_report,
    calculate_severity,
    derive_insight,
    generate_recommendation,
    generate_recommendations,
    summarize_patterns,
)

__all__ = [
    "InsightReport",
    "PatternSummary",
    "RecentTrends",
    "analyze_recent_trends",
    "build_insight_report",
    "calculate_severity",
    "derive_insight",
    "generate_recommendation",
    "generate_recommendations",
    "summarize_patterns",
]
