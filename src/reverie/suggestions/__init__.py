"""External pattern suggestions from a generative-text service."""

from .client import OllamaSuggestionClient, SuggestionClient, parse_patterns_payload
from .merger import CATEGORY_MAP, SuggestedPattern, SuggestionMerger, map_category

__all__ = [
    "OllamaSuggestionClient",
    "SuggestionClient",
    "parse_patterns_payload",
    "CATEGORY_MAP",
    "SuggestedPattern",
    "SuggestionMerger",
    "map_category",
]
