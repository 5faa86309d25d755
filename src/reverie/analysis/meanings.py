"""Static archetypal meanings used in insight text.

Known values get a short archetypal phrase; anything else falls back to a
generic phrase for the attribute.
"""

from __future__ import annotations

from typing import Dict


SYMBOL_MEANINGS: Dict[str, str] = {
    "water": "emotional processing and the unconscious mind",
    "flying": "desire for freedom and transcendence of limitations",
    "house": "aspects of the self and personal security",
    "animals": "instinctual behaviors and natural wisdom",
    "car": "life direction and personal control",
    "death": "transformation and major life changes",
    "fire": "passion, transformation, or destructive emotions",
    "family": "personal relationships and inner dynamics",
    "school": "learning experiences and performance anxiety",
    "work": "professional concerns and achievement motivations",
}

EMOTION_MEANINGS: Dict[str, str] = {
    "fear": "anxieties that may need attention",
    "joy": "positive life experiences and emotional well-being",
    "anger": "unresolved conflicts or frustrations",
    "sadness": "grief processing or emotional release needs",
    "anxiety": "stress management and coping mechanisms need attention",
    "love": "connection and relationship fulfillment",
    "excitement": "anticipation and positive life engagement",
}

THEME_MEANINGS: Dict[str, str] = {
    "flying": "desire for freedom or escape from constraints",
    "chase": "avoidance behaviors or feeling pressured",
    "water": "emotional or spiritual cleansing needs",
    "falling": "fear of losing control or failure anxiety",
    "death": "transformation and letting go of the old",
    "school": "performance anxiety or learning challenges",
    "work": "career concerns or professional identity",
    "family": "relationship dynamics and personal history",
}

FALLBACKS: Dict[str, str] = {
    "symbols": "important personal symbolism requiring deeper reflection",
    "emotions": "emotional patterns worth exploring",
    "themes": "recurring life themes requiring attention",
}

_TABLES: Dict[str, Dict[str, str]] = {
    "symbols": SYMBOL_MEANINGS,
    "emotions": EMOTION_MEANINGS,
    "themes": THEME_MEANINGS,
}


def meaning_for(attribute: str, value: str) -> str:
    """Look up the archetypal phrase for a symbol, emotion or theme."""
    table = _TABLES.get(attribute, {})
    return table.get(value.lower(), FALLBACKS.get(attribute, FALLBACKS["symbols"]))
