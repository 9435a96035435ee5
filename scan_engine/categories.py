"""
Concern category metadata.

Defines display labels and advisory sentences per category key and builds the
human-readable summary for an analysis.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, List, Mapping

from .models import Flag

CATEGORY_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "irritant": "Irritant",
        "allergen": "Allergen",
        "barrier_disruptor": "Barrier Disruptor",
        "acne_trigger": "Acne Trigger",
        "comedogenic": "Comedogenic",
        "sensitizer": "Sensitizer",
        "photosensitivity": "Photosensitivity",
        "inflammation": "Inflammation",
        "glycation": "Glycation",
        "dairy": "Dairy",
    }
)

CATEGORY_SUMMARIES: Mapping[str, str] = MappingProxyType(
    {
        "irritant": "May cause irritation for sensitive skin",
        "allergen": "Contains potential allergens that may trigger reactions",
        "barrier_disruptor": "May compromise skin barrier function",
        "acne_trigger": "May worsen acne for acne-prone individuals",
        "comedogenic": "May clog pores and cause breakouts",
        "sensitizer": "May cause sensitization with repeated exposure",
        "photosensitivity": "May increase sun sensitivity - use sunscreen",
        "inflammation": "May promote inflammation in the body",
        "glycation": "May accelerate skin aging through glycation",
        "dairy": "Dairy-derived ingredients may trigger hormonal acne",
    }
)

NO_TRIGGERS_SUMMARY = "No known triggers detected based on available database"

DISCLAIMER = (
    "Educational only. Not medical advice. "
    "Consult a dermatologist for personalized guidance."
)


def category_label(key: str) -> str:
    """Human-friendly label for a category key, falling back to the key."""
    return CATEGORY_LABELS.get(key, key)


def build_summary(flags: Iterable[Flag]) -> List[str]:
    """
    Collect one advisory sentence per flagged category, deduplicated in flag
    order. Falls back to a single "no known triggers" sentence.
    """
    summary: List[str] = []
    for flag in flags:
        sentence = CATEGORY_SUMMARIES.get(flag.key)
        if sentence and sentence not in summary:
            summary.append(sentence)
    return summary or [NO_TRIGGERS_SUMMARY]
