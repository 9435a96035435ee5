"""
Flag aggregation and risk scoring.

- aggregate matched ingredients into one flag per category (max severity)
- compute an additive 0-100 score from ingredient and category severities
- map the score onto the low/moderate/high tiers
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from .categories import category_label
from .models import Flag, MatchedIngredient, RiskTier, unique_in_order

INGREDIENT_WEIGHT = 10
FLAG_INCREMENTS: Dict[int, int] = {3: 15, 2: 8}
DEFAULT_FLAG_INCREMENT = 3
MAX_SCORE = 100

HIGH_TIER_THRESHOLD = 60
MODERATE_TIER_THRESHOLD = 30


def aggregate_flags(matches: Iterable[MatchedIngredient]) -> List[Flag]:
    """
    Group matches by category, keeping the highest severity and the contributing
    ingredient names. Flags come back sorted by severity descending; the sort is
    stable so equal severities keep their discovery order.
    """
    severities: Dict[str, int] = {}
    names: Dict[str, List[str]] = {}
    for ingredient in matches:
        for category in ingredient.categories:
            severities[category] = max(severities.get(category, 0), ingredient.severity)
            names.setdefault(category, []).append(ingredient.name)

    flags = [
        Flag(
            key=key,
            label=category_label(key),
            severity=severity,
            matched=tuple(unique_in_order(names[key])),
        )
        for key, severity in severities.items()
    ]
    return sorted(flags, key=lambda flag: -flag.severity)


def compute_risk_score(
    matches: Sequence[MatchedIngredient], flags: Sequence[Flag]
) -> int:
    score = sum(ingredient.severity * INGREDIENT_WEIGHT for ingredient in matches)
    score += sum(
        FLAG_INCREMENTS.get(flag.severity, DEFAULT_FLAG_INCREMENT) for flag in flags
    )
    return min(MAX_SCORE, score)


def risk_tier_for(score: int) -> RiskTier:
    if score >= HIGH_TIER_THRESHOLD:
        return RiskTier.HIGH
    if score >= MODERATE_TIER_THRESHOLD:
        return RiskTier.MODERATE
    return RiskTier.LOW
