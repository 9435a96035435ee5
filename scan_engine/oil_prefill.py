"""
Oil builder prefill: turns a scan result (and optional profile) into a draft
custom oil formula for the recommended support goal.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple

from .models import (
    AnalysisResult,
    BaseOilSelection,
    OilFormulaDraft,
    SkinFlag,
    SkinProfile,
    SupportGoal,
)

GOAL_BASE_OILS: Mapping[SupportGoal, Tuple[Tuple[str, int], ...]] = MappingProxyType(
    {
        SupportGoal.CALM: (("Jojoba Oil", 50), ("Sunflower Oil", 30), ("Avocado Oil", 20)),
        SupportGoal.BARRIER: (("Jojoba Oil", 40), ("Avocado Oil", 35), ("Sunflower Oil", 25)),
        SupportGoal.ACNE: (("Jojoba Oil", 50), ("Grapeseed Oil", 35), ("Sunflower Oil", 15)),
        SupportGoal.BRIGHTEN: (("Jojoba Oil", 40), ("Grapeseed Oil", 30), ("Avocado Oil", 30)),
    }
)

GOAL_BOOSTS: Mapping[SupportGoal, Tuple[str, ...]] = MappingProxyType(
    {
        SupportGoal.CALM: ("Vitamin E",),
        SupportGoal.BARRIER: ("Vitamin E", "Argan Oil"),
        SupportGoal.ACNE: ("Hemp Seed Oil", "Vitamin E"),
        SupportGoal.BRIGHTEN: ("Rosehip Oil", "Vitamin E"),
    }
)

GOAL_SCENTS: Mapping[SupportGoal, str] = MappingProxyType(
    {
        SupportGoal.CALM: "Lavender",
        SupportGoal.BARRIER: "Unscented",
        SupportGoal.ACNE: "Unscented",
        SupportGoal.BRIGHTEN: "Citrus Blend",
    }
)

GOAL_RATIONALE: Mapping[SupportGoal, Tuple[str, ...]] = MappingProxyType(
    {
        SupportGoal.CALM: (
            "Jojoba Oil closely mimics skin's natural sebum for gentle, non-irritating hydration",
            "Sunflower Oil provides anti-inflammatory benefits with vitamin E",
            "Avocado Oil deeply nourishes without clogging pores",
        ),
        SupportGoal.BARRIER: (
            "This blend focuses on restoring and strengthening your skin barrier",
            "Avocado Oil is rich in fatty acids that support barrier repair",
            "Added Argan Oil provides extra ceramide-like support",
        ),
        SupportGoal.ACNE: (
            "Non-comedogenic oils selected to avoid pore congestion",
            "Grapeseed Oil is lightweight and won't trigger breakouts",
            "Hemp Seed Oil helps balance sebum production naturally",
        ),
        SupportGoal.BRIGHTEN: (
            "Rosehip Oil is rich in vitamin A for natural brightening",
            "Grapeseed Oil provides antioxidants for even skin tone",
            "This blend supports cell turnover and radiance",
        ),
    }
)

GOAL_LABELS: Mapping[SupportGoal, str] = MappingProxyType(
    {
        SupportGoal.CALM: "Calm & Soothe",
        SupportGoal.BARRIER: "Barrier Repair",
        SupportGoal.ACNE: "Acne Support",
        SupportGoal.BRIGHTEN: "Brighten & Even",
    }
)

GOAL_DESCRIPTIONS: Mapping[SupportGoal, str] = MappingProxyType(
    {
        SupportGoal.CALM: "A gentle blend to soothe irritated or sensitive skin",
        SupportGoal.BARRIER: "Nourishing oils to strengthen and repair your skin barrier",
        SupportGoal.ACNE: "Lightweight, non-comedogenic oils to support acne-prone skin",
        SupportGoal.BRIGHTEN: "Antioxidant-rich oils to even skin tone and boost radiance",
    }
)

# Checked in order; the first goal whose flag keys appear wins.
GOAL_FLAG_PRIORITY: Tuple[Tuple[SupportGoal, Tuple[str, ...]], ...] = (
    (SupportGoal.CALM, ("irritant", "sensitizer", "fragrance", "essential_oil")),
    (SupportGoal.ACNE, ("acne_trigger", "comedogenic")),
    (SupportGoal.BARRIER, ("barrier_disruptor", "drying_alcohol")),
    (SupportGoal.BRIGHTEN, ("photosensitivity", "glycation")),
)

FRAGRANCE_FLAG_KEYS = ("fragrance", "essential_oil")
UNSCENTED = "Unscented"


def determine_goal_from_scan(result: AnalysisResult) -> SupportGoal:
    keys = set(result.flag_keys())
    for goal, flag_keys in GOAL_FLAG_PRIORITY:
        if keys.intersection(flag_keys):
            return goal
    # Calm is the safest default.
    return SupportGoal.CALM


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def _without_allergens(names: List[str], allergies: List[str]) -> List[str]:
    return [n for n in names if not any(a in n.lower() for a in allergies)]


def generate_oil_prefill(
    result: AnalysisResult,
    profile: Optional[SkinProfile] = None,
    goal: Optional[SupportGoal] = None,
) -> OilFormulaDraft:
    goal = goal or determine_goal_from_scan(result)

    fragrance_sensitive = (
        profile is not None and profile.has_flag(SkinFlag.FRAGRANCE_SENSITIVE)
    ) or any(key in FRAGRANCE_FLAG_KEYS for key in result.flag_keys())

    base_oils = [BaseOilSelection(name, pct) for name, pct in GOAL_BASE_OILS[goal]]
    boosts = list(GOAL_BOOSTS[goal])
    scent = UNSCENTED if fragrance_sensitive else GOAL_SCENTS[goal]
    rationale = list(GOAL_RATIONALE[goal])

    if profile is not None and profile.allergies:
        allergies = [a.lower() for a in profile.allergies]
        kept_names = _without_allergens([oil.name for oil in base_oils], allergies)
        kept = [oil for oil in base_oils if oil.name in kept_names]
        # Keep the original blend rather than leave it empty.
        if kept:
            total = sum(oil.percentage for oil in kept)
            base_oils = [
                BaseOilSelection(oil.name, _round_half_up(oil.percentage / total * 100))
                for oil in kept
            ]
        boosts = _without_allergens(boosts, allergies)

    if result.flags:
        labels = [flag.label for flag in result.flags[:2]]
        rationale.insert(
            0, f"Based on detected {' and '.join(labels)} in your scanned product"
        )

    if fragrance_sensitive:
        rationale.append("Keeping unscented to avoid fragrance irritation")

    return OilFormulaDraft(
        base_oils=base_oils,
        boost_ingredients=boosts,
        scent=scent,
        goal=goal,
        rationale=rationale,
    )


def goal_label(goal: SupportGoal) -> str:
    return GOAL_LABELS[goal]


def goal_description(goal: SupportGoal) -> str:
    return GOAL_DESCRIPTIONS[goal]
