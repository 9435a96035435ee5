"""
Quiz to skin profile conversion and raw profile validation.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .models import SkinFlag, SkinProfile, SkinType

SKIN_TYPE_MAP: Mapping[str, SkinType] = MappingProxyType(
    {
        "Oily": SkinType.OILY,
        "Dry": SkinType.DRY,
        "Combination": SkinType.COMBINATION,
        "Normal": SkinType.NORMAL,
        "Sensitive": SkinType.SENSITIVE,
        "Not sure": SkinType.NORMAL,
    }
)

CONCERN_TO_FLAG_MAP: Mapping[str, SkinFlag] = MappingProxyType(
    {
        "Reduce acne or breakouts": SkinFlag.ACNE_PRONE,
        "Fade dark spots or hyperpigmentation": SkinFlag.HYPERPIGMENTATION_CONCERN,
        "Soothe sensitive or irritated skin": SkinFlag.FRAGRANCE_SENSITIVE,
        "Anti-aging / firming": SkinFlag.AGING_CONCERN,
        "Hydrate dry skin": SkinFlag.DEHYDRATION_PRONE,
        "Redness or rosacea": SkinFlag.ROSACEA_PRONE,
    }
)

ALLERGY_TO_FLAG_MAP: Mapping[str, SkinFlag] = MappingProxyType(
    {
        "Fragrance": SkinFlag.FRAGRANCE_SENSITIVE,
        "Essential oils (e.g. lavender, peppermint, tea tree)": SkinFlag.FRAGRANCE_SENSITIVE,
        "Nuts (e.g. almond oil, shea butter)": SkinFlag.ALLERGY_PRONE,
        "Aloe vera": SkinFlag.ALLERGY_PRONE,
        "Coconut": SkinFlag.ALLERGY_PRONE,
    }
)

NO_ALLERGY_ANSWERS = ("I don't have any allergies", "I'm not sure")
SUN_SENSITIVE_ANSWERS = ("Daily / I work outside", "I don't use sunscreen")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def normalize_quiz_to_profile(quiz: Dict) -> SkinProfile:
    """
    Map quiz answers (skin_type, skincare_goals, skin_concerns, allergies,
    sun_exposure) onto a canonical SkinProfile.
    """
    flags: List[str] = []
    allergies: List[str] = []

    def add(flag: SkinFlag) -> None:
        if flag.value not in flags:
            flags.append(flag.value)

    skin_type = SkinType.NORMAL
    selected_types = quiz.get("skin_type") or []
    if selected_types:
        # Sensitive wins over any other selection.
        if "Sensitive" in selected_types:
            skin_type = SkinType.SENSITIVE
        else:
            skin_type = SKIN_TYPE_MAP.get(selected_types[0], SkinType.NORMAL)

    for answer in list(quiz.get("skincare_goals") or []) + list(
        quiz.get("skin_concerns") or []
    ):
        flag = CONCERN_TO_FLAG_MAP.get(answer)
        if flag:
            add(flag)

    for allergy in quiz.get("allergies") or []:
        if allergy in NO_ALLERGY_ANSWERS:
            continue
        allergies.append(allergy)
        flag = ALLERGY_TO_FLAG_MAP.get(allergy)
        if flag:
            add(flag)

    if quiz.get("sun_exposure") in SUN_SENSITIVE_ANSWERS:
        add(SkinFlag.SUN_SENSITIVE)

    if skin_type == SkinType.SENSITIVE:
        add(SkinFlag.FRAGRANCE_SENSITIVE)

    return SkinProfile(
        skin_type=skin_type,
        flags=flags,
        allergies=allergies or None,
        updated_at=_now(),
    )


def validate_profile(raw) -> Optional[SkinProfile]:
    """
    Coerce a stored profile payload (camelCase keys) into a SkinProfile.
    Unknown skin types become normal; non-string entries are dropped.
    """
    if not raw or not isinstance(raw, dict):
        return None

    try:
        skin_type = SkinType(raw.get("skinType"))
    except ValueError:
        skin_type = SkinType.NORMAL

    flags = raw.get("flags")
    flags = [f for f in flags if isinstance(f, str)] if isinstance(flags, list) else []

    allergies = raw.get("allergies")
    allergies = (
        [a for a in allergies if isinstance(a, str)]
        if isinstance(allergies, list)
        else None
    )

    updated_at = raw.get("updatedAt")
    return SkinProfile(
        skin_type=skin_type,
        flags=flags,
        allergies=allergies,
        updated_at=updated_at if isinstance(updated_at, str) else _now(),
    )
