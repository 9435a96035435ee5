"""
Support goal recommendation for the oil builder.

Scores the four remediation goals from scan flags (severity weighted, primary
goal doubled) plus flat boosts for matching profile flags, then picks the best.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .models import (
    AnalysisResult,
    Confidence,
    GoalRecommendation,
    SkinProfile,
    SupportGoal,
)

# scan flag key -> goals in priority order
FLAG_TO_GOAL_MAP: Mapping[str, Tuple[SupportGoal, ...]] = MappingProxyType(
    {
        "irritant": (SupportGoal.CALM, SupportGoal.BARRIER),
        "sensitizer": (SupportGoal.CALM, SupportGoal.BARRIER),
        "essential_oil": (SupportGoal.CALM,),
        "fragrance": (SupportGoal.CALM,),
        "barrier_disruptor": (SupportGoal.BARRIER, SupportGoal.CALM),
        "drying_alcohol": (SupportGoal.BARRIER,),
        "acne_trigger": (SupportGoal.ACNE,),
        "comedogenic": (SupportGoal.ACNE,),
        "inflammation": (SupportGoal.ACNE, SupportGoal.CALM),
        "photosensitivity": (SupportGoal.BRIGHTEN,),
        "glycation": (SupportGoal.BRIGHTEN,),
    }
)

PROFILE_FLAG_BOOST: Mapping[str, SupportGoal] = MappingProxyType(
    {
        "fragrance_sensitive": SupportGoal.CALM,
        "eczema_prone": SupportGoal.BARRIER,
        "acne_prone": SupportGoal.ACNE,
        "hyperpigmentation_concern": SupportGoal.BRIGHTEN,
        "rosacea_prone": SupportGoal.CALM,
        "dehydration_prone": SupportGoal.BARRIER,
    }
)

REASON_TEMPLATES: Mapping[SupportGoal, str] = MappingProxyType(
    {
        SupportGoal.CALM: "Detected {labels} that may irritate skin",
        SupportGoal.BARRIER: "Found {labels} that may compromise skin barrier",
        SupportGoal.ACNE: "Contains {labels} that may trigger breakouts",
        SupportGoal.BRIGHTEN: "Includes {labels} that may affect skin tone",
    }
)

# Used when only the profile contributed to the winning goal.
PROFILE_ONLY_REASONS: Mapping[SupportGoal, str] = MappingProxyType(
    {
        SupportGoal.CALM: "Your skin profile suggests calming support",
        SupportGoal.BARRIER: "Your skin profile suggests barrier support",
        SupportGoal.ACNE: "Your skin profile suggests acne support",
        SupportGoal.BRIGHTEN: "Your skin profile suggests brightening support",
    }
)

PROFILE_BOOST = 3
HIGH_CONFIDENCE_SCORE = 8
MEDIUM_CONFIDENCE_SCORE = 4
MAX_REASON_LABELS = 2


def _score_goals(
    result: AnalysisResult, profile: Optional[SkinProfile]
) -> Tuple[Dict[SupportGoal, int], Dict[SupportGoal, List[str]]]:
    scores: Dict[SupportGoal, int] = {goal: 0 for goal in SupportGoal}
    reasons: Dict[SupportGoal, List[str]] = {goal: [] for goal in SupportGoal}

    for flag in result.flags:
        for index, goal in enumerate(FLAG_TO_GOAL_MAP.get(flag.key, ())):
            scores[goal] += flag.severity * 2 if index == 0 else flag.severity
            if flag.label not in reasons[goal]:
                reasons[goal].append(flag.label)

    if profile is not None:
        for profile_flag in profile.flags:
            goal = PROFILE_FLAG_BOOST.get(profile_flag)
            if goal is not None:
                scores[goal] += PROFILE_BOOST
    return scores, reasons


def _confidence_for(score: int) -> Confidence:
    if score >= HIGH_CONFIDENCE_SCORE:
        return Confidence.HIGH
    if score >= MEDIUM_CONFIDENCE_SCORE:
        return Confidence.MEDIUM
    return Confidence.LOW


def get_recommended_goal(
    result: AnalysisResult, profile: Optional[SkinProfile] = None
) -> Optional[GoalRecommendation]:
    scores, reasons = _score_goals(result, profile)

    top_goal: Optional[SupportGoal] = None
    top_score = 0
    for goal, score in scores.items():
        if score > top_score:
            top_goal, top_score = goal, score

    if top_goal is None:
        return None

    labels = reasons[top_goal][:MAX_REASON_LABELS]
    if labels:
        reason = REASON_TEMPLATES[top_goal].format(labels=" and ".join(labels))
    else:
        reason = PROFILE_ONLY_REASONS[top_goal]

    return GoalRecommendation(
        goal=top_goal, confidence=_confidence_for(top_score), reason=reason
    )


def get_all_applicable_goals(
    result: AnalysisResult, profile: Optional[SkinProfile] = None
) -> List[SupportGoal]:
    """Every goal with a nonzero score, highest first."""
    scores, _ = _score_goals(result, profile)
    ranked = sorted(
        (item for item in scores.items() if item[1] > 0),
        key=lambda item: -item[1],
    )
    return [goal for goal, _ in ranked]
