"""
Profile risk overlay: personalized interpretation of a scan result based on the
user's skin profile (warnings, boosted score, recommended actions).
"""

from __future__ import annotations

from types import MappingProxyType
from typing import List, Mapping, Tuple

from .models import AnalysisResult, ProfileOverlay, SkinFlag, SkinProfile

# scan flag key -> profile flags that increase concern
FLAG_SENSITIVITY_MAP: Mapping[str, Tuple[str, ...]] = MappingProxyType(
    {
        "fragrance": ("fragrance_sensitive",),
        "allergen": ("allergy_prone", "fragrance_sensitive"),
        "irritant": ("fragrance_sensitive", "eczema_prone", "rosacea_prone"),
        "acne_trigger": ("acne_prone",),
        "comedogenic": ("acne_prone",),
        "barrier_disruptor": ("eczema_prone", "dehydration_prone"),
        "sensitizer": ("fragrance_sensitive", "allergy_prone"),
        "photosensitivity": ("sun_sensitive", "hyperpigmentation_concern"),
        "inflammation": ("rosacea_prone", "acne_prone"),
        "essential_oil": ("fragrance_sensitive",),
    }
)

# (scan flag key, profile flag) -> personalized warning
WARNING_MESSAGES: Mapping[str, Mapping[str, str]] = MappingProxyType(
    {
        "fragrance": {
            "fragrance_sensitive": "Contains fragrance which may irritate your sensitive skin. Consider fragrance-free alternatives.",
        },
        "allergen": {
            "allergy_prone": "Contains potential allergens. Patch test recommended before use.",
            "fragrance_sensitive": "Contains allergens that may trigger a reaction.",
        },
        "irritant": {
            "fragrance_sensitive": "Contains irritants that may not suit your sensitive skin.",
            "eczema_prone": "May aggravate eczema-prone skin. Use with caution.",
            "rosacea_prone": "May trigger rosacea flare-ups.",
        },
        "acne_trigger": {
            "acne_prone": "Contains ingredients known to trigger breakouts for acne-prone skin.",
        },
        "comedogenic": {
            "acne_prone": "Contains pore-clogging ingredients. May cause breakouts.",
        },
        "barrier_disruptor": {
            "eczema_prone": "May weaken your skin barrier. Consider gentler options.",
            "dehydration_prone": "Could worsen skin dehydration.",
        },
        "sensitizer": {
            "fragrance_sensitive": "Contains sensitizers that may increase skin sensitivity over time.",
            "allergy_prone": "May cause sensitization with repeated use.",
        },
        "photosensitivity": {
            "sun_sensitive": "Increases sun sensitivity. Always use SPF with this product.",
            "hyperpigmentation_concern": "May worsen hyperpigmentation if used without sun protection.",
        },
        "inflammation": {
            "rosacea_prone": "May cause inflammation and redness.",
            "acne_prone": "May promote inflammatory acne.",
        },
        "essential_oil": {
            "fragrance_sensitive": "Contains essential oils which may irritate sensitive skin.",
        },
    }
)

ACTION_RECOMMENDATIONS: Mapping[str, str] = MappingProxyType(
    {
        "fragrance_sensitive": 'Look for products labeled "fragrance-free" or "unscented".',
        "acne_prone": "Choose non-comedogenic formulas and patch test new products.",
        "eczema_prone": "Opt for minimal ingredient lists and ceramide-rich formulas.",
        "hyperpigmentation_concern": "Always pair active ingredients with SPF 30+.",
        "allergy_prone": "Perform a 24-hour patch test before trying new products.",
        "rosacea_prone": "Avoid extreme temperatures and physical exfoliants.",
        "aging_concern": "Introduce actives gradually to minimize irritation.",
        "dehydration_prone": "Layer hydrating products and avoid drying alcohols.",
        "sun_sensitive": "Apply broad-spectrum SPF daily, even on cloudy days.",
    }
)

GENERIC_FRAGRANCE_ADVICE = (
    "Your profile indicates fragrance sensitivity: review the ingredient list carefully."
)

BOOST_PER_TRIGGERED_FLAG = 5
MAX_BOOST = 20
GENERIC_ADVICE_SCORE_THRESHOLD = 30


def get_profile_overlay(result: AnalysisResult, profile: SkinProfile) -> ProfileOverlay:
    personal_warnings: List[str] = []
    triggered: List[str] = []

    for flag in result.flags:
        for profile_flag in FLAG_SENSITIVITY_MAP.get(flag.key, ()):
            if not profile.has_flag(profile_flag):
                continue
            if profile_flag not in triggered:
                triggered.append(profile_flag)
            warning = WARNING_MESSAGES.get(flag.key, {}).get(profile_flag)
            if warning and warning not in personal_warnings:
                personal_warnings.append(warning)

    adjusted_risk_score = None
    if triggered:
        boost = min(len(triggered) * BOOST_PER_TRIGGERED_FLAG, MAX_BOOST)
        adjusted_risk_score = min(result.risk_score + boost, 100)

    recommended_actions: List[str] = []
    for profile_flag in triggered:
        action = ACTION_RECOMMENDATIONS.get(profile_flag)
        if action and action not in recommended_actions:
            recommended_actions.append(action)

    if (
        not personal_warnings
        and result.risk_score > GENERIC_ADVICE_SCORE_THRESHOLD
        and profile.has_flag(SkinFlag.FRAGRANCE_SENSITIVE)
    ):
        recommended_actions.append(GENERIC_FRAGRANCE_ADVICE)

    return ProfileOverlay(
        personal_warnings=personal_warnings,
        adjusted_risk_score=adjusted_risk_score,
        recommended_actions=recommended_actions,
    )


def has_relevant_sensitivities(result: AnalysisResult, profile: SkinProfile) -> bool:
    """Cheap pre-check: does any scan flag touch a sensitivity the profile has?"""
    return any(
        profile.has_flag(profile_flag)
        for flag in result.flags
        for profile_flag in FLAG_SENSITIVITY_MAP.get(flag.key, ())
    )
