"""
Scan engine package for flagging potentially irritating cosmetic ingredients
in a free-text ingredient list and personalizing the result for a skin profile.

Expose the main classes so consumers can import directly from the package.
"""

from .models import (
    AnalysisResult,
    Confidence,
    Flag,
    GoalRecommendation,
    InputType,
    MatchedIngredient,
    OilFormulaDraft,
    ProductInfo,
    ProfileOverlay,
    RiskTier,
    ScanEvent,
    ScanOutcome,
    ScanRequest,
    SkinFlag,
    SkinProfile,
    SkinType,
    SupportGoal,
    TriggerIngredient,
)
from .errors import (
    ScanEngineError,
    ScanLookupError,
    ScanPersistenceError,
    TriggerDataError,
)
from .goals import get_all_applicable_goals, get_recommended_goal
from .history import CsvScanStore, InMemoryScanStore
from .matcher import TriggerMatcher
from .oil_prefill import generate_oil_prefill
from .openbeautyfacts_client import InMemoryProductSource, OpenBeautyFactsClient
from .profile_normalizer import normalize_quiz_to_profile, validate_profile
from .profile_overlay import get_profile_overlay, has_relevant_sensitivities
from .scan_engine import ScanEngine
from .settings import ScanSettings, build_engine
from .text import normalize_text, parse_ingredients
from .trigger_db import CsvTriggerSource, InMemoryTriggerSource

__all__ = [
    "AnalysisResult",
    "Confidence",
    "CsvScanStore",
    "CsvTriggerSource",
    "Flag",
    "GoalRecommendation",
    "InMemoryProductSource",
    "InMemoryScanStore",
    "InMemoryTriggerSource",
    "InputType",
    "MatchedIngredient",
    "OilFormulaDraft",
    "OpenBeautyFactsClient",
    "ProductInfo",
    "ProfileOverlay",
    "RiskTier",
    "ScanEngine",
    "ScanEngineError",
    "ScanEvent",
    "ScanLookupError",
    "ScanOutcome",
    "ScanPersistenceError",
    "ScanRequest",
    "ScanSettings",
    "SkinFlag",
    "SkinProfile",
    "SkinType",
    "SupportGoal",
    "TriggerDataError",
    "TriggerIngredient",
    "TriggerMatcher",
    "build_engine",
    "generate_oil_prefill",
    "get_all_applicable_goals",
    "get_profile_overlay",
    "get_recommended_goal",
    "has_relevant_sensitivities",
    "normalize_quiz_to_profile",
    "normalize_text",
    "parse_ingredients",
    "validate_profile",
]
