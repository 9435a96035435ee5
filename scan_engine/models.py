"""
Shared domain models used by the scan engine.

- TriggerIngredient: curated reference row describing a known trigger.
- MatchedIngredient: a trigger found in a submitted ingredient list.
- Flag: category-level finding aggregated from matched ingredients.
- AnalysisResult: scored, immutable output of one analysis.
- SkinProfile/ProfileOverlay: user sensitivities and their personalized reading.
- ScanRequest/ScanEvent/ScanOutcome: what was submitted and what got persisted.
- OilFormulaDraft: prefill for the custom oil builder.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple


class RiskTier(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


class InputType(str, Enum):
    PASTE = "paste"
    PRODUCT = "product"
    BARCODE = "barcode"


class SkinType(str, Enum):
    OILY = "oily"
    DRY = "dry"
    COMBINATION = "combination"
    NORMAL = "normal"
    SENSITIVE = "sensitive"


class SkinFlag(str, Enum):
    FRAGRANCE_SENSITIVE = "fragrance_sensitive"
    ACNE_PRONE = "acne_prone"
    ECZEMA_PRONE = "eczema_prone"
    HYPERPIGMENTATION_CONCERN = "hyperpigmentation_concern"
    ALLERGY_PRONE = "allergy_prone"
    ROSACEA_PRONE = "rosacea_prone"
    AGING_CONCERN = "aging_concern"
    DEHYDRATION_PRONE = "dehydration_prone"
    SUN_SENSITIVE = "sun_sensitive"


class SupportGoal(str, Enum):
    CALM = "calm"
    BARRIER = "barrier"
    ACNE = "acne"
    BRIGHTEN = "brighten"


class Confidence(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


MIN_SEVERITY = 1
MAX_SEVERITY = 3


def coerce_severity(value) -> int:
    """
    Reference rows are not validated upstream. Missing or non-numeric severities
    fall back to the lowest tier and numeric ones are clamped into [1, 3].
    """
    if value is None or isinstance(value, bool):
        return MIN_SEVERITY
    try:
        severity = int(float(value))
    except (TypeError, ValueError):
        return MIN_SEVERITY
    return max(MIN_SEVERITY, min(severity, MAX_SEVERITY))


def _string_list(value) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value if item is not None]


@dataclass(frozen=True)
class TriggerIngredient:
    """
    Mirrors a trigger_ingredients row. Read-only for the duration of an analysis.
    """

    name: str
    slug: str
    aliases: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    severity: int = MIN_SEVERITY
    notes: str = ""

    def __post_init__(self):
        # Frozen, so coerce through object.__setattr__.
        object.__setattr__(self, "severity", coerce_severity(self.severity))

    @classmethod
    def from_row(cls, row: Dict) -> "TriggerIngredient":
        return cls(
            name=str(row.get("name") or ""),
            slug=str(row.get("slug") or ""),
            aliases=tuple(_string_list(row.get("aliases"))),
            categories=tuple(_string_list(row.get("categories"))),
            severity=coerce_severity(row.get("severity")),
            notes=str(row.get("notes") or ""),
        )

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "slug": self.slug,
            "aliases": list(self.aliases),
            "categories": list(self.categories),
            "severity": self.severity,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class MatchedIngredient:
    name: str
    slug: str
    categories: Tuple[str, ...]
    severity: int
    notes: str
    matched_term: str  # original, unnormalized candidate text

    @classmethod
    def from_trigger(
        cls, trigger: TriggerIngredient, matched_term: str
    ) -> "MatchedIngredient":
        return cls(
            name=trigger.name,
            slug=trigger.slug,
            categories=tuple(trigger.categories),
            severity=trigger.severity,
            notes=trigger.notes,
            matched_term=matched_term,
        )

    def to_dict(self) -> Dict:
        return {
            "name": self.name,
            "slug": self.slug,
            "categories": list(self.categories),
            "severity": self.severity,
            "notes": self.notes,
            "matchedTerm": self.matched_term,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "MatchedIngredient":
        return cls(
            name=data.get("name", ""),
            slug=data.get("slug", ""),
            categories=tuple(data.get("categories") or ()),
            severity=coerce_severity(data.get("severity")),
            notes=data.get("notes") or "",
            matched_term=data.get("matchedTerm", ""),
        )


@dataclass(frozen=True)
class Flag:
    key: str
    label: str
    severity: int
    matched: Tuple[str, ...] = ()

    def to_dict(self) -> Dict:
        return {
            "key": self.key,
            "label": self.label,
            "severity": self.severity,
            "matched": list(self.matched),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Flag":
        return cls(
            key=data.get("key", ""),
            label=data.get("label") or data.get("key", ""),
            severity=coerce_severity(data.get("severity")),
            matched=tuple(data.get("matched") or ()),
        )


@dataclass(frozen=True)
class AnalysisResult:
    """
    Engine output. Persisted verbatim as result_json and never mutated.
    """

    risk_score: int
    risk_tier: RiskTier
    flags: Tuple[Flag, ...]
    summary: Tuple[str, ...]
    matched_ingredients: Tuple[MatchedIngredient, ...]
    disclaimer: str

    def flag_keys(self) -> List[str]:
        return [flag.key for flag in self.flags]

    def to_dict(self) -> Dict:
        return {
            "riskScore": self.risk_score,
            "riskTier": self.risk_tier.value,
            "flags": [flag.to_dict() for flag in self.flags],
            "summary": list(self.summary),
            "matchedIngredients": [m.to_dict() for m in self.matched_ingredients],
            "disclaimer": self.disclaimer,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "AnalysisResult":
        return cls(
            risk_score=int(data.get("riskScore", 0)),
            risk_tier=RiskTier(data.get("riskTier", RiskTier.LOW.value)),
            flags=tuple(Flag.from_dict(f) for f in data.get("flags") or ()),
            summary=tuple(data.get("summary") or ()),
            matched_ingredients=tuple(
                MatchedIngredient.from_dict(m)
                for m in data.get("matchedIngredients") or ()
            ),
            disclaimer=data.get("disclaimer", ""),
        )


@dataclass
class SkinProfile:
    """
    Self-reported skin type plus sensitivity flags used for personalization.
    """

    skin_type: SkinType = SkinType.NORMAL
    flags: List[str] = field(default_factory=list)
    allergies: Optional[List[str]] = None
    updated_at: Optional[str] = None

    def __post_init__(self):
        # Flags are kept as plain strings so rule-table lookups stay simple.
        self.flags = [f.value if isinstance(f, Enum) else str(f) for f in self.flags]
        if not isinstance(self.skin_type, SkinType):
            self.skin_type = SkinType(self.skin_type)

    def has_flag(self, flag) -> bool:
        value = flag.value if isinstance(flag, Enum) else flag
        return value in self.flags

    def to_dict(self) -> Dict:
        return {
            "skinType": self.skin_type.value,
            "flags": list(self.flags),
            "allergies": list(self.allergies) if self.allergies is not None else None,
            "updatedAt": self.updated_at,
        }


@dataclass
class ProfileOverlay:
    personal_warnings: List[str] = field(default_factory=list)
    adjusted_risk_score: Optional[int] = None
    recommended_actions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        payload = {
            "personalWarnings": list(self.personal_warnings),
            "recommendedActions": list(self.recommended_actions),
        }
        if self.adjusted_risk_score is not None:
            payload["adjustedRiskScore"] = self.adjusted_risk_score
        return payload


@dataclass
class GoalRecommendation:
    goal: SupportGoal
    confidence: Confidence
    reason: str

    def to_dict(self) -> Dict:
        return {
            "goal": self.goal.value,
            "confidence": self.confidence.value,
            "reason": self.reason,
        }


@dataclass
class ProductInfo:
    """
    Catalog product as far as the scanner cares: an id and its ingredient text.
    """

    id: str
    name: str = ""
    barcode: Optional[str] = None
    ingredients_text: Optional[str] = None
    source: str = "catalog"


@dataclass
class ScanRequest:
    input_type: InputType
    ingredients_text: Optional[str] = None
    product_id: Optional[str] = None
    barcode: Optional[str] = None
    user_id: Optional[str] = None


@dataclass
class ScanEvent:
    """
    Persisted scan record; result_json is the AnalysisResult verbatim.
    """

    id: Optional[str]
    user_id: Optional[str]
    input_type: InputType
    product_id: Optional[str]
    barcode: Optional[str]
    raw_ingredients_text: str
    result_json: Dict
    created_at: Optional[str] = None

    def result(self) -> AnalysisResult:
        return AnalysisResult.from_dict(self.result_json)

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "input_type": self.input_type.value,
            "product_id": self.product_id,
            "barcode": self.barcode,
            "raw_ingredients_text": self.raw_ingredients_text,
            "result_json": self.result_json,
            "created_at": self.created_at,
        }


@dataclass
class ScanOutcome:
    scan_id: Optional[str]
    result: AnalysisResult
    product_id: Optional[str] = None
    ingredients_text: str = ""

    def to_dict(self) -> Dict:
        payload = {"scanId": self.scan_id}
        payload.update(self.result.to_dict())
        return payload


@dataclass
class BaseOilSelection:
    name: str
    percentage: int

    def to_dict(self) -> Dict:
        return {"name": self.name, "percentage": self.percentage}


@dataclass
class OilFormulaDraft:
    base_oils: List[BaseOilSelection]
    boost_ingredients: List[str]
    scent: str
    goal: Optional[SupportGoal] = None
    rationale: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "baseOils": [oil.to_dict() for oil in self.base_oils],
            "boostIngredients": list(self.boost_ingredients),
            "scent": self.scent,
            "goal": self.goal.value if self.goal else None,
            "rationale": list(self.rationale),
        }


def unique_in_order(items: Sequence[str]) -> List[str]:
    """Deduplicate while preserving first-seen order."""
    seen = set()
    unique: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique
