"""
Central scan engine: resolves the submitted input to ingredient text, matches it
against the trigger reference set, and rolls matches up into flags, a 0-100
risk score, a tier and a readable summary.

Key stages:
- resolve product/barcode input through an injected product source
- fetch the full trigger set once per analysis (failure is fatal)
- parse, match, aggregate and score in memory with no shared state
- persist the result as a scan event and return its id (failure is fatal)
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from .categories import DISCLAIMER, build_summary
from .errors import ScanPersistenceError
from .history import ScanEventStore
from .matcher import TriggerMatcher
from .models import (
    AnalysisResult,
    InputType,
    ScanEvent,
    ScanOutcome,
    ScanRequest,
    TriggerIngredient,
)
from .openbeautyfacts_client import ProductSource
from .scoring import aggregate_flags, compute_risk_score, risk_tier_for
from .text import parse_ingredients
from .trigger_db import TriggerSource


class ScanEngine:
    """
    Orchestrates input resolution, analysis and persistence.
    Inject different trigger, product and scan stores to adapt to your stack.
    """

    def __init__(
        self,
        trigger_source: TriggerSource,
        scan_store: Optional[ScanEventStore] = None,
        product_source: Optional[ProductSource] = None,
        matcher: Optional[TriggerMatcher] = None,
    ):
        self.trigger_source = trigger_source
        self.scan_store = scan_store
        self.product_source = product_source
        self.matcher = matcher or TriggerMatcher()
        self.log = logging.getLogger(self.__class__.__name__)

    def analyze_text(
        self, ingredients_text: str, triggers: Sequence[TriggerIngredient]
    ) -> AnalysisResult:
        """
        Pure analysis of an ingredient list against an already loaded trigger set.
        Blank input yields a zero score with the fallback summary.
        """
        candidates = parse_ingredients(ingredients_text)
        matches = self.matcher.match(candidates, triggers)
        flags = aggregate_flags(matches)
        score = compute_risk_score(matches, flags)

        self.log.info(
            "Parsed %d ingredient(s), matched %d trigger(s), score %d",
            len(candidates),
            len(matches),
            score,
        )
        return AnalysisResult(
            risk_score=score,
            risk_tier=risk_tier_for(score),
            flags=tuple(flags),
            summary=tuple(build_summary(flags)),
            matched_ingredients=tuple(matches),
            disclaimer=DISCLAIMER,
        )

    def analyze(self, request: ScanRequest) -> ScanOutcome:
        """
        Resolve the request to ingredient text and analyse it without persisting.
        """
        product_id, ingredients_text = self.resolve_ingredients(request)
        # Raises TriggerDataError; there is no fallback trigger set.
        triggers = self.trigger_source.fetch_all()
        result = self.analyze_text(ingredients_text, triggers)
        return ScanOutcome(
            scan_id=None,
            result=result,
            product_id=product_id,
            ingredients_text=ingredients_text,
        )

    def scan(self, request: ScanRequest) -> ScanOutcome:
        """
        Analyse the request and record it as a scan event. The returned outcome
        carries the generated scan id.
        """
        self.log.info("Analyze request: input_type=%s", request.input_type.value)
        outcome = self.analyze(request)
        if self.scan_store is None:
            raise ScanPersistenceError("No scan event store configured")

        event = ScanEvent(
            id=None,
            user_id=request.user_id or None,
            input_type=request.input_type,
            product_id=outcome.product_id,
            barcode=request.barcode or None,
            raw_ingredients_text=outcome.ingredients_text,
            result_json=outcome.result.to_dict(),
        )
        outcome.scan_id = self.scan_store.save(event)
        self.log.info("Analysis complete, scan_id=%s", outcome.scan_id)
        return outcome

    def resolve_ingredients(self, request: ScanRequest) -> Tuple[Optional[str], str]:
        """
        Return (product_id, ingredients_text) for a request. A resolved product's
        text replaces pasted text only when it is non-empty.
        """
        ingredients_text = request.ingredients_text or ""
        product_id = request.product_id or None
        if self.product_source is None:
            return product_id, ingredients_text

        product = None
        if request.input_type == InputType.BARCODE and request.barcode:
            product = self.product_source.get_product_by_barcode(request.barcode)
        elif request.input_type == InputType.PRODUCT and request.product_id:
            product = self.product_source.get_product(request.product_id)

        if product:
            product_id = product.id
            ingredients_text = product.ingredients_text or ingredients_text
        elif request.input_type != InputType.PASTE:
            self.log.info(
                "No product resolved for %s input; analysing pasted text",
                request.input_type.value,
            )
        return product_id, ingredients_text

    def get_scan(self, scan_id: str) -> Optional[ScanEvent]:
        if self.scan_store is None:
            return None
        return self.scan_store.get(scan_id)

    def scan_history(self, user_id: str, limit: int = 20) -> List[ScanEvent]:
        if self.scan_store is None:
            return []
        return self.scan_store.list_for_user(user_id, limit=limit)
