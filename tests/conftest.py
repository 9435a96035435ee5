from typing import Iterable, Sequence, Tuple

import pytest

from scan_engine import (
    AnalysisResult,
    Flag,
    InMemoryProductSource,
    InMemoryScanStore,
    InMemoryTriggerSource,
    ScanEngine,
    TriggerIngredient,
)
from scan_engine.categories import DISCLAIMER, category_label
from scan_engine.scoring import risk_tier_for


def _trigger(name, categories=(), severity=1, aliases=(), slug=None, notes=""):
    return TriggerIngredient(
        name=name,
        slug=slug or name.lower().replace(" ", "-"),
        aliases=tuple(aliases),
        categories=tuple(categories),
        severity=severity,
        notes=notes,
    )


@pytest.fixture
def make_trigger():
    return _trigger


@pytest.fixture
def fragrance():
    return _trigger("Fragrance", categories=["irritant"], severity=2)


@pytest.fixture
def make_result():
    """Build an AnalysisResult straight from (key, severity) pairs."""

    def factory(flags: Iterable[Tuple[str, int]] = (), score: int = 0) -> AnalysisResult:
        return AnalysisResult(
            risk_score=score,
            risk_tier=risk_tier_for(score),
            flags=tuple(
                Flag(key=key, label=category_label(key), severity=severity)
                for key, severity in flags
            ),
            summary=(),
            matched_ingredients=(),
            disclaimer=DISCLAIMER,
        )

    return factory


@pytest.fixture
def make_engine():
    def factory(
        triggers: Sequence[TriggerIngredient] = (),
        products=(),
        store=None,
        matcher=None,
    ) -> ScanEngine:
        return ScanEngine(
            trigger_source=InMemoryTriggerSource(triggers),
            scan_store=store if store is not None else InMemoryScanStore(),
            product_source=InMemoryProductSource(products),
            matcher=matcher,
        )

    return factory


@pytest.fixture
def trigger_csv(tmp_path):
    path = tmp_path / "triggers.csv"
    path.write_text(
        "name,slug,aliases,categories,severity,notes\n"
        'Fragrance,fragrance,parfum|perfume,irritant,2,"Common irritant."\n'
        "Coconut Oil,coconut-oil,cocos nucifera oil,comedogenic|acne_trigger,3,\n",
        encoding="utf-8",
    )
    return path
