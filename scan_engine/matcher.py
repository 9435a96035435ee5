"""
Trigger matching: compares parsed ingredient candidates against the curated
trigger set using bidirectional containment on normalized names and aliases.

Each trigger is consumed at most once per analysis (first candidate wins),
while a single candidate may still match several distinct triggers.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Set, Tuple

from .models import MatchedIngredient, TriggerIngredient
from .text import contains_term, normalize_text


class TriggerMatcher:
    """
    Plain substring containment is the compatible default. Short aliases such
    as "oil" will therefore match many candidates; word_boundary=True switches
    to whole-word containment for callers that opt in.
    """

    def __init__(self, word_boundary: bool = False):
        self.word_boundary = word_boundary
        self.log = logging.getLogger(self.__class__.__name__)

    def match(
        self,
        candidates: Sequence[str],
        triggers: Iterable[TriggerIngredient],
    ) -> List[MatchedIngredient]:
        indexed = self._index(triggers)
        matched: List[MatchedIngredient] = []
        seen_slugs: Set[str] = set()

        for candidate in candidates:
            normalized = normalize_text(candidate)
            for trigger, terms in indexed:
                if trigger.slug in seen_slugs:
                    continue
                if any(self._matches(normalized, term) for term in terms):
                    seen_slugs.add(trigger.slug)
                    matched.append(MatchedIngredient.from_trigger(trigger, candidate))

        self.log.debug(
            "Matched %d trigger(s) from %d candidate(s)", len(matched), len(candidates)
        )
        return matched

    def _matches(self, candidate: str, term: str) -> bool:
        return contains_term(candidate, term, self.word_boundary) or contains_term(
            term, candidate, self.word_boundary
        )

    @staticmethod
    def _index(
        triggers: Iterable[TriggerIngredient],
    ) -> List[Tuple[TriggerIngredient, Tuple[str, ...]]]:
        # Normalize every trigger once per analysis; canonical name first.
        return [
            (
                trigger,
                (normalize_text(trigger.name),)
                + tuple(normalize_text(alias) for alias in trigger.aliases),
            )
            for trigger in triggers
        ]
