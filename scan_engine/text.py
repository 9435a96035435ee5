"""
Text helpers shared by the matcher and the reference loaders.

Normalization is applied identically to trigger names, aliases and parsed
candidates so that comparisons are case and punctuation insensitive.
"""

from __future__ import annotations

import re
from typing import List

# ASCII word characters only: accented letters are dropped like punctuation.
_NON_WORD = re.compile(r"[^A-Za-z0-9_\s]")
_DELIMITERS = re.compile(r"[,;\n]+")


def normalize_text(text: str) -> str:
    """Lowercase, strip punctuation, and trim surrounding whitespace."""
    lowered = (text or "").lower()
    return _NON_WORD.sub("", lowered).strip()


def parse_ingredients(text: str) -> List[str]:
    """
    Split a free-text ingredient list on commas, semicolons and newlines.
    Pieces are trimmed and empty pieces dropped; input order is preserved.
    """
    pieces = _DELIMITERS.split(text or "")
    return [piece.strip() for piece in pieces if piece.strip()]


def contains_term(haystack: str, needle: str, word_boundary: bool = False) -> bool:
    """
    Substring test used for matching. With word_boundary the needle must appear
    as a whole word or phrase, and empty needles never match.
    """
    if not word_boundary:
        return needle in haystack
    if not needle:
        return False
    pattern = rf"(?<!\w){re.escape(needle)}(?!\w)"
    return re.search(pattern, haystack) is not None
