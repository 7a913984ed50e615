# ABOUTME: String similarity primitives shared by the author and book matchers.
# ABOUTME: Levenshtein edit distance, normalized similarity, and the shared text normalizer.

import math
import re

from rapidfuzz.distance import Levenshtein

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Lowercase, drop periods, collapse whitespace runs, and trim.

    "J.R.R.  Tolkien " and "jrr tolkien" normalize to the same string, so
    initials with and without periods compare equal.
    """
    if not text:
        return ""
    text = text.lower().replace(".", "")
    return _WHITESPACE_RE.sub(" ", text).strip()


def levenshtein_distance(a: str, b: str) -> int:
    """Classic edit distance with unit insert, delete, and substitute costs."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Similarity in [0.0, 1.0] derived from Levenshtein distance.

    Callers normalize both strings first (see normalize_text); this function
    compares them exactly as given.
    """
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    distance = levenshtein_distance(a, b)
    return max(0.0, 1.0 - distance / max(len(a), len(b)))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (not banker's rounding)."""
    return math.floor(value + 0.5)
