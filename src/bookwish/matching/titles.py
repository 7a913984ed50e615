# ABOUTME: Title normalization and title-to-title similarity for book matching.
# ABOUTME: Extracts core titles and combines edit, containment, and word-overlap measures.

import re

from bookwish.matching.similarity import similarity

_CORE_TITLE_RE = re.compile(r"[:(]")
_NON_WORD_RE = re.compile(r"[^\w\s]")
_WHITESPACE_RE = re.compile(r"\s+")

# Words this short still count toward the union but never toward the overlap.
_MIN_OVERLAP_WORD_LENGTH = 3


def extract_core_title(title: str | None) -> str:
    """Return the part of a title before the first ':' or '('.

    "Dune: Book One" -> "Dune", "Foo (Bar)" -> "Foo". Titles without either
    character come back trimmed but otherwise unchanged.
    """
    if not title:
        return ""
    return _CORE_TITLE_RE.split(title, maxsplit=1)[0].strip()


def normalize_title(title: str | None) -> str:
    """Lowercase, strip punctuation, and collapse whitespace."""
    if not title:
        return ""
    text = _NON_WORD_RE.sub("", title.lower())
    return _WHITESPACE_RE.sub(" ", text).strip()


def containment_score(a: str, b: str) -> float:
    """len(shorter)/len(longer) when one normalized title contains the other."""
    if not a or not b:
        return 0.0
    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    if shorter in longer:
        return len(shorter) / len(longer)
    return 0.0


def word_overlap_ratio(a: str, b: str) -> float:
    """Shared significant words over the union of all words."""
    words_a = set(a.split())
    words_b = set(b.split())
    union = words_a | words_b
    if not union:
        return 0.0
    shared = {w for w in words_a & words_b if len(w) >= _MIN_OVERLAP_WORD_LENGTH}
    return len(shared) / len(union)


def title_similarity(a: str | None, b: str | None) -> float:
    """Best of edit similarity, containment, and word overlap.

    Each measure alone breaks on some real catalog data (reordered words,
    subtitle noise, partial titles); taking the maximum keeps all three
    signals.
    """
    norm_a = normalize_title(a)
    norm_b = normalize_title(b)
    return max(
        similarity(norm_a, norm_b),
        containment_score(norm_a, norm_b),
        word_overlap_ratio(norm_a, norm_b),
    )
