# ABOUTME: Confidence scoring for public catalog candidates during request enrichment.
# ABOUTME: Combines title similarity and author similarity; an equal ISBN is a certain match.

import re

from bookwish.matching.similarity import normalize_text, similarity
from bookwish.matching.titles import title_similarity
from bookwish.metadata.types import BookMetadata

_WEIGHT_TITLE = 0.6
_WEIGHT_AUTHOR = 0.4

_ISBN_STRIP_RE = re.compile(r"[\s-]")


def normalize_isbn(isbn: str) -> str:
    """Strip hyphens and spaces from an ISBN for comparison."""
    return _ISBN_STRIP_RE.sub("", isbn).upper()


def _normalize_author(name: str) -> str:
    """Normalize 'Last, First' to 'First Last' before the shared normalizer."""
    if "," in name:
        last, first = (p.strip() for p in name.split(",", 1))
        name = f"{first} {last}"
    return normalize_text(name)


def author_similarity(requested: str | None, authors: list[str]) -> float:
    """Best similarity between the requested author and any candidate author."""
    target = _normalize_author(requested or "")
    if not target or not authors:
        return 0.0
    return max(similarity(target, _normalize_author(a)) for a in authors)


def score_candidate(query: BookMetadata, candidate: BookMetadata) -> float:
    """Score how well a catalog record matches the request it was found for.

    Returns a float in [0.0, 1.0]. Without a requested author the title
    carries the full weight.
    """
    if query.isbn and candidate.isbn and normalize_isbn(query.isbn) == normalize_isbn(candidate.isbn):
        return 1.0

    title_score = title_similarity(query.title, candidate.title)
    if not query.authors:
        return max(0.0, min(1.0, title_score))

    author_score = author_similarity(query.authors[0], candidate.authors)
    score = _WEIGHT_TITLE * title_score + _WEIGHT_AUTHOR * author_score
    return max(0.0, min(1.0, score))
