# ABOUTME: Entity-resolution engine matching free-text requests to catalog records.
# ABOUTME: Exports the matchers, the request preprocessor, and the candidate types.

from bookwish.matching.authors import find_best_author_match, select_author
from bookwish.matching.books import find_best_book_match, select_book
from bookwish.matching.candidate import MatchCandidate, ScoredCandidate
from bookwish.matching.preprocess import RequestInput, preprocess_book_data
from bookwish.matching.scoring import MatchSelection
from bookwish.matching.similarity import normalize_text, similarity
from bookwish.matching.titles import extract_core_title, title_similarity

__all__ = [
    "MatchCandidate",
    "MatchSelection",
    "RequestInput",
    "ScoredCandidate",
    "extract_core_title",
    "find_best_author_match",
    "find_best_book_match",
    "normalize_text",
    "preprocess_book_data",
    "select_author",
    "select_book",
    "similarity",
    "title_similarity",
]
