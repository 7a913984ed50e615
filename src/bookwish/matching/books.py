# ABOUTME: Book matcher: scores catalog book records against a requested title and author.
# ABOUTME: Penalizes biographies and series volumes, rewards exact and classic titles.

import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property

from bookwish.matching.candidate import MatchCandidate, ScoredCandidate
from bookwish.matching.scoring import MatchSelection, ScoreRule, score_with_rules, select_best
from bookwish.matching.similarity import normalize_text, round_half_up, similarity
from bookwish.matching.titles import extract_core_title, title_similarity

MIN_TITLE_SIMILARITY = 0.3

# Phrases in a book title that indicate a work *about* someone.
BIOGRAPHY_PHRASES = (
    "biography",
    "life of",
    "lives of",
    "living",
    "study of",
    "studies",
    "criticism",
    "critical",
    "guide to",
    "companion",
)

_YEAR_RE = re.compile(r"^\s*(\d{4})")

# Titles this short are usually standalone classics rather than series volumes.
_SHORT_TITLE_WORDS = 3


@dataclass(frozen=True)
class BookComparison:
    """A requested (title, author) prepared against one candidate book."""

    target_title: str
    target_author: str
    candidate: MatchCandidate

    # Titles that open with "(" or ":" have an empty core; compare them whole.
    @cached_property
    def core_target(self) -> str:
        return extract_core_title(self.target_title) or self.target_title.strip()

    @cached_property
    def core_candidate(self) -> str:
        return extract_core_title(self.candidate.title) or self.candidate.title.strip()

    @cached_property
    def title_similarity(self) -> float:
        return max(
            title_similarity(self.target_title, self.candidate.title),
            title_similarity(self.core_target, self.core_candidate),
        )

    @cached_property
    def lowered_title(self) -> str:
        return self.candidate.title.lower()

    @cached_property
    def author(self) -> str:
        return normalize_text(self.target_author)

    @cached_property
    def candidate_author(self) -> str:
        return normalize_text(self.candidate.author_name)

    @cached_property
    def author_in_title(self) -> bool:
        return bool(self.author) and self.author in normalize_text(self.candidate.title)

    @cached_property
    def has_biography_phrase(self) -> bool:
        return any(phrase in self.lowered_title for phrase in BIOGRAPHY_PHRASES)

    @cached_property
    def release_year(self) -> int | None:
        match = _YEAR_RE.match(self.candidate.release_date or "")
        return int(match.group(1)) if match else None

    def metrics(self) -> Mapping[str, float]:
        return {"title_similarity": self.title_similarity}


def title_similarity_rule(c: BookComparison) -> tuple[int, str]:
    return round_half_up(150 * c.title_similarity), f"title similarity {c.title_similarity:.2f}"


def exact_title_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.target_title.strip().lower() == c.candidate.title.strip().lower():
        return 200, "exact title match"
    core = c.core_target.lower()
    if core == c.core_candidate.lower() and len(core) > 3:
        return 150, "core title match"
    return None


def title_mismatch_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.title_similarity < 0.25:
        return -350, "title similarity below 0.25"
    return None


def biography_about_author_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.has_biography_phrase and c.author_in_title:
        return -300, "biography of the requested author"
    return None


def biography_phrase_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.has_biography_phrase:
        return -150, "biography phrase in title"
    return None


def author_in_title_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.author_in_title:
        return -100, "author name in title"
    return None


def subject_by_biographer_rule(c: BookComparison) -> tuple[int, str] | None:
    if not c.author or " by " not in c.lowered_title:
        return None
    subject = c.lowered_title.rsplit(" by ", 1)[0]
    if c.author in normalize_text(subject):
        return -200, "title reads '<author> by <someone else>'"
    return None


def author_similarity_rule(c: BookComparison) -> tuple[int, str] | None:
    if not c.author or not c.candidate_author:
        return None
    author_sim = similarity(c.author, c.candidate_author)
    return round_half_up(120 * author_sim), f"author similarity {author_sim:.2f}"


def exact_author_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.author and c.author == c.candidate_author:
        return 150, "exact author match"
    return None


def publication_year_rule(c: BookComparison) -> tuple[int, str] | None:
    year = c.release_year
    if year is None:
        return None
    if year < 1940:
        return 50, f"published {year}"
    if year < 1980:
        return 25, f"published {year}"
    if year > 2010:
        return -15, f"published {year}"
    return None


def short_title_rule(c: BookComparison) -> tuple[int, str] | None:
    if (
        len(c.core_target.split()) <= _SHORT_TITLE_WORDS
        and len(c.core_candidate.split()) <= _SHORT_TITLE_WORDS
        and c.title_similarity >= 0.5
    ):
        return 40, "short title match"
    return None


def series_volume_rule(c: BookComparison) -> tuple[int, str] | None:
    if c.candidate.series_title and len(c.target_title.split()) <= _SHORT_TITLE_WORDS:
        return -40, f"series volume ({c.candidate.series_title})"
    return None


def popularity_rule(c: BookComparison) -> tuple[int, str] | None:
    if not c.candidate.rating:
        return None
    return min(20, round_half_up(4 * c.candidate.rating)), f"rating {c.candidate.rating:.1f}"


BOOK_RULES: tuple[ScoreRule[BookComparison], ...] = (
    title_similarity_rule,
    exact_title_rule,
    title_mismatch_rule,
    biography_about_author_rule,
    biography_phrase_rule,
    author_in_title_rule,
    subject_by_biographer_rule,
    author_similarity_rule,
    exact_author_rule,
    publication_year_rule,
    short_title_rule,
    series_volume_rule,
    popularity_rule,
)


def score_book(
    candidate: MatchCandidate,
    target_title: str,
    target_author: str,
    rules: Sequence[ScoreRule[BookComparison]] = BOOK_RULES,
) -> ScoredCandidate:
    """Score a single book record against the requested title and author."""
    return score_with_rules(rules, BookComparison(target_title, target_author, candidate))


def rank_books(
    candidates: Iterable[MatchCandidate], target_title: str, target_author: str
) -> list[ScoredCandidate]:
    """Score every candidate, best first."""
    scored = [score_book(candidate, target_title, target_author) for candidate in candidates]
    return sorted(scored, key=lambda s: s.score, reverse=True)


def _title_gate(scored: ScoredCandidate) -> str | None:
    title_sim = scored.metrics.get("title_similarity", 0.0)
    if title_sim < MIN_TITLE_SIMILARITY:
        return f"title similarity {title_sim:.2f} below {MIN_TITLE_SIMILARITY}"
    return None


def select_book(
    candidates: Iterable[MatchCandidate], target_title: str, target_author: str
) -> MatchSelection:
    """Score all candidates and apply the score floor, title gate, and margin check."""
    return select_best(
        (score_book(candidate, target_title, target_author) for candidate in candidates),
        kind="book",
        target=target_title,
        gate=_title_gate,
    )


def find_best_book_match(
    candidates: Iterable[MatchCandidate], target_title: str, target_author: str
) -> MatchCandidate | None:
    """Return the single best book record for the request, or None."""
    return select_book(candidates, target_title, target_author).candidate
