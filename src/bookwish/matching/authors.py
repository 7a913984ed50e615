# ABOUTME: Author matcher: scores catalog author records against a requested author name.
# ABOUTME: Weighted name/token rules with biography penalties, a 70-point floor, and a margin warning.

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property

from bookwish.matching.candidate import MatchCandidate, ScoredCandidate
from bookwish.matching.scoring import MatchSelection, ScoreRule, score_with_rules, select_best
from bookwish.matching.similarity import normalize_text, round_half_up, similarity

# Overview and genre phrases that mark someone who writes *about* authors.
BIOGRAPHY_KEYWORDS = (
    "biography",
    "biographer",
    "biographic",
    "critic",
    "criticism",
    "critical",
    "studies",
    "study of",
    "analysis",
    "commentator",
    "historian",
    "introduction by",
    "afterword by",
)


@dataclass(frozen=True)
class AuthorComparison:
    """A requested author name prepared against one candidate record."""

    target_name: str
    candidate: MatchCandidate

    @cached_property
    def target(self) -> str:
        return normalize_text(self.target_name)

    @cached_property
    def name(self) -> str:
        return normalize_text(self.candidate.name)

    @cached_property
    def target_tokens(self) -> list[str]:
        return self.target.split()

    @cached_property
    def candidate_tokens(self) -> list[str]:
        return self.name.split()

    @cached_property
    def name_similarity(self) -> float:
        return similarity(self.target, self.name)

    @cached_property
    def matching_tokens(self) -> int:
        candidate_tokens = set(self.candidate_tokens)
        return sum(1 for token in self.target_tokens if token in candidate_tokens)

    @cached_property
    def all_tokens_match(self) -> bool:
        significant = [t for t in self.target_tokens if len(t) > 1]
        candidate_tokens = set(self.candidate_tokens)
        return (
            len(self.target_tokens) > 1
            and bool(significant)
            and all(t in candidate_tokens for t in significant)
        )

    @cached_property
    def first_tokens_match(self) -> bool:
        return bool(self.target_tokens and self.candidate_tokens) and (
            self.target_tokens[0] == self.candidate_tokens[0]
        )

    @cached_property
    def last_tokens_match(self) -> bool:
        return bool(self.target_tokens and self.candidate_tokens) and (
            self.target_tokens[-1] == self.candidate_tokens[-1]
        )

    def metrics(self) -> Mapping[str, float]:
        return {"name_similarity": self.name_similarity}


def _contains_biography_keyword(text: str) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in BIOGRAPHY_KEYWORDS)


def name_similarity_rule(c: AuthorComparison) -> tuple[int, str]:
    return round_half_up(100 * c.name_similarity), f"name similarity {c.name_similarity:.2f}"


def exact_name_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.target and c.target == c.name:
        return 300, "exact name match"
    return None


def all_tokens_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.all_tokens_match:
        return 150, "all name parts present"
    return None


def last_token_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.last_tokens_match:
        return 120, "last name match"
    return None


def first_token_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.first_tokens_match:
        return 80, "first name match"
    return None


def token_ratio_rule(c: AuthorComparison) -> tuple[int, str] | None:
    total = max(len(c.target_tokens), len(c.candidate_tokens))
    if not total:
        return None
    delta = round_half_up(120 * c.matching_tokens / total)
    if not delta:
        return None
    return delta, f"{c.matching_tokens}/{total} name parts match"


def book_count_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.candidate.count is None:
        return None
    return min(30, 2 * c.candidate.count), f"{c.candidate.count} books"


def rating_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.candidate.rating is None:
        return None
    return round_half_up(5 * c.candidate.rating), f"rating {c.candidate.rating:.1f}"


def biography_overview_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.candidate.overview and _contains_biography_keyword(c.candidate.overview):
        return -100, "overview suggests biographer or critic"
    return None


def biography_genre_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if any(_contains_biography_keyword(genre) for genre in c.candidate.genres):
        return -150, "genres suggest biographer or critic"
    return None


def first_name_only_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if (
        c.matching_tokens == 1
        and len(c.target_tokens) > 1
        and c.first_tokens_match
        and not c.last_tokens_match
    ):
        return -150, "only first name matches"
    return None


def low_similarity_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.name_similarity < 0.3:
        return -250, "name similarity below 0.3"
    return None


def mismatch_rule(c: AuthorComparison) -> tuple[int, str] | None:
    if c.name_similarity < 0.5 and not c.all_tokens_match and c.matching_tokens == 0:
        return -500, "no name parts in common"
    return None


AUTHOR_RULES: tuple[ScoreRule[AuthorComparison], ...] = (
    name_similarity_rule,
    exact_name_rule,
    all_tokens_rule,
    last_token_rule,
    first_token_rule,
    token_ratio_rule,
    book_count_rule,
    rating_rule,
    biography_overview_rule,
    biography_genre_rule,
    first_name_only_rule,
    low_similarity_rule,
    mismatch_rule,
)


def score_author(
    candidate: MatchCandidate,
    target_name: str,
    rules: Sequence[ScoreRule[AuthorComparison]] = AUTHOR_RULES,
) -> ScoredCandidate:
    """Score a single author record against the requested name."""
    return score_with_rules(rules, AuthorComparison(target_name, candidate))


def rank_authors(candidates: Iterable[MatchCandidate], target_name: str) -> list[ScoredCandidate]:
    """Score every candidate, best first."""
    scored = [score_author(candidate, target_name) for candidate in candidates]
    return sorted(scored, key=lambda s: s.score, reverse=True)


def select_author(candidates: Iterable[MatchCandidate], target_name: str) -> MatchSelection:
    """Score all candidates and apply the threshold and margin checks."""
    return select_best(
        (score_author(candidate, target_name) for candidate in candidates),
        kind="author",
        target=target_name,
    )


def find_best_author_match(
    candidates: Iterable[MatchCandidate], target_name: str
) -> MatchCandidate | None:
    """Return the single best author record for `target_name`, or None.

    None means no candidate reached the minimum score; it is never raised as
    an error.
    """
    return select_author(candidates, target_name).candidate
