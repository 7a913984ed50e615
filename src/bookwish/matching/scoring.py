# ABOUTME: Rule folding and best-candidate selection shared by the author and book matchers.
# ABOUTME: Rules are pure (comparison) -> (delta, reason) functions; selection applies floor and margin.

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Protocol, TypeVar

from bookwish.matching.candidate import MatchCandidate, ScoredCandidate

logger = logging.getLogger(__name__)

MIN_SCORE = 70
CONFIDENCE_MARGIN = 40

NO_CANDIDATES = "no-candidates"
BELOW_THRESHOLD = "below-threshold"


class Comparison(Protocol):
    """A prepared (target, candidate) pair that rules read from."""

    @property
    def candidate(self) -> MatchCandidate: ...

    def metrics(self) -> Mapping[str, float]: ...


C = TypeVar("C", bound=Comparison)

ScoreRule = Callable[[C], tuple[int, str] | None]


def format_reason(delta: int, label: str) -> str:
    """Render a score contribution as '+120 last name match'."""
    return f"{delta:+d} {label}"


def score_with_rules(rules: Sequence[ScoreRule[C]], comparison: C) -> ScoredCandidate:
    """Fold every rule over one comparison into a ScoredCandidate.

    Rule order only affects the order of `reasons`, never the total.
    """
    total = 0
    reasons: list[str] = []
    for rule in rules:
        outcome = rule(comparison)
        if outcome is None:
            continue
        delta, label = outcome
        total += delta
        reasons.append(format_reason(delta, label))
    return ScoredCandidate(
        candidate=comparison.candidate,
        score=total,
        reasons=tuple(reasons),
        metrics=dict(comparison.metrics()),
    )


@dataclass(frozen=True)
class MatchSelection:
    """Outcome of selecting one candidate from a ranked list.

    Attributes:
        ranked: All scored candidates, best first.
        best: The accepted candidate, or None when rejected.
        runner_up: Second-ranked candidate, if any.
        ambiguous: True when the top two are closer than the confidence margin.
        rejection: NO_CANDIDATES, BELOW_THRESHOLD, or None when accepted.
    """

    ranked: tuple[ScoredCandidate, ...]
    best: ScoredCandidate | None
    runner_up: ScoredCandidate | None
    ambiguous: bool
    rejection: str | None

    @property
    def candidate(self) -> MatchCandidate | None:
        return self.best.candidate if self.best is not None else None


def rank(scored: Iterable[ScoredCandidate]) -> tuple[ScoredCandidate, ...]:
    """Sort scored candidates by score, highest first (stable)."""
    return tuple(sorted(scored, key=lambda s: s.score, reverse=True))


def select_best(
    scored: Iterable[ScoredCandidate],
    *,
    kind: str,
    target: str,
    min_score: int = MIN_SCORE,
    margin: int = CONFIDENCE_MARGIN,
    gate: Callable[[ScoredCandidate], str | None] | None = None,
) -> MatchSelection:
    """Pick the top-scoring candidate subject to the absolute floor.

    `gate` may veto the top candidate for reasons other than score; it returns
    a short explanation when it does. A narrow margin between the top two is
    reported through `ambiguous` and a warning, never by rejecting.
    """
    ranked = rank(scored)
    if not ranked:
        logger.info("No %s candidates for %r", kind, target)
        return MatchSelection(ranked, None, None, False, NO_CANDIDATES)

    top = ranked[0]
    runner_up = ranked[1] if len(ranked) > 1 else None
    ambiguous = runner_up is not None and top.score - runner_up.score < margin

    for scored_candidate in ranked:
        logger.debug(
            "%s candidate %r scored %d: %s",
            kind,
            scored_candidate.candidate.name,
            scored_candidate.score,
            "; ".join(scored_candidate.reasons),
        )

    if top.score < min_score:
        logger.info(
            "Best %s candidate %r for %r scored %d, below threshold %d",
            kind,
            top.candidate.name,
            target,
            top.score,
            min_score,
        )
        return MatchSelection(ranked, None, runner_up, ambiguous, BELOW_THRESHOLD)

    veto = gate(top) if gate is not None else None
    if veto:
        logger.info("Best %s candidate %r for %r rejected: %s", kind, top.candidate.name, target, veto)
        return MatchSelection(ranked, None, runner_up, ambiguous, BELOW_THRESHOLD)

    if ambiguous and runner_up is not None:
        logger.warning(
            "Low-confidence %s match for %r: %r (%d) vs %r (%d)",
            kind,
            target,
            top.candidate.name,
            top.score,
            runner_up.candidate.name,
            runner_up.score,
        )

    logger.info("Selected %s %r for %r with score %d", kind, top.candidate.name, target, top.score)
    return MatchSelection(ranked, top, runner_up, ambiguous, None)
