# ABOUTME: MatchCandidate and ScoredCandidate, the records the matchers consume and produce.
# ABOUTME: Candidates come from catalog lookups; scored candidates carry an audit trail of reasons.

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MatchCandidate:
    """An author or book record returned by a fuzzy catalog lookup.

    `name` holds the author name for author records and the title for book
    records. `external_id` is the catalog's stable foreign id; `record_id` is
    set only when the record already exists in the acquisition backend.
    The untouched catalog JSON is kept in `raw` so callers can build create
    payloads from the chosen record.
    """

    name: str
    external_id: str = ""
    record_id: int | None = None
    rating: float | None = None
    count: int | None = None
    overview: str = ""
    genres: tuple[str, ...] = ()
    series_title: str = ""
    release_date: str = ""
    author_name: str = ""
    author_id: int | None = None
    author_external_id: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def title(self) -> str:
        """Alias of `name` for book records."""
        return self.name

    @property
    def exists(self) -> bool:
        """Whether the record is already present in the acquisition backend."""
        return self.record_id is not None


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate paired with its total score and per-rule reasons.

    `metrics` holds named similarity measures (for example
    "title_similarity") that selection gates read in addition to the score.
    """

    candidate: MatchCandidate
    score: int
    reasons: tuple[str, ...] = ()
    metrics: Mapping[str, float] = field(default_factory=dict)
