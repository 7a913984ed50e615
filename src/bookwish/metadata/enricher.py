# ABOUTME: Enriches a book request with catalog metadata before it is resolved in the backend.
# ABOUTME: Cleans mangled titles, then fills a missing ISBN or author from the first confident match.

import logging
from collections.abc import Sequence
from dataclasses import dataclass, replace

from bookwish.matching.preprocess import RequestInput
from bookwish.metadata.normalizer import normalize_request
from bookwish.metadata.provider import MetadataProvider
from bookwish.metadata.types import MetadataCandidate

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.75


@dataclass(frozen=True)
class EnrichmentResult:
    """The enriched request and the catalog record it was enriched from, if any."""

    request: RequestInput
    candidate: MetadataCandidate | None = None

    @property
    def enriched(self) -> bool:
        return self.candidate is not None


class RequestEnricher:
    """Queries providers in order and takes the first confident candidate.

    Supplied values are never overwritten, except that a mangled title is
    replaced by its cleaned form.
    """

    def __init__(
        self,
        providers: Sequence[MetadataProvider],
        *,
        threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ) -> None:
        self._providers = list(providers)
        self._threshold = threshold

    def enrich(self, request: RequestInput) -> EnrichmentResult:
        normalized = normalize_request(request)
        search = normalized.normalized
        if normalized.was_modified:
            logger.info("Normalized request title %r -> %r", request.title, search.title)

        candidate = self._find(search)
        if candidate is None:
            logger.info("No confident catalog match for %r", search.title)
            return EnrichmentResult(request=search)

        meta = candidate.metadata
        updated = replace(
            search,
            isbn=search.isbn or meta.isbn,
            author=search.author or (meta.authors[0] if meta.authors else ""),
        )
        logger.info(
            "Enriched %r from %s %s (confidence %.2f)",
            search.title,
            candidate.source,
            candidate.source_id,
            candidate.confidence,
        )
        return EnrichmentResult(request=updated, candidate=candidate)

    def candidates(self, request: RequestInput) -> list[MetadataCandidate]:
        """All candidates from every provider, best first."""
        search = normalize_request(request).normalized
        found: list[MetadataCandidate] = []
        for provider in self._providers:
            if search.isbn:
                found.extend(provider.search_by_isbn(search.isbn))
            found.extend(provider.search_by_title_author(search.title, search.author or None))
        return sorted(found, key=lambda c: c.confidence, reverse=True)

    def _find(self, request: RequestInput) -> MetadataCandidate | None:
        for provider in self._providers:
            results: list[MetadataCandidate] = []
            if request.isbn:
                results = provider.search_by_isbn(request.isbn)
            if not results:
                results = provider.search_by_title_author(request.title, request.author or None)
            if results and results[0].confidence >= self._threshold:
                return results[0]
            logger.debug("%s had no candidate above %.2f", provider.name, self._threshold)
        return None
