# ABOUTME: MetadataProvider protocol defining the contract for public book catalogs.
# ABOUTME: Open Library and Google Books both implement it for request enrichment.

from typing import Protocol, runtime_checkable

from bookwish.metadata.types import MetadataCandidate


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for metadata lookup services.

    Implementations return candidates sorted by confidence, best first, and
    return an empty list rather than raising when a lookup fails.
    """

    @property
    def name(self) -> str: ...

    def search_by_isbn(self, isbn: str) -> list[MetadataCandidate]: ...

    def search_by_title_author(
        self, title: str, author: str | None = None
    ) -> list[MetadataCandidate]: ...
