# ABOUTME: Metadata records returned by the public book catalogs.
# ABOUTME: BookMetadata is the catalog-neutral record; MetadataCandidate adds confidence and provenance.

from dataclasses import dataclass, field


@dataclass
class BookMetadata:
    """Catalog metadata for one book.

    Only the title is required; public catalogs routinely omit everything
    else.
    """

    title: str
    authors: list[str] = field(default_factory=list)
    isbn: str | None = None
    description: str | None = None
    publisher: str | None = None
    language: str | None = None
    year: int | None = None
    genres: list[str] = field(default_factory=list)
    rating: float | None = None
    cover_url: str | None = None
    identifiers: dict[str, str] = field(default_factory=dict)

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return ", ".join(self.authors) if self.authors else ""


@dataclass
class MetadataCandidate:
    """A catalog record scored against the request it was found for."""

    metadata: BookMetadata
    confidence: float
    source: str
    source_id: str

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence <= 1.0:
            msg = f"confidence must be between 0.0 and 1.0, got {self.confidence}"
            raise ValueError(msg)
