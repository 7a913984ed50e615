# ABOUTME: Google Books metadata provider used to enrich book requests.
# ABOUTME: Queries the volumes API by ISBN or intitle/inauthor and returns scored candidates.

import logging
import re
from typing import Any

from bookwish.metadata.http import HttpClient, MetadataFetchError
from bookwish.metadata.scoring import normalize_isbn, score_candidate
from bookwish.metadata.types import BookMetadata, MetadataCandidate

logger = logging.getLogger(__name__)

_GB_BASE = "https://www.googleapis.com/books/v1"
_MAX_RESULTS = 10
_YEAR_RE = re.compile(r"^(\d{4})")


def parse_volume(item: dict[str, Any]) -> BookMetadata | None:
    """Convert one volumes[] item to BookMetadata; None when it has no volumeInfo."""
    info = item.get("volumeInfo")
    if not info or not info.get("title"):
        return None

    isbns = {
        ident.get("type"): ident.get("identifier")
        for ident in info.get("industryIdentifiers", [])
    }
    isbn = isbns.get("ISBN_13") or isbns.get("ISBN_10")

    year_match = _YEAR_RE.match(info.get("publishedDate") or "")
    images = info.get("imageLinks") or {}
    identifiers = {"google_books": item["id"]} if item.get("id") else {}

    return BookMetadata(
        title=info["title"],
        authors=list(info.get("authors", [])),
        isbn=isbn,
        description=info.get("description"),
        publisher=info.get("publisher"),
        language=info.get("language"),
        year=int(year_match.group(1)) if year_match else None,
        genres=list(info.get("categories", [])),
        rating=info.get("averageRating"),
        cover_url=images.get("thumbnail"),
        identifiers=identifiers,
    )


def parse_volumes(data: dict[str, Any]) -> list[BookMetadata]:
    """Parse a /volumes response, skipping items without usable info."""
    parsed = (parse_volume(item) for item in data.get("items", []))
    return [meta for meta in parsed if meta is not None]


class GoogleBooksProvider:
    """Metadata provider backed by the Google Books volumes API."""

    def __init__(self, http_client: HttpClient, api_key: str | None = None) -> None:
        self._http = http_client
        self._api_key = api_key

    @property
    def name(self) -> str:
        return "googlebooks"

    def search_by_isbn(self, isbn: str) -> list[MetadataCandidate]:
        clean_isbn = normalize_isbn(isbn)
        query = BookMetadata(title="", isbn=clean_isbn)
        return self._search(f"isbn:{clean_isbn}", query)

    def search_by_title_author(
        self, title: str, author: str | None = None
    ) -> list[MetadataCandidate]:
        terms = f"intitle:{title}"
        if author:
            terms += f"+inauthor:{author}"
        query = BookMetadata(title=title, authors=[author] if author else [])
        return self._search(terms, query)

    def _search(self, q: str, query: BookMetadata) -> list[MetadataCandidate]:
        params = {"q": q, "printType": "books", "maxResults": str(_MAX_RESULTS)}
        if self._api_key:
            params["key"] = self._api_key

        try:
            data = self._http.get(f"{_GB_BASE}/volumes", params=params)
        except MetadataFetchError as exc:
            logger.warning("Google Books search failed for %s: %s", q, exc)
            return []

        candidates = [
            MetadataCandidate(
                metadata=meta,
                confidence=score_candidate(query, meta),
                source=self.name,
                source_id=f"gb-{meta.identifiers.get('google_books', 'unknown')}",
            )
            for meta in parse_volumes(data)
        ]
        candidates.sort(key=lambda c: c.confidence, reverse=True)
        return candidates
