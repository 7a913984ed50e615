# ABOUTME: Open Library metadata provider used to enrich book requests.
# ABOUTME: Searches openlibrary.org by ISBN or title/author and returns scored candidates.

import logging
import re

from bookwish.metadata.http import HttpClient, MetadataFetchError
from bookwish.metadata.openlibrary_parser import (
    normalize_work_key,
    parse_author_name,
    parse_isbn_response,
    parse_search_results,
    parse_work,
)
from bookwish.metadata.scoring import normalize_isbn, score_candidate
from bookwish.metadata.types import BookMetadata, MetadataCandidate

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"
_SEARCH_LIMIT = 10

# Matches a colon followed by a space and remaining text (subtitle pattern).
_SUBTITLE_RE = re.compile(r"\s*:\s+.+$")

# Path segments the web app uses for routes; never valid work ids.
_RESERVED_IDS = frozenset({"genres", "genre", "latest", "popular", "search"})


def _strip_subtitle(title: str) -> str | None:
    """Remove a ": subtitle" suffix, or return None if there is none."""
    stripped = _SUBTITLE_RE.sub("", title).strip()
    if stripped and stripped != title.strip():
        return stripped
    return None


class OpenLibraryProvider:
    """Metadata provider backed by the Open Library API.

    Uses a dependency-injected HttpClient; wrap it in a CachingHttpClient to
    avoid repeating identical queries.
    """

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    @property
    def name(self) -> str:
        return "openlibrary"

    def search_by_isbn(self, isbn: str) -> list[MetadataCandidate]:
        """Look up an edition by ISBN and resolve its author names.

        Returns a single-element list on success, empty list on failure.
        """
        clean_isbn = normalize_isbn(isbn)
        try:
            data = self._http.get(f"{_OL_BASE}/isbn/{clean_isbn}.json")
        except MetadataFetchError as exc:
            logger.warning("ISBN lookup failed for %s: %s", isbn, exc)
            return []

        metadata = parse_isbn_response(data)
        metadata.authors = self._resolve_authors(
            [entry.get("key", "") for entry in data.get("authors", [])]
        )
        source_id = metadata.identifiers.get("openlibrary_work", f"isbn:{clean_isbn}")
        return [
            MetadataCandidate(
                metadata=metadata,
                confidence=1.0,
                source=self.name,
                source_id=source_id,
            )
        ]

    def search_by_title_author(
        self, title: str, author: str | None = None
    ) -> list[MetadataCandidate]:
        """Search by title and optional author, best match first.

        Retries once without the subtitle when the first search is empty.
        """
        candidates = self._search(title, author)
        if not candidates:
            stripped = _strip_subtitle(title)
            if stripped:
                candidates = self._search(stripped, author)
        return candidates

    def get_work(self, book_id: str) -> BookMetadata | None:
        """Fetch details for a work id such as 'OL123W', '123', or '/works/OL123W'.

        Returns None for reserved route names or when the fetch fails.
        """
        if book_id.strip().strip("/") in _RESERVED_IDS:
            logger.warning("Refusing reserved route name %r as a work id", book_id)
            return None

        works_key = normalize_work_key(book_id)
        try:
            data = self._http.get(f"{_OL_BASE}{works_key}.json")
        except MetadataFetchError as exc:
            logger.warning("Work lookup failed for %s: %s", works_key, exc)
            return None

        metadata = parse_work(data)
        author_keys = metadata.identifiers.pop("openlibrary_author_keys", "")
        if author_keys:
            metadata.authors = self._resolve_authors(author_keys.split(","))
        return metadata

    def _search(self, title: str, author: str | None) -> list[MetadataCandidate]:
        params: dict[str, str] = {"title": title, "limit": str(_SEARCH_LIMIT)}
        if author:
            params["author"] = author

        try:
            data = self._http.get(f"{_OL_BASE}/search.json", params=params)
        except MetadataFetchError as exc:
            logger.warning("Search failed for title=%s author=%s: %s", title, author, exc)
            return []

        query = BookMetadata(title=title, authors=[author] if author else [])
        candidates = [
            MetadataCandidate(
                metadata=meta,
                confidence=score_candidate(query, meta),
                source=self.name,
                source_id=meta.identifiers.get("openlibrary_work", "unknown"),
            )
            for meta in parse_search_results(data)
        ]
        candidates.sort(key=lambda c: c.confidence, reverse=True)
        return candidates

    def _resolve_authors(self, author_keys: list[str]) -> list[str]:
        authors: list[str] = []
        for key in author_keys:
            if not key:
                continue
            try:
                authors.append(parse_author_name(self._http.get(f"{_OL_BASE}{key}.json")))
            except MetadataFetchError:
                continue
        return authors
