# ABOUTME: Readarr v1 implementation of the AcquisitionCatalog protocol.
# ABOUTME: Wraps author/book lookups, library listings, creation, tags, and BookSearch commands.

import logging
from typing import Any

from bookwish.matching.candidate import MatchCandidate
from bookwish.readarr.catalog import ProfileOptions, SearchCommand
from bookwish.readarr.http import ApiClient, CatalogError
from bookwish.readarr.parser import (
    BookStatus,
    parse_author,
    parse_authors,
    parse_book,
    parse_book_status,
    parse_books,
)

logger = logging.getLogger(__name__)

_API = "/api/v1"


class ReadarrCatalog:
    """AcquisitionCatalog backed by a Readarr server.

    Uses a dependency-injected ApiClient so tests can substitute canned
    responses for the HTTP layer.
    """

    def __init__(self, api: ApiClient) -> None:
        self._api = api
        self._tag_ids: dict[str, int] = {}

    def lookup_author(self, name: str) -> list[MatchCandidate]:
        data = self._api.get(f"{_API}/author/lookup", params={"term": name})
        results = parse_authors(data)
        logger.info("Author lookup %r returned %d results", name, len(results))
        return results

    def lookup_book(self, term: str) -> list[MatchCandidate]:
        data = self._api.get(f"{_API}/book/lookup", params={"term": term})
        results = parse_books(data)
        logger.info("Book lookup %r returned %d results", term, len(results))
        return results

    def list_existing_authors(self) -> list[MatchCandidate]:
        return parse_authors(self._api.get(f"{_API}/author"))

    def list_existing_books(self, author_id: int) -> list[MatchCandidate]:
        data = self._api.get(
            f"{_API}/book",
            params={"authorId": author_id, "includeAllAuthorBooks": "true"},
        )
        return parse_books(data)

    def create_author(self, payload: dict[str, Any]) -> MatchCandidate:
        data = self._api.post(f"{_API}/author", payload)
        if not isinstance(data, dict) or not data.get("id"):
            raise CatalogError(f"Author create returned no id for {payload.get('authorName')!r}")
        return parse_author(data)

    def create_book(self, payload: dict[str, Any]) -> MatchCandidate:
        data = self._api.post(f"{_API}/book", payload)
        if not isinstance(data, dict) or not data.get("id"):
            raise CatalogError(f"Book create returned no id for {payload.get('title')!r}")
        return parse_book(data)

    def trigger_search(self, book_id: int) -> SearchCommand:
        data = self._api.post(f"{_API}/command", {"name": "BookSearch", "bookIds": [book_id]})
        data = data if isinstance(data, dict) else {}
        return SearchCommand(command_id=data.get("id"), status=str(data.get("status") or "queued"))

    def get_profiles(self) -> ProfileOptions:
        quality = self._api.get(f"{_API}/qualityprofile") or []
        metadata = self._api.get(f"{_API}/metadataprofile") or []
        folders = self._api.get(f"{_API}/rootfolder") or []
        return ProfileOptions(
            quality_profile_ids=tuple(p["id"] for p in quality if "id" in p),
            metadata_profile_ids=tuple(p["id"] for p in metadata if "id" in p),
            root_folders=tuple(f["path"] for f in folders if f.get("path")),
        )

    def get_or_create_tag(self, label: str) -> int:
        """Resolve a tag label to its id, creating the tag when missing.

        Readarr lowercases tag labels, so lookups are case-insensitive.
        """
        key = label.strip().lower()
        if key in self._tag_ids:
            return self._tag_ids[key]

        for tag in self._api.get(f"{_API}/tag") or []:
            self._tag_ids[str(tag.get("label", "")).lower()] = tag["id"]
        if key in self._tag_ids:
            return self._tag_ids[key]

        created = self._api.post(f"{_API}/tag", {"label": key})
        if not isinstance(created, dict) or "id" not in created:
            raise CatalogError(f"Tag create returned no id for {label!r}")
        self._tag_ids[key] = created["id"]
        return created["id"]

    def get_book_status(self, book_id: int) -> BookStatus:
        """Report whether a book has been downloaded, with its file path if so."""
        book = self._api.get(f"{_API}/book/{book_id}")
        if not isinstance(book, dict):
            raise CatalogError(f"Book {book_id} not found", status_code=404)

        files = None
        if (book.get("statistics") or {}).get("bookFileCount"):
            try:
                files = self._api.get(f"{_API}/bookfile", params={"bookId": book_id})
            except CatalogError as exc:
                logger.warning("Could not fetch files for book %d: %s", book_id, exc)
        return parse_book_status(book_id, book, files)
