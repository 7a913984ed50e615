# ABOUTME: Unit tests for ReadarrCatalog over a fake ApiClient.
# ABOUTME: Verifies endpoints, payloads, tag caching, profile extraction, and status lookups.

from typing import Any

import pytest

from bookwish.readarr.catalog import AcquisitionCatalog
from bookwish.readarr.client import ReadarrCatalog
from bookwish.readarr.http import CatalogError
from tests.fixtures.readarr_responses import (
    AUTHOR_BOOKS_STOKER,
    AUTHOR_LOOKUP_KING,
    BOOK_DOWNLOADED,
    BOOK_FILES,
    BOOK_LOOKUP_CARRIE,
    COMMAND_QUEUED,
    CREATED_AUTHOR_KING,
    METADATA_PROFILES,
    QUALITY_PROFILES,
    ROOT_FOLDERS,
    TAGS,
)


class FakeApiClient:
    """Fake ApiClient that serves canned responses by path."""

    def __init__(
        self,
        get_responses: dict[str, Any] | None = None,
        post_responses: dict[str, Any] | None = None,
    ) -> None:
        self.get_responses = dict(get_responses or {})
        self.post_responses = dict(post_responses or {})
        self.gets: list[tuple[str, dict[str, Any] | None]] = []
        self.posts: list[tuple[str, dict[str, Any]]] = []

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        self.gets.append((path, params))
        response = self.get_responses.get(path)
        if isinstance(response, Exception):
            raise response
        return response

    def post(self, path: str, payload: dict[str, Any]) -> Any:
        self.posts.append((path, payload))
        response = self.post_responses.get(path)
        if isinstance(response, Exception):
            raise response
        return response


class TestReadarrCatalog:
    """Tests for ReadarrCatalog."""

    def test_satisfies_protocol(self) -> None:
        """ReadarrCatalog satisfies the AcquisitionCatalog protocol."""
        assert isinstance(ReadarrCatalog(FakeApiClient()), AcquisitionCatalog)

    def test_lookup_author(self) -> None:
        """Author lookups pass the term and parse results."""
        api = FakeApiClient({"/api/v1/author/lookup": AUTHOR_LOOKUP_KING})
        results = ReadarrCatalog(api).lookup_author("Stephen King")
        assert [a.name for a in results] == ["Stephen King", "Steve King"]
        assert api.gets == [("/api/v1/author/lookup", {"term": "Stephen King"})]

    def test_lookup_book(self) -> None:
        """Book lookups parse embedded authors."""
        api = FakeApiClient({"/api/v1/book/lookup": BOOK_LOOKUP_CARRIE})
        results = ReadarrCatalog(api).lookup_book("Carrie Stephen King")
        assert results[0].author_name == "Stephen King"

    def test_list_existing_books_includes_all(self) -> None:
        """Author book listings ask for every book, not just monitored ones."""
        api = FakeApiClient({"/api/v1/book": AUTHOR_BOOKS_STOKER})
        books = ReadarrCatalog(api).list_existing_books(1)
        assert len(books) == 2
        assert api.gets[0][1] == {"authorId": 1, "includeAllAuthorBooks": "true"}

    def test_create_author(self) -> None:
        """Created authors come back with their new record id."""
        api = FakeApiClient(post_responses={"/api/v1/author": CREATED_AUTHOR_KING})
        author = ReadarrCatalog(api).create_author({"authorName": "Stephen King"})
        assert author.record_id == 42

    def test_create_without_id_raises(self) -> None:
        """A create response without an id is an error."""
        api = FakeApiClient(post_responses={"/api/v1/book": {}})
        with pytest.raises(CatalogError, match="no id"):
            ReadarrCatalog(api).create_book({"title": "Carrie"})

    def test_trigger_search(self) -> None:
        """Search posts a BookSearch command for the book id."""
        api = FakeApiClient(post_responses={"/api/v1/command": COMMAND_QUEUED})
        command = ReadarrCatalog(api).trigger_search(10)
        assert api.posts == [("/api/v1/command", {"name": "BookSearch", "bookIds": [10]})]
        assert command.command_id == 900
        assert command.status == "queued"

    def test_get_profiles(self) -> None:
        """Profiles and root folders are collected in backend order."""
        api = FakeApiClient(
            {
                "/api/v1/qualityprofile": QUALITY_PROFILES,
                "/api/v1/metadataprofile": METADATA_PROFILES,
                "/api/v1/rootfolder": ROOT_FOLDERS,
            }
        )
        options = ReadarrCatalog(api).get_profiles()
        assert options.quality_profile_ids == (1,)
        assert options.metadata_profile_ids == (2,)
        assert options.root_folders == ("/books", "/audiobooks")

    def test_existing_tag_is_cached(self) -> None:
        """Known tags resolve case-insensitively and are fetched once."""
        api = FakeApiClient({"/api/v1/tag": TAGS})
        catalog = ReadarrCatalog(api)
        assert catalog.get_or_create_tag("User-Requested") == 5
        assert catalog.get_or_create_tag("user-requested") == 5
        assert len(api.gets) == 1
        assert api.posts == []

    def test_missing_tag_is_created(self) -> None:
        """Unknown tags are created with a lowercased label."""
        api = FakeApiClient({"/api/v1/tag": TAGS}, {"/api/v1/tag": {"id": 6, "label": "wishlist"}})
        assert ReadarrCatalog(api).get_or_create_tag("Wishlist") == 6
        assert api.posts == [("/api/v1/tag", {"label": "wishlist"})]

    def test_book_status_with_file(self) -> None:
        """Downloaded books include the file path."""
        api = FakeApiClient({"/api/v1/book/10": BOOK_DOWNLOADED, "/api/v1/bookfile": BOOK_FILES})
        status = ReadarrCatalog(api).get_book_status(10)
        assert status.is_downloaded is True
        assert status.book_file_path.endswith("Dracula.epub")

    def test_book_status_file_lookup_failure_tolerated(self) -> None:
        """A failing file listing still reports the download state."""
        api = FakeApiClient(
            {"/api/v1/book/10": BOOK_DOWNLOADED, "/api/v1/bookfile": CatalogError("HTTP 500")}
        )
        status = ReadarrCatalog(api).get_book_status(10)
        assert status.is_downloaded is True
        assert status.book_file_path is None

    def test_book_status_missing_book(self) -> None:
        """An unknown book id raises CatalogError."""
        with pytest.raises(CatalogError, match="not found"):
            ReadarrCatalog(FakeApiClient()).get_book_status(99)
