# ABOUTME: Unit tests for OpenLibraryProvider and its response parsers.
# ABOUTME: Uses a FakeHttpClient to test ISBN lookup, search scoring, subtitle retry, and work lookup.

import logging
from typing import Any
from unittest.mock import MagicMock

from bookwish.metadata.http import HttpClient, MetadataFetchError
from bookwish.metadata.openlibrary import OpenLibraryProvider, _strip_subtitle
from bookwish.metadata.openlibrary_parser import (
    build_cover_url,
    normalize_work_key,
    parse_description,
    parse_isbn_response,
    parse_search_results,
)
from bookwish.metadata.provider import MetadataProvider
from tests.fixtures.openlibrary_responses import (
    AUTHOR_RESPONSE,
    ISBN_RESPONSE,
    SEARCH_RESPONSE,
    SEARCH_RESPONSE_EMPTY,
    WORK_RESPONSE,
)


class FakeHttpClient:
    """Fake HTTP client that returns canned responses based on URL patterns."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self._responses = responses or {}
        self.request_log: list[str] = []

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        self.request_log.append(url)
        for pattern, response in self._responses.items():
            if pattern in url:
                if isinstance(response, Exception):
                    raise response
                return response
        return {}


class TestProtocol:
    """Tests that OpenLibraryProvider satisfies MetadataProvider."""

    def test_satisfies_protocol(self) -> None:
        """OpenLibraryProvider implements the MetadataProvider protocol."""
        provider = OpenLibraryProvider(http_client=FakeHttpClient())
        assert isinstance(provider, MetadataProvider)
        assert provider.name == "openlibrary"


class TestSearchByIsbn:
    """Tests for ISBN-based lookup."""

    def test_returns_certain_candidate(self) -> None:
        """An ISBN hit is a single candidate with resolved author names."""
        client = FakeHttpClient({"/isbn/": ISBN_RESPONSE, "/authors/": AUTHOR_RESPONSE})
        results = OpenLibraryProvider(http_client=client).search_by_isbn("9780141439846")

        assert len(results) == 1
        candidate = results[0]
        assert candidate.metadata.title == "Dracula"
        assert candidate.metadata.authors == ["Bram Stoker"]
        assert candidate.confidence == 1.0
        assert candidate.source_id == "/works/OL85892W"

    def test_isbn_cleaned(self) -> None:
        """Hyphens and spaces are removed before the request."""
        client = FakeHttpClient({"/isbn/9780141439846": ISBN_RESPONSE})
        OpenLibraryProvider(http_client=client).search_by_isbn("978-0-14-143984 6")
        assert client.request_log[0].endswith("/isbn/9780141439846.json")

    def test_network_error_returns_empty(self, caplog: Any) -> None:
        """Fetch errors return an empty list and log a warning."""
        client = FakeHttpClient({"/isbn/": MetadataFetchError("connection refused")})
        with caplog.at_level(logging.WARNING):
            results = OpenLibraryProvider(http_client=client).search_by_isbn("9780141439846")
        assert results == []
        assert "connection refused" in caplog.text

    def test_failed_author_lookup_skipped(self) -> None:
        """An author that cannot be fetched is left out."""
        client = FakeHttpClient(
            {"/isbn/": ISBN_RESPONSE, "/authors/": MetadataFetchError("HTTP 500")}
        )
        results = OpenLibraryProvider(http_client=client).search_by_isbn("9780141439846")
        assert results[0].metadata.authors == []


class TestSearchByTitleAuthor:
    """Tests for title/author search."""

    def test_sorted_by_confidence(self) -> None:
        """The exact match ranks first with full confidence."""
        client = FakeHttpClient({"/search.json": SEARCH_RESPONSE})
        results = OpenLibraryProvider(http_client=client).search_by_title_author(
            "Dracula", "Bram Stoker"
        )
        assert [r.metadata.title for r in results] == ["Dracula", "The Annotated Dracula"]
        assert results[0].confidence == 1.0
        assert results[1].confidence < 0.75
        assert results[0].source_id == "/works/OL85892W"

    def test_params(self) -> None:
        """Title, author, and the result limit are sent as parameters."""
        mock_client = MagicMock(spec=HttpClient)
        mock_client.get.return_value = SEARCH_RESPONSE_EMPTY
        OpenLibraryProvider(http_client=mock_client).search_by_title_author("Dracula", "Stoker")
        params = mock_client.get.call_args.kwargs["params"]
        assert params == {"title": "Dracula", "author": "Stoker", "limit": "10"}

    def test_without_author(self) -> None:
        """Title-only searches omit the author parameter."""
        mock_client = MagicMock(spec=HttpClient)
        mock_client.get.return_value = SEARCH_RESPONSE_EMPTY
        OpenLibraryProvider(http_client=mock_client).search_by_title_author("Dracula")
        assert "author" not in mock_client.get.call_args.kwargs["params"]

    def test_retries_without_subtitle(self) -> None:
        """An empty search is retried once without the subtitle."""
        titles: list[str] = []

        def fake_get(url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
            titles.append(params["title"])
            return SEARCH_RESPONSE_EMPTY if ":" in params["title"] else SEARCH_RESPONSE

        client = MagicMock(spec=HttpClient)
        client.get.side_effect = fake_get
        results = OpenLibraryProvider(http_client=client).search_by_title_author(
            "Dracula: A Norton Critical Edition"
        )
        assert titles == ["Dracula: A Norton Critical Edition", "Dracula"]
        assert len(results) == 2

    def test_network_error_returns_empty(self) -> None:
        """Search failures return an empty list."""
        client = FakeHttpClient({"/search.json": MetadataFetchError("timeout")})
        assert OpenLibraryProvider(http_client=client).search_by_title_author("Dracula") == []


class TestGetWork:
    """Tests for work lookup."""

    def test_work_with_authors(self) -> None:
        """Works resolve descriptions, genres, and author names."""
        client = FakeHttpClient({"/works/": WORK_RESPONSE, "/authors/": AUTHOR_RESPONSE})
        metadata = OpenLibraryProvider(http_client=client).get_work("85892")

        assert metadata is not None
        assert client.request_log[0] == "https://openlibrary.org/works/OL85892W.json"
        assert metadata.authors == ["Bram Stoker"]
        assert metadata.description == "Jonathan Harker travels to Transylvania."
        assert len(metadata.genres) == 5
        assert metadata.year == 1897
        assert "openlibrary_author_keys" not in metadata.identifiers

    def test_reserved_route_rejected(self) -> None:
        """Route names such as 'search' are never fetched as works."""
        client = FakeHttpClient()
        assert OpenLibraryProvider(http_client=client).get_work("search") is None
        assert client.request_log == []

    def test_fetch_error_returns_none(self) -> None:
        """A failed work fetch returns None."""
        client = FakeHttpClient({"/works/": MetadataFetchError("HTTP 404")})
        assert OpenLibraryProvider(http_client=client).get_work("OL1W") is None


class TestParsers:
    """Tests for the Open Library response parsers."""

    def test_search_results(self) -> None:
        """Search docs map to BookMetadata with covers and ratings."""
        first = parse_search_results(SEARCH_RESPONSE)[0]
        assert first.isbn == "9780141439846"
        assert first.year == 1897
        assert first.rating == 4.1
        assert first.cover_url == "https://covers.openlibrary.org/b/id/8231990-L.jpg"
        assert first.identifiers == {"openlibrary_work": "/works/OL85892W"}

    def test_isbn_response(self) -> None:
        """Editions yield ISBN-13, language code, and a year from the date."""
        metadata = parse_isbn_response(ISBN_RESPONSE)
        assert metadata.isbn == "9780141439846"
        assert metadata.language == "eng"
        assert metadata.year == 2003
        assert metadata.publisher == "Penguin Classics"

    def test_description_shapes(self) -> None:
        """Descriptions may be strings or typed dicts."""
        assert parse_description({"description": "plain"}) == "plain"
        assert parse_description(WORK_RESPONSE) == "Jonathan Harker travels to Transylvania."
        assert parse_description({}) is None

    def test_cover_url_by_isbn(self) -> None:
        """Cover URLs can be keyed by ISBN and sized."""
        assert build_cover_url("9780141439846", kind="isbn", size="M") == (
            "https://covers.openlibrary.org/b/isbn/9780141439846-M.jpg"
        )

    def test_work_key_forms(self) -> None:
        """Every accepted work id form normalizes to /works/OL…W."""
        for raw in ("123", "OL123W", "/works/OL123W", "works/OL123W.json"):
            assert normalize_work_key(raw) == "/works/OL123W"

    def test_strip_subtitle(self) -> None:
        """Only ': ' starts a subtitle."""
        assert _strip_subtitle("Dracula: A Norton Critical Edition") == "Dracula"
        assert _strip_subtitle("Title:NoSpace") is None
        assert _strip_subtitle("Dracula") is None
