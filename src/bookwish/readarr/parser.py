# ABOUTME: Parsing functions for Readarr API JSON responses.
# ABOUTME: Converts author, book, and book-file payloads into MatchCandidate and BookStatus values.

from dataclasses import dataclass
from typing import Any

from bookwish.matching.candidate import MatchCandidate


@dataclass(frozen=True)
class BookStatus:
    """Download state of a book in the acquisition backend."""

    book_id: int
    title: str
    is_downloaded: bool
    percent_of_book: float
    size_on_disk: int
    book_file_path: str | None = None


def _rating(data: dict[str, Any]) -> float | None:
    ratings = data.get("ratings")
    if isinstance(ratings, dict) and ratings.get("value") is not None:
        return float(ratings["value"])
    return None


def _genres(data: dict[str, Any]) -> tuple[str, ...]:
    return tuple(str(g) for g in data.get("genres") or [])


def parse_author(data: dict[str, Any]) -> MatchCandidate:
    """Parse one author object from /author or /author/lookup."""
    statistics = data.get("statistics") or {}
    book_count = statistics.get("bookCount")
    return MatchCandidate(
        name=data.get("authorName") or "",
        external_id=str(data.get("foreignAuthorId") or ""),
        record_id=data.get("id") or None,
        rating=_rating(data),
        count=int(book_count) if book_count is not None else None,
        overview=data.get("overview") or "",
        genres=_genres(data),
        raw=data,
    )


def parse_authors(data: Any) -> list[MatchCandidate]:
    """Parse a list response of author objects, skipping nameless entries."""
    if not isinstance(data, list):
        return []
    return [parse_author(item) for item in data if item.get("authorName")]


def parse_book(data: dict[str, Any]) -> MatchCandidate:
    """Parse one book object from /book or /book/lookup.

    Lookup results embed the author as an object; library results carry an
    authorId and sometimes only an "authorTitle" ("lastname, firstname title").
    """
    author = data.get("author") or {}
    author_name = author.get("authorName") or ""
    author_id = data.get("authorId") or author.get("id") or None
    return MatchCandidate(
        name=data.get("title") or "",
        external_id=str(data.get("foreignBookId") or ""),
        record_id=data.get("id") or None,
        rating=_rating(data),
        overview=data.get("overview") or "",
        genres=_genres(data),
        series_title=data.get("seriesTitle") or "",
        release_date=data.get("releaseDate") or "",
        author_name=author_name,
        author_id=author_id,
        author_external_id=str(author.get("foreignAuthorId") or ""),
        raw=data,
    )


def parse_books(data: Any) -> list[MatchCandidate]:
    """Parse a list response of book objects, skipping untitled entries."""
    if not isinstance(data, list):
        return []
    return [parse_book(item) for item in data if item.get("title")]


def parse_book_status(
    book_id: int, book: dict[str, Any], book_files: Any = None
) -> BookStatus:
    """Build a BookStatus from /book/{id} and an optional /bookfile response."""
    statistics = book.get("statistics") or {}
    file_count = statistics.get("bookFileCount") or 0
    path = None
    if file_count and isinstance(book_files, list) and book_files:
        path = book_files[0].get("path")
    return BookStatus(
        book_id=book_id,
        title=book.get("title") or "",
        is_downloaded=file_count > 0,
        percent_of_book=float(statistics.get("percentOfBooks") or 0),
        size_on_disk=int(statistics.get("sizeOnDisk") or 0),
        book_file_path=path,
    )


def lastname_first(name: str) -> str:
    """Convert "First Middle Last" to "Last, First Middle"; single words pass through."""
    parts = name.strip().split()
    if len(parts) < 2:
        return name
    return f"{parts[-1]}, {' '.join(parts[:-1])}"
