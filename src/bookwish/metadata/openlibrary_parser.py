# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts search, ISBN, works, and author payloads into BookMetadata instances.

import re
from typing import Any

from bookwish.metadata.types import BookMetadata

_COVERS_BASE_URL = "https://covers.openlibrary.org/b"
_YEAR_RE = re.compile(r"\b(\d{4})\b")

# Works responses can carry hundreds of subjects; only the first few are useful.
_MAX_GENRES = 5


def build_cover_url(cover_id: int | str, kind: str = "id", size: str = "L") -> str:
    """Build an Open Library cover image URL.

    Args:
        cover_id: A cover id (kind="id") or an ISBN (kind="isbn").
        size: Image size: "S" (small), "M" (medium), or "L" (large).
    """
    return f"{_COVERS_BASE_URL}/{kind}/{cover_id}-{size}.jpg"


def _first(values: Any) -> Any:
    return values[0] if isinstance(values, list) and values else None


def _year(value: Any) -> int | None:
    if isinstance(value, int):
        return value or None
    match = _YEAR_RE.search(str(value or ""))
    return int(match.group(1)) if match else None


def parse_description(data: dict[str, Any]) -> str | None:
    """Extract a description that may be a plain string or {"type", "value"} dict."""
    desc = data.get("description")
    if isinstance(desc, str):
        return desc
    if isinstance(desc, dict):
        return desc.get("value")
    return None


def parse_search_results(data: dict[str, Any]) -> list[BookMetadata]:
    """Parse a /search.json response into one BookMetadata per doc."""
    results: list[BookMetadata] = []
    for doc in data.get("docs", []):
        identifiers: dict[str, str] = {}
        if doc.get("key"):
            identifiers["openlibrary_work"] = doc["key"]

        cover_id = doc.get("cover_i")
        results.append(
            BookMetadata(
                title=doc.get("title", "Unknown"),
                authors=list(doc.get("author_name", [])),
                isbn=_first(doc.get("isbn")),
                language=_first(doc.get("language")),
                publisher=_first(doc.get("publisher")),
                year=_year(doc.get("first_publish_year")),
                genres=list(doc.get("subject", []))[:_MAX_GENRES],
                rating=doc.get("ratings_average"),
                cover_url=build_cover_url(cover_id) if cover_id else None,
                identifiers=identifiers,
            )
        )
    return results


def parse_isbn_response(data: dict[str, Any]) -> BookMetadata:
    """Parse an /isbn/{isbn}.json edition response.

    Author names are not included; the provider resolves them separately.
    """
    isbn = _first(data.get("isbn_13")) or _first(data.get("isbn_10"))

    language = None
    lang_key = (_first(data.get("languages")) or {}).get("key", "")
    if lang_key:
        language = lang_key.rsplit("/", 1)[-1]

    identifiers: dict[str, str] = {}
    work = _first(data.get("works"))
    if work and work.get("key"):
        identifiers["openlibrary_work"] = work["key"]

    cover_id = _first(data.get("covers"))
    return BookMetadata(
        title=data.get("title", "Unknown"),
        isbn=isbn,
        publisher=_first(data.get("publishers")),
        language=language,
        year=_year(data.get("publish_date")),
        cover_url=build_cover_url(cover_id) if cover_id else None,
        identifiers=identifiers,
    )


def parse_work(data: dict[str, Any]) -> BookMetadata:
    """Parse a /works/{id}.json response.

    Author keys are kept in identifiers["openlibrary_author_keys"] (comma
    separated) for the provider to resolve into names.
    """
    identifiers: dict[str, str] = {}
    if data.get("key"):
        identifiers["openlibrary_work"] = data["key"]

    author_keys = [
        entry.get("author", {}).get("key", "")
        for entry in data.get("authors", [])
        if isinstance(entry, dict)
    ]
    author_keys = [key for key in author_keys if key]
    if author_keys:
        identifiers["openlibrary_author_keys"] = ",".join(author_keys)

    cover_id = _first(data.get("covers"))
    return BookMetadata(
        title=data.get("title", "Unknown"),
        description=parse_description(data),
        year=_year(data.get("first_publish_date")),
        genres=list(data.get("subjects", []))[:_MAX_GENRES],
        rating=data.get("ratings_average"),
        cover_url=build_cover_url(cover_id) if cover_id else None,
        identifiers=identifiers,
    )


def parse_author_name(data: dict[str, Any]) -> str:
    """Extract the author name from an /authors/{id}.json response."""
    return data.get("name", "Unknown")


def normalize_work_key(book_id: str) -> str:
    """Turn '123', 'OL123W', '/works/OL123W', or 'works/OL123W.json' into '/works/OL123W'."""
    work_id = book_id.strip().strip("/").removesuffix(".json")
    work_id = work_id.rsplit("/", 1)[-1]
    if not work_id.startswith("OL"):
        work_id = f"OL{work_id}"
    if not work_id.endswith("W"):
        work_id = f"{work_id}W"
    return f"/works/{work_id}"
