# ABOUTME: AcquisitionCatalog protocol defining what the orchestrator needs from the backend.
# ABOUTME: Any acquisition system (Readarr, a test fake) implements lookups, creation, and search.

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from bookwish.matching.candidate import MatchCandidate
from bookwish.readarr.parser import BookStatus


@dataclass(frozen=True)
class ProfileOptions:
    """Quality profiles, metadata profiles, and root folders configured in the backend."""

    quality_profile_ids: tuple[int, ...]
    metadata_profile_ids: tuple[int, ...]
    root_folders: tuple[str, ...]


@dataclass(frozen=True)
class Profiles:
    """The profile ids and root folder every created author and book references."""

    quality_profile_id: int
    metadata_profile_id: int
    root_folder_path: str


@dataclass(frozen=True)
class SearchCommand:
    """A queued acquisition search."""

    command_id: int | None
    status: str


@runtime_checkable
class AcquisitionCatalog(Protocol):
    """Protocol for the media-acquisition backend.

    Lookups return fuzzy catalog results; list_existing_* return records the
    backend already tracks. Create and search calls raise CatalogError on
    failure.
    """

    def lookup_author(self, name: str) -> list[MatchCandidate]: ...

    def lookup_book(self, term: str) -> list[MatchCandidate]: ...

    def list_existing_authors(self) -> list[MatchCandidate]: ...

    def list_existing_books(self, author_id: int) -> list[MatchCandidate]: ...

    def create_author(self, payload: dict[str, Any]) -> MatchCandidate: ...

    def create_book(self, payload: dict[str, Any]) -> MatchCandidate: ...

    def trigger_search(self, book_id: int) -> SearchCommand: ...

    def get_profiles(self) -> ProfileOptions: ...

    def get_or_create_tag(self, label: str) -> int: ...

    def get_book_status(self, book_id: int) -> BookStatus: ...
