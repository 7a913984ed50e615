# ABOUTME: Drives one request from raw title/author to a searched-for book in the acquisition backend.
# ABOUTME: Resolves or creates the author, resolves or adds the book, then triggers a search.

import logging
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from bookwish.core.locks import KeyedLocks, author_key, request_key
from bookwish.core.result import (
    AcquisitionResult,
    AcquisitionStatus,
    ConfigurationError,
    FailureReason,
)
from bookwish.core.settle import SettlePolicy, wait_until
from bookwish.matching.authors import select_author
from bookwish.matching.books import select_book
from bookwish.matching.candidate import MatchCandidate
from bookwish.matching.preprocess import RequestInput, preprocess_book_data
from bookwish.matching.scoring import MatchSelection
from bookwish.matching.similarity import normalize_text
from bookwish.readarr.catalog import AcquisitionCatalog, Profiles
from bookwish.readarr.http import CatalogError
from bookwish.readarr.parser import lastname_first, parse_author

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrchestratorSettings:
    """Tunables for one orchestrator instance.

    Attributes:
        author_settle: Polling schedule after creating an author.
        book_settle: Polling schedule after adding a book, and the wait
            before re-querying when an add fails.
        root_folder: Root folder path for new authors; the backend's first
            root folder when None.
    """

    author_settle: SettlePolicy = field(default_factory=lambda: SettlePolicy(initial_delay=3.0))
    book_settle: SettlePolicy = field(default_factory=lambda: SettlePolicy(initial_delay=1.0))
    root_folder: str | None = None


class _StepFailed(Exception):
    """Internal signal that a step ran out of fallbacks."""

    def __init__(self, reason: FailureReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


@dataclass
class _Run:
    """Mutable state for a single acquire() call."""

    request: RequestInput
    profiles: Profiles
    tag_ids: list[int]
    warnings: list[str] = field(default_factory=list)
    author_created: bool = False
    book_created: bool = False


class AcquisitionOrchestrator:
    """Resolve a request to exactly one author and one book, then search for it.

    Uses a dependency-injected AcquisitionCatalog; `sleep` is injectable so
    tests can run the settle polling without waiting.
    """

    def __init__(
        self,
        catalog: AcquisitionCatalog,
        *,
        settings: OrchestratorSettings | None = None,
        sleep: Callable[[float], None] = time.sleep,
        locks: KeyedLocks | None = None,
    ) -> None:
        self._catalog = catalog
        self._settings = settings or OrchestratorSettings()
        self._sleep = sleep
        self._locks = locks or KeyedLocks()

    def acquire(self, request: RequestInput, tags: Sequence[str] = ()) -> AcquisitionResult:
        """Run the full resolution flow for one request.

        Returns an AcquisitionResult for every outcome except a backend with
        no usable profiles, which raises ConfigurationError.
        """
        logger.info("Request: %r by %r", request.title, request.author)
        processed = preprocess_book_data(request)
        if processed != request:
            logger.info("Processed request: %r by %r", processed.title, processed.author)

        profiles = self._load_profiles()
        run = _Run(request=processed, profiles=profiles, tag_ids=[])
        run.tag_ids = self._resolve_tags(tags, run.warnings)

        with self._locks.hold(request_key(processed.author, processed.title)):
            try:
                author, book = self._resolve(run)
            except _StepFailed as failure:
                logger.info("Request %r failed: %s", processed.title, failure.message)
                return AcquisitionResult.failed(failure.reason, failure.message, run.warnings)

        result = AcquisitionResult(
            status=AcquisitionStatus.RESOLVED,
            author=author,
            book=book,
            author_created=run.author_created,
            book_created=run.book_created,
            warnings=run.warnings,
        )
        self._trigger_search(result)
        result.message = (
            f"Added {book.title!r} by {author.name}"
            if run.book_created
            else f"Found {book.title!r} by {author.name}"
        )
        return result

    # Setup

    def _load_profiles(self) -> Profiles:
        try:
            options = self._catalog.get_profiles()
        except CatalogError as exc:
            raise ConfigurationError(f"Could not load profiles: {exc}") from exc
        if not options.quality_profile_ids:
            raise ConfigurationError("No quality profiles found")
        if not options.metadata_profile_ids:
            raise ConfigurationError("No metadata profiles found")
        if not options.root_folders:
            raise ConfigurationError("No root folders found")

        root_folder = self._settings.root_folder or options.root_folders[0]
        if root_folder not in options.root_folders:
            raise ConfigurationError(f"Root folder {root_folder!r} is not configured")

        profiles = Profiles(
            quality_profile_id=options.quality_profile_ids[0],
            metadata_profile_id=options.metadata_profile_ids[0],
            root_folder_path=root_folder,
        )
        logger.info(
            "Using profiles - quality: %d, metadata: %d, root: %s",
            profiles.quality_profile_id,
            profiles.metadata_profile_id,
            profiles.root_folder_path,
        )
        return profiles

    def _resolve_tags(self, labels: Iterable[str], warnings: list[str]) -> list[int]:
        tag_ids: list[int] = []
        for label in labels:
            try:
                tag_ids.append(self._catalog.get_or_create_tag(label))
            except CatalogError as exc:
                logger.warning("Could not resolve tag %r: %s", label, exc)
                warnings.append(f"tag {label!r} not applied: {exc}")
        return tag_ids

    # Resolution

    def _resolve(self, run: _Run) -> tuple[MatchCandidate, MatchCandidate]:
        hit = self._exact_phrase_lookup(run)
        if hit is not None:
            author = self._author_for_book(run, hit)
            if author is not None:
                logger.info("Exact lookup matched %r; skipping author search", hit.title)
                books = self._books_after_author(run, author)
                return author, self._resolve_book(run, author, books, preferred=hit)

        author = self._resolve_author(run)
        books = self._books_after_author(run, author)
        return author, self._resolve_book(run, author, books)

    def _exact_phrase_lookup(self, run: _Run) -> MatchCandidate | None:
        request = run.request
        if not request.author:
            return None
        term = f'"{request.title}" {request.author}'
        results = self._safe_lookup(self._catalog.lookup_book, term, run)
        selection = select_book(results, request.title, request.author)
        hit = self._note_selection(selection, run)
        if hit is None or not (hit.author_external_id or hit.author_id):
            return None
        return hit

    def _author_for_book(self, run: _Run, book: MatchCandidate) -> MatchCandidate | None:
        """Find or create the author a looked-up book links to."""
        existing = self._existing_authors(run)
        for author in existing:
            if book.author_id is not None and author.record_id == book.author_id:
                return author
            if book.author_external_id and author.external_id == book.author_external_id:
                return author

        author_data = book.raw.get("author")
        if not isinstance(author_data, dict) or not author_data.get("foreignAuthorId"):
            return None
        return self._create_author(run, parse_author(author_data))

    def _resolve_author(self, run: _Run) -> MatchCandidate:
        name = run.request.author
        if not name:
            raise _StepFailed(FailureReason.AUTHOR_NOT_FOUND, "Request has no author")

        existing = self._existing_authors(run)
        target = normalize_text(name)
        for author in existing:
            if normalize_text(author.name) == target:
                logger.info("Found existing author %r (id %s)", author.name, author.record_id)
                return author

        known = self._note_selection(select_author(existing, name), run)
        if known is not None:
            return known

        results = self._lookup_author(name, run)
        found = self._note_selection(select_author(results, name), run)
        if found is None:
            raise _StepFailed(
                FailureReason.AUTHOR_NOT_FOUND,
                f"Author {name!r} not found ({len(results)} candidates)",
            )
        if found.exists:
            return found
        return self._create_author(run, found)

    def _lookup_author(self, name: str, run: _Run) -> list[MatchCandidate]:
        """Search "Lastname, Firstname" first, then the name as given."""
        terms = [lastname_first(name), name]
        results: list[MatchCandidate] = []
        for term in dict.fromkeys(terms):
            results = self._safe_lookup(self._catalog.lookup_author, term, run)
            if results:
                break
        return results

    def _create_author(self, run: _Run, author: MatchCandidate) -> MatchCandidate:
        with self._locks.hold(author_key(author.name)):
            # Another request may have created this author while we waited.
            for existing in self._existing_authors(run):
                if author.external_id and existing.external_id == author.external_id:
                    return existing

            payload = self._author_payload(run, author)
            logger.info("Adding author %r", author.name)
            try:
                created = self._catalog.create_author(payload)
            except CatalogError as exc:
                raise _StepFailed(
                    FailureReason.ADD_FAILED, f"Could not add author {author.name!r}: {exc}"
                ) from exc
        logger.info("Created author %r with id %s", created.name, created.record_id)
        run.author_created = True
        return created

    def _books_after_author(self, run: _Run, author: MatchCandidate) -> list[MatchCandidate]:
        """List the author's books, polling until indexed when the author is new."""
        if author.record_id is None:
            return []
        if not run.author_created:
            return self._existing_books(author.record_id, run)
        return wait_until(
            lambda: self._existing_books(author.record_id, run),
            bool,
            self._settings.author_settle,
            sleep=self._sleep,
            description=f"author {author.name!r}",
        )

    def _resolve_book(
        self,
        run: _Run,
        author: MatchCandidate,
        books: list[MatchCandidate],
        preferred: MatchCandidate | None = None,
    ) -> MatchCandidate:
        title = run.request.title
        match = self._match_existing_book(run, books, preferred)
        if match is not None:
            return match

        candidate = preferred
        if candidate is None:
            term = f"{title} {run.request.author or author.name}"
            results = self._safe_lookup(self._catalog.lookup_book, term, run)
            candidate = self._note_selection(
                select_book(results, title, run.request.author or author.name), run
            )
        if candidate is None:
            raise _StepFailed(FailureReason.BOOK_NOT_FOUND, f"Book {title!r} not found")
        if candidate.exists:
            return candidate
        return self._add_book(run, author, candidate)

    def _match_existing_book(
        self, run: _Run, books: list[MatchCandidate], preferred: MatchCandidate | None = None
    ) -> MatchCandidate | None:
        if preferred is not None and preferred.external_id:
            for book in books:
                if book.external_id == preferred.external_id:
                    return book

        target = normalize_text(run.request.title)
        for book in books:
            if normalize_text(book.title) == target:
                logger.info("Found exact title match %r (id %s)", book.title, book.record_id)
                return book
        selection = select_book(books, run.request.title, run.request.author)
        return self._note_selection(selection, run)

    def _add_book(
        self, run: _Run, author: MatchCandidate, book: MatchCandidate
    ) -> MatchCandidate:
        payload = self._book_payload(run, author, book)
        logger.info("Adding book %r for author id %s", book.title, author.record_id)
        try:
            added = self._catalog.create_book(payload)
        except CatalogError as exc:
            logger.warning("Adding %r failed: %s; re-checking the author's books", book.title, exc)
            return self._recover_failed_add(run, author, book, exc)

        run.book_created = True
        if author.record_id is not None and added.record_id is not None:
            wait_until(
                lambda: self._existing_books(author.record_id, run),
                lambda books: any(b.record_id == added.record_id for b in books),
                self._settings.book_settle,
                sleep=self._sleep,
                description=f"book {added.title!r}",
            )
        return added

    def _recover_failed_add(
        self, run: _Run, author: MatchCandidate, book: MatchCandidate, error: CatalogError
    ) -> MatchCandidate:
        self._sleep(self._settings.book_settle.initial_delay)
        books = (
            self._existing_books(author.record_id, run) if author.record_id is not None else []
        )
        match = self._match_existing_book(run, books, preferred=book)
        if match is None:
            raise _StepFailed(
                FailureReason.ADD_FAILED, f"Could not add book {book.title!r}: {error}"
            )
        run.warnings.append(f"add reported an error but {match.title!r} is in the library")
        return match

    def _trigger_search(self, result: AcquisitionResult) -> None:
        book = result.book
        if book is None or book.record_id is None:
            return
        logger.info("Triggering search for book id %d", book.record_id)
        try:
            command = self._catalog.trigger_search(book.record_id)
        except CatalogError as exc:
            logger.warning("Book %r resolved but search command failed: %s", book.title, exc)
            result.search_status = "failed"
            result.search_error = str(exc)
            result.warnings.append(f"search not triggered: {exc}")
            return
        result.search_command_id = command.command_id
        result.search_status = command.status

    # Helpers

    def _note_selection(self, selection: MatchSelection, run: _Run) -> MatchCandidate | None:
        if selection.best is not None and selection.ambiguous and selection.runner_up:
            run.warnings.append(
                f"low-confidence match {selection.best.candidate.name!r} "
                f"({selection.best.score}) over {selection.runner_up.candidate.name!r} "
                f"({selection.runner_up.score})"
            )
        return selection.candidate

    def _safe_lookup(
        self, lookup: Callable[[str], list[MatchCandidate]], term: str, run: _Run
    ) -> list[MatchCandidate]:
        try:
            return lookup(term)
        except CatalogError as exc:
            logger.warning("Lookup %r failed: %s", term, exc)
            run.warnings.append(f"lookup {term!r} failed: {exc}")
            return []

    def _existing_authors(self, run: _Run) -> list[MatchCandidate]:
        try:
            return self._catalog.list_existing_authors()
        except CatalogError as exc:
            logger.warning("Could not list existing authors: %s", exc)
            run.warnings.append(f"existing authors unavailable: {exc}")
            return []

    def _existing_books(self, author_id: int, run: _Run) -> list[MatchCandidate]:
        try:
            return self._catalog.list_existing_books(author_id)
        except CatalogError as exc:
            logger.warning("Could not list books for author %d: %s", author_id, exc)
            return []

    def _author_payload(self, run: _Run, author: MatchCandidate) -> dict[str, Any]:
        payload = dict(author.raw)
        payload.update(
            {
                "authorName": author.name,
                "foreignAuthorId": author.external_id,
                "qualityProfileId": run.profiles.quality_profile_id,
                "metadataProfileId": run.profiles.metadata_profile_id,
                "rootFolderPath": run.profiles.root_folder_path,
                "monitored": True,
                "monitorNewItems": "none",
                "tags": list(run.tag_ids),
                "addOptions": {"monitor": "none", "searchForMissingBooks": False},
            }
        )
        return payload

    def _book_payload(
        self, run: _Run, author: MatchCandidate, book: MatchCandidate
    ) -> dict[str, Any]:
        payload = dict(book.raw)
        payload.update(
            {
                "title": book.title,
                "foreignBookId": book.external_id,
                "authorId": author.record_id,
                "qualityProfileId": run.profiles.quality_profile_id,
                "metadataProfileId": run.profiles.metadata_profile_id,
                "rootFolderPath": run.profiles.root_folder_path,
                "monitored": True,
                "tags": list(run.tag_ids),
                "addOptions": {"searchForNewBook": False},
            }
        )
        embedded = payload.get("author")
        if isinstance(embedded, dict):
            payload["author"] = {
                **embedded,
                "id": author.record_id,
                "qualityProfileId": run.profiles.quality_profile_id,
                "metadataProfileId": run.profiles.metadata_profile_id,
                "rootFolderPath": run.profiles.root_folder_path,
            }
        return payload
