# ABOUTME: Outcome types for an acquisition run: status, typed failure reasons, and warnings.
# ABOUTME: The orchestrator returns these instead of raising so callers can persist the outcome.

from dataclasses import dataclass, field
from enum import Enum

from bookwish.matching.candidate import MatchCandidate


class ConfigurationError(Exception):
    """Raised when the backend lacks the profiles or root folder needed to add records."""


class AcquisitionStatus(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not-found"
    ERROR = "error"


class FailureReason(str, Enum):
    AUTHOR_NOT_FOUND = "author-not-found"
    BOOK_NOT_FOUND = "book-not-found"
    ADD_FAILED = "add-failed"


@dataclass
class AcquisitionResult:
    """What happened to one request.

    On success `author` and `book` are set and `failure` is None. A failed
    search trigger leaves the result resolved with `search_error` filled in.
    """

    status: AcquisitionStatus
    author: MatchCandidate | None = None
    book: MatchCandidate | None = None
    failure: FailureReason | None = None
    message: str = ""
    author_created: bool = False
    book_created: bool = False
    search_command_id: int | None = None
    search_status: str | None = None
    search_error: str | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.status is AcquisitionStatus.RESOLVED

    @classmethod
    def failed(
        cls, reason: FailureReason, message: str, warnings: list[str] | None = None
    ) -> "AcquisitionResult":
        status = (
            AcquisitionStatus.ERROR
            if reason is FailureReason.ADD_FAILED
            else AcquisitionStatus.NOT_FOUND
        )
        return cls(status=status, failure=reason, message=message, warnings=list(warnings or []))
