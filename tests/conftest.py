# ABOUTME: Shared pytest fixtures for bookwish tests.
# ABOUTME: Provides canonical author/book candidates and a fresh in-memory catalog.

import pytest

from bookwish.matching.candidate import MatchCandidate
from tests.fixtures.fake_catalog import FakeCatalog


@pytest.fixture
def stoker() -> MatchCandidate:
    """Bram Stoker as an author already tracked by the backend."""
    return MatchCandidate(name="Bram Stoker", external_id="ol-stoker", record_id=1)


@pytest.fixture
def dracula_lookup() -> MatchCandidate:
    """Dracula as returned by a book lookup, not yet in the library."""
    return MatchCandidate(
        name="Dracula",
        external_id="gr-dracula",
        author_name="Bram Stoker",
        author_external_id="ol-stoker",
        release_date="1897-05-26",
        raw={
            "title": "Dracula",
            "foreignBookId": "gr-dracula",
            "author": {"authorName": "Bram Stoker", "foreignAuthorId": "ol-stoker"},
        },
    )


@pytest.fixture
def king_lookup() -> list[MatchCandidate]:
    """Author lookup results for Stephen King, including a near miss."""
    return [
        MatchCandidate(name="Stephen King", external_id="gr-king", count=80),
        MatchCandidate(name="Steve King", external_id="gr-steve"),
    ]


@pytest.fixture
def carrie_lookup() -> MatchCandidate:
    """Carrie as returned by a book lookup."""
    return MatchCandidate(
        name="Carrie",
        external_id="gr-carrie",
        author_name="Stephen King",
        release_date="1974-04-05",
    )


@pytest.fixture
def sleeps() -> list[float]:
    """Collects the delays an orchestrator would have slept for."""
    return []


@pytest.fixture
def empty_catalog() -> FakeCatalog:
    """A backend with profiles configured but no authors or books."""
    return FakeCatalog()
