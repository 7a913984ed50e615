# ABOUTME: In-process keyed locks guarding author and book creation.
# ABOUTME: Requests for the same normalized key run one at a time so the second sees the first's records.

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from bookwish.matching.similarity import normalize_text


def request_key(author: str, title: str) -> str:
    """Stable key for a request, insensitive to case, periods, and spacing."""
    return f"book:{normalize_text(author)}|{normalize_text(title)}"


def author_key(author: str) -> str:
    return f"author:{normalize_text(author)}"


class KeyedLocks:
    """A lock per key, created on demand and dropped when no longer held.

    Only guards threads in this process; two processes can still create the
    same record concurrently.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.Lock] = {}
        self._users: dict[str, int] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            lock = self._locks.setdefault(key, threading.Lock())
            self._users[key] = self._users.get(key, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                self._users[key] -= 1
                if not self._users[key]:
                    del self._users[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
