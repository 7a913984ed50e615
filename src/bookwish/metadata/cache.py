# ABOUTME: Time-to-live cache for public catalog responses.
# ABOUTME: Entries are (value, inserted_at); expiry comes from a pluggable per-key TTL policy.

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

DEFAULT_TTL_SECONDS = 4 * 60 * 60

TtlPolicy = Callable[[str], float]


def fixed_ttl(seconds: float = DEFAULT_TTL_SECONDS) -> TtlPolicy:
    """A policy giving every key the same lifetime."""
    return lambda _key: seconds


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    inserted_at: float


class TTLCache:
    """Key -> (value, inserted_at) store with expiry decided at read time.

    Expired entries stay in place until overwritten or purged so callers can
    still fall back to them when a fresh fetch fails.
    """

    def __init__(
        self,
        ttl_policy: TtlPolicy | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_policy = ttl_policy or fixed_ttl()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        """Return the value for `key` if present and not expired."""
        entry = self._entries.get(key)
        if entry is None or self._is_expired(key, entry):
            return None
        return entry.value

    def get_stale(self, key: str) -> Any | None:
        """Return the value for `key` regardless of age."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = CacheEntry(value=value, inserted_at=self._clock())

    def purge(self) -> int:
        """Drop every entry and return how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, key: str, entry: CacheEntry) -> bool:
        return self._clock() - entry.inserted_at >= self._ttl_policy(key)
