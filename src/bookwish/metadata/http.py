# ABOUTME: HTTP client abstraction for public catalog API calls (Open Library, Google Books).
# ABOUTME: Per-host pacing, retry with backoff and Retry-After, injectable transport, and a caching wrapper.

import json
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

import httpx

from bookwish.metadata.cache import TTLCache

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a metadata catalog fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for HTTP GET operations against metadata APIs."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class MetadataHttpClient:
    """GET client shared by the Open Library and Google Books providers.

    Requests to the same host are spaced by `min_request_interval`; each
    catalog host keeps its own pacing so a slow Google Books quota does not
    hold up Open Library. 429 and 5xx responses are retried with exponential
    backoff, and a `Retry-After` header (in seconds) lengthens the wait.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        max_retry_after: float = 30.0,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": "bookwish/0.1.0"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._max_retry_after = max_retry_after
        self._sleep = sleep
        self._last_request_at: dict[str, float] = {}

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Fetch `url` and return its JSON body.

        Raises:
            MetadataFetchError: On a transport failure, a non-retryable status,
                an undecodable body, or once every retry is used.
        """
        host = httpx.URL(url).host
        response: httpx.Response | None = None
        for attempt in range(self._max_retries + 1):
            if response is not None:
                self._backoff(attempt, response, url)
            self._pace(host)
            try:
                response = self._client.get(url, params=params)
            except httpx.HTTPError as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

            if response.status_code == 200:
                return self._decode(response, url)
            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise MetadataFetchError(f"HTTP {response.status_code} from {url}")

        status = response.status_code if response is not None else 0
        raise MetadataFetchError(
            f"HTTP {status} from {url} after {self._max_retries + 1} attempts"
        )

    def _decode(self, response: httpx.Response, url: str) -> dict[str, Any]:
        try:
            return response.json()
        except ValueError as exc:
            raise MetadataFetchError(f"Invalid JSON from {url}") from exc

    def _backoff(self, attempt: int, response: httpx.Response, url: str) -> None:
        delay = max(self._retry_delay * (2 ** (attempt - 1)), self._retry_after(response))
        logger.warning(
            "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
            response.status_code,
            url,
            delay,
            attempt,
            self._max_retries,
        )
        if delay > 0:
            self._sleep(delay)

    def _retry_after(self, response: httpx.Response) -> float:
        """Seconds asked for by a numeric Retry-After header, capped; 0 otherwise."""
        try:
            seconds = float(response.headers.get("Retry-After", ""))
        except ValueError:
            return 0.0
        return min(max(seconds, 0.0), self._max_retry_after)

    def _pace(self, host: str) -> None:
        if self._min_interval > 0:
            last = self._last_request_at.get(host)
            if last is not None:
                wait = self._min_interval - (time.monotonic() - last)
                if wait > 0:
                    self._sleep(wait)
        self._last_request_at[host] = time.monotonic()


def cache_key(url: str, params: dict[str, str] | None = None) -> str:
    """Build a stable cache key from a URL and its query parameters."""
    if not params:
        return url
    return f"{url}?{json.dumps(params, sort_keys=True)}"


class CachingHttpClient:
    """HttpClient wrapper that serves repeat GETs from a TTLCache.

    When a fresh fetch fails and an expired entry exists for the same key,
    the expired value is returned instead of raising.
    """

    def __init__(self, inner: HttpClient, cache: TTLCache) -> None:
        self._inner = inner
        self._cache = cache

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        key = cache_key(url, params)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        try:
            data = self._inner.get(url, params=params)
        except MetadataFetchError:
            stale = self._cache.get_stale(key)
            if stale is None:
                raise
            logger.warning("Fetch failed for %s; serving expired cache entry", key)
            return stale

        self._cache.set(key, data)
        return data

    def purge(self) -> int:
        return self._cache.purge()
