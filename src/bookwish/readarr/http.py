# ABOUTME: HTTP transport for the Readarr v1 API.
# ABOUTME: Adds the API key header, retries transient failures with backoff, and raises CatalogError.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

# A 5xx on a create may come after the record was stored; only a rate-limit
# rejection is safe to resend.
_RETRYABLE_POST_STATUS_CODES = {429}


class CatalogError(Exception):
    """Raised when a request to the acquisition backend fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class ApiClient(Protocol):
    """Protocol for JSON GET/POST calls against the acquisition backend."""

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any: ...

    def post(self, path: str, payload: dict[str, Any]) -> Any: ...


class ReadarrHttpClient:
    """JSON client for a Readarr instance.

    Paths are relative to `base_url` (e.g. "/api/v1/author"). Transient GET
    failures (429, 5xx) are retried with exponential backoff; POSTs are only
    retried on 429. Everything else raises CatalogError immediately.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        max_retries: int = 2,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "base_url": base_url.rstrip("/"),
            "headers": {"X-Api-Key": api_key, "User-Agent": "bookwish/0.1.0"},
            "timeout": timeout,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Send a GET request and return the decoded JSON body."""
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: dict[str, Any]) -> Any:
        """Send a POST request with a JSON body and return the decoded response."""
        return self._request("POST", path, json=payload)

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        attempts = 1 + self._max_retries
        retryable = _RETRYABLE_POST_STATUS_CODES if method == "POST" else _RETRYABLE_STATUS_CODES
        last_status = 0
        for attempt in range(attempts):
            try:
                response = self._client.request(method, path, **kwargs)
                last_status = response.status_code
            except httpx.HTTPError as exc:
                raise CatalogError(f"{method} {path} failed: {exc}") from exc

            if response.is_success:
                if not response.content:
                    return None
                try:
                    return response.json()
                except ValueError as exc:
                    raise CatalogError(
                        f"Invalid JSON from {method} {path}", status_code=response.status_code
                    ) from exc

            if response.status_code not in retryable:
                raise CatalogError(
                    f"HTTP {response.status_code} from {method} {path}: {_error_detail(response)}",
                    status_code=response.status_code,
                )

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    method,
                    path,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise CatalogError(
            f"HTTP {last_status} from {method} {path} after {attempts} attempts",
            status_code=last_status,
        )


def _error_detail(response: httpx.Response) -> str:
    """Pull a readable message out of a Readarr error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(body, list) and body:
        body = body[0]
    if isinstance(body, dict):
        return str(body.get("errorMessage") or body.get("message") or body)
    return str(body)
