# ABOUTME: HTTP client for remote bibliographic lookups, built on httpx.
# ABOUTME: Spaces out requests, backs off on 429/5xx honoring Retry-After, injectable transport.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "bookwarden/0.1.0"
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
_MAX_RETRY_AFTER = 60.0


class RemoteLookupError(Exception):
    """Raised when a request to a bibliographic service fails."""


@runtime_checkable
class HttpClient(Protocol):
    """GET returning a decoded JSON body."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


def _retry_after(response: httpx.Response) -> float | None:
    """Seconds requested by a Retry-After header, if it holds a number."""
    value = response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return min(max(float(value), 0.0), _MAX_RETRY_AFTER)
    except ValueError:
        return None


class LookupHttpClient:
    """Polite JSON-over-HTTP client for lookup services."""

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
            transport=transport,
        )
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._next_allowed = 0.0

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "LookupHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """GET ``url`` and decode its JSON body.

        Raises:
            RemoteLookupError: On a non-retryable status, a network failure,
                an undecodable body, or when every retry was used up.
        """
        query = dict(params or {})
        response: httpx.Response | None = None

        for attempt in range(self._max_retries + 1):
            if attempt:
                delay = _retry_after(response) if response is not None else None
                if delay is None:
                    delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(
                    "HTTP %d from %s, retry %d/%d in %.1fs",
                    response.status_code if response is not None else 0,
                    url,
                    attempt,
                    self._max_retries,
                    delay,
                )
                time.sleep(delay)

            response = self._send(url, query)
            if response.status_code == 200:
                try:
                    return response.json()
                except ValueError as exc:
                    raise RemoteLookupError(f"Invalid JSON from {url}") from exc
            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise RemoteLookupError(f"HTTP {response.status_code} from {url}")

        status = response.status_code if response is not None else 0
        raise RemoteLookupError(
            f"HTTP {status} from {url} after {self._max_retries + 1} attempts"
        )

    def _send(self, url: str, query: dict[str, str]) -> httpx.Response:
        wait = self._next_allowed - time.monotonic()
        if wait > 0:
            time.sleep(wait)
        try:
            return self._client.get(url, params=query)
        except httpx.HTTPError as exc:
            raise RemoteLookupError(f"Request failed: {url}: {exc}") from exc
        finally:
            self._next_allowed = time.monotonic() + self._min_interval
