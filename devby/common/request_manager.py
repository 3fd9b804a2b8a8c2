"""Request manager for handling HTTP requests.

SyncRequestManager encapsulates the httpx client and turns HTTP responses
into Response objects. Non-2xx statuses and timeouts are raised as
TransientException subclasses so that the retry pipeline can tell them
apart from scraper assumption violations.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from devby.common.exceptions import (
    HTMLResponseAssumptionException,
    RequestTimeoutException,
)

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "devby-scraper (+https://companies.devby.io)",
    "Accept": "text/html,application/xhtml+xml",
}


@dataclass(frozen=True)
class Response:
    """HTTP response from fetching a page.

    Attributes:
        status_code: HTTP status code.
        headers: Response headers.
        content: Raw response bytes.
        text: Decoded response text.
        url: Final URL after any redirects.
    """

    status_code: int
    headers: dict[str, str]
    content: bytes
    text: str
    url: str


class Fetcher(Protocol):
    """Anything that can GET a URL and return a Response."""

    def get(self, url: str) -> Response: ...


class SyncRequestManager:
    """Manages HTTP requests for the synchronous driver.

    Example::

        with SyncRequestManager(timeout=30.0) as manager:
            response = manager.get("https://companies.devby.io")
    """

    def __init__(
        self,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the request manager.

        Args:
            timeout: Request timeout in seconds. None means no timeout.
            headers: Extra headers sent with every request.
            client: Optional preconfigured httpx.Client (e.g. with a mock
                transport). The manager closes it on close().
        """
        self.timeout = timeout
        self._client = client or httpx.Client(
            timeout=timeout,
            headers={**DEFAULT_HEADERS, **(headers or {})},
            follow_redirects=True,
        )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> SyncRequestManager:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def get(self, url: str) -> Response:
        """GET url and return the Response.

        Raises:
            HTMLResponseAssumptionException: If the server answers with a
                non-2xx status code.
            RequestTimeoutException: If the request times out.
        """
        logger.debug(f"GET {url}")
        try:
            http_response = self._client.get(url)
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.timeout
            ) from e

        if not http_response.is_success:
            raise HTMLResponseAssumptionException(
                status_code=http_response.status_code,
                expected_codes=[200],
                url=url,
                reason=http_response.reason_phrase,
            )

        return Response(
            status_code=http_response.status_code,
            headers=dict(http_response.headers),
            content=http_response.content,
            text=http_response.text,
            url=str(http_response.url),
        )
