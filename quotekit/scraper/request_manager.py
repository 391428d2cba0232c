"""HTTP page fetching for the scrapers.

PageFetcher encapsulates the httpx client so scrapers only deal with page
text. It is responsible for:

- Maintaining the httpx.Client lifecycle
- Fetching URLs and decoding the body
- Turning server errors, timeouts and connection failures into
  transient exceptions
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quotekit.common.exceptions import (
    HTTPResponseAssumptionException,
    RequestFailedException,
    RequestTimeoutException,
)

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "quotekit/0.1 (+https://pypi.org/project/quotekit/)"


class PageFetcher:
    """Fetches pages over HTTP for synchronous scrapers.

    Example::

        with PageFetcher(timeout=30.0) as fetcher:
            text = fetcher.fetch("https://example.com/quotes?page=1")
    """

    def __init__(
        self,
        timeout: float | None = 30.0,
        verify: bool = True,
        client: httpx.Client | None = None,
    ) -> None:
        """Initialize the fetcher.

        Args:
            timeout: Request timeout in seconds. None means no timeout.
            verify: Whether to verify TLS certificates. Some quote sites
                serve broken chains and need this turned off.
            client: Optional preconfigured client (tests pass one built on
                httpx.MockTransport).
        """
        self.timeout = timeout

        if client is not None:
            self._client = client
        else:
            self._client = httpx.Client(
                timeout=timeout,
                verify=verify,
                follow_redirects=True,
                headers={"User-Agent": DEFAULT_USER_AGENT},
            )

    def close(self) -> None:
        """Close the HTTP client and release resources."""
        self._client.close()

    def __enter__(self) -> PageFetcher:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()

    def fetch(self, url: str) -> str:
        """GET a URL and return its decoded body.

        Client errors (4xx) are not raised; their body is returned like any
        other so the caller decides whether there was anything to scan.

        Args:
            url: Absolute URL to fetch.

        Returns:
            The response text.

        Raises:
            HTTPResponseAssumptionException: If server returns 5xx status code.
            RequestTimeoutException: If the request times out.
            RequestFailedException: If no response arrives for another reason.
        """
        logger.debug(f"GET {url}")
        try:
            response = self._client.get(url)
        except httpx.TimeoutException as e:
            raise RequestTimeoutException(
                url=url, timeout_seconds=self.timeout
            ) from e
        except httpx.TransportError as e:
            raise RequestFailedException(url=url, reason=str(e)) from e

        if response.status_code >= 500:
            raise HTTPResponseAssumptionException(
                status_code=response.status_code,
                expected_codes=[200],
                url=url,
            )

        if response.status_code >= 400:
            logger.warning(f"HTTP {response.status_code} from {url}")

        return response.text
