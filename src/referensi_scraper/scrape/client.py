import logging
from collections.abc import Callable
from typing import Any

import httpx

from referensi_scraper.exceptions import UpstreamError
from referensi_scraper.scrape._retry import default_http_retry

logger = logging.getLogger(__name__)

_DEFAULT_RETRY = default_http_retry("referensi page fetch")


class ReferensiClient:
    """Fetches raw HTML pages from the upstream site."""

    def __init__(
        self,
        base_url: str,
        client: httpx.Client | None = None,
        retry: Callable[[Callable[..., Any]], Callable[..., Any]] = _DEFAULT_RETRY,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.Client(timeout=httpx.Timeout(60.0, connect=10.0), follow_redirects=True)
        self._get_with_retry = retry(self._do_get)

    @property
    def base_url(self) -> str:
        return self._base_url

    def url_for(self, path: str = "") -> str:
        return f"{self._base_url}/{path.lstrip('/')}" if path else self._base_url

    def fetch_html(self, url: str) -> str:
        """GET ``url`` and return the body text.

        Raises:
            UpstreamError: If the page could not be fetched after retries.
        """
        logger.debug("GET %s", url)
        try:
            return self._get_with_retry(url)
        except (httpx.TransportError, httpx.HTTPStatusError) as e:
            raise UpstreamError(url, e) from e

    def close(self) -> None:
        self._client.close()

    def _do_get(self, url: str) -> str:
        response = self._client.get(url)
        response.raise_for_status()
        return response.text
