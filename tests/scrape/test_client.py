import httpx
import pytest
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_none

from referensi_scraper.exceptions import UpstreamError
from referensi_scraper.scrape._retry import is_transient
from referensi_scraper.scrape.client import ReferensiClient

_NO_WAIT_RETRY = retry(
    stop=stop_after_attempt(3),
    wait=wait_none(),
    retry=retry_if_exception(is_transient),
    reraise=True,
)

BASE_URL = "https://referensi.example.test"


class FakeTransport(httpx.BaseTransport):
    def __init__(self, response: httpx.Response) -> None:
        self._response = response
        self.requests: list[httpx.Request] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response


class FailNTransport(httpx.BaseTransport):
    """Returns 503 for the first N requests, then succeeds."""

    def __init__(self, fail_count: int, success_response: httpx.Response) -> None:
        self._fail_count = fail_count
        self._success_response = success_response
        self.call_count = 0

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.call_count += 1
        if self.call_count <= self._fail_count:
            return httpx.Response(503, content=b"Service Unavailable")
        return self._success_response


class BrokenTransport(httpx.BaseTransport):
    def handle_request(self, request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)


def _client(transport: httpx.BaseTransport) -> ReferensiClient:
    return ReferensiClient(BASE_URL, client=httpx.Client(transport=transport), retry=_NO_WAIT_RETRY)


class TestUrlFor:
    def test_root(self) -> None:
        assert ReferensiClient(f"{BASE_URL}/").url_for() == BASE_URL

    def test_path(self) -> None:
        client = ReferensiClient(BASE_URL)
        assert client.url_for("pendidikan/npsn/20100001") == f"{BASE_URL}/pendidikan/npsn/20100001"
        assert client.url_for("/pendidikan/dikdas") == f"{BASE_URL}/pendidikan/dikdas"


class TestFetchHtml:
    def test_returns_body_text(self) -> None:
        transport = FakeTransport(httpx.Response(200, text="<html>ok</html>"))
        client = _client(transport)

        assert client.fetch_html(f"{BASE_URL}/pendidikan/dikdas") == "<html>ok</html>"
        assert len(transport.requests) == 1
        assert str(transport.requests[0].url) == f"{BASE_URL}/pendidikan/dikdas"

    def test_retries_error_status(self) -> None:
        transport = FailNTransport(2, httpx.Response(200, text="<html>ok</html>"))

        assert _client(transport).fetch_html(BASE_URL) == "<html>ok</html>"
        assert transport.call_count == 3

    def test_error_status_after_retries_raises_upstream_error(self) -> None:
        transport = FailNTransport(5, httpx.Response(200))
        url = f"{BASE_URL}/pendidikan/npsn/1"

        with pytest.raises(UpstreamError, match="Failed to fetch") as exc_info:
            _client(transport).fetch_html(url)

        assert exc_info.value.url == url
        assert isinstance(exc_info.value.cause, httpx.HTTPStatusError)
        assert transport.call_count == 3

    def test_transport_error_raises_upstream_error(self) -> None:
        with pytest.raises(UpstreamError) as exc_info:
            _client(BrokenTransport()).fetch_html(BASE_URL)

        assert isinstance(exc_info.value.cause, httpx.ConnectError)
        assert "connection refused" in str(exc_info.value)

    def test_missing_page_is_not_retried(self) -> None:
        transport = FakeTransport(httpx.Response(404, text="Not Found"))
        client = ReferensiClient(BASE_URL, client=httpx.Client(transport=transport))

        with pytest.raises(UpstreamError, match="404"):
            client.fetch_html(f"{BASE_URL}/pendidikan/npsn/99999999")

        assert len(transport.requests) == 1
