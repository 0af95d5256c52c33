import pytest

from referensi_scraper.exceptions import CacheKeyError, ConfigError, ReferensiException, UpstreamError


def test_all_errors_share_base() -> None:
    for cls in (CacheKeyError, ConfigError, UpstreamError):
        assert issubclass(cls, ReferensiException)


def test_cache_key_error_is_value_error() -> None:
    with pytest.raises(ValueError, match="wildcard"):
        raise CacheKeyError("too many wildcard segments")


class TestUpstreamError:
    def test_message_includes_url_and_cause(self) -> None:
        cause = RuntimeError("503 Service Unavailable")
        error = UpstreamError("https://referensi.example.test/pendidikan", cause)

        assert str(error) == "Failed to fetch https://referensi.example.test/pendidikan: 503 Service Unavailable"
        assert error.url == "https://referensi.example.test/pendidikan"
        assert error.cause is cause

    def test_without_cause(self) -> None:
        error = UpstreamError("https://referensi.example.test")
        assert str(error) == "Failed to fetch https://referensi.example.test"
        assert error.cause is None
