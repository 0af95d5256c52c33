class ReferensiException(Exception):
    """Base class for all referensi_scraper errors."""


class CacheKeyError(ReferensiException, ValueError):
    """Raised when a cache key cannot be used for the requested operation."""


class ConfigError(ReferensiException):
    """Raised when a configuration value is invalid."""


class UpstreamError(ReferensiException):
    """Raised when an upstream page cannot be fetched."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Failed to fetch {url}{detail}")
        self.url = url
        self.cause = cause
