"""File-backed JSON cache used by the scrapers.

Keys are ``/``-separated identifiers whose first segment names a top-level
directory under the cache root. A read may leave one segment unknown by
writing it as ``*``; the directory at that position is listed and the first
valid entry wins. Listing order is whatever the filesystem returns, so when
several entries match, which one is served is unspecified.

Usage:
    cache = JsonCache(Path(".cache"), enabled=True, ttl_ms=86_400_000, base_url=BASE_URL)
    cache.set("npsn/sd/000123", {"nama": "SD Negeri 1"})
    entry = cache.get("npsn/*/000123")
    entry.value, entry.scraped_at
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from referensi_scraper.cache.keys import DEFAULT_URL_PREFIX, key_from_url, normalize_key
from referensi_scraper.cache.paths import resolve_path, wildcard_candidates
from referensi_scraper.cache.store import JsonFileStore
from referensi_scraper.exceptions import CacheKeyError

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from referensi_scraper.cache.keys import CacheKey
    from referensi_scraper.cache.store import CacheEntry
    from referensi_scraper.config import Settings

logger = logging.getLogger(__name__)


class JsonCache:
    def __init__(
        self,
        root: Path,
        *,
        enabled: bool,
        ttl_ms: int,
        base_url: str,
        url_prefix: str = DEFAULT_URL_PREFIX,
        use_subfolders: bool = True,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._root = root
        self._enabled = enabled
        self._base_url = base_url
        self._url_prefix = url_prefix
        self._use_subfolders = use_subfolders
        self._store = JsonFileStore(ttl_ms, clock=clock)
        if enabled and not root.exists():
            root.mkdir(parents=True, exist_ok=True)
            logger.info("Created cache directory %s", root)

    @classmethod
    def from_settings(cls, settings: Settings) -> JsonCache:
        return cls(
            settings.cache_dir,
            enabled=settings.cache_enabled,
            ttl_ms=settings.cache_ttl_ms,
            base_url=settings.base_url,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def root(self) -> Path:
        return self._root

    def get(self, raw_key: str) -> CacheEntry | None:
        """Return the live entry for ``raw_key``, or None on a miss.

        Raises:
            CacheKeyError: If ``raw_key`` holds more than one wildcard segment.
        """
        if not self._enabled:
            return None
        key = normalize_key(raw_key)
        if key.wildcard_index is None:
            entry = self._store.read(resolve_path(self._root, key, self._use_subfolders))
        else:
            entry = None
            for path in wildcard_candidates(self._root, key, self._use_subfolders):
                entry = self._store.read(path)
                if entry is not None:
                    break
        logger.debug("Cache %s for %s", "hit" if entry is not None else "miss", key)
        return entry

    def set(self, raw_key: str, value: Any) -> None:
        if not self._enabled:
            return
        key = self._resolved(raw_key, "write")
        if self._store.write(resolve_path(self._root, key, self._use_subfolders), value):
            logger.debug("Cached %s", key)

    def clear(self, raw_key: str | None = None) -> None:
        """Remove one entry, or every entry when ``raw_key`` is empty."""
        if not self._enabled:
            return
        if not self._root.exists():
            return
        if raw_key:
            key = self._resolved(raw_key, "clear")
            self._store.remove(resolve_path(self._root, key, self._use_subfolders))
            logger.info("Cleared cache entry %s", key)
        else:
            self._store.clear_all(self._root)
            logger.info("Cleared all cache entries under %s", self._root)

    def key_from_url(self, url: str) -> str:
        return key_from_url(url, self._base_url, self._url_prefix)

    def _resolved(self, raw_key: str, operation: str) -> CacheKey:
        key = normalize_key(raw_key)
        if key.is_wildcard:
            raise CacheKeyError(f"Cannot {operation} wildcard cache key {raw_key!r}")
        return key
