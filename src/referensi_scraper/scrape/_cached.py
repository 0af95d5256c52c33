from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from referensi_scraper.domain.scrape_result import ScrapeResult

if TYPE_CHECKING:
    from collections.abc import Callable

    from referensi_scraper.cache.facade import JsonCache

logger = logging.getLogger(__name__)


def cached_scrape(
    cache: JsonCache,
    cache_key: str,
    scrape_fn: Callable[[], Any],
    write_key: Callable[[Any], str] | None = None,
) -> ScrapeResult:
    """Shared cache-or-scrape logic for all page scrapers.

    ``cache_key`` may contain a wildcard segment for the lookup; in that case
    ``write_key`` must derive the concrete key from the scraped data.
    """
    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug("Serving %s from cache (scraped at %s)", cache_key, cached.scraped_at)
        return ScrapeResult.from_cache(cached)

    logger.debug("Cache miss for %s, scraping upstream", cache_key)
    data = scrape_fn()
    cache.set(write_key(data) if write_key is not None else cache_key, data)
    return ScrapeResult.fresh(data)
