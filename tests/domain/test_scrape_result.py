import re

from referensi_scraper.cache.store import CacheEntry
from referensi_scraper.domain.scrape_result import ScrapeResult, utc_now_iso


def test_utc_now_iso_format() -> None:
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_now_iso())


def test_from_cache_uses_write_time() -> None:
    result = ScrapeResult.from_cache(CacheEntry(value=[1, 2], written_at_ms=1_717_597_800_123))
    assert result.to_dict() == {"data": [1, 2], "scrapedAt": "2024-06-05T14:30:00.123Z"}


def test_fresh_is_stamped_now() -> None:
    result = ScrapeResult.fresh({"a": 1})
    assert result.data == {"a": 1}
    assert result.scraped_at.endswith("Z")
