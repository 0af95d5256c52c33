from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from referensi_scraper.cache.store import CacheEntry


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ScrapeResult:
    data: Any
    scraped_at: str

    @classmethod
    def fresh(cls, data: Any) -> ScrapeResult:
        return cls(data=data, scraped_at=utc_now_iso())

    @classmethod
    def from_cache(cls, entry: CacheEntry) -> ScrapeResult:
        return cls(data=entry.value, scraped_at=entry.scraped_at)

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "scrapedAt": self.scraped_at}
