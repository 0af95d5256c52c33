"""Shared pytest fixtures for test modules."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from referensi_scraper.cache.facade import JsonCache

if TYPE_CHECKING:
    from pathlib import Path

BASE_URL = "https://referensi.example.test"
TTL_MS = 60_000


class FakeClock:
    """Callable clock with millisecond steps, returning epoch seconds."""

    def __init__(self, now_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms / 1000

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"


@pytest.fixture
def cache(cache_root: Path, clock: FakeClock) -> JsonCache:
    """An enabled cache rooted in a temporary directory with a fake clock."""
    return JsonCache(cache_root, enabled=True, ttl_ms=TTL_MS, base_url=BASE_URL, clock=clock)
