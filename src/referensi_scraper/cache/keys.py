"""Cache key normalization and derivation.

A raw key such as ``"table/DikDas/001-002"`` is split on ``/`` and every
segment is folded to ``[a-z0-9-]``. The first segment is the namespace; the
literal segment ``*`` marks the single position that a read may resolve by
scanning the cache directory.

Usage:
    key = normalize_key("Table/DikDas/001-002!!")
    key.segments  # ("table", "dikdas", "001-002")

    key_from_url("https://base/pendidikan/dikti/026000/2", "https://base")
    # "dikti/2/026000"
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from referensi_scraper.exceptions import CacheKeyError

WILDCARD = "*"
DEFAULT_URL_PREFIX = "pendidikan"

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUNS = re.compile(r"-+")


def normalize_segment(raw: str) -> str:
    """Fold a single key segment to lowercase ``[a-z0-9-]`` without edge hyphens."""
    if raw == WILDCARD:
        return WILDCARD
    segment = _INVALID_CHARS.sub("-", raw.lower())
    segment = _HYPHEN_RUNS.sub("-", segment)
    return segment.strip("-")


@dataclass(frozen=True)
class CacheKey:
    segments: tuple[str, ...]

    @property
    def namespace(self) -> str:
        return self.segments[0]

    @property
    def rest(self) -> tuple[str, ...]:
        return self.segments[1:]

    @property
    def wildcard_index(self) -> int | None:
        """Position of the wildcard segment, or None for a fully resolved key.

        Raises:
            CacheKeyError: If the key holds more than one wildcard.
        """
        positions = [i for i, segment in enumerate(self.segments) if segment == WILDCARD]
        if not positions:
            return None
        if len(positions) > 1:
            raise CacheKeyError(f"Cache key {self} has {len(positions)} wildcard segments; at most one is allowed")
        return positions[0]

    @property
    def is_wildcard(self) -> bool:
        return WILDCARD in self.segments

    def substitute(self, name: str) -> CacheKey:
        """Return a resolved key with the wildcard replaced by ``name``."""
        index = self.wildcard_index
        if index is None:
            raise CacheKeyError(f"Cache key {self} has no wildcard to substitute")
        segments = list(self.segments)
        segments[index] = normalize_segment(name)
        return CacheKey(tuple(segments))

    def __str__(self) -> str:
        return "/".join(self.segments)


def normalize_key(raw: str) -> CacheKey:
    """Split ``raw`` on ``/`` and normalize each segment. Never raises.

    Empty segments are kept in place.
    """
    return CacheKey(tuple(normalize_segment(part) for part in raw.split("/")))


def key_from_url(url: str, base_url: str, prefix: str = DEFAULT_URL_PREFIX) -> str:
    """Derive a table cache key from an upstream URL.

    Strips ``base_url`` and a leading ``prefix`` segment. Paths shaped
    ``group/id/page`` become ``group/page/id`` so that every id of the same
    page shares one directory; shorter paths are returned cleaned but
    otherwise unchanged.
    """
    relative = url.replace(base_url, "", 1) if base_url else url
    relative = re.sub(rf"^/?{re.escape(prefix)}(?:/|$)", "", relative) if prefix else relative
    relative = relative.strip("/")

    parts = relative.split("/")
    if len(parts) >= 3:
        group, item_id, page = parts[:3]
        return f"{group}/{page}/{item_id}"
    return relative
