from __future__ import annotations

import logging
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from referensi_scraper.cache.keys import normalize_segment
from referensi_scraper.exceptions import CacheKeyError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from referensi_scraper.cache.keys import CacheKey

logger = logging.getLogger(__name__)

ENTRY_SUFFIX = ".json"
INDEX_NAME = "index"


def _filename(rest: tuple[str, ...], use_subfolders: bool) -> tuple[str, ...]:
    # A trailing slash in the raw key leaves empty segments that would name a bare ".json".
    while rest and not rest[-1]:
        rest = rest[:-1]
    if not rest:
        return (INDEX_NAME + ENTRY_SUFFIX,)
    if use_subfolders:
        return (*rest[:-1], rest[-1] + ENTRY_SUFFIX)
    return ("-".join(rest) + ENTRY_SUFFIX,)


def resolve_path(root: Path, key: CacheKey, use_subfolders: bool = True) -> Path:
    """Map a fully resolved key to ``root/<namespace>/<rest>.json``.

    Remaining segments become nested directories, or a single ``-``-joined
    filename when ``use_subfolders`` is False. A key with no remaining
    segments maps to ``index.json``.
    """
    if key.is_wildcard:
        raise CacheKeyError(f"Cannot resolve a storage path for wildcard key {key}")
    return root.joinpath(key.namespace, *_filename(key.rest, use_subfolders))


def resolve_prefix(root: Path, key: CacheKey) -> Path:
    """Directory whose entries stand in for the wildcard segment."""
    index = key.wildcard_index
    if index is None:
        raise CacheKeyError(f"Cache key {key} has no wildcard segment")
    return root.joinpath(*key.segments[:index])


def wildcard_candidates(root: Path, key: CacheKey, use_subfolders: bool = True) -> Iterator[Path]:
    """Yield candidate storage paths for a key holding one wildcard segment.

    Candidates come out in directory-listing order, which is unspecified.
    A missing prefix directory yields nothing.
    """
    index = key.wildcard_index
    if index is None:
        yield resolve_path(root, key, use_subfolders)
        return

    if not use_subfolders and index > 0:
        # Flattened entries all live directly under the namespace directory.
        pattern = "".join(_filename(key.rest, False))
        for entry in _list_dir(root / key.namespace):
            if entry.is_file() and fnmatchcase(entry.name, pattern):
                yield entry
        return

    is_last = index == len(key.segments) - 1
    for entry in _list_dir(resolve_prefix(root, key)):
        name = entry.stem if is_last and entry.suffix == ENTRY_SUFFIX else entry.name
        if not normalize_segment(name):
            continue
        yield resolve_path(root, key.substitute(name), use_subfolders)


def _list_dir(directory: Path) -> list[Path]:
    try:
        return list(directory.iterdir())
    except (FileNotFoundError, NotADirectoryError):
        return []
    except OSError as e:
        logger.warning("Could not list cache directory %s: %s", directory, e)
        return []
