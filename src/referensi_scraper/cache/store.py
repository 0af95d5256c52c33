from __future__ import annotations

import json
import logging
import os
import shutil
import tempfile
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)


def format_timestamp(epoch_ms: int) -> str:
    """Render epoch milliseconds as ISO-8601 UTC, e.g. ``2024-06-05T14:30:00.000Z``."""
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    written_at_ms: int

    @property
    def scraped_at(self) -> str:
        return format_timestamp(self.written_at_ms)


class _CorruptEntry(Exception):
    pass


def _parse_envelope(raw: bytes, now_ms: int) -> CacheEntry:
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise _CorruptEntry(str(e)) from e
    if not isinstance(payload, dict) or "data" not in payload:
        raise _CorruptEntry("missing 'data' field")
    timestamp = payload.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int):
        raise _CorruptEntry(f"invalid timestamp {timestamp!r}")
    if timestamp > now_ms:
        raise _CorruptEntry(f"timestamp {timestamp} is in the future")
    return CacheEntry(value=payload["data"], written_at_ms=timestamp)


class JsonFileStore:
    """One JSON envelope per file with lazy TTL expiry.

    Expired and unparseable files are deleted when read, so a bad entry is
    never served twice. Writes go to a temporary file in the target
    directory and are renamed into place.
    """

    def __init__(self, ttl_ms: int, clock: Callable[[], float] = time.time) -> None:
        self._ttl_ms = ttl_ms
        self._clock = clock

    def _now_ms(self) -> int:
        return round(self._clock() * 1000)

    def read(self, path: Path) -> CacheEntry | None:
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read cache file %s: %s", path, e)
            return None

        now_ms = self._now_ms()
        try:
            entry = _parse_envelope(raw, now_ms)
        except _CorruptEntry as e:
            logger.warning("Deleting corrupt cache file %s: %s", path, e)
            self.remove(path)
            return None

        if now_ms - entry.written_at_ms > self._ttl_ms:
            logger.info("Deleting expired cache file %s", path)
            self.remove(path)
            return None
        return entry

    def write(self, path: Path, value: Any) -> bool:
        """Persist ``value`` at ``path``. Returns False when the write failed."""
        tmp_name: str | None = None
        try:
            payload = json.dumps({"data": value, "timestamp": self._now_ms()}, ensure_ascii=False)
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                f.write(payload)
            os.replace(tmp_name, path)
            tmp_name = None
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed to write cache file %s: %s", path, e)
            return False
        finally:
            if tmp_name is not None:
                _unlink_quietly(tmp_name)
        return True

    def remove(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to delete cache file %s: %s", path, e)

    def clear_all(self, root: Path) -> None:
        """Remove every namespace under ``root``, keeping ``root`` itself."""
        try:
            children = list(root.iterdir())
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Could not list cache root %s: %s", root, e)
            return
        for child in children:
            try:
                if child.is_dir() and not child.is_symlink():
                    shutil.rmtree(child)
                else:
                    child.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Failed to clear cache path %s: %s", child, e)


def _unlink_quietly(name: str) -> None:
    try:
        os.unlink(name)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning("Failed to remove temporary cache file %s: %s", name, e)
