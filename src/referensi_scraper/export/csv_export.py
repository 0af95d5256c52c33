"""CSV rendering of scraped table rows.

Every field is quoted so spreadsheet tools keep codes such as ``026000``
intact. The bookkeeping columns ``_ref`` and ``_link`` are left out.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

SKIP_KEYS = frozenset({"_ref", "_link"})
FILENAME_PREFIX = "referensi-data-kemdikbud"


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def json_to_csv(rows: Any) -> str:
    """Render a list of row dicts as CSV; anything else renders as ``""``.

    The header comes from the first row's keys.
    """
    if not isinstance(rows, list) or not rows or not isinstance(rows[0], dict):
        return ""

    keys = [key for key in rows[0] if key not in SKIP_KEYS]
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(keys)
    for row in rows:
        writer.writerow([_cell(row.get(key)) if isinstance(row, dict) else "" for key in keys])
    return buf.getvalue().removesuffix("\n")


def format_date(scraped_at: str | None = None) -> str:
    """``YYMMDDhhmm`` in UTC for an ISO-8601 timestamp; unparseable input uses now."""
    moment: datetime | None = None
    if scraped_at:
        try:
            moment = datetime.fromisoformat(scraped_at.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable timestamp %r, using current time", scraped_at)
    if moment is None:
        moment = datetime.now(UTC)
    elif moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).strftime("%y%m%d%H%M")


def csv_filename(name: str, scraped_at: str | None = None) -> str:
    return f"{FILENAME_PREFIX}-{name}-{format_date(scraped_at)}.csv"
