from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from referensi_scraper.scrape._cached import cached_scrape
from referensi_scraper.scrape.dom import parse_html, select_within
from referensi_scraper.scrape.text import absolute_links, coerce_cell, to_camel_case

if TYPE_CHECKING:
    from referensi_scraper.cache.facade import JsonCache
    from referensi_scraper.domain.scrape_result import ScrapeResult
    from referensi_scraper.scrape.client import ReferensiClient

logger = logging.getLogger(__name__)

DEFAULT_TABLE_ID = "table1"
LINK_COLUMN = 1


def parse_table(html: str, base_url: str, api_base: str, table_id: str = DEFAULT_TABLE_ID) -> list[dict[str, Any]]:
    """Turn ``<table id=table_id>`` into a list of row dicts.

    Keys come from the ``thead`` cells in lowerCamelCase; cells without a
    header are named ``col{i}``. The link in the second column becomes the
    row's ``_ref`` (upstream URL) and ``_link`` (this API's URL).
    """
    table = parse_html(html).find(id_=table_id)
    if table is None:
        logger.warning("Table #%s not found", table_id)
        return []

    theads = table.find_all("thead")
    header_cells = select_within(select_within(theads, lambda el: el.tag == "tr"), lambda el: el.tag == "th")
    headers = [to_camel_case(th.text().strip(), strip_brackets=True) for th in header_cells]

    rows: list[dict[str, Any]] = []
    for tr in select_within(table.find_all("tbody"), lambda el: el.tag == "tr"):
        row: dict[str, Any] = {}
        ref: str | None = None
        link: str | None = None
        for i, td in enumerate(tr.find_all("td")):
            key = headers[i] if i < len(headers) and headers[i] else f"col{i}"
            row[key] = coerce_cell(td.text().strip(), key)
            if i == LINK_COLUMN:
                anchor = td.find("a")
                ref, link = absolute_links(anchor.get("href") if anchor else "", base_url, api_base)
        row["_ref"] = ref
        row["_link"] = link
        rows.append(row)
    return rows


class TableScraper:
    def __init__(self, client: ReferensiClient, cache: JsonCache) -> None:
        self._client = client
        self._cache = cache

    def get_table_data(self, url: str, api_base: str = "", table_id: str = DEFAULT_TABLE_ID) -> ScrapeResult:
        cache_key = f"table/{self._cache.key_from_url(url)}"

        def scrape() -> list[dict[str, Any]]:
            rows = parse_table(self._client.fetch_html(url), self._client.base_url, api_base, table_id)
            logger.info("Scraped %d rows from %s", len(rows), url)
            return rows

        return cached_scrape(self._cache, cache_key, scrape)
