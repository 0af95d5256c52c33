from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from referensi_scraper.cache.keys import WILDCARD, normalize_segment
from referensi_scraper.scrape._cached import cached_scrape
from referensi_scraper.scrape.dom import Element, parse_html, select_within
from referensi_scraper.scrape.text import clean_value, strip_list_number, to_camel_case

if TYPE_CHECKING:
    from referensi_scraper.cache.facade import JsonCache
    from referensi_scraper.domain.scrape_result import ScrapeResult
    from referensi_scraper.scrape.client import ReferensiClient

logger = logging.getLogger(__name__)

INTERNET_ACCESS_KEY = "aksesInternet"
UNKNOWN_LEVEL = "unknown"

_LATITUDE = re.compile(r"Lintang:\s*(-?\d+\.\d+)")
_LONGITUDE = re.compile(r"Bujur:\s*(-?\d+\.\d+)")


def _parse_tab(tab: Element) -> dict[str, Any]:
    data: dict[str, Any] = {}
    last_label: str | None = None
    rows = select_within(tab.find_all("table"), lambda el: el.tag == "tr")
    for tr in rows:
        cells = tr.find_all("td")
        if len(cells) < 4:
            continue
        label = cells[1].text().strip().replace(":", "", 1)
        value = clean_value(cells[3].text().strip())

        if label:
            last_label = to_camel_case(label)
            if last_label == INTERNET_ACCESS_KEY and value:
                data[INTERNET_ACCESS_KEY] = [strip_list_number(value)]
            else:
                data[last_label] = value
        elif last_label == INTERNET_ACCESS_KEY and value:
            # Continuation rows of the internet access list carry no label.
            if not data.get(INTERNET_ACCESS_KEY):
                data[INTERNET_ACCESS_KEY] = []
            data[INTERNET_ACCESS_KEY].append(strip_list_number(value))
    return data


def _parse_coordinates(tab: Element) -> dict[str, str | None]:
    text = tab.text()
    latitude = _LATITUDE.search(text)
    longitude = _LONGITUDE.search(text)
    return {
        "lintang": latitude.group(1) if latitude else None,
        "bujur": longitude.group(1) if longitude else None,
    }


def parse_institution_detail(html: str) -> dict[str, Any]:
    """Extract every tab of an institution page into ``{tabName: {field: value}}``.

    Tabs are labelled by their ``.tabby-tab label`` text; unlabelled tabs
    fall back to ``tab{i}``. The map tab also gets ``lintang``/``bujur``.
    """
    tab_roots = parse_html(html).find_all(class_="tabby-tab")
    tab_names = [to_camel_case(label.text().strip()) for label in select_within(tab_roots, lambda el: el.tag == "label")]
    contents = select_within(tab_roots, lambda el: el.has_class("tabby-content"))

    detail: dict[str, Any] = {}
    for i, tab in enumerate(contents):
        tab_name = tab_names[i] if i < len(tab_names) and tab_names[i] else f"tab{i}"
        tab_data = _parse_tab(tab)
        if "peta" in tab_name:
            tab_data.update(_parse_coordinates(tab))
        detail[tab_name] = tab_data
    return detail


def education_level(detail: dict[str, Any]) -> str:
    """Level segment used to file the detail, e.g. ``"sd"``; ``"unknown"`` when absent."""
    identity = detail.get("identitasSatuanPendidikan")
    level = identity.get("jenjangPendidikan") if isinstance(identity, dict) else None
    return normalize_segment(level) if level and normalize_segment(level) else UNKNOWN_LEVEL


class InstitutionDetailScraper:
    def __init__(self, client: ReferensiClient, cache: JsonCache) -> None:
        self._client = client
        self._cache = cache

    def get_detail(self, npsn: str) -> ScrapeResult:
        # The level is only known after scraping, so lookups scan every level directory.
        lookup_key = f"npsn/{WILDCARD}/{npsn}"

        def scrape() -> dict[str, Any]:
            detail = parse_institution_detail(self._client.fetch_html(self._client.url_for(f"pendidikan/npsn/{npsn}")))
            logger.info("Scraped %d detail tabs for NPSN %s", len(detail), npsn)
            return detail

        return cached_scrape(
            self._cache,
            lookup_key,
            scrape,
            write_key=lambda detail: f"npsn/{education_level(detail)}/{npsn}",
        )
