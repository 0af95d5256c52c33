from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from referensi_scraper.scrape._cached import cached_scrape
from referensi_scraper.scrape.dom import Element, parse_html
from referensi_scraper.scrape.text import absolute_links

if TYPE_CHECKING:
    from referensi_scraper.cache.facade import JsonCache
    from referensi_scraper.domain.scrape_result import ScrapeResult
    from referensi_scraper.scrape.client import ReferensiClient

logger = logging.getLogger(__name__)

MENU_CACHE_KEY = "menu"


def _child(parent: Element | None, index: int, tag: str, class_: str | None = None) -> Element | None:
    """Element child at ``index`` (like ``:nth-child``) if it has the given tag and class."""
    if parent is None:
        return None
    children = parent.element_children
    if index >= len(children):
        return None
    child = children[index]
    if child.tag != tag or (class_ is not None and not child.has_class(class_)):
        return None
    return child


def _children(parent: Element | None, tag: str, class_: str | None = None) -> list[Element]:
    if parent is None:
        return []
    return [c for c in parent.element_children if c.tag == tag and (class_ is None or c.has_class(class_))]


def _menu_items(doc: Element) -> list[Element]:
    # ul.nav.navbar-nav > li:nth-child(2) > ul.dropdown-menu > li:first-child > ul > li
    items: list[Element] = []
    for navbar in doc.iter():
        if navbar.tag != "ul" or not {"nav", "navbar-nav"} <= navbar.classes:
            continue
        section = _child(navbar, 1, "li")
        for dropdown in _children(section, "ul", "dropdown-menu"):
            first = _child(dropdown, 0, "li")
            for submenu in _children(first, "ul"):
                items.extend(_children(submenu, "li"))
    return items


def parse_menu(html: str, base_url: str, api_base: str) -> list[dict[str, Any]]:
    """Extract the "Satuan Pendidikan" sub-menu links, skipping inactive ``redlink`` entries."""
    menus: list[dict[str, Any]] = []
    for item in _menu_items(parse_html(html)):
        anchors = item.find_all("a")
        if any(a.has_class("redlink") for a in anchors):
            continue
        title = "".join(a.text() for a in anchors).strip()
        href = anchors[0].get("href") if anchors else ""
        ref, link = absolute_links(href, base_url, api_base)
        menus.append({"title": title, "_ref": ref, "_link": link})
    return menus


class MenuScraper:
    def __init__(self, client: ReferensiClient, cache: JsonCache) -> None:
        self._client = client
        self._cache = cache

    def get_menu(self, api_base: str = "") -> ScrapeResult:
        def scrape() -> list[dict[str, Any]]:
            html = self._client.fetch_html(self._client.url_for())
            menus = parse_menu(html, self._client.base_url, api_base)
            logger.info("Scraped %d menu entries", len(menus))
            return menus

        return cached_scrape(self._cache, MENU_CACHE_KEY, scrape)
