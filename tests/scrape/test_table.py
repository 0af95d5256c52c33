from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx
import pytest

from referensi_scraper.cache.facade import JsonCache
from referensi_scraper.scrape.client import ReferensiClient
from referensi_scraper.scrape.table import TableScraper, parse_table

if TYPE_CHECKING:
    from pathlib import Path

BASE_URL = "https://referensi.example.test"
API_BASE = "http://localhost:3000"

TABLE_HTML = """
<table id="table1" class="display">
  <thead>
    <tr><th>No.</th><th>Nama Wilayah</th><th>Jumlah (Total)</th><th>Kode</th></tr>
  </thead>
  <tbody>
    <tr>
      <td>1</td>
      <td><a href="/pendidikan/dikdas/010000/1">Prov. Aceh</a></td>
      <td>1234</td>
      <td>010000</td>
    </tr>
    <tr>
      <td>2</td>
      <td>Prov. Bali</td>
      <td></td>
      <td>220000</td>
      <td>catatan</td>
    </tr>
  </tbody>
</table>
"""


class CountingTransport(httpx.BaseTransport):
    def __init__(self, html: str) -> None:
        self._html = html
        self.urls: list[str] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        self.urls.append(str(request.url))
        return httpx.Response(200, text=self._html)


class TestParseTable:
    def test_rows_keyed_by_header(self) -> None:
        rows = parse_table(TABLE_HTML, BASE_URL, API_BASE)

        assert rows[0] == {
            "no": 1,
            "namaWilayah": "Prov. Aceh",
            "jumlah": 1234,
            "kode": "010000",
            "_ref": f"{BASE_URL}/pendidikan/dikdas/010000/1",
            "_link": f"{API_BASE}/pendidikan/dikdas/010000/1",
        }

    def test_extra_cells_and_missing_links(self) -> None:
        rows = parse_table(TABLE_HTML, BASE_URL, API_BASE)

        assert rows[1] == {
            "no": 2,
            "namaWilayah": "Prov. Bali",
            "jumlah": None,
            "kode": "220000",
            "col4": "catatan",
            "_ref": None,
            "_link": None,
        }

    def test_npsn_column_stays_string(self) -> None:
        html = (
            '<table id="table1"><thead><tr><th>No</th><th>NPSN</th></tr></thead>'
            '<tbody><tr><td>1</td><td><a href="/pendidikan/npsn/20100001">20100001</a></td></tr></tbody></table>'
        )
        [row] = parse_table(html, BASE_URL, API_BASE)
        assert row["npsn"] == "20100001"
        assert row["_link"] == f"{API_BASE}/pendidikan/npsn/20100001"

    def test_missing_table(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert parse_table("<table id='other'></table>", BASE_URL, API_BASE) == []
        assert any("table1" in msg for msg in caplog.messages)

    def test_custom_table_id(self) -> None:
        html = TABLE_HTML.replace('id="table1"', 'id="rekap"')
        assert len(parse_table(html, BASE_URL, API_BASE, table_id="rekap")) == 2


class TestTableScraper:
    def test_caches_under_url_derived_key(self, cache: JsonCache, cache_root: Path) -> None:
        transport = CountingTransport(TABLE_HTML)
        scraper = TableScraper(ReferensiClient(BASE_URL, client=httpx.Client(transport=transport)), cache)
        url = f"{BASE_URL}/pendidikan/dikdas/2/026000"

        first = scraper.get_table_data(url, API_BASE)
        second = scraper.get_table_data(url, API_BASE)

        assert transport.urls == [url]
        assert len(first.data) == 2
        assert second.data == first.data
        assert (cache_root / "table" / "dikdas" / "2" / "026000.json").is_file()

    def test_disabled_cache_always_scrapes(self, cache_root: Path) -> None:
        disabled = JsonCache(cache_root, enabled=False, ttl_ms=60_000, base_url=BASE_URL)
        transport = CountingTransport(TABLE_HTML)
        scraper = TableScraper(ReferensiClient(BASE_URL, client=httpx.Client(transport=transport)), disabled)
        url = f"{BASE_URL}/pendidikan/dikdas"

        scraper.get_table_data(url, API_BASE)
        scraper.get_table_data(url, API_BASE)

        assert len(transport.urls) == 2
        assert not cache_root.exists()
