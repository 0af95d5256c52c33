from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from referensi_scraper.cache.facade import JsonCache
from referensi_scraper.domain.scrape_result import ScrapeResult, utc_now_iso
from referensi_scraper.exceptions import CacheKeyError, UpstreamError
from referensi_scraper.export.csv_export import csv_filename, json_to_csv
from referensi_scraper.scrape.client import ReferensiClient
from referensi_scraper.scrape.detail import InstitutionDetailScraper
from referensi_scraper.scrape.menu import MenuScraper
from referensi_scraper.scrape.table import TableScraper

if TYPE_CHECKING:
    from referensi_scraper.config import Settings

logger = logging.getLogger(__name__)


def _error(code: int, message: str) -> tuple[Response, int]:
    return jsonify({"code": code, "error": message, "timestamp": utc_now_iso()}), code


def _respond(result: ScrapeResult, csv_name: str | None = None) -> Response:
    if csv_name is not None and request.args.get("export") == "csv":
        filename = csv_filename(csv_name, result.scraped_at)
        return Response(
            json_to_csv(result.data),
            mimetype="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return jsonify(result.to_dict())


def _api_base() -> str:
    return request.host_url.rstrip("/")


def create_app(
    settings: Settings,
    cache: JsonCache | None = None,
    client: ReferensiClient | None = None,
) -> Flask:
    """Create the Flask app serving scraped menu, table and detail data.

    GET / lists the menu, GET /pendidikan/<menu>[/<area_id>/<level_id>]
    returns table rows (``?export=csv`` for a CSV download), GET
    /pendidikan/npsn/<npsn> returns one institution, and POST /clear-cache
    drops one cached key or the whole cache.
    """
    app = Flask(__name__)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1)  # type: ignore[method-assign]

    cache = cache or JsonCache.from_settings(settings)
    client = client or ReferensiClient(settings.base_url)
    menu_scraper = MenuScraper(client, cache)
    table_scraper = TableScraper(client, cache)
    detail_scraper = InstitutionDetailScraper(client, cache)

    @app.get("/")
    def menu() -> Response:
        return _respond(menu_scraper.get_menu(_api_base()), csv_name="menu")

    @app.get("/pendidikan/npsn/<npsn>")
    def institution_detail(npsn: str) -> Response:
        return _respond(detail_scraper.get_detail(npsn))

    @app.get("/pendidikan/<menu_name>/<area_id>/<level_id>")
    def area_table(menu_name: str, area_id: str, level_id: str) -> Response:
        url = client.url_for(f"pendidikan/{menu_name}/{area_id}/{level_id}")
        result = table_scraper.get_table_data(url, _api_base())
        return _respond(result, csv_name=f"tabel-{menu_name}-{area_id}-{level_id}")

    @app.get("/pendidikan/<menu_name>")
    def menu_table(menu_name: str) -> Response:
        url = client.url_for(f"pendidikan/{menu_name}")
        result = table_scraper.get_table_data(url, _api_base())
        return _respond(result, csv_name=f"tabel-{menu_name}")

    @app.post("/clear-cache")
    def clear_cache() -> Response:
        body = request.get_json(silent=True)
        key = body.get("key") if isinstance(body, dict) else None
        cache.clear(key or None)
        message = f'Cache for "{key}" cleared' if key else "All cache cleared"
        return jsonify({"message": message, "timestamp": utc_now_iso()})

    @app.errorhandler(CacheKeyError)
    def bad_cache_key(e: CacheKeyError) -> tuple[Response, int]:
        return _error(400, str(e))

    @app.errorhandler(UpstreamError)
    def upstream_failed(e: UpstreamError) -> tuple[Response, int]:
        logger.error("%s", e)
        return _error(502, str(e))

    @app.errorhandler(404)
    def not_found(e: HTTPException) -> tuple[Response, int]:
        logger.warning("[404] %s", request.url)
        return _error(404, "Endpoint not found")

    @app.errorhandler(HTTPException)
    def http_error(e: HTTPException) -> tuple[Response, int]:
        code = e.code or 500
        return _error(code, e.description or e.name)

    @app.errorhandler(Exception)
    def internal_error(e: Exception) -> tuple[Response, int]:
        logger.exception("Unhandled error serving %s", request.url)
        return _error(500, str(e) or "Internal Server Error")

    return app
