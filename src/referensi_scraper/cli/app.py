import logging
from typing import Annotated

import typer

from referensi_scraper.cache.facade import JsonCache
from referensi_scraper.cli._logging import configure_logging
from referensi_scraper.cli._output import (
    print_cache_cleared,
    print_cache_disabled,
    print_cache_entry,
    print_cache_miss,
    print_error,
)
from referensi_scraper.config import Settings, create_config, load_settings
from referensi_scraper.exceptions import ReferensiException
from referensi_scraper.web.app import create_app

logger = logging.getLogger(__name__)

app = typer.Typer(name="referensi", help="Scraping proxy for referensi.data.kemdikbud.go.id.")

_ConfigOpt = Annotated[str, typer.Option("--config", help="Path to the YAML config file")]
_KeyArg = Annotated[str, typer.Argument(help="Cache key, e.g. table/dikdas/2/026000 or npsn/*/20100001")]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
) -> None:
    """Referensi scraper: serve scraped data and manage its cache."""
    configure_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


def _load(config_path: str, overrides: dict[str, object] | None = None) -> Settings:
    try:
        return load_settings(create_config(yaml_path=config_path, overrides=overrides))
    except ReferensiException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", help="Port to listen on")] = None,
    config_path: _ConfigOpt = "referensi.yaml",
) -> None:
    """Run the HTTP server."""
    overrides: dict[str, object] = {}
    if host is not None:
        overrides["host"] = host
    if port is not None:
        overrides["port"] = port
    settings = _load(config_path, overrides)

    logger.info("Environment: %s", settings.env)
    logger.info("Cache: %s (%s)", "enabled" if settings.cache_enabled else "disabled", settings.cache_dir)
    logger.info("App URL: http://%s:%d", settings.host, settings.port)
    create_app(settings).run(host=settings.host, port=settings.port, threaded=True)


@app.command("clear-cache")
def clear_cache(
    key: Annotated[str | None, typer.Argument(help="Cache key to clear; omit to clear everything")] = None,
    config_path: _ConfigOpt = "referensi.yaml",
) -> None:
    """Clear one cache entry, or the whole cache."""
    cache = JsonCache.from_settings(_load(config_path))
    if not cache.enabled:
        print_cache_disabled()
        return
    try:
        cache.clear(key)
    except ReferensiException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_cache_cleared(key)


@app.command("cache-get")
def cache_get(key: _KeyArg, config_path: _ConfigOpt = "referensi.yaml") -> None:
    """Show a cached entry."""
    cache = JsonCache.from_settings(_load(config_path))
    if not cache.enabled:
        print_cache_disabled()
        raise typer.Exit(code=1)
    try:
        entry = cache.get(key)
    except ReferensiException as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    if entry is None:
        print_cache_miss(key)
        raise typer.Exit(code=1)
    print_cache_entry(key, entry)
