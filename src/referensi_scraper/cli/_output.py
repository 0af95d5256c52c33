import json
from typing import Any

from rich.console import Console

from referensi_scraper.cache.store import CacheEntry

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_cache_cleared(key: str | None) -> None:
    if key:
        console.print(f"[bold green]Cleared[/bold green] cache entry [bold]'{key}'[/bold]")
    else:
        console.print("[bold green]Cleared[/bold green] all cache entries")


def print_cache_entry(key: str, entry: CacheEntry) -> None:
    payload: dict[str, Any] = {"data": entry.value, "scrapedAt": entry.scraped_at}
    console.print(f"[bold]{key}[/bold] scraped at {entry.scraped_at}")
    console.print_json(json.dumps(payload, ensure_ascii=False))


def print_cache_miss(key: str) -> None:
    console.print(f"[yellow]No cached entry for[/yellow] [bold]'{key}'[/bold]")


def print_cache_disabled() -> None:
    err_console.print(
        "[yellow]Caching is disabled.[/yellow] Set REFERENSI__CACHE__ENABLED=true or run with env=production."
    )
