from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from referensi_scraper.exceptions import ConfigError

DEFAULT_CACHE_TTL_MS = 24 * 60 * 60 * 1000

_TRUTHY = frozenset({"true", "1", "yes", "on"})


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...

    def get(self, key: str, default: object = None) -> object: ...


_DEFAULTS: dict[str, object] = {
    "env": "development",
    "host": "127.0.0.1",
    "port": 3000,
    "base_url": "https://referensi.data.kemdikbud.go.id",
    "cache": {
        "dir": ".cache",
        "ttl_ms": DEFAULT_CACHE_TTL_MS,
    },
}


@dataclass(frozen=True)
class Settings:
    """Process-wide settings, read once at startup."""

    env: str
    host: str
    port: int
    base_url: str
    cache_dir: Path
    cache_enabled: bool
    cache_ttl_ms: int


def create_config(
    yaml_path: str = "referensi.yaml",
    env_prefix: str = "REFERENSI",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file. A missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``REFERENSI__CACHE__ENABLED``.
        defaults: Default configuration values.
        overrides: Values that take precedence over every other layer.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def _parse_bool(value: object) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def _parse_ttl(value: object) -> int:
    try:
        ttl = int(str(value))
    except ValueError:
        return DEFAULT_CACHE_TTL_MS
    return ttl if ttl > 0 else DEFAULT_CACHE_TTL_MS


def _resolve_cache_dir(value: object) -> Path:
    path = Path(str(value)).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path


def load_settings(cfg: AppConfig | None = None) -> Settings:
    """Build :class:`Settings` from a layered configuration.

    Caching defaults to enabled only when ``env`` is ``production``. A relative
    ``cache.dir`` is taken from the working directory at startup.
    """
    if cfg is None:
        cfg = create_config()

    env = str(cfg["env"])
    try:
        port = int(str(cfg["port"]))
    except ValueError:
        raise ConfigError(f"Invalid port: {cfg['port']!r}") from None

    raw_enabled = cfg.get("cache.enabled")
    cache_enabled = env == "production" if raw_enabled is None else _parse_bool(raw_enabled)

    return Settings(
        env=env,
        host=str(cfg["host"]),
        port=port,
        base_url=str(cfg["base_url"]).rstrip("/"),
        cache_dir=_resolve_cache_dir(cfg["cache.dir"]),
        cache_enabled=cache_enabled,
        cache_ttl_ms=_parse_ttl(cfg.get("cache.ttl_ms", DEFAULT_CACHE_TTL_MS)),
    )
