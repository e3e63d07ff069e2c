"""
Settings Management Module

Provides pydantic-based configuration with:
- Environment variables using the deployment's established names
  (``INVIDIOUS_POOL``, ``CACHE_TTL_S``, ``UPSTREAM_TIMEOUT_MS``, ...)
- An optional YAML base file (``SEARCH_PROXY_CONFIG`` or settings/config.yaml)
- Validation that fails fast at start-up
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError

DEFAULT_INVIDIOUS_MIRRORS = [
    "https://invidious.fdn.fr",
    "https://vid.puffyan.us",
    "https://iv.ggtyler.dev",
    "https://inv.nadeko.net",
    "https://invidious.nerdvpn.de",
]

DEFAULT_PIPED_MIRRORS = [
    "https://piped.video",
    "https://piped.mha.fi",
    "https://pipedapi.adminforge.de",
    "https://piped.api.garudalinux.org",
    "https://piped.frontendfriendly.xyz",
]

FETCH_MODES = ("race", "sequential", "parallel")


def parse_pool(raw: str | None, default: list[str]) -> list[str]:
    """
    Parse a comma-separated mirror override.

    Blank entries are dropped and trailing slashes stripped. An empty or
    missing override yields the default pool.

    Examples:
        >>> parse_pool("https://a.example/, ,https://b.example", ["https://d"])
        ['https://a.example', 'https://b.example']
        >>> parse_pool("", ["https://d"])
        ['https://d']
    """
    if raw:
        pool = [entry.strip().rstrip("/") for entry in raw.split(",")]
        pool = [entry for entry in pool if entry]
        if pool:
            return pool
    return [entry.rstrip("/") for entry in default]


class Settings(BaseSettings):
    """
    Application settings.

    Configuration hierarchy (lowest to highest precedence):
    1. Built-in defaults
    2. YAML file (``SEARCH_PROXY_CONFIG`` or settings/config.yaml)
    3. Environment variables

    Examples:
        >>> settings = get_settings()
        >>> settings.invidious_pool_urls[0]
        'https://yewtu.be'
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 3000

    invidious_base: str = "https://yewtu.be"
    piped_base: str = "https://pipedapi.kavin.rocks"
    invidious_pool: str = ""
    piped_pool: str = ""
    youtube_base: str = "https://www.youtube.com"
    google_suggest_base: str = "https://suggestqueries.google.com"

    suggest_hl: str = "en"
    suggest_gl: str = "US"

    upstream_timeout_ms: int = 3500
    scrape_timeout_ms: int = 4500
    suggest_fallback_timeout_ms: int = 2500
    fetch_mode: str = "race"

    cache_ttl_s: float = 600
    cache_max: int = 2000

    rate_limit_window_s: float = 60
    rate_limit_max: int = 120

    max_connections: int = 100
    max_keepalive_connections: int = 20

    log_level: str = "INFO"
    log_json: bool = False
    metrics_enabled: bool = False

    @field_validator("fetch_mode")
    @classmethod
    def _check_fetch_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in FETCH_MODES:
            raise ValueError(f"fetch_mode must be one of {FETCH_MODES}, got {value!r}")
        return value

    @field_validator(
        "upstream_timeout_ms",
        "scrape_timeout_ms",
        "suggest_fallback_timeout_ms",
        "cache_ttl_s",
        "cache_max",
        "rate_limit_window_s",
        "rate_limit_max",
    )
    @classmethod
    def _check_positive(cls, value: float) -> float:
        if value <= 0:
            raise ValueError(f"must be positive, got {value}")
        return value

    @property
    def invidious_pool_urls(self) -> list[str]:
        return parse_pool(self.invidious_pool, [self.invidious_base, *DEFAULT_INVIDIOUS_MIRRORS])

    @property
    def piped_pool_urls(self) -> list[str]:
        return parse_pool(self.piped_pool, [self.piped_base, *DEFAULT_PIPED_MIRRORS])

    @property
    def upstream_timeout(self) -> float:
        return self.upstream_timeout_ms / 1000

    @property
    def scrape_timeout(self) -> float:
        return self.scrape_timeout_ms / 1000

    @property
    def suggest_fallback_timeout(self) -> float:
        return self.suggest_fallback_timeout_ms / 1000

    def describe_upstreams(self) -> dict[str, Any]:
        """Effective upstream configuration, for the debug endpoint."""
        return {
            "INVIDIOUS_POOL": self.invidious_pool_urls,
            "PIPED_POOL": self.piped_pool_urls,
            "SUGGEST_HL": self.suggest_hl,
            "SUGGEST_GL": self.suggest_gl,
            "CACHE_TTL_S": self.cache_ttl_s,
            "CACHE_MAX": self.cache_max,
            "UPSTREAM_TIMEOUT_MS": self.upstream_timeout_ms,
            "FETCH_MODE": self.fetch_mode,
        }

    @classmethod
    def load_from_yaml(cls, config_path: Path | None = None) -> "Settings":
        """
        Load settings from an optional YAML file, then apply the environment.

        Args:
            config_path: Path to config file (default: ``SEARCH_PROXY_CONFIG``
                or settings/config.yaml in the working directory)

        Returns:
            Settings instance

        Raises:
            ConfigError: If the file is unreadable or a value is invalid
        """
        if config_path is None:
            config_path = Path(os.getenv("SEARCH_PROXY_CONFIG", "settings/config.yaml"))

        config_data: dict[str, Any] = {}
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigError(
                    "Could not read settings file", context={"path": str(config_path), "error": str(e)}
                ) from e
            if not isinstance(config_data, dict):
                raise ConfigError("Settings file must contain a mapping", context={"path": str(config_path)})

        # Init kwargs outrank the environment in pydantic-settings, so drop any
        # file value the environment already provides.
        environ = {key.lower() for key in os.environ}
        config_data = {
            key: value for key, value in config_data.items() if key.lower() not in environ
        }

        try:
            return cls(**config_data)
        except ValueError as e:
            raise ConfigError("Invalid settings", context={"error": str(e)}) from e


@lru_cache
def get_settings(config_path: Path | None = None) -> Settings:
    """Get cached settings instance."""
    return Settings.load_from_yaml(config_path)


def reload_settings() -> Settings:
    """Reload settings by clearing cache."""
    get_settings.cache_clear()
    return get_settings()


__all__ = [
    "Settings",
    "DEFAULT_INVIDIOUS_MIRRORS",
    "DEFAULT_PIPED_MIRRORS",
    "parse_pool",
    "get_settings",
    "reload_settings",
]
