"""
Environment + JSON config loader for upstream scraping.
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from app.config import load_env_files
from app.scraping.config.models import ProxyPoolConfig, ScrapingSettings
from app.scraping.proxy_fetcher import ProxyEndpoint

SCRAPERAPI_KEY_PATTERN = re.compile(r"^(?:VITE_)?SCRAPERAPI_KEY_(\d+)$")


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    stripped = raw.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    raw = os.getenv(name)
    if raw is None:
        return None
    return raw.strip() or None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[3]


def _resolve_config_path(raw_path: str) -> Path:
    candidate = Path(raw_path)
    if candidate.is_absolute():
        return candidate
    return (_project_root() / candidate).resolve()


def collect_scraperapi_keys(environ: Mapping[str, str]) -> tuple[str, ...]:
    """
    Collect numbered ScraperAPI keys, ordered by their number.

    Both `SCRAPERAPI_KEY_<n>` and the legacy `VITE_SCRAPERAPI_KEY_<n>` names
    are accepted; when both define the same number the unprefixed one wins.
    """

    numbered: dict[int, str] = {}
    legacy: dict[int, str] = {}
    for name, value in environ.items():
        match = SCRAPERAPI_KEY_PATTERN.match(name)
        if match is None or not value or not value.strip():
            continue
        target = legacy if name.startswith("VITE_") else numbered
        target[int(match.group(1))] = value.strip()

    merged = {**legacy, **numbered}
    return tuple(merged[number] for number in sorted(merged))


@lru_cache(maxsize=1)
def get_scraping_settings() -> ScrapingSettings:
    """
    Return cached scraping settings from environment variables.
    """

    load_env_files()
    proxy_config_path = _get_str_env(
        "SCRAPER_PROXY_CONFIG_PATH",
        "app/scraping/config/proxies.json",
    )
    return ScrapingSettings(
        scraperapi_keys=collect_scraperapi_keys(os.environ),
        scrapedo_api_key=_get_optional_str_env("SCRAPEDO_API_KEY"),
        timeout_seconds=max(1.0, _get_float_env("SCRAPER_TIMEOUT_SECONDS", 60.0)),
        proxy_timeout_seconds=max(1.0, _get_float_env("SCRAPER_PROXY_TIMEOUT_SECONDS", 20.0)),
        min_content_length=max(0, _get_int_env("SCRAPER_MIN_CONTENT_LENGTH", 5000)),
        continue_on_network_error=_get_bool_env("SCRAPER_CONTINUE_ON_NETWORK_ERROR", True),
        proxy_config_path=str(_resolve_config_path(proxy_config_path)),
    )


def load_proxy_pool_config(*, config_path: str) -> ProxyPoolConfig:
    """
    Load proxy endpoints and user agents from a JSON file.
    """

    path = _resolve_config_path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Proxy config file not found: {path}")

    raw_data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(raw_data, dict):
        raise ValueError("Invalid proxy config: top-level value must be an object.")
    proxies = raw_data.get("proxies", [])
    if not isinstance(proxies, list):
        raise ValueError("Invalid proxy config: 'proxies' must be a list.")

    endpoints: list[ProxyEndpoint] = []
    for entry in proxies:
        if isinstance(entry, str):
            entry = {"prefix": entry}
        if not isinstance(entry, dict):
            continue
        prefix = str(entry.get("prefix", "")).strip()
        if not prefix.startswith(("http://", "https://")):
            continue
        endpoints.append(ProxyEndpoint(prefix=prefix, suffix=str(entry.get("suffix", "")).strip()))

    user_agents = raw_data.get("user_agents", [])
    if not isinstance(user_agents, list):
        user_agents = []

    return ProxyPoolConfig(
        endpoints=tuple(endpoints),
        user_agents=tuple(
            agent.strip() for agent in user_agents if isinstance(agent, str) and agent.strip()
        ),
    )
