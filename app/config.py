"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    project_root = Path(__file__).resolve().parents[1]
    for filename in (".env", ".env.local"):
        env_path = project_root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class AffiliateSettings:
    """
    Amazon Associates link settings.
    """

    tag: str = "dekolaps-21"
    default_domain: str = "www.amazon.es"


@dataclass(frozen=True)
class ShortenerSettings:
    """
    Short.io link shortener settings.
    """

    api_key: str | None = None
    base_url: str = "https://api.short.io/links"
    domain: str = "amazon-dks.short.gy"
    default_title: str = "Producto Amazon"
    timeout_seconds: float = 15.0


@lru_cache(maxsize=1)
def get_affiliate_settings() -> AffiliateSettings:
    """
    Return cached affiliate link settings from environment variables.
    """

    return AffiliateSettings(
        tag=_get_str_env("AMAZON_AFFILIATE_TAG", "dekolaps-21"),
        default_domain=_get_str_env("AMAZON_DEFAULT_DOMAIN", "www.amazon.es"),
    )


@lru_cache(maxsize=1)
def get_shortener_settings() -> ShortenerSettings:
    """
    Return cached Short.io settings from environment variables.
    """

    return ShortenerSettings(
        api_key=_get_optional_str_env("SHORT_IO_API_KEY"),
        base_url=_get_str_env("SHORT_IO_BASE_URL", "https://api.short.io/links"),
        domain=_get_str_env("SHORT_IO_DOMAIN", "amazon-dks.short.gy"),
        default_title=_get_str_env("SHORT_IO_DEFAULT_TITLE", "Producto Amazon"),
        timeout_seconds=max(1.0, _get_float_env("SHORT_IO_TIMEOUT_SECONDS", 15.0)),
    )
