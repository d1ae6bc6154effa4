"""
Scraping configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from app.scraping.proxy_fetcher import ProxyEndpoint


@dataclass(frozen=True)
class ProxyPoolConfig:
    """
    Public proxy endpoints and browser identities for the fan-out fetcher.
    """

    endpoints: tuple[ProxyEndpoint, ...] = field(default_factory=tuple)
    user_agents: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ScrapingSettings:
    """
    Runtime settings for upstream scraping.
    """

    scraperapi_keys: tuple[str, ...]
    scrapedo_api_key: str | None
    timeout_seconds: float
    proxy_timeout_seconds: float
    min_content_length: int
    continue_on_network_error: bool
    proxy_config_path: str
