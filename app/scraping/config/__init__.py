"""
Config helpers for upstream scraping.
"""

from app.scraping.config.loader import get_scraping_settings, load_proxy_pool_config
from app.scraping.config.models import ProxyPoolConfig, ScrapingSettings

__all__ = [
    "ProxyPoolConfig",
    "ScrapingSettings",
    "get_scraping_settings",
    "load_proxy_pool_config",
]
