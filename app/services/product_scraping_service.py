"""
app/services/product_scraping_service.py

Service orchestration for product scraping, keyword search and page browsing.
"""

from __future__ import annotations

import logging
from functools import lru_cache

import requests

from app.scraping.config import (
    ProxyPoolConfig,
    ScrapingSettings,
    get_scraping_settings,
    load_proxy_pool_config,
)
from app.scraping.logging_utils import log_event
from app.scraping.parsing import build_browse_digest, extract_product, summarize_search_results
from app.scraping.parsing.search_results import google_search_url
from app.scraping.providers import ScraperAPIProvider, ScrapeDoProvider, UpstreamProvider
from app.scraping.proxy_fetcher import DEFAULT_USER_AGENT, ProxyFanoutFetcher
from app.scraping.rotating_fetcher import RotatingFetcher
from app.scraping.types import ExtractedProduct, RotationState

logger = logging.getLogger(__name__)


class ProductScrapingService:
    """
    Fetches pages through the configured upstreams and extracts product data.

    One `RotationState` per provider lives for the lifetime of the service,
    so successive calls start from the last key that worked.
    """

    def __init__(
        self,
        *,
        settings: ScrapingSettings | None = None,
        session: requests.Session | None = None,
        proxy_config: ProxyPoolConfig | None = None,
    ) -> None:
        self._settings = settings or get_scraping_settings()
        self._session = session or requests.Session()
        self._proxy_config = proxy_config
        self._rotation_states: dict[str, RotationState] = {}

    def rotating_fetcher(self, provider: UpstreamProvider | None = None) -> RotatingFetcher:
        provider = provider or ScraperAPIProvider()
        credentials: tuple[str, ...]
        if isinstance(provider, ScrapeDoProvider):
            credentials = (self._settings.scrapedo_api_key,) if self._settings.scrapedo_api_key else ()
        else:
            credentials = self._settings.scraperapi_keys

        state = self._rotation_states.setdefault(provider.name, RotationState())
        return RotatingFetcher(
            pool=credentials,
            provider=provider,
            state=state,
            session=self._session,
            timeout_seconds=self._settings.timeout_seconds,
            continue_on_network_error=self._settings.continue_on_network_error,
        )

    def proxy_fetcher(self) -> ProxyFanoutFetcher:
        if self._proxy_config is None:
            self._proxy_config = load_proxy_pool_config(
                config_path=self._settings.proxy_config_path
            )
        return ProxyFanoutFetcher(
            endpoints=self._proxy_config.endpoints,
            session=self._session,
            timeout_seconds=self._settings.proxy_timeout_seconds,
            min_content_length=self._settings.min_content_length,
            user_agents=self._proxy_config.user_agents or (DEFAULT_USER_AGENT,),
        )

    def fetch_raw(self, url: str) -> str:
        """
        Page HTML through Scrape.do, the single-key passthrough provider.
        """

        return self.rotating_fetcher(ScrapeDoProvider()).fetch(url)

    def scrape_product(self, url: str, *, product_id: str | None = None) -> ExtractedProduct:
        html = self.rotating_fetcher().fetch(url)
        product = extract_product(html, product_id=product_id)
        log_event(
            logger,
            logging.INFO,
            "product_scrape_completed",
            url=url,
            path="scraperapi",
            has_price=product.price is not None,
        )
        return product

    def scrape_product_via_proxies(
        self,
        url: str,
        *,
        product_id: str | None = None,
    ) -> ExtractedProduct:
        html = self.proxy_fetcher().fetch(url)
        product = extract_product(html, product_id=product_id)
        log_event(
            logger,
            logging.INFO,
            "product_scrape_completed",
            url=url,
            path="proxies",
            has_price=product.price is not None,
        )
        return product

    def search(self, query: str) -> str:
        html = self.rotating_fetcher().fetch(google_search_url(query))
        return summarize_search_results(html)

    def browse(self, url: str, instructions: str) -> str:
        html = self.rotating_fetcher().fetch(url)
        return build_browse_digest(html, instructions)


@lru_cache(maxsize=1)
def get_product_scraping_service() -> ProductScrapingService:
    """
    Build and cache the product scraping service.
    """

    return ProductScrapingService()
