from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _report_configuration() -> None:
    """
    Log which upstream credentials are configured.

    Missing credentials do not stop the process: each request that needs
    them fails with a configuration error instead.
    """

    from app.config import get_shortener_settings
    from app.scraping.config import get_scraping_settings

    log = logging.getLogger(__name__)
    settings = get_scraping_settings()
    if settings.scraperapi_keys:
        log.info("ScraperAPI key pool loaded with %d key(s)", len(settings.scraperapi_keys))
    else:
        log.error(
            "No ScraperAPI keys configured. Set SCRAPERAPI_KEY_1, SCRAPERAPI_KEY_2, ..."
        )
    if not settings.scrapedo_api_key:
        log.warning("SCRAPEDO_API_KEY is not set; /api/scrape will fail.")
    if not get_shortener_settings().api_key:
        log.warning("SHORT_IO_API_KEY is not set; /api/shorten will fail.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Report upstream configuration on boot."""
    _report_configuration()
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()

    application = FastAPI(
        title="Amazon Affiliate Tools API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import links_router, product_scraping_router

    application.include_router(links_router)
    application.include_router(product_scraping_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    return application


app = create_app()
