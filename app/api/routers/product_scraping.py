"""
app/api/routers/product_scraping.py

Product scraping, keyword search and page browsing endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import HTMLResponse

from app.schemas.product_scraping import (
    BrowseResponse,
    ProductScrapeResponse,
    ScrapeAmazonRequest,
    SearchResponse,
)
from app.scraping.errors import ConfigurationError, ScrapingError
from app.scraping.logging_utils import log_event
from app.services.affiliate_service import is_amazon_url
from app.services.product_scraping_service import (
    ProductScrapingService,
    get_product_scraping_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["product-scraping"])

UNAVAILABLE_MESSAGE = "Servicio temporalmente no disponible, inténtalo de nuevo más tarde."


def _fetch_error(exc: Exception, *, endpoint: str) -> HTTPException:
    log_event(logger, logging.ERROR, "endpoint_fetch_failed", endpoint=endpoint, error=str(exc))
    if isinstance(exc, (ConfigurationError, FileNotFoundError, ValueError)):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno del servidor",
        )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=UNAVAILABLE_MESSAGE,
    )


@router.post("/scrape-amazon", response_model=ProductScrapeResponse)
def scrape_amazon(
    body: ScrapeAmazonRequest,
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
) -> ProductScrapeResponse:
    """
    Scrape a product page through the public proxy pool.
    """

    if not is_amazon_url(body.url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL inválida o no es de Amazon",
        )

    try:
        product = scraping_service.scrape_product_via_proxies(body.url, product_id=body.asin)
    except (ScrapingError, FileNotFoundError, ValueError) as exc:
        raise _fetch_error(exc, endpoint="scrape-amazon") from exc
    return ProductScrapeResponse.from_product(product)


@router.get("/product", response_model=ProductScrapeResponse)
def scrape_product(
    url: str = Query(..., min_length=1, description="Amazon product URL"),
    asin: str | None = Query(default=None, description="Known ASIN of the product"),
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
) -> ProductScrapeResponse:
    """
    Scrape a product page through the rotating ScraperAPI key pool.
    """

    if not is_amazon_url(url):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="URL inválida o no es de Amazon",
        )

    try:
        product = scraping_service.scrape_product(url, product_id=asin)
    except ScrapingError as exc:
        raise _fetch_error(exc, endpoint="product") from exc
    return ProductScrapeResponse.from_product(product)


@router.get("/scrape", response_class=HTMLResponse)
def scrape_raw(
    url: str = Query(..., min_length=1),
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
) -> HTMLResponse:
    """
    Return the raw HTML of any page fetched through Scrape.do.
    """

    try:
        html = scraping_service.fetch_raw(url)
    except ScrapingError as exc:
        raise _fetch_error(exc, endpoint="scrape") from exc
    return HTMLResponse(content=html)


@router.get("/search", response_model=SearchResponse)
def search(
    q: str = Query(default=""),
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
) -> SearchResponse:
    """
    Summarize the first Google results for a keyword query.
    """

    query = q.strip()
    if len(query) < 3:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Falta o consulta demasiado corta: ?q=",
        )

    try:
        return SearchResponse(result=scraping_service.search(query))
    except ScrapingError as exc:
        log_event(logger, logging.WARNING, "search_failed", query=query, error=str(exc))
        return SearchResponse(
            result=(
                "No pude realizar la búsqueda ahora mismo.\n"
                f'Consulta: "{query}"\n'
                f"Error: {str(exc)[:120]}"
            )
        )


@router.get("/browse", response_model=BrowseResponse)
def browse(
    url: str = Query(default=""),
    instructions: str = Query(default=""),
    scraping_service: ProductScrapingService = Depends(get_product_scraping_service),
) -> BrowseResponse:
    """
    Read a page and return a truncated digest for a language model.
    """

    if not url.strip() or not instructions.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Faltan url o instructions",
        )

    try:
        return BrowseResponse(content=scraping_service.browse(url.strip(), instructions))
    except ScrapingError as exc:
        log_event(logger, logging.WARNING, "browse_failed", url=url, error=str(exc))
        return BrowseResponse(
            content=f"No pude leer la página.\nURL: {url}\nError: {str(exc)[:150]}"
        )
