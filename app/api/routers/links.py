"""
app/api/routers/links.py

Affiliate link generation and link shortening endpoints.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from app.config import AffiliateSettings, get_affiliate_settings, get_shortener_settings
from app.connectors.short_io import ShortenerError, ShortIOClient
from app.schemas.links import (
    AffiliateLinkRequest,
    AffiliateLinkResponse,
    ShortenRequest,
    ShortenResponse,
)
from app.scraping.errors import ConfigurationError
from app.services.affiliate_service import (
    InvalidProductURLError,
    build_affiliate_link,
    fallback_title,
)

router = APIRouter(prefix="/api", tags=["links"])


@lru_cache(maxsize=1)
def get_short_io_client() -> ShortIOClient:
    """
    Build and cache the Short.io client.
    """

    return ShortIOClient(settings=get_shortener_settings())


@router.post("/affiliate-link", response_model=AffiliateLinkResponse)
def create_affiliate_link(
    body: AffiliateLinkRequest,
    settings: AffiliateSettings = Depends(get_affiliate_settings),
) -> AffiliateLinkResponse:
    """
    Turn a pasted Amazon product URL into a tagged affiliate link.
    """

    try:
        link = build_affiliate_link(
            body.url,
            tag=settings.tag,
            default_domain=settings.default_domain,
        )
    except InvalidProductURLError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return AffiliateLinkResponse(
        asin=link.asin,
        domain=link.domain,
        original_url=link.original_url,
        affiliate_url=link.affiliate_url,
        product_title=fallback_title(link.original_url, link.asin),
    )


@router.post("/shorten", response_model=ShortenResponse)
def shorten_link(
    body: ShortenRequest,
    client: ShortIOClient = Depends(get_short_io_client),
) -> ShortenResponse | JSONResponse:
    """
    Shorten an affiliate link through Short.io.
    """

    if not body.original_url:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Falta originalURL",
        )

    try:
        short_url = client.shorten(body.original_url, path=body.path, title=body.title)
    except ConfigurationError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error interno al acortar enlace",
        ) from exc
    except ShortenerError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc), "details": exc.details},
        )
    return ShortenResponse(short_url=short_url)
