"""
app/schemas package marker.
"""

from app.schemas.links import (
    AffiliateLinkRequest,
    AffiliateLinkResponse,
    ShortenRequest,
    ShortenResponse,
)
from app.schemas.product_scraping import (
    BrowseResponse,
    ProductScrapeResponse,
    RecommendationResponse,
    ScrapeAmazonRequest,
    SearchResponse,
)

__all__ = [
    "AffiliateLinkRequest",
    "AffiliateLinkResponse",
    "BrowseResponse",
    "ProductScrapeResponse",
    "RecommendationResponse",
    "ScrapeAmazonRequest",
    "SearchResponse",
    "ShortenRequest",
    "ShortenResponse",
]
