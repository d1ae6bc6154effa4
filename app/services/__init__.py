"""
app/services package marker.
"""

from app.services.affiliate_service import (
    AffiliateLink,
    InvalidProductURLError,
    build_affiliate_link,
)
from app.services.product_scraping_service import (
    ProductScrapingService,
    get_product_scraping_service,
)

__all__ = [
    "AffiliateLink",
    "InvalidProductURLError",
    "build_affiliate_link",
    "ProductScrapingService",
    "get_product_scraping_service",
]
