"""
app/api/routers package marker.
"""

from app.api.routers.links import router as links_router
from app.api.routers.product_scraping import router as product_scraping_router

__all__ = [
    "links_router",
    "product_scraping_router",
]
