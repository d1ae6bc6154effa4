"""
app/schemas/product_scraping.py

Request/response schemas for product scraping, search and browse endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.scraping.types import ExtractedProduct


class ScrapeAmazonRequest(BaseModel):
    """
    Product page to scrape, with the caller's ASIN when already known.
    """

    url: str = Field(..., min_length=1)
    asin: str | None = None


class RecommendationResponse(BaseModel):
    asin: str
    title: str


class ProductScrapeResponse(BaseModel):
    """
    Extracted product data; every field is best-effort.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    real_title: str | None = Field(default=None, alias="realTitle")
    price: str | None = None
    recommended: list[RecommendationResponse] = Field(default_factory=list)

    @classmethod
    def from_product(cls, product: ExtractedProduct) -> ProductScrapeResponse:
        return cls(
            success=True,
            real_title=product.title,
            price=product.price,
            recommended=[
                RecommendationResponse(asin=item.asin, title=item.title)
                for item in product.recommendations
            ],
        )


class SearchResponse(BaseModel):
    result: str


class BrowseResponse(BaseModel):
    content: str
