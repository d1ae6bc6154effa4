"""
app/schemas/links.py

Request/response schemas for affiliate link and shortener endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AffiliateLinkRequest(BaseModel):
    url: str


class AffiliateLinkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    asin: str
    domain: str
    original_url: str = Field(..., alias="originalUrl")
    affiliate_url: str = Field(..., alias="affiliateUrl")
    product_title: str = Field(..., alias="productTitle")


class ShortenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_url: str | None = Field(default=None, alias="originalURL")
    path: str | None = None
    title: str | None = None


class ShortenResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    short_url: str = Field(..., alias="shortURL")
