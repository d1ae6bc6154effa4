"""
HTML parsing layer for product, search and browse pages.
"""

from app.scraping.parsing.prices import normalize_price, parse_amount
from app.scraping.parsing.product_extractor import ProductPage, extract_product
from app.scraping.parsing.search_results import build_browse_digest, summarize_search_results

__all__ = [
    "ProductPage",
    "build_browse_digest",
    "extract_product",
    "normalize_price",
    "parse_amount",
    "summarize_search_results",
]
