"""
Amazon product identifier (ASIN) helpers.
"""

from __future__ import annotations

import re

ASIN_PATTERN = re.compile(r"^[A-Z0-9]{10}$")

ASIN_URL_PATTERNS = (
    re.compile(r"/dp/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/gp/product/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/product/([A-Z0-9]{10})", re.IGNORECASE),
    re.compile(r"/exec/obidos/ASIN/([A-Z0-9]{10})", re.IGNORECASE),
)


def extract_asin(url: str | None) -> str | None:
    """
    Return the ASIN embedded in a product URL path, uppercased.
    """

    if not url:
        return None
    for pattern in ASIN_URL_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1).upper()
    return None


def is_valid_asin(value: str | None) -> bool:
    return bool(value) and ASIN_PATTERN.match(value) is not None


def placeholder_title(asin: str) -> str:
    return f"Producto {asin}"
