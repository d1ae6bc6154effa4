"""
app/services/affiliate_service.py

Amazon affiliate link generation and fallback product titles.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from app.scraping.parsing.identifiers import extract_asin, placeholder_title

AMAZON_HOST_PATTERN = re.compile(r"amazon\.", re.IGNORECASE)
HOST_PATTERN = re.compile(r"https?://([^/?#]+)", re.IGNORECASE)
SLUG_PATTERN = re.compile(r"/([^/]+)/dp/[A-Z0-9]{10}", re.IGNORECASE)
RESERVED_SLUGS = {"dp", "gp", "product", "ref", "sspa", "tag"}


class InvalidProductURLError(ValueError):
    """
    Raised when a URL cannot be turned into an affiliate link.
    """


@dataclass(frozen=True)
class AffiliateLink:
    asin: str
    domain: str
    original_url: str
    affiliate_url: str


def is_amazon_url(url: str) -> bool:
    return bool(AMAZON_HOST_PATTERN.search(url or ""))


def domain_from_url(url: str, default: str = "www.amazon.es") -> str:
    match = HOST_PATTERN.match((url or "").strip())
    return match.group(1) if match else default


def build_affiliate_link(url: str, *, tag: str, default_domain: str = "www.amazon.es") -> AffiliateLink:
    """
    Rewrite an Amazon product URL into a clean `/dp/<ASIN>` link carrying `tag`.
    """

    cleaned = (url or "").strip()
    if not cleaned:
        raise InvalidProductURLError("Por favor, introduce una URL de Amazon")
    if not is_amazon_url(cleaned):
        raise InvalidProductURLError("La URL introducida no es válida. Debe ser de Amazon.")

    asin = extract_asin(cleaned)
    if asin is None:
        raise InvalidProductURLError("No se encontró el código ASIN del producto.")

    domain = domain_from_url(cleaned, default=default_domain)
    return AffiliateLink(
        asin=asin,
        domain=domain,
        original_url=cleaned,
        affiliate_url=f"https://{domain}/dp/{asin}/ref=nosim?tag={tag}",
    )


def title_from_url_slug(url: str) -> str | None:
    """
    Human-readable title from the SEO slug preceding `/dp/<ASIN>`, if usable.
    """

    try:
        path = urlparse(url).path
    except ValueError:
        return None

    match = SLUG_PATTERN.search(path)
    if match is None:
        return None

    slug = unquote(match.group(1)).strip()
    if not 3 <= len(slug) <= 200:
        return None
    if "." in slug or "?" in slug or slug.lower() in RESERVED_SLUGS:
        return None

    words = slug.replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def fallback_title(url: str, asin: str) -> str:
    """
    Best title available without fetching the page.
    """

    title = title_from_url_slug(url)
    if not title or "amazon" in title.lower() or len(title) < 3:
        return placeholder_title(asin)
    return title[:120]
