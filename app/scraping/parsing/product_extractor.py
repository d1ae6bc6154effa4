"""
Best-effort title, price and recommendation extraction from Amazon product pages.

No single source is reliable across page variants, so each field is
recovered by an ordered list of named strategies. A strategy takes a
`ProductPage` and returns a candidate string or None; the first strategy
that yields a value wins.
"""

from __future__ import annotations

import html as html_lib
import json
import logging
import re
from collections.abc import Callable, Iterable, Iterator, Sequence
from functools import cached_property
from typing import Any

from bs4 import BeautifulSoup, Tag

from app.scraping.logging_utils import log_event
from app.scraping.parsing.identifiers import extract_asin, is_valid_asin, placeholder_title
from app.scraping.parsing.prices import normalize_price, parse_amount
from app.scraping.types import ExtractedProduct, Recommendation

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 15
TITLE_MAX_LENGTH = 120
PAGE_TITLE_MIN_LENGTH = 20

PRICE_FLOOR = 10.0
FALLBACK_PRICE_FLOOR = 1.0

MIN_RECOMMENDATIONS = 4
MAX_RECOMMENDATIONS = 8
RECOMMENDATION_TITLE_MIN_LENGTH = 10
RECOMMENDATION_TITLE_MAX_LENGTH = 120

MARKETING_PARENTHETICAL = re.compile(
    r"\s*\([^)]*(?:oferta|descuento|prime|ahorro|cup[oó]n|env[ií]o|\d+ ?€|"
    r"offer|discount|deal|coupon|shipping)[^)]*\)",
    re.IGNORECASE,
)
ANY_PARENTHETICAL = re.compile(r"\s*\([^)]*\)")
BRACKETED_TAG = re.compile(r"\s*\[.*?\]")
BRAND_SEPARATOR = re.compile(r"[-:|–](?=\s*Amazon)", re.IGNORECASE)
WHITESPACE = re.compile(r"\s+")

INLINE_PRICE_FIELDS = re.compile(
    r'"(?:priceAmount|displayPriceAmount|priceToPayAmount|landingPriceAmount)"'
    r'\s*:\s*"?([0-9][0-9.,]*)"?',
    re.IGNORECASE,
)
PROMOTIONAL_PRICE_KEYWORDS = (
    "ahorro",
    "cupón",
    "cupon",
    "descuento",
    "envío",
    "envio",
    "gastos de envío",
    "prime",
    "suscríbete y ahorra",
    "coupon",
    "shipping",
    "subscribe & save",
)

PROMOTIONAL_TITLE = re.compile(
    r"\b(?:patrocinado|sponsored|ad|anuncio|prime|oferta)\b",
    re.IGNORECASE,
)
# The alt text must belong to the same block: the gap may not cross another data-asin.
BROAD_RECOMMENDATION = re.compile(
    r"data-asin=[\"']([A-Z0-9]{10})[\"'](?:(?!data-asin=).)*?alt=[\"']([^\"']{10,250})[\"']",
    re.IGNORECASE,
)


class ProductPage:
    """
    Raw product page HTML with lazily parsed views.
    """

    def __init__(self, html: str) -> None:
        self.html = html or ""

    @cached_property
    def soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.html, "html.parser")

    @cached_property
    def structured_data(self) -> list[dict[str, Any]]:
        """
        JSON-LD objects embedded in the page, flattened out of lists and `@graph`.
        """

        objects: list[dict[str, Any]] = []
        for script in self.soup.find_all("script", attrs={"type": "application/ld+json"}):
            raw = script.string or script.get_text()
            try:
                parsed = json.loads(raw)
            except (TypeError, ValueError):
                continue
            objects.extend(_flatten_json_ld(parsed))
        return objects


Strategy = Callable[[ProductPage], str | None]


def first_match(
    strategies: Sequence[Strategy],
    page: ProductPage,
    *,
    accept: Callable[[str], bool] = bool,
) -> str | None:
    """
    Value of the first strategy whose result passes `accept`.
    """

    for strategy in strategies:
        try:
            value = strategy(page)
        except Exception as exc:
            log_event(
                logger,
                logging.WARNING,
                "extraction_strategy_failed",
                strategy=strategy.__name__,
                error=str(exc),
            )
            continue
        if value is not None and accept(value):
            return value
    return None


def _flatten_json_ld(value: Any) -> Iterator[dict[str, Any]]:
    if isinstance(value, list):
        for item in value:
            yield from _flatten_json_ld(item)
    elif isinstance(value, dict):
        yield value
        graph = value.get("@graph")
        if isinstance(graph, list):
            yield from _flatten_json_ld(graph)


def _collapse(value: str) -> str:
    return WHITESPACE.sub(" ", value).strip()


# ---------------------------------------------------------------------------
# Title strategies
# ---------------------------------------------------------------------------


def structured_data_title(page: ProductPage) -> str | None:
    for item in page.structured_data:
        name = item.get("name")
        if not isinstance(name, str) or len(name) <= 10:
            continue
        cleaned = MARKETING_PARENTHETICAL.sub("", name)
        cleaned = BRACKETED_TAG.sub("", cleaned)
        return _collapse(cleaned)
    return None


def page_title_element(page: ProductPage) -> str | None:
    node = page.soup.title
    if node is None:
        return None
    text = node.get_text()
    if len(text.strip()) < PAGE_TITLE_MIN_LENGTH:
        return None
    head = BRAND_SEPARATOR.split(text, maxsplit=1)[0]
    return _collapse(ANY_PARENTHETICAL.sub("", head))


def body_title_element(page: ProductPage) -> str | None:
    node = page.soup.find(id="productTitle")
    if node is None:
        return None
    return _collapse(node.get_text(" ", strip=True))


TITLE_STRATEGIES: tuple[Strategy, ...] = (
    structured_data_title,
    page_title_element,
    body_title_element,
)


# ---------------------------------------------------------------------------
# Price strategies
# ---------------------------------------------------------------------------


def _above(candidate: object, floor: float) -> bool:
    amount = parse_amount(candidate)
    return amount is not None and amount > floor


def structured_data_price(page: ProductPage) -> str | None:
    for item in page.structured_data:
        offers = item.get("offers")
        if isinstance(offers, list):
            offers = next((offer for offer in offers if isinstance(offer, dict)), None)
        if not isinstance(offers, dict):
            continue
        for key in ("price", "lowPrice", "highPrice"):
            candidate = offers.get(key)
            if candidate is None or isinstance(candidate, bool):
                continue
            if _above(candidate, PRICE_FLOOR):
                return str(candidate)
    return None


def inline_script_price(page: ProductPage) -> str | None:
    for script in page.soup.find_all("script"):
        content = script.string or script.get_text()
        if not content:
            continue
        for match in INLINE_PRICE_FIELDS.finditer(content):
            if _above(match.group(1), PRICE_FLOOR):
                return match.group(1)
    return None


def price_triplet(page: ProductPage) -> str | None:
    whole_node = page.soup.select_one(".a-price-whole")
    if whole_node is None:
        return None
    whole = re.sub(r"\D", "", whole_node.get_text())
    if not whole:
        return None

    fraction_node = page.soup.select_one(".a-price-fraction")
    fraction = re.sub(r"\D", "", fraction_node.get_text()) if fraction_node is not None else ""
    fraction = (fraction or "00").ljust(2, "0")[:2]

    candidate = f"{whole},{fraction}"
    return candidate if _above(candidate, PRICE_FLOOR) else None


def offscreen_price(page: ProductPage) -> str | None:
    candidates: list[tuple[float, str]] = []
    for span in page.soup.select("span.a-offscreen"):
        text = span.get_text().strip()
        lowered = text.lower()
        if "€" not in text:
            continue
        if any(keyword in lowered for keyword in PROMOTIONAL_PRICE_KEYWORDS):
            continue
        amount = parse_amount(text)
        if amount is None or amount <= FALLBACK_PRICE_FLOOR:
            continue
        candidates.append((amount, text))

    if not candidates:
        return None
    candidates.sort(key=lambda item: item[0])
    return candidates[0][1]


PRICE_STRATEGIES: tuple[Strategy, ...] = (
    structured_data_price,
    inline_script_price,
    price_triplet,
    offscreen_price,
)


# ---------------------------------------------------------------------------
# Recommendation strategies
# ---------------------------------------------------------------------------

RecommendationStrategy = Callable[[ProductPage], Iterable[tuple[str, str]]]


def sponsored_recommendations(page: ProductPage) -> Iterator[tuple[str, str]]:
    for node in page.soup.find_all(attrs={"data-asin": True, "title": True}):
        yield str(node.get("data-asin", "")), str(node.get("title", ""))


def carousel_recommendations(page: ProductPage) -> Iterator[tuple[str, str]]:
    for block in page.soup.find_all("div", attrs={"data-asin": True}):
        labelled = block.find(
            lambda tag: isinstance(tag, Tag)
            and tag.name in {"img", "span"}
            and len(str(tag.get("alt", ""))) >= RECOMMENDATION_TITLE_MIN_LENGTH
        )
        if labelled is not None:
            yield str(block.get("data-asin", "")), str(labelled.get("alt", ""))


def broad_recommendations(page: ProductPage) -> Iterator[tuple[str, str]]:
    for match in BROAD_RECOMMENDATION.finditer(page.html):
        yield match.group(1), html_lib.unescape(match.group(2))


RECOMMENDATION_STRATEGIES: tuple[RecommendationStrategy, ...] = (
    sponsored_recommendations,
    carousel_recommendations,
    broad_recommendations,
)


def extract_recommendations(
    page: ProductPage,
    *,
    exclude_asin: str | None = None,
) -> tuple[Recommendation, ...]:
    """
    Related products, deduplicated by ASIN in first-seen order.

    An ASIN whose title was found promotional stays excluded even if a
    later strategy pairs it with another title.
    """

    collected: dict[str, Recommendation] = {}
    promotional: set[str] = set()
    for strategy in RECOMMENDATION_STRATEGIES:
        for asin, raw_title in strategy(page):
            if len(collected) >= MAX_RECOMMENDATIONS:
                break
            asin = asin.strip().upper()
            title = _collapse(raw_title)
            if not is_valid_asin(asin) or asin == exclude_asin:
                continue
            if asin in collected or asin in promotional:
                continue
            if PROMOTIONAL_TITLE.search(title):
                promotional.add(asin)
                continue
            if len(title) < RECOMMENDATION_TITLE_MIN_LENGTH:
                continue
            collected[asin] = Recommendation(asin=asin, title=title[:RECOMMENDATION_TITLE_MAX_LENGTH])
        if len(collected) >= MIN_RECOMMENDATIONS:
            break
    return tuple(collected.values())


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def detect_product_id(page: ProductPage) -> str | None:
    """
    ASIN of the page's own product, from the canonical link or the ASIN input.
    """

    canonical = page.soup.find("link", rel="canonical")
    if canonical is not None:
        asin = extract_asin(str(canonical.get("href", "")))
        if asin:
            return asin

    asin_input = page.soup.find("input", attrs={"id": "ASIN"})
    if asin_input is not None:
        value = str(asin_input.get("value", "")).strip().upper()
        if is_valid_asin(value):
            return value
    return None


def extract_product(html: str, *, product_id: str | None = None) -> ExtractedProduct:
    """
    Recover title, price and recommendations; fields that cannot be found stay empty.
    """

    page = ProductPage(html)
    asin = product_id.strip().upper() if product_id and product_id.strip() else None
    if asin is None:
        asin = detect_product_id(page)

    title = first_match(
        TITLE_STRATEGIES,
        page,
        accept=lambda value: len(value) >= TITLE_MIN_LENGTH,
    )
    if title is None and asin:
        title = placeholder_title(asin)

    raw_price = first_match(PRICE_STRATEGIES, page)
    price = normalize_price(raw_price) if raw_price is not None else None

    recommendations = extract_recommendations(page, exclude_asin=asin)
    log_event(
        logger,
        logging.INFO,
        "product_extracted",
        asin=asin,
        has_title=title is not None,
        has_price=price is not None,
        recommendations=len(recommendations),
    )
    return ExtractedProduct(
        title=title[:TITLE_MAX_LENGTH] if title else None,
        price=price,
        recommendations=recommendations,
    )
