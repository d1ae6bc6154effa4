"""
Scrape one Amazon product page from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging

from app.scraping.errors import ScrapingError
from app.scraping.parsing.identifiers import extract_asin
from app.services.product_scraping_service import ProductScrapingService


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape title, price and recommendations.")
    parser.add_argument("--url", dest="url", required=True, help="Amazon product URL.")
    parser.add_argument(
        "--asin",
        dest="asin",
        default=None,
        help="Product ASIN; taken from the URL when omitted.",
    )
    parser.add_argument(
        "--proxies",
        dest="proxies",
        action="store_true",
        help="Fetch through the public proxy pool instead of ScraperAPI.",
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    service = ProductScrapingService()
    asin = args.asin or extract_asin(args.url)
    try:
        if args.proxies:
            product = service.scrape_product_via_proxies(args.url, product_id=asin)
        else:
            product = service.scrape_product(args.url, product_id=asin)
    except ScrapingError as exc:
        print(json.dumps({"success": False, "error": str(exc)}, indent=2, ensure_ascii=False))
        return 1

    payload = {
        "success": True,
        "realTitle": product.title,
        "price": product.price,
        "recommended": [
            {"asin": item.asin, "title": item.title} for item in product.recommendations
        ],
    }
    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
