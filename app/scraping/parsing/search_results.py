"""
Plain-text digests of search result pages and arbitrary web pages.
"""

from __future__ import annotations

import re
from urllib.parse import quote_plus

from bs4 import BeautifulSoup

NO_RESULTS_MESSAGE = "No pude extraer resultados claros de la búsqueda."
TRUNCATION_MARKER = "… [truncado]"
PRICE_INSTRUCTION_KEYWORDS = ("precio", "price", "oferta")
PAGE_PRICE_REGEX = re.compile(r"(\d{1,3}(?:[.,\s]?\d{3})*[.,]\d{2})\s*€?")


def google_search_url(query: str) -> str:
    return f"https://www.google.com/search?q={quote_plus(query.strip())}"


def summarize_search_results(html: str, *, limit: int = 6) -> str:
    """
    Pair result headings with their snippets as `title\\nsnippet` blocks.
    """

    soup = BeautifulSoup(html or "", "html.parser")
    titles = [node.get_text(" ", strip=True) for node in soup.find_all("h3")]
    snippets = [node.get_text(" ", strip=True) for node in soup.select("div.VwiC3b")]

    blocks: list[str] = []
    for index, title in enumerate(titles[:limit]):
        if not title:
            continue
        snippet = snippets[index] if index < len(snippets) else ""
        blocks.append(f"{title}\n{snippet}".rstrip())

    return "\n\n".join(blocks) if blocks else NO_RESULTS_MESSAGE


def build_browse_digest(html: str, instructions: str, *, max_chars: int = 14000) -> str:
    """
    Truncated page content for a language model, with price hints when asked for.
    """

    html = html or ""
    content = html[:max_chars]
    if len(html) > max_chars:
        content += TRUNCATION_MARKER

    lowered = instructions.lower()
    if any(keyword in lowered for keyword in PRICE_INSTRUCTION_KEYWORDS):
        prices = [match.group(0).strip() for match in PAGE_PRICE_REGEX.finditer(html)][:10]
        if prices:
            content = "Precios encontrados:\n" + "\n".join(prices) + "\n\n" + content

    return f"{content}\n\nInstrucciones recibidas: {instructions}"
