"""
Euro price parsing and formatting.

Amazon pages mix Spanish (`1.234,56 €`) and machine (`1234.56`) notations.
Both are normalized to `1.234,56 €`.
"""

from __future__ import annotations

import re

MIN_PRICE_VALUE = 1.0

_NON_NUMERIC = re.compile(r"[^0-9,.]")
_DOT_THOUSANDS = re.compile(r"^\d{1,3}\.\d{3}$")


def _canonical_number(raw: object) -> str | None:
    """
    Reduce a price string to `<digits>[,<digits>]` using a single decimal comma.
    """

    numeric = _NON_NUMERIC.sub("", str(raw)).strip(".,")
    if not numeric:
        return None

    if "," in numeric and "." in numeric:
        if numeric.rfind(".") > numeric.rfind(","):
            numeric = numeric.replace(",", "").replace(".", ",")
        else:
            numeric = numeric.replace(".", "")
    elif numeric.count(".") == 1 and not _DOT_THOUSANDS.match(numeric):
        numeric = numeric.replace(".", ",")
    elif "." in numeric:
        numeric = numeric.replace(".", "")

    if numeric.count(",") > 1:
        whole, _, decimal = numeric.rpartition(",")
        numeric = f"{whole.replace(',', '')},{decimal}"
    return numeric or None


def parse_amount(raw: object) -> float | None:
    """
    Numeric value of a price string, or None when it has no digits.
    """

    canonical = _canonical_number(raw)
    if canonical is None:
        return None
    try:
        return float(canonical.replace(",", "."))
    except ValueError:
        return None


def format_thousands(value: int) -> str:
    return f"{value:,}".replace(",", ".")


def normalize_price(raw: object) -> str | None:
    """
    Format a raw price as `1.234,56 €`; None when below one euro or unparseable.
    """

    canonical = _canonical_number(raw)
    if canonical is None:
        return None

    amount = parse_amount(canonical)
    if amount is None or amount < MIN_PRICE_VALUE:
        return None

    whole, _, decimal = canonical.partition(",")
    formatted_decimal = decimal.ljust(2, "0")[:2]
    return f"{format_thousands(int(whole or '0'))},{formatted_decimal} €"
