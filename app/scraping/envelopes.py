"""
Decoding of upstream response bodies into page HTML.

Proxies and scraping APIs either return the page verbatim or wrap it in a
small JSON envelope. Known envelope shapes are matched explicitly; anything
else is treated as raw text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum


class PayloadShape(str, Enum):
    CONTENTS = "contents"
    HTML = "html"
    BODY = "body"
    DATA = "data"
    RAW_TEXT = "raw_text"


ENVELOPE_SHAPES: tuple[PayloadShape, ...] = (
    PayloadShape.CONTENTS,
    PayloadShape.HTML,
    PayloadShape.BODY,
    PayloadShape.DATA,
)


@dataclass(frozen=True)
class DecodedPayload:
    shape: PayloadShape
    content: str

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()


def decode_payload(body: str, content_type: str | None = None) -> DecodedPayload:
    """
    Unwrap HTML from a JSON envelope when the response declares JSON.
    """

    if "application/json" not in (content_type or "").lower():
        return DecodedPayload(shape=PayloadShape.RAW_TEXT, content=body or "")

    try:
        parsed = json.loads(body)
    except ValueError:
        return DecodedPayload(shape=PayloadShape.RAW_TEXT, content=body or "")

    if not isinstance(parsed, dict):
        return DecodedPayload(shape=PayloadShape.RAW_TEXT, content="")

    for shape in ENVELOPE_SHAPES:
        value = parsed.get(shape.value)
        if isinstance(value, str) and value:
            return DecodedPayload(shape=shape, content=value)
    return DecodedPayload(shape=PayloadShape.RAW_TEXT, content="")
