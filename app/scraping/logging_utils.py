"""
Structured logging helpers for scraping workflows.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def mask_credential(value: str) -> str:
    """
    Return a log-safe form of an API key: its last four characters only.
    """

    if len(value) <= 4:
        return "****"
    return f"****{value[-4:]}"
