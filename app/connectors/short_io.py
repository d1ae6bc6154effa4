"""
app/connectors/short_io.py

Short.io client for shortening affiliate links.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import ShortenerSettings
from app.scraping.errors import ConfigurationError
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


class ShortenerError(RuntimeError):
    """
    Raised when Short.io rejects a shorten request.
    """

    def __init__(self, message: str, *, status_code: int, details: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.details = details if details is not None else {}


class ShortIOClient:
    """
    Thin wrapper over the Short.io "create link" endpoint.
    """

    def __init__(
        self,
        *,
        settings: ShortenerSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    def shorten(
        self,
        original_url: str,
        *,
        path: str | None = None,
        title: str | None = None,
    ) -> str:
        if not self._settings.api_key:
            raise ConfigurationError("SHORT_IO_API_KEY is not configured.")

        payload: dict[str, Any] = {
            "originalURL": original_url,
            "domain": self._settings.domain,
            "title": title or self._settings.default_title,
        }
        if path:
            payload["path"] = path

        response = self._session.post(
            self._settings.base_url,
            json=payload,
            headers={
                "Authorization": self._settings.api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=self._settings.timeout_seconds,
        )

        if not 200 <= response.status_code < 300:
            try:
                details = response.json()
            except ValueError:
                details = {}
            log_event(
                logger,
                logging.ERROR,
                "short_link_failed",
                status_code=response.status_code,
                original_url=original_url,
            )
            raise ShortenerError(
                "Error en Short.io",
                status_code=response.status_code,
                details=details,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ShortenerError(
                "Short.io response was not valid JSON.",
                status_code=502,
            ) from exc

        short_url = data.get("shortURL") if isinstance(data, dict) else None
        if not short_url:
            raise ShortenerError("Short.io response had no shortURL.", status_code=502, details=data)

        log_event(logger, logging.INFO, "short_link_created", original_url=original_url)
        return str(short_url)
