"""
Fetch-layer exceptions for upstream scraping services.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.scraping.types import FetchAttempt


class ScrapingError(Exception):
    """Base exception for upstream fetch failures."""


class ConfigurationError(ScrapingError):
    """Raised when no credentials or proxy endpoints are configured."""


class QuotaOrAuthError(ScrapingError):
    """Raised when one credential is rate-limited, unauthorized or out of credit."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamHardError(ScrapingError):
    """Raised when the upstream fails for a reason rotation cannot fix."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AllCredentialsExhausted(ScrapingError):
    """
    Raised after every credential (or proxy endpoint) was tried without success.

    `last_error` carries the final recorded cause; `attempts` lists every
    attempt made during the pass, in order.
    """

    def __init__(
        self,
        message: str,
        *,
        last_error: Exception | None = None,
        attempts: list[FetchAttempt] | None = None,
    ) -> None:
        super().__init__(message)
        self.last_error = last_error
        self.attempts = list(attempts or [])
