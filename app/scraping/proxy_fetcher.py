"""
Fan-out fetch across public CORS proxies.

Proxies are tried in a fresh random order per call; a result is accepted
only when the HTTP call succeeds and the page does not look like a block
or captcha page.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import quote

import requests

from app.scraping.envelopes import decode_payload
from app.scraping.errors import AllCredentialsExhausted, ConfigurationError
from app.scraping.logging_utils import log_event
from app.scraping.types import AttemptOutcome, FetchAttempt

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_MARKERS: tuple[str, ...] = (
    "Captcha",
    "sorry",
    "robot",
    "unusual traffic",
    "api-services-support@amazon.com",
)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36"
)


@dataclass(frozen=True)
class ProxyEndpoint:
    """
    A proxy that takes the percent-encoded target URL appended to `prefix`.
    """

    prefix: str
    suffix: str = ""

    def proxied_url(self, target_url: str) -> str:
        return f"{self.prefix}{quote(target_url, safe='')}{self.suffix}"


class ProxyFanoutFetcher:
    """
    Tries shuffled proxy endpoints until one returns a plausible product page.

    `timeout_seconds` is handed to requests as-is, so it bounds the connect
    and each socket read of an attempt rather than its total duration.
    """

    def __init__(
        self,
        *,
        endpoints: Sequence[ProxyEndpoint],
        session: requests.Session | None = None,
        timeout_seconds: float = 20.0,
        min_content_length: int = 5000,
        block_markers: Sequence[str] = DEFAULT_BLOCK_MARKERS,
        required_marker: str | None = "amazon",
        user_agents: Sequence[str] = (DEFAULT_USER_AGENT,),
        accept_language: str = "es-ES,es;q=0.9",
        rng: random.Random | None = None,
    ) -> None:
        self._endpoints = list(endpoints)
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._min_content_length = min_content_length
        self._block_markers = tuple(block_markers)
        self._required_marker = required_marker
        self._user_agents = list(user_agents) or [DEFAULT_USER_AGENT]
        self._accept_language = accept_language
        self._rng = rng or random.Random()

    def fetch(self, target_url: str) -> str:
        if not self._endpoints:
            raise ConfigurationError("No proxy endpoints configured.")

        order = list(self._endpoints)
        self._rng.shuffle(order)
        headers = {
            "User-Agent": self._rng.choice(self._user_agents),
            "Accept-Language": self._accept_language,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "X-Requested-With": "XMLHttpRequest",
        }

        attempts: list[FetchAttempt] = []
        last_error: Exception | None = None
        for index, endpoint in enumerate(order):
            try:
                response = self._session.get(
                    endpoint.proxied_url(target_url),
                    headers=headers,
                    timeout=self._timeout_seconds,
                )
            except requests.RequestException as exc:
                last_error = exc
                attempts.append(
                    FetchAttempt(
                        credential_index=index,
                        outcome=AttemptOutcome.NETWORK_ERROR,
                        error_detail=str(exc),
                    )
                )
                log_event(
                    logger,
                    logging.WARNING,
                    "proxy_request_failed",
                    proxy=endpoint.prefix,
                    error=str(exc),
                )
                continue

            if not 200 <= response.status_code < 300:
                last_error = RuntimeError(f"proxy {endpoint.prefix} responded {response.status_code}")
                attempts.append(
                    FetchAttempt(
                        credential_index=index,
                        outcome=AttemptOutcome.HARD_ERROR,
                        http_status=response.status_code,
                    )
                )
                log_event(
                    logger,
                    logging.WARNING,
                    "proxy_bad_status",
                    proxy=endpoint.prefix,
                    status_code=response.status_code,
                )
                continue

            payload = decode_payload(response.text, response.headers.get("content-type"))
            rejection = self.rejection_reason(payload.content)
            if rejection is not None:
                last_error = RuntimeError(f"proxy {endpoint.prefix} returned {rejection}")
                attempts.append(
                    FetchAttempt(
                        credential_index=index,
                        outcome=AttemptOutcome.HARD_ERROR,
                        http_status=response.status_code,
                        error_detail=rejection,
                    )
                )
                log_event(
                    logger,
                    logging.WARNING,
                    "proxy_content_rejected",
                    proxy=endpoint.prefix,
                    reason=rejection,
                    content_length=len(payload.content),
                )
                continue

            log_event(
                logger,
                logging.INFO,
                "proxy_fetch_succeeded",
                proxy=endpoint.prefix,
                payload_shape=payload.shape.value,
                content_length=len(payload.content),
                attempts=len(attempts) + 1,
            )
            return payload.content

        log_event(
            logger,
            logging.ERROR,
            "proxies_exhausted",
            attempts=len(attempts),
            last_error=str(last_error),
        )
        raise AllCredentialsExhausted(
            f"All {len(order)} proxies failed to return a valid page; last error: {last_error}",
            last_error=last_error,
            attempts=attempts,
        ) from last_error

    def rejection_reason(self, content: str) -> str | None:
        """
        Why a page body is not a usable product page, or None when it is.
        """

        if not content:
            return "empty page"
        for marker in self._block_markers:
            if marker in content:
                return f"block marker '{marker}'"
        if len(content) < self._min_content_length:
            return "page too short"
        if self._required_marker and self._required_marker.lower() not in content.lower():
            return f"missing '{self._required_marker}'"
        return None
