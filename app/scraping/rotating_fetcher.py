"""
Key-rotating fetch through a credentialed scraping API.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import requests

from app.scraping.errors import (
    AllCredentialsExhausted,
    ConfigurationError,
    QuotaOrAuthError,
    UpstreamHardError,
)
from app.scraping.logging_utils import log_event, mask_credential
from app.scraping.providers import UpstreamProvider
from app.scraping.types import AttemptOutcome, CredentialPool, FetchAttempt, RotationState

logger = logging.getLogger(__name__)

QUOTA_STATUS_CODES = {401, 403, 429}
QUOTA_BODY_TOKENS = ("credit", "quota", "exceeded", "limit", "no credits")


def is_quota_or_auth_error(status_code: int, body: str) -> bool:
    """
    True when an error response means the key itself is unusable right now.
    """

    if status_code in QUOTA_STATUS_CODES:
        return True
    lowered = (body or "").lower()
    return any(token in lowered for token in QUOTA_BODY_TOKENS)


class RotatingFetcher:
    """
    Fetches page HTML trying each API key once, starting from the last good one.
    """

    def __init__(
        self,
        *,
        pool: CredentialPool | Sequence[str],
        provider: UpstreamProvider,
        state: RotationState,
        session: requests.Session | None = None,
        timeout_seconds: float = 60.0,
        continue_on_network_error: bool = True,
    ) -> None:
        self._pool = pool
        self._provider = provider
        self._state = state
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds
        self._continue_on_network_error = continue_on_network_error

    def fetch(self, target_url: str) -> str:
        pool = self._resolve_pool()
        start_index = self._state.start_index(len(pool))
        attempts: list[FetchAttempt] = []
        last_error: Exception | None = None

        for offset in range(len(pool)):
            index = (start_index + offset) % len(pool)
            credential = pool[index]
            log_event(
                logger,
                logging.INFO,
                "credential_attempt_started",
                provider=self._provider.name,
                key_number=index + 1,
                key=mask_credential(credential),
                target_url=target_url,
            )

            try:
                response = self._send(credential=credential, target_url=target_url)
            except requests.RequestException as exc:
                attempts.append(
                    FetchAttempt(
                        credential_index=index,
                        outcome=AttemptOutcome.NETWORK_ERROR,
                        error_detail=str(exc),
                    )
                )
                last_error = exc
                log_event(
                    logger,
                    logging.WARNING,
                    "credential_network_error",
                    provider=self._provider.name,
                    key_number=index + 1,
                    error=str(exc),
                )
                if self._continue_on_network_error:
                    continue
                raise UpstreamHardError(
                    f"{self._provider.name} request failed with key #{index + 1}: {exc}"
                ) from exc

            status_code = response.status_code
            if 200 <= status_code < 300:
                payload = self._provider.decode(response)
                if payload.is_empty:
                    attempts.append(
                        FetchAttempt(
                            credential_index=index,
                            outcome=AttemptOutcome.HARD_ERROR,
                            http_status=status_code,
                            error_detail="empty response body",
                        )
                    )
                    raise UpstreamHardError(
                        f"{self._provider.name} returned an empty page with key #{index + 1}",
                        status_code=status_code,
                    )

                self._state.mark_success(index)
                log_event(
                    logger,
                    logging.INFO,
                    "credential_attempt_succeeded",
                    provider=self._provider.name,
                    key_number=index + 1,
                    content_length=len(payload.content),
                    attempts=len(attempts) + 1,
                )
                return payload.content

            body = response.text or ""
            if is_quota_or_auth_error(status_code, body):
                attempts.append(
                    FetchAttempt(
                        credential_index=index,
                        outcome=AttemptOutcome.QUOTA_OR_AUTH_ERROR,
                        http_status=status_code,
                        error_detail=body[:180],
                    )
                )
                last_error = QuotaOrAuthError(
                    f"{self._provider.name} key #{index + 1} rejected: {status_code}",
                    status_code=status_code,
                )
                log_event(
                    logger,
                    logging.WARNING,
                    "credential_quota_or_auth_error",
                    provider=self._provider.name,
                    key_number=index + 1,
                    status_code=status_code,
                )
                continue

            log_event(
                logger,
                logging.ERROR,
                "credential_hard_error",
                provider=self._provider.name,
                key_number=index + 1,
                status_code=status_code,
            )
            raise UpstreamHardError(
                f"{self._provider.name} error {status_code}: {body[:180]}",
                status_code=status_code,
            )

        log_event(
            logger,
            logging.ERROR,
            "credentials_exhausted",
            provider=self._provider.name,
            attempts=len(attempts),
            last_error=str(last_error),
        )
        raise AllCredentialsExhausted(
            f"All {len(pool)} {self._provider.name} keys failed; last error: {last_error}",
            last_error=last_error,
            attempts=attempts,
        ) from last_error

    def _resolve_pool(self) -> CredentialPool:
        if isinstance(self._pool, CredentialPool):
            return self._pool
        if not self._pool:
            raise ConfigurationError(f"No {self._provider.name} API keys configured.")
        return CredentialPool.from_values(self._pool)

    def _send(self, *, credential: str, target_url: str) -> requests.Response:
        request = self._provider.build_request(credential=credential, target_url=target_url)
        return self._session.get(
            request.url,
            params=request.params,
            headers=request.headers,
            timeout=self._timeout_seconds,
        )
