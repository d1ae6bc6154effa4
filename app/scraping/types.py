"""
Shared scraping runtime data models.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from app.scraping.errors import ConfigurationError


@dataclass(frozen=True)
class CredentialPool:
    """
    Ordered, immutable set of upstream API keys available for rotation.
    """

    credentials: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.credentials:
            raise ConfigurationError("Credential pool is empty; configure at least one API key.")

    @classmethod
    def from_values(cls, values: Iterable[str | None]) -> CredentialPool:
        """
        Build a pool from raw values, dropping blanks and surrounding whitespace.
        """

        cleaned = tuple(value.strip() for value in values if value and value.strip())
        return cls(credentials=cleaned)

    def __len__(self) -> int:
        return len(self.credentials)

    def __getitem__(self, index: int) -> str:
        return self.credentials[index]


class RotationState:
    """
    Index of the last credential that succeeded.

    Shared by reference between fetch calls; concurrent passes are not
    serialized. Use `SynchronizedRotationState` to guard cursor access.
    """

    def __init__(self, cursor: int = 0) -> None:
        self.cursor = cursor

    def start_index(self, pool_size: int) -> int:
        if pool_size <= 0 or not 0 <= self.cursor < pool_size:
            return 0
        return self.cursor

    def mark_success(self, index: int) -> None:
        self.cursor = index


class SynchronizedRotationState(RotationState):
    """
    Rotation state whose reads and writes are guarded by a lock.
    """

    def __init__(self, cursor: int = 0) -> None:
        super().__init__(cursor)
        self._lock = threading.Lock()

    def start_index(self, pool_size: int) -> int:
        with self._lock:
            return super().start_index(pool_size)

    def mark_success(self, index: int) -> None:
        with self._lock:
            super().mark_success(index)


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    QUOTA_OR_AUTH_ERROR = "quota_or_auth_error"
    NETWORK_ERROR = "network_error"
    HARD_ERROR = "hard_error"


@dataclass(frozen=True)
class FetchAttempt:
    """
    One upstream call made during a rotation pass.
    """

    credential_index: int
    outcome: AttemptOutcome
    http_status: int | None = None
    error_detail: str | None = None


@dataclass(frozen=True)
class Recommendation:
    asin: str
    title: str


@dataclass(frozen=True)
class ExtractedProduct:
    """
    Best-effort product data recovered from one product page.
    """

    title: str | None = None
    price: str | None = None
    recommendations: tuple[Recommendation, ...] = field(default_factory=tuple)
