"""Shared error types for the Deriv proxy server."""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass


@dataclass(frozen=True, slots=True)
class RateLimitError(Exception):
    """Raised when a sliding-window rate limiter is saturated."""

    retry_in: float
    limit: int
    window_seconds: float


@dataclass(slots=True)
class DerivAPIError(Exception):
    """An `error` object returned by the Deriv API for a request."""

    error: dict[str, Any] = field(default_factory=dict)
    msg_type: str | None = None

    @property
    def code(self) -> str:
        return str(self.error.get("code") or "DerivError")

    @property
    def message(self) -> str:
        return str(self.error.get("message") or "Deriv API error")

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


@dataclass(slots=True)
class UpstreamClosedError(Exception):
    """The upstream socket closed before a response arrived."""

    reason: str = "upstream connection closed"

    def __str__(self) -> str:
        return self.reason


@dataclass(slots=True)
class CallTimeoutError(Exception):
    timeout_s: float

    def __str__(self) -> str:
        return f"no response from Deriv within {self.timeout_s:g} seconds"


@dataclass(slots=True)
class PendingQueueFullError(Exception):
    """Raised when too many messages are waiting for authorization."""

    limit: int

    def __str__(self) -> str:
        return f"pending queue is full ({self.limit} messages)"


@dataclass(slots=True)
class CapacityError(Exception):
    resource: str
    limit: int

    def __str__(self) -> str:
        return f"{self.resource} limit reached ({self.limit})"


@dataclass(slots=True)
class NotAuthenticatedError(Exception):
    def __str__(self) -> str:
        return "Not authenticated"


@dataclass(slots=True)
class InvalidRequestError(Exception):
    code: str
    message: str

    def __str__(self) -> str:
        return self.message


__all__ = [
    "CallTimeoutError",
    "CapacityError",
    "DerivAPIError",
    "InvalidRequestError",
    "NotAuthenticatedError",
    "PendingQueueFullError",
    "RateLimitError",
    "UpstreamClosedError",
]
