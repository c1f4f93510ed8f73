"""Runtime settings (dataclasses only)."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class DerivSettings:
    app_id: int
    ws_url: str
    call_timeout_s: float
    open_timeout_s: float
    max_pending_messages: int


@dataclass(frozen=True, slots=True)
class SessionSettings:
    secret: str
    cookie_name: str
    max_age_s: int
    cookie_secure: bool
    idle_timeout_s: float
    watchdog_tick_s: float
    max_sessions: int


@dataclass(frozen=True, slots=True)
class LimitsSettings:
    api_window_seconds: float
    api_max_requests_per_window: int
    max_concurrent_streams: int


@dataclass(frozen=True, slots=True)
class StreamSettings:
    keepalive_s: float
    queue_max: int


@dataclass(frozen=True, slots=True)
class HttpSettings:
    host: str
    port: int
    cors_allow_origins: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class AppSettings:
    deriv: DerivSettings
    session: SessionSettings
    limits: LimitsSettings
    stream: StreamSettings
    http: HttpSettings


__all__ = [
    "AppSettings",
    "DerivSettings",
    "HttpSettings",
    "LimitsSettings",
    "SessionSettings",
    "StreamSettings",
]
