"""Environment parsing for runtime settings.

Env names and defaults live in `deriv_proxy/config/*`; this module resolves
them into the dataclasses from `deriv_proxy/state/settings.py`.
"""

from __future__ import annotations

import os
import logging
import secrets

from deriv_proxy.config.secrets import ENV_SESSION_SECRET
from deriv_proxy.config.streaming import (
    ENV_STREAM_QUEUE_MAX,
    ENV_STREAM_KEEPALIVE_S,
    DEFAULT_STREAM_QUEUE_MAX,
    DEFAULT_STREAM_KEEPALIVE_S,
)
from deriv_proxy.state.settings import (
    AppSettings,
    HttpSettings,
    DerivSettings,
    LimitsSettings,
    StreamSettings,
    SessionSettings,
)
from deriv_proxy.config.http import ENV_HOST, ENV_PORT, DEFAULT_HOST, DEFAULT_PORT, ENV_CORS_ALLOW_ORIGINS
from deriv_proxy.config.deriv import (
    ENV_DERIV_APP_ID,
    ENV_DERIV_WS_URL,
    DEFAULT_DERIV_APP_ID,
    DEFAULT_DERIV_WS_URL,
    ENV_DERIV_CALL_TIMEOUT_S,
    ENV_DERIV_OPEN_TIMEOUT_S,
    DEFAULT_DERIV_CALL_TIMEOUT_S,
    DEFAULT_DERIV_OPEN_TIMEOUT_S,
    ENV_DERIV_MAX_PENDING_MESSAGES,
    DEFAULT_DERIV_MAX_PENDING_MESSAGES,
)
from deriv_proxy.config.limits import (
    ENV_API_WINDOW_SECONDS,
    ENV_MAX_CONCURRENT_STREAMS,
    DEFAULT_API_WINDOW_SECONDS,
    ENV_API_MAX_REQUESTS_PER_WINDOW,
    DEFAULT_MAX_CONCURRENT_STREAMS,
    DEFAULT_API_MAX_REQUESTS_PER_WINDOW,
)
from deriv_proxy.config.session import (
    ENV_MAX_SESSIONS,
    DEFAULT_MAX_SESSIONS,
    ENV_SESSION_MAX_AGE_S,
    ENV_SESSION_COOKIE_NAME,
    ENV_SESSION_COOKIE_SECURE,
    DEFAULT_SESSION_MAX_AGE_S,
    ENV_SESSION_IDLE_TIMEOUT_S,
    DEFAULT_SESSION_COOKIE_NAME,
    ENV_SESSION_WATCHDOG_TICK_S,
    DEFAULT_SESSION_COOKIE_SECURE,
    DEFAULT_SESSION_IDLE_TIMEOUT_S,
    DEFAULT_SESSION_WATCHDOG_TICK_S,
)

logger = logging.getLogger(__name__)


def _str_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    v = raw.strip()
    return v if v else default


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except Exception:
        return default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except Exception:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _list_env(name: str) -> tuple[str, ...]:
    raw = os.getenv(name) or ""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _load_deriv_settings() -> DerivSettings:
    return DerivSettings(
        app_id=_int_env(ENV_DERIV_APP_ID, DEFAULT_DERIV_APP_ID),
        ws_url=_str_env(ENV_DERIV_WS_URL, DEFAULT_DERIV_WS_URL),
        call_timeout_s=max(0.0, _float_env(ENV_DERIV_CALL_TIMEOUT_S, DEFAULT_DERIV_CALL_TIMEOUT_S)),
        open_timeout_s=max(0.0, _float_env(ENV_DERIV_OPEN_TIMEOUT_S, DEFAULT_DERIV_OPEN_TIMEOUT_S)),
        max_pending_messages=max(0, _int_env(ENV_DERIV_MAX_PENDING_MESSAGES, DEFAULT_DERIV_MAX_PENDING_MESSAGES)),
    )


def _load_session_settings() -> SessionSettings:
    secret = (os.getenv(ENV_SESSION_SECRET) or "").strip()
    if not secret:
        # Cookies signed with a per-process secret do not survive a restart.
        logger.warning("%s is not set; using a random per-process secret", ENV_SESSION_SECRET)
        secret = secrets.token_hex(32)

    max_age = _int_env(ENV_SESSION_MAX_AGE_S, DEFAULT_SESSION_MAX_AGE_S)
    if max_age <= 0:
        max_age = DEFAULT_SESSION_MAX_AGE_S

    return SessionSettings(
        secret=secret,
        cookie_name=_str_env(ENV_SESSION_COOKIE_NAME, DEFAULT_SESSION_COOKIE_NAME),
        max_age_s=max_age,
        cookie_secure=_bool_env(ENV_SESSION_COOKIE_SECURE, DEFAULT_SESSION_COOKIE_SECURE),
        idle_timeout_s=max(0.0, _float_env(ENV_SESSION_IDLE_TIMEOUT_S, DEFAULT_SESSION_IDLE_TIMEOUT_S)),
        watchdog_tick_s=_float_env(ENV_SESSION_WATCHDOG_TICK_S, DEFAULT_SESSION_WATCHDOG_TICK_S),
        max_sessions=max(0, _int_env(ENV_MAX_SESSIONS, DEFAULT_MAX_SESSIONS)),
    )


def _load_limits_settings() -> LimitsSettings:
    window = _float_env(ENV_API_WINDOW_SECONDS, DEFAULT_API_WINDOW_SECONDS)
    if window <= 0:
        window = DEFAULT_API_WINDOW_SECONDS
    return LimitsSettings(
        api_window_seconds=window,
        api_max_requests_per_window=_int_env(ENV_API_MAX_REQUESTS_PER_WINDOW, DEFAULT_API_MAX_REQUESTS_PER_WINDOW),
        max_concurrent_streams=max(1, _int_env(ENV_MAX_CONCURRENT_STREAMS, DEFAULT_MAX_CONCURRENT_STREAMS)),
    )


def _load_stream_settings() -> StreamSettings:
    keepalive = _float_env(ENV_STREAM_KEEPALIVE_S, DEFAULT_STREAM_KEEPALIVE_S)
    if keepalive <= 0:
        keepalive = DEFAULT_STREAM_KEEPALIVE_S
    return StreamSettings(
        keepalive_s=keepalive,
        queue_max=max(1, _int_env(ENV_STREAM_QUEUE_MAX, DEFAULT_STREAM_QUEUE_MAX)),
    )


def load_http_settings() -> HttpSettings:
    return HttpSettings(
        host=_str_env(ENV_HOST, DEFAULT_HOST),
        port=_int_env(ENV_PORT, DEFAULT_PORT),
        cors_allow_origins=_list_env(ENV_CORS_ALLOW_ORIGINS),
    )


def load_settings() -> AppSettings:
    return AppSettings(
        deriv=_load_deriv_settings(),
        session=_load_session_settings(),
        limits=_load_limits_settings(),
        stream=_load_stream_settings(),
        http=load_http_settings(),
    )


__all__ = ["load_http_settings", "load_settings"]
