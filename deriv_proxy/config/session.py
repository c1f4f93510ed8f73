"""Session cookie and session lifetime configuration."""

from __future__ import annotations

ENV_SESSION_COOKIE_NAME = "SESSION_COOKIE_NAME"
ENV_SESSION_MAX_AGE_S = "SESSION_MAX_AGE_S"
ENV_SESSION_COOKIE_SECURE = "SESSION_COOKIE_SECURE"
ENV_SESSION_IDLE_TIMEOUT_S = "SESSION_IDLE_TIMEOUT_S"
ENV_SESSION_WATCHDOG_TICK_S = "SESSION_WATCHDOG_TICK_S"
ENV_MAX_SESSIONS = "MAX_SESSIONS"

DEFAULT_SESSION_COOKIE_NAME = "sid"
DEFAULT_SESSION_MAX_AGE_S = 8 * 60 * 60
# Set true behind HTTPS.
DEFAULT_SESSION_COOKIE_SECURE = False
DEFAULT_SESSION_IDLE_TIMEOUT_S = float(DEFAULT_SESSION_MAX_AGE_S)
DEFAULT_SESSION_WATCHDOG_TICK_S = 60.0
DEFAULT_MAX_SESSIONS = 0

SESSION_COOKIE_SAME_SITE = "lax"
SESSION_COOKIE_SALT = "deriv-proxy-session"
SESSION_ID_BYTES = 24

__all__ = [
    "DEFAULT_MAX_SESSIONS",
    "DEFAULT_SESSION_COOKIE_NAME",
    "DEFAULT_SESSION_COOKIE_SECURE",
    "DEFAULT_SESSION_IDLE_TIMEOUT_S",
    "DEFAULT_SESSION_MAX_AGE_S",
    "DEFAULT_SESSION_WATCHDOG_TICK_S",
    "ENV_MAX_SESSIONS",
    "ENV_SESSION_COOKIE_NAME",
    "ENV_SESSION_COOKIE_SECURE",
    "ENV_SESSION_IDLE_TIMEOUT_S",
    "ENV_SESSION_MAX_AGE_S",
    "ENV_SESSION_WATCHDOG_TICK_S",
    "SESSION_COOKIE_SALT",
    "SESSION_COOKIE_SAME_SITE",
    "SESSION_ID_BYTES",
]
