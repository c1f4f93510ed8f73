"""Configuration module exports (env names and defaults only)."""

from .deriv import DEFAULT_DERIV_APP_ID, DEFAULT_DERIV_WS_URL
from .session import DEFAULT_SESSION_COOKIE_NAME, DEFAULT_SESSION_MAX_AGE_S

__all__ = [
    "DEFAULT_DERIV_APP_ID",
    "DEFAULT_DERIV_WS_URL",
    "DEFAULT_SESSION_COOKIE_NAME",
    "DEFAULT_SESSION_MAX_AGE_S",
]
