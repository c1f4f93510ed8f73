"""Deriv upstream configuration (env names and defaults)."""

from __future__ import annotations

ENV_DERIV_APP_ID = "DERIV_APP_ID"
ENV_DERIV_WS_URL = "DERIV_WS_URL"
ENV_DERIV_CALL_TIMEOUT_S = "DERIV_CALL_TIMEOUT_S"
ENV_DERIV_OPEN_TIMEOUT_S = "DERIV_OPEN_TIMEOUT_S"
ENV_DERIV_MAX_PENDING_MESSAGES = "DERIV_MAX_PENDING_MESSAGES"

DEFAULT_DERIV_APP_ID = 80342
DEFAULT_DERIV_WS_URL = "wss://ws.derivws.com/websockets/v3"
DEFAULT_DERIV_CALL_TIMEOUT_S = 30.0
DEFAULT_DERIV_OPEN_TIMEOUT_S = 10.0
DEFAULT_DERIV_MAX_PENDING_MESSAGES = 1000

# Protocol keys
DERIV_KEY_MSG_TYPE = "msg_type"
DERIV_KEY_REQ_ID = "req_id"
DERIV_KEY_ERROR = "error"
DERIV_KEY_SUBSCRIPTION = "subscription"

DERIV_MSG_AUTHORIZE = "authorize"
DERIV_MSG_TICK = "tick"

# Deriv caps statement page size at 999.
DERIV_STATEMENT_LIMIT_MAX = 999
DERIV_STATEMENT_LIMIT_DEFAULT = 20

__all__ = [
    "DEFAULT_DERIV_APP_ID",
    "DEFAULT_DERIV_CALL_TIMEOUT_S",
    "DEFAULT_DERIV_MAX_PENDING_MESSAGES",
    "DEFAULT_DERIV_OPEN_TIMEOUT_S",
    "DEFAULT_DERIV_WS_URL",
    "DERIV_KEY_ERROR",
    "DERIV_KEY_MSG_TYPE",
    "DERIV_KEY_REQ_ID",
    "DERIV_KEY_SUBSCRIPTION",
    "DERIV_MSG_AUTHORIZE",
    "DERIV_MSG_TICK",
    "DERIV_STATEMENT_LIMIT_DEFAULT",
    "DERIV_STATEMENT_LIMIT_MAX",
    "ENV_DERIV_APP_ID",
    "ENV_DERIV_CALL_TIMEOUT_S",
    "ENV_DERIV_MAX_PENDING_MESSAGES",
    "ENV_DERIV_OPEN_TIMEOUT_S",
    "ENV_DERIV_WS_URL",
]
