"""Log noise filters for third-party libraries."""

from __future__ import annotations

import os
import logging

from deriv_proxy.config.logging import ENV_SHOW_WEBSOCKETS_LOGS

_NOISY_LOGGERS = ("websockets", "websockets.client")


def configure() -> None:
    # The websockets client logs every frame at DEBUG. Keep it tame unless explicitly enabled.
    if (os.getenv(ENV_SHOW_WEBSOCKETS_LOGS) or "").strip().lower() not in {"1", "true", "yes"}:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["configure"]
