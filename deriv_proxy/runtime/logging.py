"""Logging initialization."""

from __future__ import annotations

import logging

from deriv_proxy.config.logging import LOG_LEVEL, LOG_FORMAT

from . import third_party_log_filters


def configure_logging() -> None:
    third_party_log_filters.configure()
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)


__all__ = ["configure_logging"]
