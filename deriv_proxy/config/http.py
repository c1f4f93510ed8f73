"""HTTP listener and CORS configuration."""

from __future__ import annotations

ENV_HOST = "HOST"
ENV_PORT = "PORT"
ENV_CORS_ALLOW_ORIGINS = "CORS_ALLOW_ORIGINS"

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080

# Used when no explicit origins are configured: reflect any origin.
CORS_ANY_ORIGIN_REGEX = ".*"

__all__ = [
    "CORS_ANY_ORIGIN_REGEX",
    "DEFAULT_HOST",
    "DEFAULT_PORT",
    "ENV_CORS_ALLOW_ORIGINS",
    "ENV_HOST",
    "ENV_PORT",
]
