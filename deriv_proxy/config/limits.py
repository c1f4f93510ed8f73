"""Admission control and rate limit configuration."""

from __future__ import annotations

ENV_API_WINDOW_SECONDS = "API_WINDOW_SECONDS"
ENV_API_MAX_REQUESTS_PER_WINDOW = "API_MAX_REQUESTS_PER_WINDOW"
ENV_MAX_CONCURRENT_STREAMS = "MAX_CONCURRENT_STREAMS"

# 300 requests per 15 minutes per client address on /api/.
DEFAULT_API_WINDOW_SECONDS = 15 * 60.0
DEFAULT_API_MAX_REQUESTS_PER_WINDOW = 300
DEFAULT_MAX_CONCURRENT_STREAMS = 100

API_RATE_LIMITED_PREFIX = "/api/"

__all__ = [
    "API_RATE_LIMITED_PREFIX",
    "DEFAULT_API_MAX_REQUESTS_PER_WINDOW",
    "DEFAULT_API_WINDOW_SECONDS",
    "DEFAULT_MAX_CONCURRENT_STREAMS",
    "ENV_API_MAX_REQUESTS_PER_WINDOW",
    "ENV_API_WINDOW_SECONDS",
    "ENV_MAX_CONCURRENT_STREAMS",
]
