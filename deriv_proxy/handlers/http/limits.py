"""Per-client rate limiting for the /api/ surface."""

from __future__ import annotations

from collections.abc import Callable, Awaitable

from fastapi import Request, Response

from deriv_proxy.errors import RateLimitError
from deriv_proxy.config.limits import API_RATE_LIMITED_PREFIX

from .errors import rate_limited_response

CallNext = Callable[[Request], Awaitable[Response]]


def client_key(request: Request) -> str:
    return request.client.host if request.client is not None else "unknown"


async def rate_limit_middleware(request: Request, call_next: CallNext) -> Response:
    runtime_deps = getattr(request.app.state, "runtime_deps", None)
    if runtime_deps is not None and request.url.path.startswith(API_RATE_LIMITED_PREFIX):
        try:
            runtime_deps.api_limiter.consume(client_key(request))
        except RateLimitError as exc:
            return rate_limited_response(exc)
    return await call_next(request)


__all__ = ["client_key", "rate_limit_middleware"]
