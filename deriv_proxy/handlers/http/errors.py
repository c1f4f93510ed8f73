"""Error bodies and exception-to-response mapping for the HTTP surface."""

from __future__ import annotations

import math
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import ORJSONResponse

from deriv_proxy.errors import (
    CapacityError,
    DerivAPIError,
    RateLimitError,
    CallTimeoutError,
    InvalidRequestError,
    UpstreamClosedError,
    NotAuthenticatedError,
    PendingQueueFullError,
)

logger = logging.getLogger(__name__)


def build_error_payload(
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = dict(details)
    return {"error": error}


def error_response(
    status_code: int,
    code: str,
    message: str,
    *,
    details: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> ORJSONResponse:
    return ORJSONResponse(
        build_error_payload(code, message, details=details),
        status_code=status_code,
        headers=headers,
    )


def rate_limited_response(exc: RateLimitError) -> ORJSONResponse:
    retry_in_s = int(max(1, math.ceil(float(exc.retry_in)))) if exc.retry_in else 1
    return error_response(
        429,
        "RateLimited",
        f"at most {exc.limit} requests per {int(exc.window_seconds)} seconds; retry in {retry_in_s} seconds",
        details={"retry_in": retry_in_s, "limit": exc.limit, "window_seconds": int(exc.window_seconds)},
        headers={"Retry-After": str(retry_in_s)},
    )


async def _deriv_error(_request: Request, exc: DerivAPIError) -> ORJSONResponse:
    # Upstream errors pass through unchanged.
    return ORJSONResponse({"error": exc.error}, status_code=400)


async def _not_authenticated(_request: Request, exc: Exception) -> ORJSONResponse:
    return error_response(401, "NotAuthenticated", str(exc))


async def _invalid_request(_request: Request, exc: InvalidRequestError) -> ORJSONResponse:
    return error_response(400, exc.code, exc.message)


async def _call_timeout(_request: Request, exc: Exception) -> ORJSONResponse:
    logger.info("deriv call timed out: %s", exc)
    return error_response(504, "UpstreamTimeout", str(exc))


async def _upstream_closed(_request: Request, exc: Exception) -> ORJSONResponse:
    return error_response(502, "UpstreamClosed", str(exc))


async def _queue_full(_request: Request, exc: Exception) -> ORJSONResponse:
    logger.warning("deriv pending queue full: %s", exc)
    return error_response(503, "UpstreamBusy", str(exc))


async def _capacity(_request: Request, exc: Exception) -> ORJSONResponse:
    logger.warning("capacity reached: %s", exc)
    return error_response(503, "ServerAtCapacity", str(exc))


async def _rate_limited(_request: Request, exc: RateLimitError) -> ORJSONResponse:
    return rate_limited_response(exc)


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DerivAPIError, _deriv_error)
    app.add_exception_handler(NotAuthenticatedError, _not_authenticated)
    app.add_exception_handler(InvalidRequestError, _invalid_request)
    app.add_exception_handler(CallTimeoutError, _call_timeout)
    app.add_exception_handler(UpstreamClosedError, _upstream_closed)
    app.add_exception_handler(PendingQueueFullError, _queue_full)
    app.add_exception_handler(CapacityError, _capacity)
    app.add_exception_handler(RateLimitError, _rate_limited)


__all__ = [
    "build_error_payload",
    "error_response",
    "install_exception_handlers",
    "rate_limited_response",
]
