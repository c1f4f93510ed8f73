"""Server-Sent Events framing for upstream subscriptions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from collections.abc import Callable, Awaitable, AsyncIterator

import orjson
from fastapi import Request

from deriv_proxy.deriv import Subscription
from deriv_proxy.config.streaming import SSE_KEEPALIVE_FRAME

logger = logging.getLogger(__name__)


def format_sse(msg: dict[str, Any]) -> str:
    return f"data: {orjson.dumps(msg).decode()}\n\n"


async def stream_subscription(
    request: Request,
    subscription: Subscription,
    *,
    keepalive_s: float,
    on_close: Callable[[], Awaitable[None]],
) -> AsyncIterator[str]:
    """Yield one SSE frame per delivered message until either side goes away."""
    try:
        while True:
            if await request.is_disconnected():
                break
            try:
                msg = await asyncio.wait_for(subscription.get(), timeout=keepalive_s)
            except TimeoutError:
                yield SSE_KEEPALIVE_FRAME
                continue
            if msg is None:
                break
            yield format_sse(msg)
    finally:
        # Release the slot before anything that may suspend.
        await on_close()
        await subscription.unsubscribe()
        logger.info("stream closed req_id=%s dropped=%s", subscription.req_id, subscription.dropped)


__all__ = ["format_sse", "stream_subscription"]
