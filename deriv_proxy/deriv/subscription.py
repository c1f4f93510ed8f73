"""A single upstream subscription and its delivery queue."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from collections.abc import Callable, Awaitable

from .protocol import get_error, get_subscription_id

logger = logging.getLogger(__name__)

ReleaseFn = Callable[["Subscription"], Awaitable[None]]


class Subscription:
    """Messages the upstream tags with this subscription's `req_id`.

    Consumers iterate with `async for`. Iteration stops when the subscription
    ends: an upstream error, the socket closing, or `unsubscribe()`. When the
    consumer falls behind by `queue_max` messages the oldest ones are dropped.
    """

    def __init__(
        self,
        *,
        req_id: int,
        payload: dict[str, Any],
        queue_max: int,
        on_release: ReleaseFn,
    ) -> None:
        self.req_id = req_id
        self.payload = payload
        self.subscription_id: str | None = None
        self.dropped = 0
        self._queue: asyncio.Queue[dict[str, Any] | None] = asyncio.Queue(maxsize=max(1, int(queue_max)) + 1)
        self._queue_max = max(1, int(queue_max))
        self._on_release = on_release
        self._ended = False
        self._released = False

    @property
    def ended(self) -> bool:
        return self._ended

    def deliver(self, msg: dict[str, Any]) -> None:
        if self._ended:
            return
        if self.subscription_id is None:
            self.subscription_id = get_subscription_id(msg)
        if self._queue.qsize() >= self._queue_max:
            self._queue.get_nowait()
            self.dropped += 1
            if self.dropped == 1 or self.dropped % 100 == 0:
                logger.warning("subscription req_id=%s: consumer behind, dropped=%s", self.req_id, self.dropped)
        self._queue.put_nowait(msg)
        if get_error(msg) is not None:
            self.end()

    def end(self) -> None:
        if self._ended:
            return
        self._ended = True
        # The queue keeps one slot free for the end marker.
        self._queue.put_nowait(None)

    async def get(self) -> dict[str, Any] | None:
        """Next message, or None once the subscription has ended and drained."""
        if self._ended and self._queue.empty():
            return None
        return await self._queue.get()

    async def unsubscribe(self) -> None:
        if self._released:
            return
        self._released = True
        self.end()
        await self._on_release(self)

    def __aiter__(self) -> Subscription:
        return self

    async def __anext__(self) -> dict[str, Any]:
        msg = await self.get()
        if msg is None:
            raise StopAsyncIteration
        return msg


__all__ = ["Subscription"]
