"""Deriv WebSocket client bound to a single user session."""

from __future__ import annotations

import time
import asyncio
import logging
import itertools
import contextlib
from typing import Any
from collections import deque
from collections.abc import Callable

import orjson
import websockets
from websockets.exceptions import ConnectionClosed

from deriv_proxy.config.deriv import DERIV_KEY_MSG_TYPE, DERIV_MSG_AUTHORIZE
from deriv_proxy.errors import (
    DerivAPIError,
    CallTimeoutError,
    UpstreamClosedError,
    PendingQueueFullError,
)

from .subscription import Subscription
from .protocol import (
    get_error,
    get_req_id,
    with_req_id,
    build_ws_url,
    forget_request,
    authorize_request,
    get_subscription_id,
)

logger = logging.getLogger(__name__)

# Returns an async context manager yielding an open socket (send/close/async-iter).
ConnectFn = Callable[..., Any]
TimeFn = Callable[[], float]


class DerivClient:
    """One persistent upstream socket, authorized with the session's token.

    Outbound messages are queued until the `authorize` response arrives and
    then flushed in order. Responses are matched to requests by `req_id`.
    """

    def __init__(
        self,
        *,
        token: str,
        app_id: int,
        ws_url: str,
        call_timeout_s: float = 30.0,
        open_timeout_s: float = 10.0,
        max_pending_messages: int = 0,
        stream_queue_max: int = 500,
        connect_fn: ConnectFn | None = None,
        now_fn: TimeFn | None = None,
    ) -> None:
        self.app_id = app_id
        self.url = build_ws_url(ws_url, app_id)
        self.ready = False
        self._token = token
        self._call_timeout_s = max(0.0, float(call_timeout_s))
        self._open_timeout_s = max(0.0, float(open_timeout_s))
        self._max_pending = max(0, int(max_pending_messages))
        self._stream_queue_max = stream_queue_max
        self._connect_fn = connect_fn or websockets.connect
        self._now = now_fn or time.monotonic
        self._ws: Any = None
        self._task: asyncio.Task | None = None
        self._closed = False
        self._req_ids = itertools.count(1)
        self._auth_req_id: int | None = None
        self._pending: deque[dict[str, Any]] = deque()
        self._calls: dict[int, asyncio.Future] = {}
        self._subscriptions: dict[int, Subscription] = {}
        # Released before their first message; forgotten once it reveals the id.
        self._released: set[int] = set()
        self.last_activity = self._now()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def has_subscriptions(self) -> bool:
        return bool(self._subscriptions)

    def touch(self) -> None:
        self.last_activity = self._now()

    def idle_for(self) -> float:
        return self._now() - self.last_activity

    def connect(self) -> None:
        """Start the connection task unless one is already running."""
        if self._closed:
            raise UpstreamClosedError("client is closed")
        if self._task is not None and not self._task.done():
            return
        self._task = asyncio.create_task(self._run())

    async def send(self, payload: dict[str, Any]) -> None:
        if self._ws is None or not self.ready:
            if self._max_pending and len(self._pending) >= self._max_pending:
                raise PendingQueueFullError(self._max_pending)
            self._pending.append(payload)
            return
        await self._send_now(payload)

    async def call(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send a request and wait for the response that echoes its `req_id`."""
        self.connect()
        self.touch()
        req_id = next(self._req_ids)
        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._calls[req_id] = future
        try:
            await self.send(with_req_id(payload, req_id))
            if self._call_timeout_s <= 0:
                return await future
            try:
                return await asyncio.wait_for(future, timeout=self._call_timeout_s)
            except TimeoutError as exc:
                raise CallTimeoutError(self._call_timeout_s) from exc
        finally:
            self._calls.pop(req_id, None)
            self._discard_pending(req_id)

    async def subscribe(self, payload: dict[str, Any]) -> Subscription:
        self.connect()
        self.touch()
        req_id = next(self._req_ids)
        sub = Subscription(
            req_id=req_id,
            payload=payload,
            queue_max=self._stream_queue_max,
            on_release=self._release_subscription,
        )
        self._subscriptions[req_id] = sub
        try:
            await self.send(with_req_id(payload, req_id))
        except Exception:
            self._subscriptions.pop(req_id, None)
            raise
        return sub

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await task
        self._teardown("client closed", fail_queued=True)

    async def _run(self) -> None:
        open_timeout = self._open_timeout_s or None
        try:
            async with self._connect_fn(self.url, open_timeout=open_timeout) as ws:
                self._ws = ws
                self._auth_req_id = next(self._req_ids)
                logger.info("deriv: connected app_id=%s", self.app_id)
                await ws.send(orjson.dumps(with_req_id(authorize_request(self._token), self._auth_req_id)).decode())
                async for raw in ws:
                    await self._dispatch(raw)
            logger.info("deriv: connection closed app_id=%s", self.app_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.warning("deriv: websocket error app_id=%s", self.app_id, exc_info=True)
        finally:
            self._teardown("upstream connection closed")

    async def _send_now(self, payload: dict[str, Any]) -> None:
        ws = self._ws
        if ws is None:
            raise UpstreamClosedError()
        try:
            await ws.send(orjson.dumps(payload).decode())
        except ConnectionClosed as exc:
            raise UpstreamClosedError(f"upstream connection closed: {exc}") from exc

    async def _dispatch(self, raw: str | bytes) -> None:
        try:
            msg = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.debug("deriv: dropping non-JSON frame")
            return
        if not isinstance(msg, dict):
            return

        req_id = get_req_id(msg)
        if msg.get(DERIV_KEY_MSG_TYPE) == DERIV_MSG_AUTHORIZE and req_id is not None and req_id == self._auth_req_id:
            await self._handle_authorize(msg)
            return

        if req_id is not None and req_id in self._released:
            self._released.discard(req_id)
            subscription_id = get_subscription_id(msg)
            if subscription_id is not None:
                await self._forget(subscription_id)
            return

        sub = self._subscriptions.get(req_id) if req_id is not None else None
        if sub is not None:
            sub.deliver(msg)
            if sub.ended:
                self._subscriptions.pop(req_id, None)
            return

        future = self._calls.get(req_id) if req_id is not None else None
        if future is not None and not future.done():
            error = get_error(msg)
            if error is not None:
                future.set_exception(DerivAPIError(error=error, msg_type=msg.get(DERIV_KEY_MSG_TYPE)))
            else:
                future.set_result(msg)
            return

        logger.debug("deriv: unmatched message msg_type=%s req_id=%s", msg.get(DERIV_KEY_MSG_TYPE), req_id)

    async def _handle_authorize(self, msg: dict[str, Any]) -> None:
        error = get_error(msg)
        if error is not None:
            logger.warning("deriv: authorization failed code=%s", error.get("code"))
            exc = DerivAPIError(error=error, msg_type=DERIV_MSG_AUTHORIZE)
            pending, self._pending = self._pending, deque()
            for payload in pending:
                self._fail_request(payload.get("req_id"), exc)
            if self._ws is not None:
                await self._ws.close()
            return

        # Sends issued during the flush are queued behind it, so order holds.
        while self._pending:
            await self._send_now(self._pending.popleft())
        self.ready = True
        logger.info("deriv: authorized app_id=%s", self.app_id)

    def _fail_request(self, req_id: Any, exc: DerivAPIError) -> None:
        future = self._calls.get(req_id)
        if future is not None and not future.done():
            future.set_exception(exc)
        sub = self._subscriptions.pop(req_id, None)
        if sub is not None:
            sub.deliver({"error": exc.error, "req_id": req_id, "msg_type": exc.msg_type})

    def _discard_pending(self, req_id: int) -> bool:
        if not any(p.get("req_id") == req_id for p in self._pending):
            return False
        self._pending = deque(p for p in self._pending if p.get("req_id") != req_id)
        return True

    async def _release_subscription(self, sub: Subscription) -> None:
        # Already detached by an upstream error or teardown.
        if self._subscriptions.pop(sub.req_id, None) is None:
            return
        if self._discard_pending(sub.req_id) or self._ws is None or not self.ready:
            return
        if sub.subscription_id is None:
            self._released.add(sub.req_id)
            return
        await self._forget(sub.subscription_id)

    async def _forget(self, subscription_id: str) -> None:
        try:
            await self._send_now(forget_request(subscription_id))
        except UpstreamClosedError:
            logger.debug("deriv: forget skipped, socket closed subscription=%s", subscription_id)

    def _teardown(self, reason: str, *, fail_queued: bool = False) -> None:
        self._ws = None
        self.ready = False
        self._auth_req_id = None
        self._released.clear()

        if fail_queued:
            self._pending.clear()
        queued = {p.get("req_id") for p in self._pending}

        for req_id, future in list(self._calls.items()):
            if req_id in queued or future.done():
                continue
            future.set_exception(UpstreamClosedError(reason))
        for req_id, sub in list(self._subscriptions.items()):
            if req_id in queued:
                continue
            sub.end()
            del self._subscriptions[req_id]


__all__ = ["DerivClient"]
