from __future__ import annotations

import json
import asyncio
from typing import Any
from collections.abc import Callable, Awaitable

import pytest
from websockets.exceptions import ConnectionClosedOK

_ENVELOPE_KEYS = {"req_id", "passthrough"}


class _FakeSocket:
    def __init__(self, server: FakeDerivServer) -> None:
        self.server = server
        self.sent: list[dict[str, Any]] = []
        self.closed = False
        self._inbox: asyncio.Queue[str | None] = asyncio.Queue()

    async def send(self, text: str) -> None:
        if self.closed:
            raise ConnectionClosedOK(None, None)
        msg = json.loads(text)
        self.sent.append(msg)
        self.server.sent.append(msg)
        for reply in self.server.respond(msg, self):
            self.push(reply)
        if any(key in msg for key in self.server.close_on):
            await self.close()

    def push(self, msg: dict[str, Any]) -> None:
        self._inbox.put_nowait(json.dumps(msg))

    def push_raw(self, raw: str) -> None:
        self._inbox.put_nowait(raw)

    async def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._inbox.put_nowait(None)

    def __aiter__(self) -> _FakeSocket:
        return self

    async def __anext__(self) -> str:
        item = await self._inbox.get()
        if item is None:
            raise StopAsyncIteration
        return item


class _FakeConnection:
    def __init__(self, server: FakeDerivServer, socket: _FakeSocket) -> None:
        self._server = server
        self._socket = socket

    async def __aenter__(self) -> _FakeSocket:
        if self._server.fail_connect:
            raise OSError("connection refused")
        return self._socket

    async def __aexit__(self, *exc: object) -> None:
        await self._socket.close()


class FakeDerivServer:
    """Scripted stand-in for the Deriv endpoint, injected as `connect_fn`."""

    def __init__(self) -> None:
        self.urls: list[str] = []
        self.sockets: list[_FakeSocket] = []
        self.sent: list[dict[str, Any]] = []
        self.replies: dict[str, Any] = {}
        self.errors: dict[str, dict[str, Any]] = {}
        self.auto_reply = True
        self.hold_authorize = False
        self.authorize_error: dict[str, Any] | None = None
        self.fail_connect = False
        # Request keys after which the upstream drops the socket.
        self.close_on: set[str] = set()
        self._held: list[tuple[_FakeSocket, dict[str, Any]]] = []

    def connect(self, url: str, **_kwargs: Any) -> _FakeConnection:
        self.urls.append(url)
        socket = _FakeSocket(self)
        self.sockets.append(socket)
        return _FakeConnection(self, socket)

    @property
    def socket(self) -> _FakeSocket:
        return self.sockets[-1]

    def requests(self, key: str) -> list[dict[str, Any]]:
        return [msg for msg in self.sent if key in msg]

    def release_authorize(self) -> None:
        held, self._held = self._held, []
        for socket, msg in held:
            socket.push(self._authorize_reply(msg))

    def _authorize_reply(self, msg: dict[str, Any]) -> dict[str, Any]:
        reply: dict[str, Any] = {"msg_type": "authorize", "req_id": msg.get("req_id"), "echo_req": msg}
        if self.authorize_error is not None:
            reply["error"] = self.authorize_error
        else:
            reply["authorize"] = {"loginid": "CR900000", "currency": "USD"}
        return reply

    def respond(self, msg: dict[str, Any], socket: _FakeSocket) -> list[dict[str, Any]]:
        req_id = msg.get("req_id")
        if "authorize" in msg:
            if self.hold_authorize:
                self._held.append((socket, msg))
                return []
            return [self._authorize_reply(msg)]
        if "forget" in msg:
            return [{"msg_type": "forget", "forget": 1, "echo_req": msg}]
        if "ticks" in msg:
            return [
                {
                    "msg_type": "tick",
                    "req_id": req_id,
                    "echo_req": msg,
                    "tick": {"symbol": msg["ticks"], "quote": 1234.5, "epoch": 1700000000},
                    "subscription": {"id": "sub-1"},
                }
            ]
        if not self.auto_reply:
            return []
        msg_type = next(key for key in msg if key not in _ENVELOPE_KEYS)
        reply = {"msg_type": msg_type, "req_id": req_id, "echo_req": msg}
        if msg_type in self.errors:
            reply["error"] = self.errors[msg_type]
        else:
            reply[msg_type] = self.replies.get(msg_type, {"ok": 1})
        return [reply]


async def _wait_until(predicate: Callable[[], bool], timeout: float = 1.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() >= deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.005)


@pytest.fixture
def deriv_server() -> FakeDerivServer:
    return FakeDerivServer()


@pytest.fixture
def wait_until() -> Callable[..., Awaitable[None]]:
    return _wait_until
