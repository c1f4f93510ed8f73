from __future__ import annotations

import asyncio

import pytest

from deriv_proxy.deriv import DerivClient
from deriv_proxy.errors import (
    DerivAPIError,
    CallTimeoutError,
    UpstreamClosedError,
    PendingQueueFullError,
)


def _client(server, **kwargs) -> DerivClient:
    kwargs.setdefault("call_timeout_s", 1.0)
    return DerivClient(
        token="tok-123",
        app_id=1089,
        ws_url="wss://example.test/websockets/v3",
        connect_fn=server.connect,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_call_resolves_after_authorize(deriv_server) -> None:
    client = _client(deriv_server)
    try:
        reply = await client.call({"ping": 1})
    finally:
        await client.close()

    assert reply["msg_type"] == "ping"
    assert deriv_server.urls == ["wss://example.test/websockets/v3?app_id=1089"]
    first = deriv_server.sent[0]
    assert first["authorize"] == "tok-123"
    assert [next(iter(msg)) for msg in deriv_server.sent] == ["authorize", "ping"]


@pytest.mark.asyncio
async def test_requests_queue_until_authorized_and_flush_in_order(deriv_server, wait_until) -> None:
    deriv_server.hold_authorize = True
    client = _client(deriv_server)
    try:
        first = asyncio.create_task(client.call({"ping": 1}))
        second = asyncio.create_task(client.call({"time": 1}))
        await wait_until(lambda: len(deriv_server.sent) == 1)
        await wait_until(lambda: client.pending_count == 2)
        assert client.ready is False

        deriv_server.release_authorize()
        assert (await first)["msg_type"] == "ping"
        assert (await second)["msg_type"] == "time"
        assert client.ready is True
        assert [next(iter(msg)) for msg in deriv_server.sent] == ["authorize", "ping", "time"]
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_upstream_error_is_raised(deriv_server) -> None:
    deriv_server.errors["buy"] = {"code": "InvalidContractProposal", "message": "Proposal expired"}
    client = _client(deriv_server)
    try:
        with pytest.raises(DerivAPIError) as exc:
            await client.call({"buy": "abc", "price": 10})
    finally:
        await client.close()

    assert exc.value.code == "InvalidContractProposal"
    assert exc.value.message == "Proposal expired"
    assert exc.value.msg_type == "buy"


@pytest.mark.asyncio
async def test_authorize_failure_fails_queued_calls(deriv_server, wait_until) -> None:
    deriv_server.authorize_error = {"code": "InvalidToken", "message": "The token is invalid."}
    client = _client(deriv_server)
    try:
        with pytest.raises(DerivAPIError) as exc:
            await client.call({"ping": 1})
        await wait_until(lambda: deriv_server.socket.closed)
    finally:
        await client.close()

    assert exc.value.code == "InvalidToken"
    assert client.ready is False
    assert deriv_server.requests("ping") == []


@pytest.mark.asyncio
async def test_call_times_out_and_leaves_nothing_queued(deriv_server) -> None:
    deriv_server.hold_authorize = True
    client = _client(deriv_server, call_timeout_s=0.05)
    try:
        with pytest.raises(CallTimeoutError):
            await client.call({"ping": 1})
        assert client.pending_count == 0
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_browser_req_id_is_replaced(deriv_server) -> None:
    client = _client(deriv_server)
    try:
        reply = await client.call({"ping": 1, "req_id": 999})
    finally:
        await client.close()

    sent = deriv_server.requests("ping")[0]
    assert sent["req_id"] != 999
    assert reply["req_id"] == sent["req_id"]


@pytest.mark.asyncio
async def test_subscription_receives_only_its_own_messages(deriv_server) -> None:
    client = _client(deriv_server)
    try:
        sub = await client.subscribe({"ticks": "R_50", "subscribe": 1})
        first = await asyncio.wait_for(sub.get(), timeout=1.0)
        assert first is not None
        assert first["tick"]["symbol"] == "R_50"
        assert sub.subscription_id == "sub-1"

        deriv_server.socket.push({"msg_type": "tick", "req_id": sub.req_id + 100, "tick": {"quote": 1.0}})
        deriv_server.socket.push({"msg_type": "tick", "req_id": sub.req_id, "tick": {"quote": 2.0}})
        second = await asyncio.wait_for(sub.get(), timeout=1.0)
        assert second is not None
        assert second["tick"]["quote"] == 2.0

        await sub.unsubscribe()
        assert deriv_server.requests("forget") == [{"forget": "sub-1"}]
        assert client.has_subscriptions is False
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_upstream_close_fails_inflight_and_ends_streams(deriv_server, wait_until) -> None:
    client = _client(deriv_server)
    try:
        sub = await client.subscribe({"ticks": "R_10", "subscribe": 1})
        assert await asyncio.wait_for(sub.get(), timeout=1.0) is not None

        deriv_server.auto_reply = False
        pending = asyncio.create_task(client.call({"ping": 1}))
        await wait_until(lambda: bool(deriv_server.requests("ping")))

        await deriv_server.socket.close()
        with pytest.raises(UpstreamClosedError):
            await pending
        assert await asyncio.wait_for(sub.get(), timeout=1.0) is None
        assert client.ready is False
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_next_call_reconnects_after_upstream_close(deriv_server, wait_until) -> None:
    client = _client(deriv_server)
    try:
        await client.call({"ping": 1})
        await deriv_server.socket.close()
        await wait_until(lambda: client.ready is False)

        reply = await client.call({"time": 1})
        assert reply["msg_type"] == "time"
        assert len(deriv_server.urls) == 2
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_close_fails_queued_calls_and_blocks_reconnect(deriv_server, wait_until) -> None:
    deriv_server.hold_authorize = True
    client = _client(deriv_server)
    pending = asyncio.create_task(client.call({"ping": 1}))
    await wait_until(lambda: client.pending_count == 1)

    await client.close()

    with pytest.raises(UpstreamClosedError):
        await pending
    with pytest.raises(UpstreamClosedError):
        client.connect()
    assert client.closed is True


@pytest.mark.asyncio
async def test_pending_queue_is_bounded(deriv_server, wait_until) -> None:
    deriv_server.hold_authorize = True
    client = _client(deriv_server, max_pending_messages=1)
    try:
        queued = asyncio.create_task(client.call({"ping": 1}))
        await wait_until(lambda: client.pending_count == 1)
        with pytest.raises(PendingQueueFullError):
            await client.call({"time": 1})
    finally:
        await client.close()
    with pytest.raises(UpstreamClosedError):
        await queued


@pytest.mark.asyncio
async def test_non_json_frames_are_ignored(deriv_server, wait_until) -> None:
    client = _client(deriv_server)
    try:
        await client.call({"ping": 1})
        deriv_server.socket.push_raw("not json")
        reply = await client.call({"time": 1})
        assert reply["msg_type"] == "time"
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_connect_failure_is_logged_not_raised(deriv_server, wait_until) -> None:
    deriv_server.fail_connect = True
    client = _client(deriv_server, call_timeout_s=0.05)
    try:
        with pytest.raises(CallTimeoutError):
            await client.call({"ping": 1})
        assert client.ready is False
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_unsubscribe_before_first_tick_forgets_late_subscription(deriv_server, wait_until) -> None:
    client = _client(deriv_server)
    try:
        await client.call({"ping": 1})
        sub = await client.subscribe({"ticks": "R_75", "subscribe": 1})
        assert sub.subscription_id is None

        await sub.unsubscribe()
        await wait_until(lambda: bool(deriv_server.requests("forget")))
        assert deriv_server.requests("forget") == [{"forget": "sub-1"}]
        assert client.has_subscriptions is False
    finally:
        await client.close()


@pytest.mark.asyncio
async def test_unsubscribe_while_queued_sends_nothing(deriv_server, wait_until) -> None:
    deriv_server.hold_authorize = True
    client = _client(deriv_server)
    try:
        sub = await client.subscribe({"ticks": "R_75", "subscribe": 1})
        await wait_until(lambda: len(deriv_server.sent) == 1)
        await sub.unsubscribe()
        assert client.pending_count == 0

        deriv_server.release_authorize()
        await wait_until(lambda: client.ready)
        assert deriv_server.requests("ticks") == []
        assert deriv_server.requests("forget") == []
    finally:
        await client.close()
