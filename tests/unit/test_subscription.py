from __future__ import annotations

import pytest

from deriv_proxy.deriv import Subscription


def _make(queue_max: int = 3) -> tuple[Subscription, list[Subscription]]:
    released: list[Subscription] = []

    async def _on_release(sub: Subscription) -> None:
        released.append(sub)

    sub = Subscription(req_id=7, payload={"ticks": "R_50", "subscribe": 1}, queue_max=queue_max, on_release=_on_release)
    return sub, released


def _tick(quote: float) -> dict:
    return {"msg_type": "tick", "req_id": 7, "tick": {"quote": quote}, "subscription": {"id": "abc"}}


@pytest.mark.asyncio
async def test_first_message_records_subscription_id() -> None:
    sub, _ = _make()
    sub.deliver(_tick(1.0))
    assert sub.subscription_id == "abc"
    assert (await sub.get())["tick"]["quote"] == 1.0


@pytest.mark.asyncio
async def test_oldest_messages_are_dropped_when_consumer_falls_behind() -> None:
    sub, _ = _make(queue_max=2)
    for quote in (1.0, 2.0, 3.0, 4.0):
        sub.deliver(_tick(quote))
    sub.end()

    quotes = [msg["tick"]["quote"] async for msg in sub]
    assert quotes == [3.0, 4.0]
    assert sub.dropped == 2


@pytest.mark.asyncio
async def test_error_message_is_delivered_then_ends_stream() -> None:
    sub, _ = _make()
    sub.deliver({"msg_type": "tick", "req_id": 7, "error": {"code": "InvalidSymbol", "message": "Unknown symbol"}})
    sub.deliver(_tick(5.0))

    received = [msg async for msg in sub]
    assert len(received) == 1
    assert received[0]["error"]["code"] == "InvalidSymbol"
    assert sub.ended is True


@pytest.mark.asyncio
async def test_unsubscribe_is_idempotent() -> None:
    sub, released = _make()
    await sub.unsubscribe()
    await sub.unsubscribe()

    assert released == [sub]
    assert sub.ended is True
    assert await sub.get() is None
