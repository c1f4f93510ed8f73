"""REST and SSE routes relayed to the session's Deriv client."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, Request, APIRouter
from fastapi.responses import ORJSONResponse, StreamingResponse

from deriv_proxy.state import RuntimeDeps
from deriv_proxy.deriv import DerivClient
from deriv_proxy.errors import CapacityError, DerivAPIError
from deriv_proxy.config.streaming import SSE_HEADERS, SSE_MEDIA_TYPE
from deriv_proxy.deriv.protocol import (
    buy_request,
    ticks_request,
    proposal_request,
    portfolio_request,
    statement_request,
)

from .stream import stream_subscription
from .auth import require_client, get_runtime_deps, get_session_client
from .parser import (
    parse_symbol,
    parse_json_object,
    parse_login_token,
    parse_trade_request,
    parse_statement_limit,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


@router.post("/login")
async def login(request: Request, runtime_deps: RuntimeDeps = Depends(get_runtime_deps)) -> ORJSONResponse:
    token = parse_login_token(await request.body())
    response = ORJSONResponse({"ok": True})
    session_id = runtime_deps.cookies.read(request)
    if session_id is None:
        session_id = runtime_deps.cookies.new_session_id()
        runtime_deps.cookies.issue(response, session_id)
    await runtime_deps.sessions.set(session_id, token)
    return response


@router.post("/logout")
async def logout(request: Request, runtime_deps: RuntimeDeps = Depends(get_runtime_deps)) -> ORJSONResponse:
    session_id = runtime_deps.cookies.read(request)
    if session_id is not None:
        await runtime_deps.sessions.delete(session_id)
    response = ORJSONResponse({"ok": True})
    runtime_deps.cookies.clear(response)
    return response


@router.get("/session")
async def session_status(request: Request, runtime_deps: RuntimeDeps = Depends(get_runtime_deps)) -> dict[str, bool]:
    client = get_session_client(request, runtime_deps)
    return {"authenticated": client is not None, "ready": bool(client is not None and client.ready)}


@router.post("/deriv")
async def deriv_call(request: Request, client: DerivClient = Depends(require_client)) -> dict[str, Any]:
    payload = parse_json_object(await request.body())
    return await client.call(payload)


@router.get("/portfolio")
async def portfolio(client: DerivClient = Depends(require_client)) -> dict[str, Any]:
    return await client.call(portfolio_request())


@router.get("/statement")
async def statement(limit: str | None = None, client: DerivClient = Depends(require_client)) -> dict[str, Any]:
    return await client.call(statement_request(parse_statement_limit(limit)))


@router.post("/trade")
async def trade(request: Request, client: DerivClient = Depends(require_client)) -> dict[str, Any]:
    """Quote a contract, then buy it at the quoted price."""
    order = parse_trade_request(await request.body())
    proposal = await client.call(
        proposal_request(
            contract_type=order.contract_type,
            symbol=order.symbol,
            amount=order.amount,
            duration=order.duration,
            duration_unit=order.duration_unit,
            currency=order.currency,
            basis=order.basis,
        )
    )
    quote = proposal.get("proposal")
    if not isinstance(quote, dict) or "id" not in quote or "ask_price" not in quote:
        raise DerivAPIError(
            error={"code": "InvalidProposal", "message": "proposal response has no id or ask_price"},
            msg_type="proposal",
        )
    buy = await client.call(buy_request(quote))
    logger.info("trade placed contract_type=%s symbol=%s", order.contract_type, order.symbol)
    return {"proposal": quote, "buy": buy.get("buy")}


@router.get("/stream/ticks")
async def stream_ticks(
    request: Request,
    symbol: str | None = None,
    client: DerivClient = Depends(require_client),
    runtime_deps: RuntimeDeps = Depends(get_runtime_deps),
) -> StreamingResponse:
    sym = parse_symbol(symbol)
    streams = runtime_deps.streams
    key = id(request)
    if not await streams.acquire(key):
        raise CapacityError("streams", streams.max_streams)

    try:
        subscription = await client.subscribe(ticks_request(sym))
    except Exception:
        await streams.release(key)
        raise

    async def _release_slot() -> None:
        await streams.release(key)

    logger.info("stream opened symbol=%s req_id=%s active=%s", sym, subscription.req_id, streams.get_stream_count())
    return StreamingResponse(
        stream_subscription(
            request,
            subscription,
            keepalive_s=runtime_deps.settings.stream.keepalive_s,
            on_close=_release_slot,
        ),
        media_type=SSE_MEDIA_TYPE,
        headers=SSE_HEADERS,
    )


__all__ = ["router"]
