"""Deriv API request builders and message helpers."""

from __future__ import annotations

from typing import Any
from urllib.parse import urlparse, parse_qsl, urlencode, urlunparse

from deriv_proxy.config.deriv import (
    DERIV_KEY_ERROR,
    DERIV_KEY_REQ_ID,
    DERIV_KEY_SUBSCRIPTION,
    DERIV_STATEMENT_LIMIT_MAX,
)


def build_ws_url(base_url: str, app_id: int) -> str:
    """Attach `app_id` to the upstream URL, replacing any value already present."""
    parsed = urlparse(base_url)
    query = dict(parse_qsl(parsed.query, keep_blank_values=True))
    query["app_id"] = str(app_id)
    return urlunparse((parsed.scheme, parsed.netloc, parsed.path, parsed.params, urlencode(query), parsed.fragment))


def with_req_id(payload: dict[str, Any], req_id: int) -> dict[str, Any]:
    # Any req_id supplied by the browser is replaced; it is the proxy's correlation key.
    return {**payload, DERIV_KEY_REQ_ID: req_id}


def get_req_id(msg: dict[str, Any]) -> int | None:
    req_id = msg.get(DERIV_KEY_REQ_ID)
    if isinstance(req_id, bool) or not isinstance(req_id, int):
        return None
    return req_id


def get_error(msg: dict[str, Any]) -> dict[str, Any] | None:
    error = msg.get(DERIV_KEY_ERROR)
    if not error:
        return None
    if isinstance(error, dict):
        return error
    return {"code": "DerivError", "message": str(error)}


def get_subscription_id(msg: dict[str, Any]) -> str | None:
    sub = msg.get(DERIV_KEY_SUBSCRIPTION)
    if isinstance(sub, dict) and sub.get("id"):
        return str(sub["id"])
    return None


def authorize_request(token: str) -> dict[str, Any]:
    return {"authorize": token}


def forget_request(subscription_id: str) -> dict[str, Any]:
    return {"forget": subscription_id}


def ticks_request(symbol: str) -> dict[str, Any]:
    return {"ticks": symbol, "subscribe": 1}


def portfolio_request() -> dict[str, Any]:
    return {"portfolio": 1}


def statement_request(limit: int) -> dict[str, Any]:
    return {"statement": 1, "limit": max(1, min(int(limit), DERIV_STATEMENT_LIMIT_MAX))}


def proposal_request(
    *,
    contract_type: str,
    symbol: str,
    amount: float,
    duration: int,
    duration_unit: str,
    currency: str,
    basis: str,
) -> dict[str, Any]:
    return {
        "proposal": 1,
        "amount": amount,
        "basis": basis,
        "contract_type": contract_type,
        "currency": currency,
        "duration": duration,
        "duration_unit": duration_unit,
        "symbol": symbol,
    }


def buy_request(proposal: dict[str, Any]) -> dict[str, Any]:
    """Buy the contract quoted by a `proposal` response body."""
    return {"buy": proposal["id"], "price": proposal["ask_price"]}


__all__ = [
    "authorize_request",
    "build_ws_url",
    "buy_request",
    "forget_request",
    "get_error",
    "get_req_id",
    "get_subscription_id",
    "portfolio_request",
    "proposal_request",
    "statement_request",
    "ticks_request",
    "with_req_id",
]
