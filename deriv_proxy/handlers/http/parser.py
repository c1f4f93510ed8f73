"""Request body parsing/validation for the REST surface."""

from __future__ import annotations

import math
from typing import Any
from dataclasses import dataclass

import orjson

from deriv_proxy.errors import InvalidRequestError
from deriv_proxy.config.deriv import DERIV_STATEMENT_LIMIT_MAX, DERIV_STATEMENT_LIMIT_DEFAULT

_CONTRACT_TYPES = {"CALL", "PUT"}


@dataclass(frozen=True, slots=True)
class TradeRequest:
    contract_type: str
    symbol: str
    amount: float
    duration: int
    duration_unit: str = "t"
    currency: str = "USD"
    basis: str = "stake"


def parse_json_object(raw: bytes) -> dict[str, Any]:
    if not raw or not raw.strip():
        raise InvalidRequestError("InvalidPayload", "request body must be a JSON object")
    try:
        body = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise InvalidRequestError("InvalidPayload", f"invalid JSON: {exc}") from exc
    if not isinstance(body, dict):
        raise InvalidRequestError("InvalidPayload", "request body must be a JSON object")
    return body


def parse_login_token(raw: bytes) -> str:
    try:
        body = parse_json_object(raw)
    except InvalidRequestError:
        body = {}
    token = body.get("token")
    if not isinstance(token, str) or not token.strip():
        raise InvalidRequestError("MissingToken", "Missing token")
    return token.strip()


def parse_symbol(symbol: str | None) -> str:
    value = (symbol or "").strip()
    if not value:
        raise InvalidRequestError("MissingSymbol", "query parameter 'symbol' is required")
    return value


def parse_statement_limit(limit: str | None) -> int:
    if limit is None or not limit.strip():
        return DERIV_STATEMENT_LIMIT_DEFAULT
    try:
        value = int(limit)
    except ValueError as exc:
        raise InvalidRequestError("InvalidLimit", "'limit' must be an integer") from exc
    return max(1, min(value, DERIV_STATEMENT_LIMIT_MAX))


def _positive_number(body: dict[str, Any], key: str) -> float:
    value = body.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise InvalidRequestError("InvalidPayload", f"'{key}' must be a positive number")
    try:
        number = float(value)
    except ValueError as exc:
        raise InvalidRequestError("InvalidPayload", f"'{key}' must be a positive number") from exc
    if not math.isfinite(number) or number <= 0:
        raise InvalidRequestError("InvalidPayload", f"'{key}' must be a positive number")
    return number


def _optional_str(body: dict[str, Any], key: str, default: str) -> str:
    value = body.get(key)
    if value is None:
        return default
    if not isinstance(value, str) or not value.strip():
        raise InvalidRequestError("InvalidPayload", f"'{key}' must be a non-empty string")
    return value.strip()


def parse_trade_request(raw: bytes) -> TradeRequest:
    body = parse_json_object(raw)

    contract_type = body.get("contract_type")
    if not isinstance(contract_type, str) or contract_type.strip().upper() not in _CONTRACT_TYPES:
        raise InvalidRequestError("InvalidPayload", "'contract_type' must be CALL or PUT")

    symbol = body.get("symbol")
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidRequestError("InvalidPayload", "'symbol' is required")

    duration = _positive_number(body, "duration")
    if duration != int(duration):
        raise InvalidRequestError("InvalidPayload", "'duration' must be a whole number")

    return TradeRequest(
        contract_type=contract_type.strip().upper(),
        symbol=symbol.strip(),
        amount=_positive_number(body, "amount"),
        duration=int(duration),
        duration_unit=_optional_str(body, "duration_unit", "t"),
        currency=_optional_str(body, "currency", "USD"),
        basis=_optional_str(body, "basis", "stake"),
    )


__all__ = [
    "TradeRequest",
    "parse_json_object",
    "parse_login_token",
    "parse_statement_limit",
    "parse_symbol",
    "parse_trade_request",
]
