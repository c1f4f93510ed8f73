"""Signed session cookie issuance and verification."""

from __future__ import annotations

import secrets

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeTimedSerializer

from deriv_proxy.config.session import SESSION_ID_BYTES, SESSION_COOKIE_SALT, SESSION_COOKIE_SAME_SITE


class SessionCookieCodec:
    """Session ids travel in an httpOnly cookie signed with the server secret."""

    def __init__(
        self,
        *,
        secret: str,
        cookie_name: str,
        max_age_s: int,
        secure: bool,
    ) -> None:
        self.cookie_name = cookie_name
        self.max_age_s = int(max_age_s)
        self._secure = bool(secure)
        self._serializer = URLSafeTimedSerializer(secret, salt=SESSION_COOKIE_SALT)

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_hex(SESSION_ID_BYTES)

    def sign(self, session_id: str) -> str:
        return self._serializer.dumps(session_id)

    def unsign(self, raw: str) -> str | None:
        # SignatureExpired is a BadSignature.
        try:
            value = self._serializer.loads(raw, max_age=self.max_age_s)
        except BadSignature:
            return None
        return value if isinstance(value, str) and value else None

    def read(self, request: Request) -> str | None:
        raw = request.cookies.get(self.cookie_name)
        if not raw:
            return None
        return self.unsign(raw)

    def issue(self, response: Response, session_id: str) -> None:
        response.set_cookie(
            self.cookie_name,
            self.sign(session_id),
            max_age=self.max_age_s,
            httponly=True,
            samesite=SESSION_COOKIE_SAME_SITE,
            secure=self._secure,
            path="/",
        )

    def clear(self, response: Response) -> None:
        response.delete_cookie(self.cookie_name, path="/")


__all__ = ["SessionCookieCodec"]
