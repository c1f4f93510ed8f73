from __future__ import annotations

from fastapi import Response

from deriv_proxy.handlers.http.cookies import SessionCookieCodec


def _codec(secret: str = "s3cret", max_age_s: int = 3600) -> SessionCookieCodec:
    return SessionCookieCodec(secret=secret, cookie_name="sid", max_age_s=max_age_s, secure=True)


def test_new_session_id_is_48_hex_chars() -> None:
    sid = SessionCookieCodec.new_session_id()
    assert len(sid) == 48
    int(sid, 16)
    assert sid != SessionCookieCodec.new_session_id()


def test_sign_and_unsign() -> None:
    codec = _codec()
    sid = codec.new_session_id()
    assert codec.unsign(codec.sign(sid)) == sid


def test_unsign_rejects_tampered_or_foreign_values() -> None:
    codec = _codec()
    signed = codec.sign("abc")
    _payload, timestamp, signature = signed.split(".")
    forged = ".".join([codec.sign("xyz").split(".")[0], timestamp, signature])
    assert codec.unsign(forged) is None
    assert codec.unsign("abc") is None
    assert _codec(secret="other").unsign(signed) is None


def test_issue_sets_hardened_cookie() -> None:
    codec = _codec()
    response = Response()
    codec.issue(response, "abc")

    header = response.headers["set-cookie"]
    assert header.startswith("sid=")
    assert "HttpOnly" in header
    assert "Max-Age=3600" in header
    assert "SameSite=lax" in header
    assert "Secure" in header


def test_clear_expires_cookie() -> None:
    response = Response()
    _codec().clear(response)
    header = response.headers["set-cookie"]
    assert header.startswith("sid=")
    assert "Max-Age=0" in header
