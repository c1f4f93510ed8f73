"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from deriv_proxy.deriv.store import SessionStore
    from deriv_proxy.state.settings import AppSettings
    from deriv_proxy.handlers.lifecycle import SessionWatchdog
    from deriv_proxy.handlers.connections import StreamManager
    from deriv_proxy.handlers.http.cookies import SessionCookieCodec
    from deriv_proxy.handlers.keyed_limits import KeyedRateLimiter


@dataclass(slots=True)
class RuntimeDeps:
    sessions: SessionStore
    streams: StreamManager
    api_limiter: KeyedRateLimiter
    cookies: SessionCookieCodec
    watchdog: SessionWatchdog
    settings: AppSettings

    async def shutdown(self) -> None:
        try:
            await self.watchdog.stop()
        except Exception:
            logger.exception("session watchdog shutdown failed")
        try:
            await self.sessions.close_all()
        except Exception:
            logger.exception("session store shutdown failed")


__all__ = ["RuntimeDeps"]
