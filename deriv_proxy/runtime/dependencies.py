"""Runtime dependency construction (session store + admission control)."""

from __future__ import annotations

import logging

from deriv_proxy.state import RuntimeDeps
from deriv_proxy.deriv.client import ConnectFn
from deriv_proxy.deriv import DerivClient, SessionStore
from deriv_proxy.state.settings import AppSettings
from deriv_proxy.handlers.lifecycle import SessionWatchdog
from deriv_proxy.handlers.connections import StreamManager
from deriv_proxy.handlers.keyed_limits import KeyedRateLimiter
from deriv_proxy.handlers.http.cookies import SessionCookieCodec
from deriv_proxy.deriv.store import ClientFactory

from .settings import load_settings

logger = logging.getLogger(__name__)


def build_client_factory(settings: AppSettings, connect_fn: ConnectFn | None = None) -> ClientFactory:
    deriv = settings.deriv

    def _factory(token: str) -> DerivClient:
        return DerivClient(
            token=token,
            app_id=deriv.app_id,
            ws_url=deriv.ws_url,
            call_timeout_s=deriv.call_timeout_s,
            open_timeout_s=deriv.open_timeout_s,
            max_pending_messages=deriv.max_pending_messages,
            stream_queue_max=settings.stream.queue_max,
            connect_fn=connect_fn,
        )

    return _factory


async def build_runtime_deps(
    settings: AppSettings | None = None,
    *,
    connect_fn: ConnectFn | None = None,
) -> RuntimeDeps:
    settings = settings or load_settings()

    sessions = SessionStore(
        client_factory=build_client_factory(settings, connect_fn),
        max_sessions=settings.session.max_sessions,
    )
    watchdog = SessionWatchdog(
        sessions,
        idle_timeout_s=settings.session.idle_timeout_s,
        watchdog_tick_s=settings.session.watchdog_tick_s,
    )
    watchdog.start()

    logger.info(
        "runtime: deriv app_id=%s url=%s max_streams=%s",
        settings.deriv.app_id,
        settings.deriv.ws_url,
        settings.limits.max_concurrent_streams,
    )
    return RuntimeDeps(
        sessions=sessions,
        streams=StreamManager(max_streams=settings.limits.max_concurrent_streams),
        api_limiter=KeyedRateLimiter(
            limit=settings.limits.api_max_requests_per_window,
            window_seconds=settings.limits.api_window_seconds,
        ),
        cookies=SessionCookieCodec(
            secret=settings.session.secret,
            cookie_name=settings.session.cookie_name,
            max_age_s=settings.session.max_age_s,
            secure=settings.session.cookie_secure,
        ),
        watchdog=watchdog,
        settings=settings,
    )


__all__ = ["RuntimeDeps", "build_client_factory", "build_runtime_deps"]
