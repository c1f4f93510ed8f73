"""Background watchdog that expires idle upstream sessions."""

from __future__ import annotations

import asyncio
import logging
import contextlib

from deriv_proxy.deriv.store import SessionStore

logger = logging.getLogger(__name__)


class SessionWatchdog:
    def __init__(
        self,
        sessions: SessionStore,
        *,
        idle_timeout_s: float,
        watchdog_tick_s: float,
    ) -> None:
        self._sessions = sessions
        self._idle_timeout_s = max(0.0, float(idle_timeout_s))
        self._watchdog_tick_s = float(watchdog_tick_s) if watchdog_tick_s > 0 else 60.0
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def enabled(self) -> bool:
        return self._idle_timeout_s > 0

    def start(self) -> asyncio.Task | None:
        if not self.enabled:
            return None
        if self._task is None:
            self._stop_event.clear()
            self._task = asyncio.create_task(self._watchdog_loop())
        return self._task

    async def stop(self) -> None:
        self._stop_event.set()
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError, Exception):
            await self._task
        self._task = None

    async def _watchdog_loop(self) -> None:
        try:
            while not self._stop_event.is_set():
                await asyncio.sleep(self._watchdog_tick_s)
                if self._stop_event.is_set():
                    break
                try:
                    await self._sessions.expire_idle(self._idle_timeout_s)
                except Exception:
                    logger.warning("session watchdog sweep failed", exc_info=True)
        except asyncio.CancelledError:
            return


__all__ = ["SessionWatchdog"]
