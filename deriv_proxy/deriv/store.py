"""In-memory map from session id to its upstream Deriv client."""

from __future__ import annotations

import logging
from collections.abc import Callable

from deriv_proxy.errors import CapacityError

from .client import DerivClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], DerivClient]


def _short(session_id: str) -> str:
    return session_id[:8]


class SessionStore:
    """Holds at most one live client per session id."""

    def __init__(self, *, client_factory: ClientFactory, max_sessions: int = 0) -> None:
        self._client_factory = client_factory
        self._max_sessions = max(0, int(max_sessions))
        self._clients: dict[str, DerivClient] = {}

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._clients

    def get(self, session_id: str) -> DerivClient | None:
        client = self._clients.get(session_id)
        if client is not None:
            client.touch()
        return client

    async def set(self, session_id: str, token: str) -> DerivClient:
        """Bind a fresh client to the session, closing any previous one.

        Nothing is awaited until the new client is stored.
        """
        existing = self._clients.get(session_id)
        if existing is None and self._max_sessions and len(self._clients) >= self._max_sessions:
            raise CapacityError("sessions", self._max_sessions)

        client = self._client_factory(token)
        client.connect()
        self._clients[session_id] = client
        logger.info("session: bound sid=%s replaced=%s active=%s", _short(session_id), existing is not None, len(self))
        if existing is not None:
            await existing.close()
        return client

    async def delete(self, session_id: str) -> bool:
        client = self._clients.pop(session_id, None)
        if client is None:
            return False
        await client.close()
        logger.info("session: removed sid=%s active=%s", _short(session_id), len(self))
        return True

    def _is_idle(self, client: DerivClient, idle_timeout_s: float) -> bool:
        return not client.has_subscriptions and client.idle_for() >= idle_timeout_s

    async def expire_idle(self, idle_timeout_s: float) -> list[str]:
        """Close clients idle longer than the timeout that have no open streams."""
        if idle_timeout_s <= 0:
            return []
        candidates = [(sid, client) for sid, client in self._clients.items() if self._is_idle(client, idle_timeout_s)]
        expired: list[str] = []
        for sid, client in candidates:
            # Closing suspends; the sid may have been rebound or touched meanwhile.
            if self._clients.get(sid) is not client or not self._is_idle(client, idle_timeout_s):
                continue
            del self._clients[sid]
            expired.append(sid)
            await client.close()
        if expired:
            logger.info("session: expired %s idle session(s); active=%s", len(expired), len(self))
        return expired

    async def close_all(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()


__all__ = ["ClientFactory", "SessionStore"]
