"""SSE stream admission control."""

from __future__ import annotations

import asyncio


class StreamManager:
    def __init__(self, *, max_streams: int) -> None:
        self._max = max(1, int(max_streams))
        self._lock = asyncio.Lock()
        self._active: set[int] = set()

    @property
    def max_streams(self) -> int:
        return self._max

    async def acquire(self, key: int) -> bool:
        """Attempt to admit a stream; False when the server is at capacity."""
        async with self._lock:
            if len(self._active) >= self._max:
                return False
            self._active.add(key)
            return True

    async def release(self, key: int) -> None:
        async with self._lock:
            self._active.discard(key)

    def get_stream_count(self) -> int:
        return len(self._active)


__all__ = ["StreamManager"]
