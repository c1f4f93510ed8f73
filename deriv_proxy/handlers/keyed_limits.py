"""Per-key sliding-window limiters (one window per client address)."""

from __future__ import annotations

import time

from .limits import TimeFn, SlidingWindowRateLimiter

# Idle windows are swept once this many keys are tracked.
_SWEEP_THRESHOLD = 1024


class KeyedRateLimiter:
    def __init__(
        self,
        *,
        limit: int,
        window_seconds: float,
        now_fn: TimeFn | None = None,
    ) -> None:
        self.limit = max(0, int(limit))
        self.window_seconds = max(0.0, float(window_seconds))
        self._now = now_fn or time.monotonic
        self._limiters: dict[str, SlidingWindowRateLimiter] = {}

    def __len__(self) -> int:
        return len(self._limiters)

    def consume(self, key: str) -> None:
        """Record one event for `key`; raises RateLimitError when saturated."""
        limiter = self._limiters.get(key)
        if limiter is None:
            if len(self._limiters) >= _SWEEP_THRESHOLD:
                self.sweep()
            limiter = SlidingWindowRateLimiter(
                limit=self.limit,
                window_seconds=self.window_seconds,
                now_fn=self._now,
            )
            self._limiters[key] = limiter
        limiter.consume()

    def sweep(self) -> int:
        idle = [key for key, limiter in self._limiters.items() if limiter.is_idle()]
        for key in idle:
            del self._limiters[key]
        return len(idle)


__all__ = ["KeyedRateLimiter"]
