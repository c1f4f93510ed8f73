"""Server-Sent Events stream settings."""

from __future__ import annotations

ENV_STREAM_KEEPALIVE_S = "STREAM_KEEPALIVE_S"
ENV_STREAM_QUEUE_MAX = "STREAM_QUEUE_MAX"

DEFAULT_STREAM_KEEPALIVE_S = 15.0
# When a subscriber falls this far behind, the oldest messages are dropped.
DEFAULT_STREAM_QUEUE_MAX = 500

SSE_MEDIA_TYPE = "text/event-stream"
SSE_KEEPALIVE_FRAME = ": keep-alive\n\n"
SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}

__all__ = [
    "DEFAULT_STREAM_KEEPALIVE_S",
    "DEFAULT_STREAM_QUEUE_MAX",
    "ENV_STREAM_KEEPALIVE_S",
    "ENV_STREAM_QUEUE_MAX",
    "SSE_HEADERS",
    "SSE_KEEPALIVE_FRAME",
    "SSE_MEDIA_TYPE",
]
