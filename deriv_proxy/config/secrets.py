"""Secrets configuration."""

from __future__ import annotations

ENV_SESSION_SECRET = "SESSION_SECRET"

__all__ = ["ENV_SESSION_SECRET"]
