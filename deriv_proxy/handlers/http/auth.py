"""Session resolution dependencies for the REST surface."""

from __future__ import annotations

from fastapi import Request

from deriv_proxy.state import RuntimeDeps
from deriv_proxy.deriv import DerivClient
from deriv_proxy.errors import NotAuthenticatedError


async def get_runtime_deps(request: Request) -> RuntimeDeps:
    runtime_deps = getattr(request.app.state, "runtime_deps", None)
    if runtime_deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    return runtime_deps


def get_session_client(request: Request, runtime_deps: RuntimeDeps) -> DerivClient | None:
    session_id = runtime_deps.cookies.read(request)
    if session_id is None:
        return None
    return runtime_deps.sessions.get(session_id)


async def require_client(request: Request) -> DerivClient:
    client = get_session_client(request, await get_runtime_deps(request))
    if client is None:
        raise NotAuthenticatedError()
    return client


__all__ = ["get_runtime_deps", "get_session_client", "require_client"]
