"""Main FastAPI server for the Deriv trading dashboard proxy."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import Callable, Awaitable

from fastapi import FastAPI
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware

from deriv_proxy.state import RuntimeDeps
from deriv_proxy.runtime.settings import load_http_settings
from deriv_proxy.runtime.logging import configure_logging
from deriv_proxy.config.http import CORS_ANY_ORIGIN_REGEX
from deriv_proxy.handlers.http.routes import router as api_router
from deriv_proxy.runtime.dependencies import build_runtime_deps
from deriv_proxy.handlers.http.limits import rate_limit_middleware
from deriv_proxy.handlers.http.errors import install_exception_handlers

logger = logging.getLogger(__name__)

configure_logging()

DepsFactory = Callable[[], Awaitable[RuntimeDeps]]


def create_app(deps_factory: DepsFactory = build_runtime_deps, *, cors_allow_origins: tuple[str, ...] = ()) -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        app.state.runtime_deps = await deps_factory()
        logger.info("runtime: ready")
        try:
            yield
        finally:
            deps = getattr(app.state, "runtime_deps", None)
            if deps is not None:
                await deps.shutdown()

    app = FastAPI(default_response_class=ORJSONResponse, lifespan=_lifespan)
    install_exception_handlers(app)
    app.middleware("http")(rate_limit_middleware)
    # Added last so it wraps the rate limiter and 429s still carry CORS headers.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_allow_origins),
        allow_origin_regex=None if cors_allow_origins else CORS_ANY_ORIGIN_REGEX,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app(cors_allow_origins=load_http_settings().cors_allow_origins)
