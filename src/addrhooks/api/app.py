"""FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest
from starlette.responses import Response

from addrhooks import __version__
from addrhooks.api.middleware.cors import setup_cors
from addrhooks.api.v1 import v1_router
from addrhooks.config.settings import AppConfig
from addrhooks.engine.client import HookEngine
from addrhooks.errors.hook_errors import HookError
from addrhooks.metrics.collector import EngineMetrics
from addrhooks.metrics.middleware import PrometheusMiddleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle hooks.

    Initialises the engine (store, dispatcher, listener, reaper) on startup
    and gracefully shuts down on exit.
    """
    config: AppConfig = app.state.config
    engine = HookEngine(
        config,
        metrics=app.state.metrics,
        annotator=getattr(app.state, "annotator", None),
        transport=getattr(app.state, "transport", None),
    )

    try:
        await engine.initialize()
        app.state.engine = engine
        logger.info("addrhooks engine initialized")
        yield
    finally:
        await engine.close()
        logger.info("addrhooks engine shut down")


def create_app(*, config: AppConfig | None = None, engine_options: dict | None = None) -> FastAPI:
    """Build and return the FastAPI application.

    Args:
        config: Optional AppConfig. If *None*, a default config is created
            from environment variables.
        engine_options: Optional ``annotator`` / ``transport`` overrides
            passed to the engine at startup.
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="addrhooks",
        version=__version__,
        description="Payment webhooks for watched blockchain addresses",
        lifespan=_lifespan,
    )

    # Stored on app.state for lifespan access
    app.state.config = config
    app.state.metrics = EngineMetrics()
    for key, value in (engine_options or {}).items():
        setattr(app.state, key, value)

    # -- Middleware --
    setup_cors(app, config.server.cors_origins)
    if config.metrics.enabled:
        app.add_middleware(PrometheusMiddleware, registry=app.state.metrics.registry)

    # -- Error handler --
    @app.exception_handler(HookError)
    async def _hook_error_handler(request: Request, exc: HookError) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"code": exc.code, "message": exc.message},
        )

    # -- Base routes --
    @app.get("/health", tags=["base"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/metrics", tags=["base"], include_in_schema=False)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(app.state.metrics.registry),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    # -- Mount v1 API --
    app.include_router(v1_router)

    return app
