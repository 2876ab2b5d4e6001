"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from resolvarr import __version__
from resolvarr.infrastructure.config import AppConfig
from resolvarr.interfaces.app_state import AppState
from resolvarr.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration only, no resource initialization.

    Resources (HTTP client, resolvers, orchestrator) are created in lifespan().
    """
    app = FastAPI(
        title="Resolvarr",
        description="Provider link resolution engine",
        version=__version__,
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from resolvarr.interfaces.api.resolve.router import router as resolve_router

    app.include_router(resolve_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | list[str]]:
        """Liveness probe: 200 as long as the process is running."""
        orchestrator = getattr(app.state, "orchestrator", None)
        return {
            "status": "ok",
            "hosts": orchestrator.supported_hosts if orchestrator else [],
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start) * 1000.0, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
