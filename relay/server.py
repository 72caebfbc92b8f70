"""FastAPI server for the streaming relay.

Endpoints:

- ``GET /`` and ``GET /healthz``: health checks (no authentication)
- ``WS /ws``: relay endpoint; one relay per connection

Server Lifecycle:
    1. On startup: configure logging, validate configuration, start
       telemetry and build the runtime dependencies
    2. Accept WebSocket connections on /ws and drive them through the
       Relay Coordinator
    3. On shutdown: close the upstream HTTP client and flush telemetry

Example:
    $ uvicorn relay.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, WebSocket
from fastapi.responses import ORJSONResponse

from .config import validate_env
from .logging import configure_logging
from .runtime import RuntimeDeps, build_runtime_deps
from .handlers import handle_websocket_connection
from .telemetry import init_telemetry, shutdown_telemetry

logger = logging.getLogger(__name__)


def create_app(deps: RuntimeDeps | None = None) -> FastAPI:
    """Build the application; ``deps`` overrides the env-configured runtime."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging()
        runtime = deps
        if runtime is None:
            validate_env()
            init_telemetry()
            runtime = build_runtime_deps()
        app.state.deps = runtime
        try:
            yield
        finally:
            await runtime.shutdown()
            shutdown_telemetry()
            logger.info("relay server stopped")

    app = FastAPI(default_response_class=ORJSONResponse, lifespan=lifespan)

    @app.get("/")
    async def root():
        """Root endpoint for load balancer health checks."""
        return {"status": "ok"}

    @app.get("/healthz")
    async def healthz():
        """Health check endpoint (no authentication required)."""
        runtime: RuntimeDeps = app.state.deps
        return {
            "status": "ok",
            "store_backend": runtime.store_backend,
            "connections": runtime.connections.capacity(),
        }

    @app.get("/favicon.ico", status_code=204)
    async def favicon():
        """Suppress favicon requests from browsers/probes."""
        return None

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Relay endpoint."""
        await handle_websocket_connection(websocket, app.state.deps)

    return app


app = create_app()

__all__ = ["app", "create_app"]
