"""Status HTTP server: health probes and Prometheus exposition, served in-process by uvicorn."""
from __future__ import annotations

import asyncio
import contextlib
from typing import Iterator

import uvicorn
from fastapi import FastAPI, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from notification_worker.app.infrastructure.metrics.prometheus_metrics import PrometheusMetrics
from notification_worker.app.routers.health import health_router


def create_status_app(metrics: PrometheusMetrics, metrics_path: str = "/metrics") -> FastAPI:
    app = FastAPI(title="Notification Worker Status", version="1.0.0")
    app.state.metrics = metrics
    app.include_router(health_router)

    async def expose_metrics(request: Request) -> Response:
        registry = request.app.state.metrics.registry
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    app.add_api_route(metrics_path, expose_metrics, methods=["GET"], include_in_schema=False)
    return app


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves process signal handling to the worker entry point."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield

    def install_signal_handlers(self) -> None:
        pass


class StatusServer:
    def __init__(self, app: FastAPI, *, host: str = "0.0.0.0", port: int = 8080) -> None:
        config = uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
        self._server = _EmbeddedServer(config)
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._server.serve())

    async def close(self) -> None:
        if self._task is None:
            return
        self._server.should_exit = True
        try:
            await self._task
        finally:
            self._task = None
