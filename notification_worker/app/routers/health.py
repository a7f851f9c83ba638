from typing import Any

from fastapi import APIRouter, Request, Response
from loguru import logger

from notification_worker.app.core import SERVICE_NAME

health_router = APIRouter(tags=["Health"])


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


@health_router.get(
    "/health",
    summary="Liveness probe",
    description="Returns 200 while the worker process is running.",
    responses={200: {"description": "Process is alive."}},
)
async def live() -> Response:
    return Response(status_code=200, content="OK")


@health_router.get(
    "/health/ready",
    summary="Readiness probe",
    description="Returns 200 only while the worker holds a live broker connection.",
    responses={
        200: {"description": "Worker is connected and consuming."},
        503: {"description": "Worker is disconnected or shutting down."},
    },
)
async def ready(request: Request) -> Response:
    metrics = getattr(request.app.state, "metrics", None)
    if metrics is None:
        _log("metrics_not_initialized")
        return Response(status_code=503, content="Not ready")
    if not metrics.healthy:
        _log("worker_not_ready")
        return Response(status_code=503, content="Worker not ready")
    return Response(status_code=200, content="OK")
