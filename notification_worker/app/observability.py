"""Observability context: logger handle and metrics sink passed to the engine and its collaborators."""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from notification_worker.app.core import SERVICE_NAME
from notification_worker.app.ports.metrics import MetricsSink, NullMetrics

_LEVELS = {
    "debug": "DEBUG",
    "info": "INFO",
    "warn": "WARNING",
    "warning": "WARNING",
    "error": "ERROR",
}

_TEXT_FORMAT = (
    "<green>{time:YYYY-MM-DDTHH:mm:ss.SSSZZ}</green> | <level>{level: <8}</level> | "
    "{extra[event]} {message} | {extra}"
)


def configure_logging(level: str = "info", fmt: str = "json") -> None:
    """Replace loguru's default sink with a stdout sink. Unknown levels fall back to info."""
    logger.remove()
    logger.configure(extra={"service_name": SERVICE_NAME, "event": ""})
    resolved = _LEVELS.get(level.strip().lower(), "INFO")
    if fmt.strip().lower() == "json":
        logger.add(sys.stdout, level=resolved, serialize=True)
    else:
        logger.add(sys.stdout, level=resolved, format=_TEXT_FORMAT)


@dataclass(frozen=True)
class ObservabilityContext:
    """Structured logger bound to the service plus a metrics sink."""

    log: Any = field(default_factory=lambda: logger.bind(service_name=SERVICE_NAME))
    metrics: MetricsSink = field(default_factory=NullMetrics)

    def event(self, event: str, **kwargs: Any) -> None:
        self.log.bind(event=event, **kwargs).info("")

    def warning(self, event: str, **kwargs: Any) -> None:
        self.log.bind(event=event, **kwargs).warning("")

    def error(self, event: str, **kwargs: Any) -> None:
        self.log.bind(event=event, **kwargs).error("")

    def debug(self, event: str, **kwargs: Any) -> None:
        self.log.bind(event=event, **kwargs).debug("")
