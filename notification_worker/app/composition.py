"""Worker composition root: build and lifecycle-manage concrete dependencies.

Composition may: import concrete classes, call factories, store interface types,
manage high-level lifecycle.
"""
from __future__ import annotations

from loguru import logger

from notification_worker.app.application.consumption_engine import ConsumptionEngine
from notification_worker.app.application.processing_service import ProcessingService
from notification_worker.app.config.settings import Settings
from notification_worker.app.core import SERVICE_NAME
from notification_worker.app.infrastructure.messaging.factory import create_message_consumer
from notification_worker.app.infrastructure.metrics.prometheus_metrics import PrometheusMetrics
from notification_worker.app.infrastructure.notifier.factory import create_notifier
from notification_worker.app.observability import ObservabilityContext
from notification_worker.app.ports.message_consumer import MessageConsumer
from notification_worker.app.ports.notifier import Notifier
from notification_worker.app.status_server import StatusServer, create_status_app


class WorkerDependencies:
    """Holds wired worker dependencies and their lifecycle."""

    def __init__(self, *, settings: Settings) -> None:
        self._settings = settings
        self._metrics = PrometheusMetrics()
        self._observability = ObservabilityContext(
            log=logger.bind(service_name=SERVICE_NAME),
            metrics=self._metrics,
        )
        self._message_consumer: MessageConsumer | None = None
        self._notifier: Notifier | None = None
        self._engine: ConsumptionEngine | None = None
        self._status_server: StatusServer | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def metrics(self) -> PrometheusMetrics:
        return self._metrics

    @property
    def observability(self) -> ObservabilityContext:
        return self._observability

    @property
    def engine(self) -> ConsumptionEngine:
        if self._engine is None:
            raise RuntimeError("engine is not initialized")
        return self._engine

    def build(self) -> None:
        self._message_consumer = create_message_consumer(self._settings, self._observability)
        self._notifier = create_notifier(self._settings, self._observability)
        processor = ProcessingService(self._notifier, self._observability)
        self._engine = ConsumptionEngine(
            self._message_consumer,
            processor,
            self._observability,
            queue_name=self._settings.rabbitmq_queue,
            reconnect_delay_seconds=self._settings.reconnect_delay_seconds,
        )

    async def start_status_server(self) -> None:
        app = create_status_app(self._metrics, self._settings.server_metrics_path)
        self._status_server = StatusServer(app, port=self._settings.server_port)
        await self._status_server.start()
        self._observability.event(
            "status_server_started",
            port=self._settings.server_port,
            path=self._settings.server_metrics_path,
        )

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.stop()
            self._engine = None
        self._message_consumer = None

        if self._notifier is not None:
            try:
                await self._notifier.close()
            except Exception as exc:
                logger.warning("notifier close failed: {}", exc)
            self._notifier = None

        if self._status_server is not None:
            try:
                await self._status_server.close()
            except Exception as exc:
                logger.warning("status server close failed: {}", exc)
            self._status_server = None


def create_worker_dependencies(settings: Settings) -> WorkerDependencies:
    deps = WorkerDependencies(settings=settings)
    deps.build()
    return deps
