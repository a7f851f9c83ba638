"""Message consumer factory: selects implementation from config. Only place that imports concrete consumers."""
from __future__ import annotations

from notification_worker.app.config.settings import Settings
from notification_worker.app.infrastructure.messaging.rabbitmq.rabbitmq_consumer import RabbitMQConsumer
from notification_worker.app.observability import ObservabilityContext
from notification_worker.app.ports.message_consumer import MessageConsumer


def create_message_consumer(
    settings: Settings,
    observability: ObservabilityContext | None = None,
) -> MessageConsumer:
    backend = settings.consumer_backend.strip().lower()

    if backend == "rabbitmq":
        return RabbitMQConsumer(settings, observability)

    raise ValueError(f"Unsupported consumer backend: {backend}")
