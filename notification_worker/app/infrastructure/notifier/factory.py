"""Notifier factory: selects implementation from config. Only place that imports concrete notifiers."""
from __future__ import annotations

from notification_worker.app.config.settings import Settings
from notification_worker.app.infrastructure.http.factory import create_http_client
from notification_worker.app.infrastructure.notifier.api_notifier import ApiNotifier
from notification_worker.app.observability import ObservabilityContext
from notification_worker.app.ports.notifier import Notifier


def create_notifier(settings: Settings, observability: ObservabilityContext) -> Notifier:
    backend = settings.notifier_backend.strip().lower()

    if backend == "api":
        return ApiNotifier(
            create_http_client(settings),
            url=settings.api_url,
            service_id=settings.api_service_id,
            password=settings.api_pass,
            source=settings.api_source,
            timeout_seconds=settings.api_timeout_seconds,
            user_agent=settings.api_user_agent,
            observability=observability,
        )

    raise ValueError(f"Unsupported notifier backend: {backend}")
