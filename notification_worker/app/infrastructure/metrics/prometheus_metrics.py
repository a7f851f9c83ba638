"""MetricsSink backed by prometheus_client on a per-instance registry."""
from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


class PrometheusMetrics:
    """Counters, histograms and the health gauge for one worker instance."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._healthy = False

        self.messages_received = Counter(
            "rabbitmq_messages_received",
            "The total number of messages received from RabbitMQ",
            registry=self.registry,
        )
        self.messages_processed = Counter(
            "messages_processed",
            "The total number of messages processed successfully",
            registry=self.registry,
        )
        self.api_requests_sent = Counter(
            "api_requests_sent",
            "The total number of API requests sent",
            registry=self.registry,
        )
        self.api_requests_success = Counter(
            "api_requests_success",
            "The total number of successful API requests",
            registry=self.registry,
        )
        self.api_requests_failed = Counter(
            "api_requests_failed",
            "The total number of failed API requests",
            registry=self.registry,
        )
        self.message_processing_duration = Histogram(
            "message_processing_duration_seconds",
            "Duration of message processing in seconds",
            registry=self.registry,
        )
        self.api_request_duration = Histogram(
            "api_request_duration_seconds",
            "Duration of API requests in seconds",
            registry=self.registry,
        )
        self.worker_healthy = Gauge(
            "worker_healthy",
            "Worker health status: 1 for healthy, 0 for unhealthy",
            registry=self.registry,
        )

    @property
    def healthy(self) -> bool:
        return self._healthy

    def message_received(self) -> None:
        self.messages_received.inc()

    def message_processed(self) -> None:
        self.messages_processed.inc()

    def observe_processing_duration(self, seconds: float) -> None:
        self.message_processing_duration.observe(seconds)

    def api_request_sent(self) -> None:
        self.api_requests_sent.inc()

    def api_request_succeeded(self) -> None:
        self.api_requests_success.inc()

    def api_request_failed(self) -> None:
        self.api_requests_failed.inc()

    def observe_api_request_duration(self, seconds: float) -> None:
        self.api_request_duration.observe(seconds)

    def set_healthy(self, healthy: bool) -> None:
        self._healthy = bool(healthy)
        self.worker_healthy.set(1 if healthy else 0)
