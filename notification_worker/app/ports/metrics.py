"""Port: metrics sink injected into the engine and its collaborators."""
from __future__ import annotations

from typing import Protocol


class MetricsSink(Protocol):
    def message_received(self) -> None: ...

    def message_processed(self) -> None: ...

    def observe_processing_duration(self, seconds: float) -> None: ...

    def api_request_sent(self) -> None: ...

    def api_request_succeeded(self) -> None: ...

    def api_request_failed(self) -> None: ...

    def observe_api_request_duration(self, seconds: float) -> None: ...

    def set_healthy(self, healthy: bool) -> None: ...


class NullMetrics:
    """MetricsSink that records nothing."""

    def message_received(self) -> None:
        pass

    def message_processed(self) -> None:
        pass

    def observe_processing_duration(self, seconds: float) -> None:
        pass

    def api_request_sent(self) -> None:
        pass

    def api_request_succeeded(self) -> None:
        pass

    def api_request_failed(self) -> None:
        pass

    def observe_api_request_duration(self, seconds: float) -> None:
        pass

    def set_healthy(self, healthy: bool) -> None:
        pass
