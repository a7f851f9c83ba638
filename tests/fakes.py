"""In-memory stand-ins for the worker ports, shared by unit tests."""
from __future__ import annotations

import asyncio
import json
from typing import Any

from notification_worker.app.domain.errors import NotifyError


class FakeMessage:
    """Implements IncomingMessage; records ack/reject calls."""

    def __init__(
        self,
        payload: dict[str, Any] | bytes,
        *,
        message_id: str = "msg-1",
        ack_raises: Exception | None = None,
    ) -> None:
        self.body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        self.message_id = message_id
        self.routing_key = "notifications"
        self.ack_calls = 0
        self.reject_calls = 0
        self.reject_requeue: bool | None = None
        self._ack_raises = ack_raises

    async def ack(self) -> None:
        self.ack_calls += 1
        if self._ack_raises is not None:
            raise self._ack_raises

    async def reject(self, *, requeue: bool = False) -> None:
        self.reject_calls += 1
        self.reject_requeue = requeue


class FakeStream:
    """Yields queued messages, then either ends (broker closed) or idles until cancelled."""

    def __init__(self, messages: list[FakeMessage] | None = None, *, closes: bool = False) -> None:
        self._messages = list(messages or [])
        self._closes = closes
        self.idle = asyncio.Event()

    def __aiter__(self) -> "FakeStream":
        return self

    async def __anext__(self) -> FakeMessage:
        if self._messages:
            return self._messages.pop(0)
        if self._closes:
            raise StopAsyncIteration
        self.idle.set()
        await asyncio.Event().wait()
        raise AssertionError("unreachable")


class FakeConsumer:
    """Implements MessageConsumer.

    ``connect_errors`` is consumed one entry per connect() call: None means
    success, an exception instance is raised. Calls beyond the list succeed.
    """

    def __init__(
        self,
        streams: list[FakeStream] | None = None,
        *,
        connect_errors: list[Exception | None] | None = None,
        open_stream_error: Exception | None = None,
        close_raises: Exception | None = None,
    ) -> None:
        self._streams = list(streams or [])
        self._connect_errors = list(connect_errors or [])
        self._open_stream_error = open_stream_error
        self._close_raises = close_raises
        self.calls: list[str] = []

    def count(self, name: str) -> int:
        return self.calls.count(name)

    async def connect(self) -> None:
        self.calls.append("connect")
        if self._connect_errors:
            error = self._connect_errors.pop(0)
            if error is not None:
                raise error

    async def open_stream(self) -> FakeStream:
        self.calls.append("open_stream")
        if self._open_stream_error is not None:
            raise self._open_stream_error
        return self._streams.pop(0)

    async def close(self) -> None:
        self.calls.append("close")
        if self._close_raises is not None:
            raise self._close_raises


class FakeNotifier:
    """Implements Notifier; fails on the given zero-based call indexes."""

    def __init__(self, *, fail_on: set[int] | None = None, exc: Exception | None = None) -> None:
        self._fail_on = fail_on or set()
        self._exc = exc
        self.calls: list[tuple[str, str]] = []
        self.succeeded: list[tuple[str, str]] = []
        self.failed: list[tuple[str, str]] = []
        self.closed = False

    async def notify(self, recipient: str, body: str) -> None:
        index = len(self.calls)
        self.calls.append((recipient, body))
        if index in self._fail_on:
            self.failed.append((recipient, body))
            raise self._exc or NotifyError("downstream unavailable")
        self.succeeded.append((recipient, body))

    async def close(self) -> None:
        self.closed = True


class RecordingMetrics:
    """Implements MetricsSink; keeps counters and the health history."""

    def __init__(self) -> None:
        self.received = 0
        self.processed = 0
        self.processing_durations: list[float] = []
        self.api_sent = 0
        self.api_succeeded = 0
        self.api_failed = 0
        self.api_durations: list[float] = []
        self.health: list[bool] = []

    @property
    def healthy(self) -> bool:
        return bool(self.health) and self.health[-1]

    def message_received(self) -> None:
        self.received += 1

    def message_processed(self) -> None:
        self.processed += 1

    def observe_processing_duration(self, seconds: float) -> None:
        self.processing_durations.append(seconds)

    def api_request_sent(self) -> None:
        self.api_sent += 1

    def api_request_succeeded(self) -> None:
        self.api_succeeded += 1

    def api_request_failed(self) -> None:
        self.api_failed += 1

    def observe_api_request_duration(self, seconds: float) -> None:
        self.api_durations.append(seconds)

    def set_healthy(self, healthy: bool) -> None:
        self.health.append(healthy)


class RecordingSleep:
    """Replaces asyncio.sleep in the engine; records requested delays without waiting.

    When given a consumer's ``calls`` list, also appends "sleep" to it so the
    delay can be ordered against connect/close.
    """

    def __init__(self, calls: list[str] | None = None) -> None:
        self.delays: list[float] = []
        self._calls = calls

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        if self._calls is not None:
            self._calls.append("sleep")


def events(records: list[dict[str, Any]]) -> list[str]:
    """Event names of captured loguru records, in emission order."""
    return [record["extra"].get("event", "") for record in records]
