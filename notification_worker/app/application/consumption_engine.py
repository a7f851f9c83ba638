"""
Consumption engine: receive -> process -> acknowledge loop against one durable queue.

Loop states:
  STREAMING -> (delivery processed, acked or rejected) -> STREAMING
  STREAMING -> (cancel event set)                      -> CANCELLED
  STREAMING -> (stream closed)                         -> DRAINED
  DRAINED   -> (reconnect succeeded)                   -> STREAMING
  DRAINED   -> (reconnect failed)                      -> DONE, ConnectivityError raised

Deliveries are handled one at a time in broker order. The cancel event is only
observed while waiting for the next delivery; a delivery being processed always
runs to completion first. Every per-delivery failure rejects the delivery
without requeue, transient notifier failures included.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable

from notification_worker.app.application.processing_service import ProcessingService
from notification_worker.app.constants import (
    DEFAULT_RECONNECT_DELAY_SECONDS,
    REJECT_REASON,
    LoopState,
)
from notification_worker.app.domain.errors import (
    ConnectivityError,
    DecodeError,
    NotifyError,
    ShutdownError,
)
from notification_worker.app.observability import ObservabilityContext
from notification_worker.app.ports.incoming_message import IncomingMessage
from notification_worker.app.ports.message_consumer import DeliveryStream, MessageConsumer

_CANCELLED = object()


def _reject_reason(exc: Exception) -> str:
    if isinstance(exc, DecodeError):
        return REJECT_REASON.DECODE
    if isinstance(exc, NotifyError):
        return REJECT_REASON.NOTIFY
    return REJECT_REASON.UNEXPECTED


class ConsumptionEngine:
    """Drives one queue under an external cancel event with fixed-delay reconnects.

    start/stop must not be called concurrently on the same instance.
    """

    def __init__(
        self,
        consumer: MessageConsumer,
        processor: ProcessingService,
        observability: ObservabilityContext | None = None,
        *,
        queue_name: str = "",
        reconnect_delay_seconds: float = DEFAULT_RECONNECT_DELAY_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._consumer = consumer
        self._processor = processor
        self._obs = observability or ObservabilityContext()
        self._queue_name = queue_name
        self._reconnect_delay_seconds = float(reconnect_delay_seconds)
        self._sleep = sleep
        self._state = LoopState.DONE

    @property
    def state(self) -> LoopState:
        return self._state

    def _set_healthy(self, healthy: bool) -> None:
        self._obs.metrics.set_healthy(healthy)

    async def start(self, cancel_event: asyncio.Event) -> LoopState:
        """Connect, then consume until cancelled.

        Returns LoopState.CANCELLED on cancellation. Raises ConnectivityError when
        the first connect, consumer registration or a reconnect fails.
        """
        try:
            await self._consumer.connect()
        except ConnectivityError as exc:
            self._set_healthy(False)
            self._state = LoopState.DONE
            self._obs.error("worker_start_failed", queue=self._queue_name, error=str(exc))
            raise

        self._obs.event("worker_started", queue=self._queue_name)
        self._set_healthy(True)
        return await self._consume(cancel_event)

    async def stop(self) -> None:
        """Best-effort teardown. Safe to call more than once; never raises."""
        self._obs.event("worker_stopping")
        self._set_healthy(False)
        try:
            await self._consumer.close()
        except Exception as exc:
            err = ShutdownError(f"failed to close consumer: {exc}")
            self._obs.warning("worker_stop_failed", error=str(err))
        self._obs.event("worker_shutdown_complete")

    async def _consume(self, cancel_event: asyncio.Event) -> LoopState:
        while True:
            self._state = LoopState.STREAMING
            try:
                stream = await self._consumer.open_stream()
            except ConnectivityError:
                self._set_healthy(False)
                self._state = LoopState.DONE
                raise

            self._obs.event("consumption_started", queue=self._queue_name)
            if await self._drain(stream, cancel_event) is LoopState.CANCELLED:
                self._state = LoopState.CANCELLED
                self._obs.event("worker_cancelled", queue=self._queue_name)
                return LoopState.CANCELLED

            self._state = LoopState.DRAINED
            self._obs.warning("delivery_stream_closed", queue=self._queue_name)
            self._set_healthy(False)
            try:
                await self._reconnect()
            except ConnectivityError:
                self._state = LoopState.DONE
                raise
            self._set_healthy(True)

    async def _drain(self, stream: DeliveryStream, cancel_event: asyncio.Event) -> LoopState:
        while True:
            delivery = await self._next_delivery(stream, cancel_event)
            if delivery is _CANCELLED:
                return LoopState.CANCELLED
            if delivery is None:
                return LoopState.DRAINED
            await self._handle_delivery(delivery)

    async def _next_delivery(self, stream: DeliveryStream, cancel_event: asyncio.Event):
        """Wait for whichever comes first: the cancel event or the next delivery.

        Returns the delivery, None when the stream is closed, or _CANCELLED.
        Cancellation wins a tie; the delivery is then left unacked for redelivery.
        """
        if cancel_event.is_set():
            return _CANCELLED

        next_task = asyncio.ensure_future(stream.__anext__())
        cancel_task = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({next_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            pending = [task for task in (next_task, cancel_task) if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if cancel_task.done() and not cancel_task.cancelled():
            return _CANCELLED
        try:
            return next_task.result()
        except StopAsyncIteration:
            return None

    async def _handle_delivery(self, delivery: IncomingMessage) -> None:
        self._obs.debug(
            "delivery_received",
            message_id=delivery.message_id,
            routing_key=delivery.routing_key,
            body_length=len(delivery.body),
        )
        try:
            batch = await self._processor.process(delivery.body)
        except Exception as exc:
            self._obs.error(
                "message_processing_failed",
                reason=_reject_reason(exc),
                error_type=type(exc).__name__,
                error=str(exc),
                message_id=delivery.message_id,
                body=delivery.body.decode("utf-8", errors="replace"),
            )
            await self._reject(delivery)
            return
        await self._ack(delivery, len(batch))

    async def _ack(self, delivery: IncomingMessage, message_count: int) -> None:
        try:
            await delivery.ack()
        except Exception as exc:
            self._obs.warning("message_ack_failed", message_id=delivery.message_id, error=str(exc))
            return
        self._obs.debug("message_acked", message_id=delivery.message_id, messages=message_count)

    async def _reject(self, delivery: IncomingMessage) -> None:
        try:
            await delivery.reject(requeue=False)
        except Exception as exc:
            self._obs.warning("message_reject_failed", message_id=delivery.message_id, error=str(exc))

    async def _reconnect(self) -> None:
        """Close what is left, wait the fixed delay, connect exactly once."""
        self._obs.event("rmq_reconnecting", delay_seconds=self._reconnect_delay_seconds)
        await self._consumer.close()
        await self._sleep(self._reconnect_delay_seconds)
        try:
            await self._consumer.connect()
        except ConnectivityError as exc:
            self._obs.error("rmq_reconnect_failed", error=str(exc))
            raise
        self._obs.event("rmq_reconnected", queue=self._queue_name)
