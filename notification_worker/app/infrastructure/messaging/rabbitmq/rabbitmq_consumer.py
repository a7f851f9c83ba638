"""
RabbitMQ consumer: connection lifecycle, queue declaration and delivery stream.

Lifecycle:
  DISCONNECTED -> CONNECTING -> CONNECTED -> CHANNEL_OPEN -> QUEUE_DECLARED -> READY
  READY -> CONSUMING once open_stream() registers the consumer.
  close(): any state -> CLOSING -> close channel, close connection -> CLOSED.

Recovery is not done here. The connection is a plain (non-robust) aio_pika
connection, so a broker or network failure ends the delivery stream and the
consumption engine decides whether to reconnect.
"""
from __future__ import annotations

import aio_pika
from aio_pika.abc import AbstractChannel, AbstractConnection, AbstractQueue

from notification_worker.app.config.settings import Settings
from notification_worker.app.domain.errors import ConnectivityError, ShutdownError
from notification_worker.app.infrastructure.messaging.rabbitmq.aio_pika_message_adapter import (
    AioPikaDeliveryStream,
)
from notification_worker.app.infrastructure.messaging.rabbitmq.constants import ConsumerState
from notification_worker.app.observability import ObservabilityContext


class RabbitMQConsumer:
    """MessageConsumer implementation"""

    def __init__(
        self,
        settings: Settings,
        observability: ObservabilityContext | None = None,
    ) -> None:
        self._settings = settings
        self._obs = observability or ObservabilityContext()
        self._state = ConsumerState.DISCONNECTED
        self._connection: AbstractConnection | None = None
        self._channel: AbstractChannel | None = None
        self._queue: AbstractQueue | None = None

    @property
    def state(self) -> ConsumerState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._connection is not None and self._channel is not None

    def _set_state(self, state: ConsumerState) -> None:
        self._state = state

    async def connect(self) -> None:
        """Open connection and channel and declare the durable queue. No retries."""
        queue_name = self._settings.rabbitmq_queue
        self._set_state(ConsumerState.CONNECTING)
        self._obs.event(
            "rmq_connecting",
            host=self._settings.rabbitmq_host,
            port=self._settings.rabbitmq_port,
        )
        try:
            self._connection = await aio_pika.connect(self._settings.rabbitmq_url)
            self._set_state(ConsumerState.CONNECTED)

            self._channel = await self._connection.channel()
            self._set_state(ConsumerState.CHANNEL_OPEN)
            await self._channel.set_qos(prefetch_count=self._settings.rabbitmq_prefetch_count)

            self._queue = await self._channel.declare_queue(
                queue_name,
                durable=True,
                exclusive=False,
                auto_delete=False,
            )
            self._set_state(ConsumerState.QUEUE_DECLARED)
        except Exception as exc:
            self._obs.error(
                "rmq_connect_failed",
                host=self._settings.rabbitmq_host,
                port=self._settings.rabbitmq_port,
                queue=queue_name,
                stage=self._state.value,
                error=str(exc),
            )
            await self._close_channel_and_connection()
            self._set_state(ConsumerState.DISCONNECTED)
            raise ConnectivityError(f"failed to connect to RabbitMQ: {exc}") from exc

        self._set_state(ConsumerState.READY)
        self._obs.event("rmq_connected", queue=queue_name)

    async def open_stream(self) -> AioPikaDeliveryStream:
        """Register a manual-ack consumer with a broker-generated tag."""
        if self._queue is None:
            raise ConnectivityError("consumer not connected")
        iterator = self._queue.iterator(no_ack=False)
        try:
            await iterator.consume()
        except Exception as exc:
            self._obs.error("rmq_consume_failed", queue=self._settings.rabbitmq_queue, error=str(exc))
            raise ConnectivityError(f"failed to register consumer: {exc}") from exc
        self._set_state(ConsumerState.CONSUMING)
        self._obs.event("rmq_consuming", queue=self._settings.rabbitmq_queue)
        return AioPikaDeliveryStream(iterator, on_error=self._on_stream_error)

    def _on_stream_error(self, exc: BaseException) -> None:
        self._obs.warning("rmq_stream_error", queue=self._settings.rabbitmq_queue, error=str(exc))

    async def _close_channel_and_connection(self) -> None:
        self._queue = None
        if self._channel is not None:
            try:
                await self._channel.close()
            except Exception as exc:
                err = ShutdownError(f"channel close failed: {exc}")
                self._obs.warning("rmq_channel_close_failed", error=str(err))
            self._channel = None
        if self._connection is not None:
            try:
                await self._connection.close()
            except Exception as exc:
                err = ShutdownError(f"connection close failed: {exc}")
                self._obs.warning("rmq_connection_close_failed", error=str(err))
            self._connection = None

    async def close(self) -> None:
        if self._state == ConsumerState.CLOSED and not self.is_connected:
            return
        self._set_state(ConsumerState.CLOSING)
        await self._close_channel_and_connection()
        self._set_state(ConsumerState.CLOSED)
        self._obs.event("rmq_closed")
