"""Adapters: wrap aio_pika deliveries and queue iterators to implement the worker ports."""
from __future__ import annotations

from typing import Any, Callable

from aio_pika import IncomingMessage as AioPikaIncomingMessage
from aio_pika.abc import AbstractQueueIterator
from aio_pika.exceptions import AMQPError, ChannelInvalidStateError


class AioPikaMessageAdapter:
    """Implements notification_worker.app.ports.incoming_message.IncomingMessage for aio_pika."""

    def __init__(self, message: AioPikaIncomingMessage) -> None:
        self._message = message

    @property
    def body(self) -> bytes:
        return self._message.body

    @property
    def message_id(self) -> str | None:
        return self._message.message_id

    @property
    def routing_key(self) -> str | None:
        return self._message.routing_key

    async def ack(self) -> None:
        await self._message.ack()

    async def reject(self, *, requeue: bool = False) -> None:
        await self._message.reject(requeue=requeue)


class AioPikaDeliveryStream:
    """Implements ports.message_consumer.DeliveryStream over an aio_pika QueueIterator.

    Broker or network errors while waiting for the next delivery end the stream
    the same way a closed channel does.
    """

    def __init__(
        self,
        iterator: AbstractQueueIterator,
        *,
        on_error: Callable[[BaseException], Any] | None = None,
    ) -> None:
        self._iterator = iterator
        self._on_error = on_error

    def __aiter__(self) -> "AioPikaDeliveryStream":
        return self

    async def __anext__(self) -> AioPikaMessageAdapter:
        try:
            raw_message = await self._iterator.__anext__()
        except (AMQPError, ChannelInvalidStateError, ConnectionError) as exc:
            if self._on_error is not None:
                self._on_error(exc)
            raise StopAsyncIteration from exc
        return AioPikaMessageAdapter(raw_message)
