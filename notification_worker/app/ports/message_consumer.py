"""Port: message consumer for one queue. Implementations live in infrastructure."""
from __future__ import annotations

from typing import AsyncIterator, Protocol

from notification_worker.app.ports.incoming_message import IncomingMessage


class DeliveryStream(Protocol):
    """Deliveries in broker order. Iteration ends when the channel is gone."""

    def __aiter__(self) -> AsyncIterator[IncomingMessage]: ...

    async def __anext__(self) -> IncomingMessage: ...


class MessageConsumer(Protocol):
    async def connect(self) -> None:
        """Open connection and channel, declare the queue. Raises ConnectivityError."""
        ...

    async def open_stream(self) -> DeliveryStream:
        """Register a manual-ack consumer. Raises ConnectivityError."""
        ...

    async def close(self) -> None:
        """Best-effort teardown of channel then connection. Never raises."""
        ...
