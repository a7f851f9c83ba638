from __future__ import annotations

import time

from notification_worker.app.domain.errors import NotifyError
from notification_worker.app.domain.models import DeliveryBatch
from notification_worker.app.observability import ObservabilityContext
from notification_worker.app.ports.notifier import Notifier


class ProcessingService:
    """
    Processes one delivery payload: decode the batch, then forward each message in order.

    The first notifier failure aborts the rest of the batch. Messages already sent
    stay sent; the caller rejects the whole delivery.
    """

    def __init__(
        self,
        notifier: Notifier,
        observability: ObservabilityContext | None = None,
    ) -> None:
        self._notifier = notifier
        self._obs = observability or ObservabilityContext()

    async def process(self, raw_body: bytes) -> DeliveryBatch:
        """Raise DecodeError or NotifyError; return the forwarded batch on success."""
        metrics = self._obs.metrics
        started = time.perf_counter()
        metrics.message_received()
        try:
            self._obs.debug("message_received", body_length=len(raw_body))
            batch = DeliveryBatch.from_json(raw_body)

            for index, message in enumerate(batch.messages):
                try:
                    await self._notifier.notify(message.recipient, message.body)
                except Exception as exc:
                    raise NotifyError(
                        f"failed to send message via API: {exc}", index=index
                    ) from exc
                self._obs.event(
                    "message_sent",
                    recipient=message.recipient,
                    body=message.body,
                    index=index,
                )

            metrics.message_processed()
            return batch
        finally:
            metrics.observe_processing_duration(time.perf_counter() - started)
