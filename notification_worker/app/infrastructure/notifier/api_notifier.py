"""Notifier that forwards each message to the downstream HTTP API as a POST with query parameters."""
from __future__ import annotations

import time

from notification_worker.app.domain.errors import NotifyError
from notification_worker.app.observability import ObservabilityContext
from notification_worker.app.ports.http_client import (
    AbstractHttpClient,
    HttpClientError,
    HttpClientTimeoutError,
)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class ApiNotifier:
    """Implements ports.notifier.Notifier over an AbstractHttpClient.

    The recipient is sent as ``clientId`` and the body as ``message``; service
    credentials ride along as ``serviceId``, ``pass`` and ``source``. A status of
    400 or above is a failure.
    """

    def __init__(
        self,
        client: AbstractHttpClient,
        *,
        url: str,
        service_id: str,
        password: str,
        source: str,
        timeout_seconds: float = 30.0,
        user_agent: str = "Notification-Worker/1.0",
        observability: ObservabilityContext | None = None,
    ) -> None:
        self._client = client
        self._url = url
        self._service_id = service_id
        self._password = password
        self._source = source
        self._timeout_seconds = float(timeout_seconds)
        self._headers = {"Content-Type": FORM_CONTENT_TYPE, "User-Agent": user_agent}
        self._obs = observability or ObservabilityContext()

    def _params(self, recipient: str, body: str) -> dict[str, str]:
        return {
            "clientId": recipient,
            "message": body,
            "serviceId": self._service_id,
            "pass": self._password,
            "source": self._source,
        }

    async def notify(self, recipient: str, body: str) -> None:
        metrics = self._obs.metrics
        metrics.api_request_sent()
        self._obs.debug("api_request_sending", url=self._url, client_id=recipient)
        started = time.perf_counter()
        try:
            response = await self._client.post(
                self._url,
                params=self._params(recipient, body),
                headers=self._headers,
                timeout_seconds=self._timeout_seconds,
            )
        except HttpClientTimeoutError as exc:
            metrics.api_request_failed()
            self._obs.error("api_request_timeout", url=self._url, client_id=recipient, error=str(exc))
            raise NotifyError(f"failed to send request: {exc}") from exc
        except HttpClientError as exc:
            metrics.api_request_failed()
            self._obs.error("api_request_failed", url=self._url, client_id=recipient, error=str(exc))
            raise NotifyError(f"failed to send request: {exc}") from exc
        finally:
            metrics.observe_api_request_duration(time.perf_counter() - started)

        if response.status_code >= 400:
            metrics.api_request_failed()
            self._obs.error(
                "api_request_error_status",
                client_id=recipient,
                status_code=response.status_code,
                response_body=response.text,
            )
            raise NotifyError(
                f"API request failed with status {response.status_code}: {response.text}"
            )

        metrics.api_request_succeeded()
        self._obs.event("api_request_succeeded", client_id=recipient, status_code=response.status_code)

    async def close(self) -> None:
        await self._client.close()
