"""Unit tests for ApiNotifier over the httpx client adapter (httpx.MockTransport, no network)."""
from __future__ import annotations

import httpx
import pytest

from notification_worker.app.domain.errors import NotifyError
from notification_worker.app.infrastructure.http.httpx_client import HttpxHttpClient
from notification_worker.app.infrastructure.notifier.api_notifier import ApiNotifier

API_URL = "https://api.example.com/send"


def _notifier(handler, observability) -> ApiNotifier:
    client = HttpxHttpClient(httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    return ApiNotifier(
        client,
        url=API_URL,
        service_id="test_service",
        password="test_pass",
        source="test_source",
        timeout_seconds=3.0,
        user_agent="Notification-Worker/test",
        observability=observability,
    )


@pytest.mark.asyncio
async def test_posts_query_parameters_and_headers(observability, metrics):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="OK")

    notifier = _notifier(handler, observability)
    await notifier.notify("79218897127", "Test message")
    await notifier.close()

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "POST"
    assert (request.url.scheme, request.url.host, request.url.path) == ("https", "api.example.com", "/send")
    assert dict(request.url.params) == {
        "clientId": "79218897127",
        "message": "Test message",
        "serviceId": "test_service",
        "pass": "test_pass",
        "source": "test_source",
    }
    assert request.headers["content-type"] == "application/x-www-form-urlencoded"
    assert request.headers["user-agent"] == "Notification-Worker/test"
    assert request.content == b""
    assert (metrics.api_sent, metrics.api_succeeded, metrics.api_failed) == (1, 1, 0)
    assert len(metrics.api_durations) == 1


@pytest.mark.asyncio
async def test_non_ascii_message_is_url_encoded(observability):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200)

    await _notifier(handler, observability).notify("1", "Код: 2652 & more")

    assert seen[0].url.params["message"] == "Код: 2652 & more"


@pytest.mark.asyncio
async def test_error_status_raises_notify_error(observability, metrics):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="Internal Server Error")

    with pytest.raises(NotifyError, match="status 500: Internal Server Error"):
        await _notifier(handler, observability).notify("1", "x")

    assert (metrics.api_sent, metrics.api_succeeded, metrics.api_failed) == (1, 0, 1)


@pytest.mark.asyncio
async def test_client_error_status_is_a_failure(observability):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, text="bad clientId")

    with pytest.raises(NotifyError, match="400"):
        await _notifier(handler, observability).notify("1", "x")


@pytest.mark.asyncio
async def test_transport_error_raises_notify_error(observability, metrics):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(NotifyError, match="failed to send request"):
        await _notifier(handler, observability).notify("1", "x")

    assert metrics.api_failed == 1
    assert len(metrics.api_durations) == 1


@pytest.mark.asyncio
async def test_timeout_raises_notify_error(observability, metrics):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(NotifyError, match="timeout"):
        await _notifier(handler, observability).notify("1", "x")

    assert metrics.api_failed == 1
