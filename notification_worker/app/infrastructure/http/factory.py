"""HTTP client factory: builds AbstractHttpClient from settings (no provider logic in composition)."""
from __future__ import annotations

import httpx

from notification_worker.app.config.settings import Settings
from notification_worker.app.ports.http_client import AbstractHttpClient
from notification_worker.app.infrastructure.http.httpx_client import HttpxHttpClient


def create_http_client(settings: Settings) -> AbstractHttpClient:
    """Build an HTTP client from settings. Timeouts are applied per-request by the adapter."""
    async_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.api_timeout_seconds))
    return HttpxHttpClient(async_client)
