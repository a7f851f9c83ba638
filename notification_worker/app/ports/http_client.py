"""HTTP client port: contract for performing POST requests.

Application and infrastructure notifiers depend on this port; httpx implements
it. Keeps the notifier free of transport library imports.
"""
from __future__ import annotations

from typing import Mapping, Protocol, runtime_checkable


class HttpClientError(Exception):
    """Base for HTTP client failures (network, protocol, etc.)."""


class HttpClientTimeoutError(HttpClientError):
    """Raised when the request times out."""


@runtime_checkable
class HttpResponse(Protocol):
    """Minimal read-only view of an HTTP response."""

    @property
    def text(self) -> str: ...

    @property
    def status_code(self) -> int: ...


@runtime_checkable
class AbstractHttpClient(Protocol):
    """Port: perform POST requests. Implementations live in infrastructure."""

    async def post(
        self,
        url: str,
        *,
        params: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        timeout_seconds: float,
    ) -> HttpResponse:
        """Perform POST; raise HttpClientTimeoutError or HttpClientError on transport failure.

        Error statuses are returned, not raised.
        """
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...
