"""Port: forwards one (recipient, body) pair to its final destination."""
from __future__ import annotations

from typing import Protocol


class Notifier(Protocol):
    async def notify(self, recipient: str, body: str) -> None:
        """Deliver one message; raise NotifyError on failure."""
        ...

    async def close(self) -> None: ...
