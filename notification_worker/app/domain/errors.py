"""Worker error taxonomy.

Only ConnectivityError is fatal to the process. ProcessError subclasses are
absorbed per delivery (the delivery is rejected without requeue).
"""
from __future__ import annotations


class WorkerError(Exception):
    """Base for all worker failures."""


class ConfigError(WorkerError):
    """Raised when the configuration file cannot be read or parsed."""


class ConnectivityError(WorkerError):
    """Raised when the broker connection, channel or queue declaration fails."""


class ProcessError(WorkerError):
    """Base for failures local to a single delivery."""


class DecodeError(ProcessError):
    """Raised when a delivery payload is not a valid message batch."""


class NotifyError(ProcessError):
    """Raised when the notifier fails to forward a message.

    ``index`` is the position of the failing message inside its batch when the
    error is raised while processing a delivery; messages before it were
    already sent.
    """

    def __init__(self, message: str, *, index: int | None = None) -> None:
        super().__init__(message)
        self.index = index


class ShutdownError(WorkerError):
    """Wraps a resource close failure during shutdown. Logged, never raised to callers."""
