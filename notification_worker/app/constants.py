"""Worker-level constants shared across modules."""
from __future__ import annotations

from enum import Enum


class LoopState(str, Enum):
    """States of the consume loop."""

    STREAMING = "STREAMING"
    DRAINED = "DRAINED"
    CANCELLED = "CANCELLED"
    DONE = "DONE"


class REJECT_REASON:
    DECODE = "decode"
    NOTIFY = "notify"
    UNEXPECTED = "unexpected"


DEFAULT_RECONNECT_DELAY_SECONDS = 5.0
