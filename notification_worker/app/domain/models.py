"""Domain models: wire schema of a delivery payload."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from notification_worker.app.domain.errors import DecodeError


def _field(obj: dict[str, Any], name: str) -> Any:
    """Value of the key matching ``name`` case-insensitively; the last match wins."""
    value = None
    for key, item in obj.items():
        if key.lower() == name:
            value = item
    return value


def _optional_str(entry: dict[str, Any], key: str, index: int) -> str:
    value = _field(entry, key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"messages[{index}].{key} must be a string")
    return value


@dataclass(frozen=True)
class Message:
    """One unit of outbound content. Recipient is opaque and not validated."""

    recipient: str
    body: str

    def to_dict(self) -> dict[str, str]:
        return {"recipient": self.recipient, "body": self.body}


@dataclass(frozen=True)
class DeliveryBatch:
    """Parsed payload of one queue delivery; messages are processed in order."""

    messages: tuple[Message, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not isinstance(self.messages, tuple):
            object.__setattr__(self, "messages", tuple(self.messages))

    def __len__(self) -> int:
        return len(self.messages)

    @staticmethod
    def from_json(raw_body: bytes) -> "DeliveryBatch":
        """Decode raw delivery bytes.

        Field names match case-insensitively and invalid UTF-8 inside string
        values is replaced with U+FFFD. A missing or null ``messages`` field
        yields an empty batch, as does a top-level JSON ``null``. Unknown fields
        are ignored. Anything else that does not match the schema raises
        DecodeError.
        """
        try:
            payload = json.loads(raw_body.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as exc:
            raise DecodeError(f"payload is not valid json: {exc}") from exc

        if payload is None:
            return DeliveryBatch()
        if not isinstance(payload, dict):
            raise DecodeError("payload must be a json object")

        raw_messages = _field(payload, "messages")
        if raw_messages is None:
            return DeliveryBatch()
        if not isinstance(raw_messages, list):
            raise DecodeError("messages must be an array")

        messages: list[Message] = []
        for index, entry in enumerate(raw_messages):
            if not isinstance(entry, dict):
                raise DecodeError(f"messages[{index}] must be an object")
            messages.append(
                Message(
                    recipient=_optional_str(entry, "recipient", index),
                    body=_optional_str(entry, "body", index),
                )
            )
        return DeliveryBatch(messages=tuple(messages))

    def to_dict(self) -> dict[str, Any]:
        return {"messages": [message.to_dict() for message in self.messages]}

    def to_json(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False).encode("utf-8")
