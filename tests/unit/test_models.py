"""Unit tests for the delivery payload schema."""
from __future__ import annotations

import pytest

from notification_worker.app.domain.errors import DecodeError
from notification_worker.app.domain.models import DeliveryBatch, Message


def test_decodes_single_message():
    batch = DeliveryBatch.from_json(b'{"messages":[{"recipient":"123","body":"hello"}]}')

    assert batch.messages == (Message(recipient="123", body="hello"),)


def test_decodes_non_ascii_body():
    raw = '{"messages":[{"recipient":"79218897127","body":"Код авторизации: 2652"}]}'.encode()

    batch = DeliveryBatch.from_json(raw)

    assert batch.messages[0].body == "Код авторизации: 2652"


@pytest.mark.parametrize(
    "raw",
    [b'{"messages":[]}', b"{}", b'{"messages":null}', b'{"other":1}', b"null"],
)
def test_empty_or_missing_messages_is_an_empty_batch(raw):
    assert len(DeliveryBatch.from_json(raw)) == 0


def test_unknown_fields_are_ignored_and_missing_strings_default_empty():
    batch = DeliveryBatch.from_json(b'{"id":7,"messages":[{"recipient":"1","extra":true},{"body":null}]}')

    assert batch.messages == (Message("1", ""), Message("", ""))


def test_field_names_match_case_insensitively():
    batch = DeliveryBatch.from_json(b'{"Messages":[{"Recipient":"1","BODY":"x"}]}')

    assert batch.messages == (Message("1", "x"),)


def test_last_case_insensitive_duplicate_wins():
    batch = DeliveryBatch.from_json(b'{"messages":[{"recipient":"1","Recipient":"2","body":"x"}]}')

    assert batch.messages[0].recipient == "2"


def test_invalid_utf8_inside_string_is_replaced_not_rejected():
    batch = DeliveryBatch.from_json(b'{"messages":[{"recipient":"1","body":"caf\xe9"}]}')

    assert batch.messages == (Message("1", "caf�"),)


@pytest.mark.parametrize(
    "raw",
    [
        b"not-json",
        b"\xff\xfe\x00",
        b"[]",
        b'"messages"',
        b'{"messages":{}}',
        b'{"messages":["x"]}',
        b'{"messages":[{"recipient":123,"body":"x"}]}',
        b'{"messages":[{"recipient":"1","body":["x"]}]}',
    ],
)
def test_malformed_payloads_raise_decode_error(raw):
    with pytest.raises(DecodeError):
        DeliveryBatch.from_json(raw)


def test_reencoding_preserves_order_and_content():
    batch = DeliveryBatch(
        messages=(
            Message("b", "second ✓"),
            Message("a", "first"),
            Message("", ""),
        )
    )

    assert DeliveryBatch.from_json(batch.to_json()) == batch
    assert batch.to_dict()["messages"][0] == {"recipient": "b", "body": "second ✓"}


def test_list_of_messages_is_stored_as_tuple():
    batch = DeliveryBatch(messages=[Message("1", "x")])

    assert isinstance(batch.messages, tuple)
