"""Testes do normalizador de updates do Telegram."""

from __future__ import annotations

from vybebot.adapters.telegram.normalizer import normalize_update
from vybebot.domain.protocols.transport import IncomingUpdate


def _message(text: str | None = "hello", **overrides) -> dict:
    message = {
        "message_id": 55,
        "date": 1700000000,
        "chat": {"id": 1234567890, "type": "private"},
        "from": {"id": 42, "is_bot": False, "username": "alice"},
    }
    if text is not None:
        message["text"] = text
    message.update(overrides)
    return message


class TestTextMessages:
    """Mensagens de texto."""

    def test_text_message(self):
        update = normalize_update({"update_id": 7, "message": _message("/start")})

        assert update == IncomingUpdate(
            chat_id="1234567890",
            update_id=7,
            user_id="42",
            text="/start",
            message_id=55,
        )
        assert not update.is_action

    def test_message_without_sender(self):
        message = _message()
        del message["from"]
        update = normalize_update({"update_id": 1, "message": message})

        assert update is not None
        assert update.user_id is None

    def test_non_text_message_is_ignored(self):
        payload = {"update_id": 1, "message": _message(None, sticker={"file_id": "x"})}
        assert normalize_update(payload) is None

    def test_edited_message_is_ignored(self):
        assert normalize_update({"update_id": 1, "edited_message": _message()}) is None


class TestCallbackQueries:
    """Botões inline."""

    def test_callback_query(self):
        payload = {
            "update_id": 9,
            "callback_query": {
                "id": "4382bfdwdsb323b2d9",
                "from": {"id": 42},
                "message": _message("Choose the resolution"),
                "data": "resolution:1h",
            },
        }
        update = normalize_update(payload)

        assert update.is_action
        assert update.callback_data == "resolution:1h"
        assert update.callback_query_id == "4382bfdwdsb323b2d9"
        assert update.message_id == 55
        assert update.chat_id == "1234567890"

    def test_callback_without_data_becomes_empty_token(self):
        payload = {
            "update_id": 9,
            "callback_query": {"id": "q", "from": {"id": 42}, "message": _message()},
        }
        assert normalize_update(payload).callback_data == ""

    def test_inline_callback_without_message_is_ignored(self):
        payload = {
            "update_id": 9,
            "callback_query": {"id": "q", "from": {"id": 42}, "data": "x"},
        }
        assert normalize_update(payload) is None


class TestInvalidPayloads:
    def test_missing_update_id(self):
        assert normalize_update({"message": _message()}) is None

    def test_malformed_chat(self):
        assert normalize_update({"update_id": 1, "message": {"message_id": 1, "chat": "x"}}) is None

    def test_unknown_fields_are_tolerated(self):
        payload = {"update_id": 1, "message": _message(), "my_chat_member": {"anything": True}}
        assert normalize_update(payload) is not None
