"""Testes da configuração de logging estruturado."""

from __future__ import annotations

import json
import logging

from pythonjsonlogger.json import JsonFormatter

from vybebot.observability.logging import (
    CorrelationIdFilter,
    configure_logging,
    get_logger,
    mask_chat_id,
)


class TestMaskChatId:
    def test_truncates(self):
        assert mask_chat_id("1234567890") == "123456..."

    def test_empty(self):
        assert mask_chat_id(None) is None
        assert mask_chat_id("") is None


class TestConfigureLogging:
    """Handler JSON com service e correlation_id."""

    def test_installs_single_json_handler(self):
        root = logging.getLogger()
        previous_handlers, previous_level = root.handlers[:], root.level
        try:
            configure_logging("DEBUG", "vybebot-test")

            assert len(root.handlers) == 1
            handler = root.handlers[0]
            assert isinstance(handler.formatter, JsonFormatter)
            assert any(isinstance(f, CorrelationIdFilter) for f in handler.filters)
            assert root.level == logging.DEBUG
            # URLs do Bot API carregam o token
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers = previous_handlers
            root.setLevel(previous_level)

    def test_record_rendering(self):
        record = logging.LogRecord("vybebot.x", logging.INFO, __file__, 1, "flow_entered", None, None)
        record.flow_id = "wallet_pnl"
        CorrelationIdFilter("vybebot").filter(record)

        formatter = JsonFormatter(
            "%(levelname)s %(name)s %(message)s %(correlation_id)s %(service)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
        payload = json.loads(formatter.format(record))

        assert payload["service"] == "vybebot"
        assert payload["level"] == "INFO"
        assert payload["message"] == "flow_entered"
        assert payload["flow_id"] == "wallet_pnl"


class TestCorrelationIdFilter:
    def test_keeps_explicit_correlation_id(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        record.correlation_id = "abc"
        CorrelationIdFilter("svc").filter(record)
        assert record.correlation_id == "abc"

    def test_defaults_to_empty_outside_request(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", None, None)
        assert CorrelationIdFilter("svc").filter(record) is True
        assert record.correlation_id == ""
        assert record.service == "svc"

    def test_get_logger_is_stdlib_logger(self):
        assert get_logger("vybebot.test").name == "vybebot.test"
