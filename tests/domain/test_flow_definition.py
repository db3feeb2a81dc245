"""Testes de Step/Flow (descritores indexáveis por ordinal)."""

from __future__ import annotations

import pytest

from vybebot.domain.errors import FetchErrorCode, InvalidCursorError
from vybebot.domain.wizard.steps import Flow, RewindRule, Step
from vybebot.domain.wizard.validators import required


def _flow(**overrides) -> Flow:
    params = {
        "flow_id": "demo",
        "title": "Demo",
        "command": "demo",
        "operation": "demo_op",
        "steps": (
            Step("a", "Send A", required()),
            Step("b", "Send B", required()),
            Step("c", "Pick C", required(), action_tokens=("c:x", "c:y")),
        ),
    }
    params.update(overrides)
    return Flow(**params)


class TestFlowIndexing:
    """Cursor 1..N e busca por campo."""

    def test_step_at_is_one_based(self):
        flow = _flow()
        assert flow.step_at(1).field == "a"
        assert flow.step_at(3).field == "c"

    def test_invalid_cursor_raises(self):
        flow = _flow()
        with pytest.raises(InvalidCursorError):
            flow.step_at(0)
        with pytest.raises(InvalidCursorError):
            flow.step_at(4)

    def test_terminal_and_fields_after(self):
        flow = _flow()
        assert flow.is_terminal(3)
        assert not flow.is_terminal(2)
        assert flow.fields_after(1) == ("b", "c")
        assert flow.fields_after(3) == ()

    def test_ordinal_of(self):
        flow = _flow()
        assert flow.ordinal_of("b") == 2
        with pytest.raises(KeyError):
            flow.ordinal_of("zzz")


class TestFlowValidation:
    """Erros de definição detectados na construção."""

    def test_requires_steps(self):
        with pytest.raises(ValueError):
            _flow(steps=())

    def test_rejects_duplicated_fields(self):
        with pytest.raises(ValueError):
            _flow(steps=(Step("a", "x", required()), Step("a", "y", required())))

    def test_rewind_rule_must_target_known_field(self):
        with pytest.raises(ValueError):
            _flow(rewind_rules={FetchErrorCode.UNKNOWN_VARIANT: RewindRule("nope", "msg")})


class TestStepTokens:
    """Tokens de ação com prefixo."""

    def test_token_value_strips_prefix(self):
        assert Step.token_value("interval:1h") == "1h"
        assert Step.token_value("plain") == "plain"

    def test_expects_token(self):
        step = _flow().step_at(3)
        assert step.expects_token("c:x")
        assert not step.expects_token("c:z")


class TestEmptyResult:
    """Detecção de resultado vazio."""

    def test_default_sized(self):
        flow = _flow()
        assert flow.is_empty_result([])
        assert flow.is_empty_result(None)
        assert not flow.is_empty_result([{"x": 1}])

    def test_custom_predicate(self):
        flow = _flow(empty_result=lambda result: result.get("count") == 0)
        assert flow.is_empty_result({"count": 0})
        assert not flow.is_empty_result({"count": 2})
