"""Descritores de passo e definição de fluxo.

Um fluxo é uma lista ordenada e explícita de passos, indexável por ordinal
(1..N). Rewind e re-entrada são atribuições de índice, não fluxo de controle.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sized
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from vybebot.domain.errors import FetchErrorCode, InvalidCursorError
from vybebot.domain.wizard.validators import Validator


@dataclass(frozen=True, slots=True)
class Step:
    """Um passo do fluxo.

    - field: chave gravada no estado do wizard quando o passo é aceito
    - prompt: instrução mostrada ao entrar no passo (e repetida no reprompt)
    - validator: cadeia pura de validação + normalização
    - action_tokens: tokens de botão que este passo aceita (ex.: "resolution:1h")
    - accepts_text: se False, texto livre é rejeitado com reprompt
    """

    field: str
    prompt: str
    validator: Validator
    action_tokens: tuple[str, ...] = ()
    accepts_text: bool = True
    button_labels: Mapping[str, str] = field(default_factory=dict)

    def expects_token(self, token: str) -> bool:
        return token in self.action_tokens

    @staticmethod
    def token_value(token: str) -> str:
        """Extrai o valor de um token com prefixo (ex.: "interval:1h" → "1h")."""
        _, sep, value = token.partition(":")
        return value if sep else token


@dataclass(frozen=True, slots=True)
class RewindRule:
    """Alvo de rewind para um código de erro de consulta."""

    target_field: str
    explanation: str
    retain_target: bool = False


@dataclass(frozen=True)
class Flow:
    """Sequência nomeada de passos que coleta parâmetros de uma consulta."""

    flow_id: str
    title: str
    command: str
    operation: str
    steps: tuple[Step, ...]
    searching_message: str = "🔍 Searching..."
    no_results_message: str = "🔍 No results found."
    formatter: Callable[[Any, int], str] | None = None
    empty_result: Callable[[Any], bool] | None = None
    rewind_rules: Mapping[FetchErrorCode, RewindRule] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not self.steps:
            raise ValueError(f"Flow {self.flow_id} requires at least one step")
        fields = [step.field for step in self.steps]
        if len(set(fields)) != len(fields):
            raise ValueError(f"Flow {self.flow_id} has duplicated step fields")
        for code, rule in self.rewind_rules.items():
            if rule.target_field not in fields:
                raise ValueError(
                    f"Rewind rule {code} of flow {self.flow_id} targets unknown field "
                    f"{rule.target_field!r}"
                )

    @property
    def size(self) -> int:
        return len(self.steps)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(step.field for step in self.steps)

    def is_valid_cursor(self, cursor: int) -> bool:
        return 1 <= cursor <= self.size

    def step_at(self, cursor: int) -> Step:
        if not self.is_valid_cursor(cursor):
            raise InvalidCursorError(
                f"Cursor {cursor} out of range [1, {self.size}] for flow {self.flow_id}"
            )
        return self.steps[cursor - 1]

    def ordinal_of(self, field_name: str) -> int:
        for index, step in enumerate(self.steps, start=1):
            if step.field == field_name:
                return index
        raise KeyError(field_name)

    def is_terminal(self, cursor: int) -> bool:
        return cursor == self.size

    def fields_after(self, ordinal: int) -> tuple[str, ...]:
        """Campos dos passos estritamente posteriores a `ordinal`."""
        return tuple(step.field for step in self.steps[ordinal:])

    def is_empty_result(self, result: Any) -> bool:
        """Resultado vazio → mensagem de "sem resultados" (o fluxo conclui mesmo assim)."""
        if self.empty_result is not None:
            return self.empty_result(result)
        if result is None:
            return True
        return isinstance(result, Sized) and len(result) == 0
