"""Resultados de processamento de um update dentro de um fluxo.

O sequenciador produz Reprompt/Advanced/Completed/Interrupted/StaleAction/Busy;
o controlador de cena acrescenta Cancelled/Rewound/LeftWithError/Superseded e
os desfechos fora de fluxo (Routed).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ErrorKind(StrEnum):
    """Categorias de saída com erro."""

    FETCH = "FETCH"
    """Falha de consulta não recuperável por rewind."""

    REWINDS_EXHAUSTED = "REWINDS_EXHAUSTED"
    INTERNAL = "INTERNAL"
    """Exceção inesperada em qualquer handler."""


@dataclass(frozen=True, slots=True)
class Reprompt:
    """Validação falhou; cursor inalterado."""

    flow_id: str
    cursor: int
    message: str


@dataclass(frozen=True, slots=True)
class Advanced:
    """Passo aceito (ou fluxo iniciado); `cursor` é o passo a perguntar."""

    flow_id: str
    cursor: int
    prompt: str


@dataclass(frozen=True, slots=True)
class Completed:
    flow_id: str
    state: dict[str, Any]
    result: Any = None


@dataclass(frozen=True, slots=True)
class Interrupted:
    command_name: str
    argument: str | None = None


@dataclass(frozen=True, slots=True)
class Cancelled:
    flow_id: str | None = None


@dataclass(frozen=True, slots=True)
class StaleAction:
    """Token de ação que não pertence ao passo atual (tela anterior)."""

    token: str


@dataclass(frozen=True, slots=True)
class Busy:
    """Consulta já em andamento para esta sessão."""

    message: str = "⏳ Please wait, fetching is in progress..."


@dataclass(frozen=True, slots=True)
class Rewound:
    flow_id: str
    cursor: int
    message: str


@dataclass(frozen=True, slots=True)
class LeftWithError:
    error_kind: ErrorKind
    message: str
    flow_id: str | None = None
    retry_token: str | None = None


@dataclass(frozen=True, slots=True)
class Superseded:
    """Resultado de fetch descartado: a conversa já saiu do fluxo que o pediu."""

    flow_id: str


@dataclass(frozen=True, slots=True)
class Routed:
    """Update fora de fluxo entregue a um roteador global."""

    target: str
    handled: bool = True
    details: dict[str, Any] = field(default_factory=dict)


Outcome = (
    Reprompt
    | Advanced
    | Completed
    | Interrupted
    | Cancelled
    | StaleAction
    | Busy
    | Rewound
    | LeftWithError
    | Routed
    | Superseded
)
