"""Eventos de entrada consumidos pelo sequenciador de passos.

Cada update recebido do transporte é classificado exatamente uma vez em um
destes três tipos antes de qualquer handler de passo executar.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class EventKind(StrEnum):
    """Tipos de evento de entrada."""

    ACTION = "action"
    """Ação estruturada (clique em botão) com token opaco."""

    TEXT = "text"
    """Resposta em texto livre."""

    INTERRUPT = "interrupt"
    """Comando global que interrompe o fluxo ativo."""


@dataclass(frozen=True, slots=True)
class ActionEvent:
    token: str

    @property
    def kind(self) -> EventKind:
        return EventKind.ACTION


@dataclass(frozen=True, slots=True)
class TextEvent:
    value: str

    @property
    def kind(self) -> EventKind:
        return EventKind.TEXT


@dataclass(frozen=True, slots=True)
class InterruptEvent:
    command_name: str
    argument: str | None = None

    @property
    def kind(self) -> EventKind:
        return EventKind.INTERRUPT


InputEvent = ActionEvent | TextEvent | InterruptEvent
