"""Contratos com o transporte de mensagens (entrada e saída).

O motor é agnóstico de transporte: recebe `IncomingUpdate` já normalizado e
responde via `TransportProtocol` (reply/answer/delete_message).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class IncomingUpdate:
    """Update de entrada normalizado (um por chamada)."""

    chat_id: str
    update_id: int | None = None
    user_id: str | None = None
    text: str | None = None
    callback_data: str | None = None
    callback_query_id: str | None = None
    message_id: int | None = None

    @property
    def is_action(self) -> bool:
        return self.callback_data is not None


@dataclass(frozen=True, slots=True)
class Button:
    label: str
    token: str


Keyboard = Sequence[Sequence[Button]]


class TransportProtocol(ABC):
    """Saída para o usuário."""

    @abstractmethod
    async def reply(
        self,
        chat_id: str,
        text: str,
        keyboard: Keyboard | None = None,
    ) -> None: ...

    @abstractmethod
    async def answer(self, callback_query_id: str, text: str | None = None) -> None: ...

    @abstractmethod
    async def delete_message(self, chat_id: str, message_id: int) -> None: ...
