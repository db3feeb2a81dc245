"""Classificação de updates em eventos de entrada.

Roda uma única vez por update, antes de qualquer handler de passo. Comandos
são detectados mesmo quando o passo atual espera texto livre (endereço,
número), o que garante que um fluxo obsoleto nunca consuma um comando.
"""

from __future__ import annotations

import logging

from vybebot.application.session import WizardSession
from vybebot.domain.protocols.transport import IncomingUpdate
from vybebot.domain.wizard.events import ActionEvent, InputEvent, InterruptEvent, TextEvent
from vybebot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


class InputClassifier:
    """Ação estruturada > comando (prefixo) > texto livre."""

    def __init__(self, command_prefix: str = "/") -> None:
        if not command_prefix:
            raise ValueError("command_prefix must not be empty")
        self._prefix = command_prefix

    def classify(self, update: IncomingUpdate, session: WizardSession | None = None) -> InputEvent:
        if update.callback_data is not None:
            event: InputEvent = ActionEvent(token=update.callback_data)
        else:
            text = (update.text or "").strip()
            if text.startswith(self._prefix) and len(text) > len(self._prefix):
                event = self._parse_command(text)
            else:
                event = TextEvent(value=text)

        logger.debug(
            "input_classified",
            extra={
                "kind": event.kind.value,
                "active_flow_id": session.active_flow_id if session else None,
            },
        )
        return event

    def _parse_command(self, text: str) -> InterruptEvent:
        """Ex.: "/tokenohlcv@VybeBot So1111..." → ("tokenohlcv", "So1111...")."""
        head, _, rest = text[len(self._prefix):].partition(" ")
        name = head.split("@", 1)[0].lower()
        argument = rest.strip() or None
        return InterruptEvent(command_name=name, argument=argument)
