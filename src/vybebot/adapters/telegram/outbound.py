"""Transporte de saída via Telegram Bot API.

Responsabilidade:
- Converter teclados do motor em `inline_keyboard`
- Enviar mensagens HTML, responder callback queries e apagar mensagens
- Nunca registrar texto de mensagens nem o token do bot
"""

from __future__ import annotations

import logging
from typing import Any

from vybebot.domain.protocols.transport import Keyboard, TransportProtocol
from vybebot.infra.http import HttpClient, HttpError
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)

# Limites do Bot API
MAX_MESSAGE_LENGTH = 4096
MAX_CALLBACK_DATA_BYTES = 64
MAX_CALLBACK_ANSWER_LENGTH = 200

_TRUNCATION_SUFFIX = "\n…"


def to_inline_keyboard(keyboard: Keyboard) -> dict[str, Any]:
    """Teclado do motor → `reply_markup` do Bot API.

    Raises:
        ValueError: token de botão acima de 64 bytes (rejeitado pelo Telegram)
    """
    rows: list[list[dict[str, str]]] = []
    for row in keyboard:
        buttons = []
        for button in row:
            if len(button.token.encode("utf-8")) > MAX_CALLBACK_DATA_BYTES:
                raise ValueError(f"callback_data too long for button {button.label!r}")
            buttons.append({"text": button.label, "callback_data": button.token})
        if buttons:
            rows.append(buttons)
    return {"inline_keyboard": rows}


def fit_message(text: str) -> str:
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    return text[: MAX_MESSAGE_LENGTH - len(_TRUNCATION_SUFFIX)] + _TRUNCATION_SUFFIX


class TelegramTransport(TransportProtocol):
    """Implementa reply/answer/delete_message sobre o `HttpClient` compartilhado."""

    def __init__(self, http: HttpClient) -> None:
        self._http = http

    async def reply(self, chat_id: str, text: str, keyboard: Keyboard | None = None) -> None:
        """Envia mensagem HTML.

        Raises:
            HttpError: falha do Bot API (o webhook registra e segue)
        """
        payload: dict[str, Any] = {
            "chat_id": chat_id,
            "text": fit_message(text),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        if keyboard:
            payload["reply_markup"] = to_inline_keyboard(keyboard)

        await self._http.post("/sendMessage", json=payload)
        logger.debug(
            "telegram_message_sent",
            extra={"chat_id": mask_chat_id(chat_id), "has_keyboard": bool(keyboard)},
        )

    async def answer(self, callback_query_id: str, text: str | None = None) -> None:
        """Responde a callback query (encerra o spinner do botão).

        Queries expiradas (> ~15 min) devolvem 400; isso não interrompe o update.
        """
        payload: dict[str, Any] = {"callback_query_id": callback_query_id}
        if text:
            payload["text"] = text[:MAX_CALLBACK_ANSWER_LENGTH]
        try:
            await self._http.post("/answerCallbackQuery", json=payload)
        except HttpError as exc:
            logger.warning(
                "telegram_callback_answer_failed",
                extra={"status_code": exc.status_code},
            )

    async def delete_message(self, chat_id: str, message_id: int) -> None:
        """Apaga mensagem do bot; mensagens antigas (> 48h) não podem ser apagadas."""
        try:
            await self._http.post(
                "/deleteMessage",
                json={"chat_id": chat_id, "message_id": message_id},
            )
        except HttpError as exc:
            logger.warning(
                "telegram_delete_failed",
                extra={"chat_id": mask_chat_id(chat_id), "status_code": exc.status_code},
            )
