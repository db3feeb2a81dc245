"""Normalização de updates do Telegram em `IncomingUpdate`.

Responsabilidade:
- Validar o payload bruto do webhook (pydantic)
- Extrair chat, texto ou dados de callback
- Descartar updates que o motor não trata (edições, canais, inline)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from vybebot.adapters.telegram.models import TelegramMessage, TelegramUpdate
from vybebot.domain.protocols.transport import IncomingUpdate
from vybebot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)


def _from_message(update_id: int, message: TelegramMessage) -> IncomingUpdate | None:
    if message.text is None:
        return None
    return IncomingUpdate(
        chat_id=str(message.chat.id),
        update_id=update_id,
        user_id=str(message.from_user.id) if message.from_user else None,
        text=message.text,
        message_id=message.message_id,
    )


def normalize_update(payload: dict[str, Any]) -> IncomingUpdate | None:
    """Converte o JSON do webhook em update normalizado.

    Retorna None quando o update não tem conteúdo tratável.
    """
    try:
        update = TelegramUpdate.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "telegram_update_invalid",
            extra={"error_count": exc.error_count()},
        )
        return None

    if update.callback_query is not None:
        query = update.callback_query
        if query.message is None:
            logger.info("telegram_callback_without_message", extra={"update_id": update.update_id})
            return None
        return IncomingUpdate(
            chat_id=str(query.message.chat.id),
            update_id=update.update_id,
            user_id=str(query.from_user.id),
            callback_data=query.data or "",
            callback_query_id=query.id,
            message_id=query.message.message_id,
        )

    if update.message is not None:
        return _from_message(update.update_id, update.message)

    logger.debug("telegram_update_ignored", extra={"update_id": update.update_id})
    return None
