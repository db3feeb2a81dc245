"""Modelos do payload de webhook do Telegram Bot API.

Apenas os campos consumidos pelo bot; o restante é ignorado na validação.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _TelegramModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TelegramUser(_TelegramModel):
    id: int
    is_bot: bool = False
    username: str | None = None


class TelegramChat(_TelegramModel):
    id: int
    type: str = "private"  # private, group, supergroup, channel


class TelegramMessage(_TelegramModel):
    message_id: int
    chat: TelegramChat
    from_user: TelegramUser | None = Field(default=None, alias="from")
    date: int | None = None
    text: str | None = None


class TelegramCallbackQuery(_TelegramModel):
    id: str
    from_user: TelegramUser = Field(alias="from")
    message: TelegramMessage | None = None  # Ausente em mensagens inline antigas
    data: str | None = None


class TelegramUpdate(_TelegramModel):
    update_id: int
    message: TelegramMessage | None = None
    edited_message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None


class WebhookResult(BaseModel):
    """Resumo do processamento de um update (sem PII)."""

    ok: bool = True
    update_id: int | None = None
    outcome: str | None = None
    notes: list[str] = Field(default_factory=list)
