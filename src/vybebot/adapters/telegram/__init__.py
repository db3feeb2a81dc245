"""Adapter do Telegram Bot API (webhook de entrada + transporte de saída)."""

from vybebot.adapters.telegram.normalizer import normalize_update
from vybebot.adapters.telegram.outbound import TelegramTransport, to_inline_keyboard
from vybebot.adapters.telegram.signature import verify_secret_token

__all__ = [
    "TelegramTransport",
    "normalize_update",
    "to_inline_keyboard",
    "verify_secret_token",
]
