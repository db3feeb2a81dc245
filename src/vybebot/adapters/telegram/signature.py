"""Validação do secret token do webhook Telegram.

O Bot API repete o `secret_token` do setWebhook no header
`X-Telegram-Bot-Api-Secret-Token` de cada entrega.
"""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from dataclasses import dataclass

SECRET_TOKEN_HEADER = "x-telegram-bot-api-secret-token"


@dataclass(slots=True)
class SecretTokenResult:
    valid: bool
    skipped: bool = False
    error: str | None = None


def verify_secret_token(headers: Mapping[str, str], secret: str | None) -> SecretTokenResult:
    """Compara o header com o secret configurado (tempo constante).

    Sem secret configurado a verificação é ignorada (skipped).
    """
    if not secret:
        return SecretTokenResult(valid=True, skipped=True)

    received = headers.get(SECRET_TOKEN_HEADER)
    if not received:
        return SecretTokenResult(valid=False, error="missing_secret_token")

    if not hmac.compare_digest(received.encode("utf-8"), secret.encode("utf-8")):
        return SecretTokenResult(valid=False, error="secret_token_mismatch")

    return SecretTokenResult(valid=True)
