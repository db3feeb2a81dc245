"""Tokens de controle de fluxo (botões comuns a todas as telas)."""

from __future__ import annotations

CANCEL_TOKEN = "CANCEL_BUTTON"
MAIN_MENU_TOKEN = "MAIN_MENU_BUTTON"
CLOSE_TOKEN = "CLOSE"
AGAIN_PREFIX = "AGAIN:"
FLOW_PREFIX = "FLOW:"


def again_token(flow_id: str) -> str:
    """Token do botão "Try Again" (reinicia o fluxo no passo 1)."""
    return f"{AGAIN_PREFIX}{flow_id}"


def flow_token(flow_id: str) -> str:
    """Token do botão de menu que inicia um fluxo."""
    return f"{FLOW_PREFIX}{flow_id}"


def parse_again_token(token: str) -> str | None:
    if token.startswith(AGAIN_PREFIX):
        return token[len(AGAIN_PREFIX):] or None
    return None
