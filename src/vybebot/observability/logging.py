"""Logging estruturado (JSON) do vybebot.

Regras:
- Um único handler JSON no root, configurado no bootstrap
- Todo registro leva `service` e `correlation_id` (um por entrega de webhook)
- Nunca registrar texto livre do usuário nem o token do bot
"""

from __future__ import annotations

import logging

from pythonjsonlogger.json import JsonFormatter

from vybebot.observability.middleware import get_correlation_id

# Loggers de bibliotecas que registram URLs completas (o path do Bot API
# contém o token): só avisos e erros
_QUIET_LOGGERS = ("httpx", "httpcore")


class CorrelationIdFilter(logging.Filter):
    """Completa o record com correlation_id e service."""

    def __init__(self, service_name: str) -> None:
        super().__init__()
        self._service_name = service_name

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # correlation_id explícito em `extra` tem precedência
        if not getattr(record, "correlation_id", None):
            record.correlation_id = get_correlation_id()
        record.service = self._service_name
        return True


def configure_logging(level: str, service_name: str) -> None:
    """Instala o handler JSON no root logger (idempotente)."""
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(
        JsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s %(service)s",
            rename_fields={"levelname": "level", "name": "logger"},
        )
    )
    handler.addFilter(CorrelationIdFilter(service_name))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def mask_chat_id(chat_id: str | None) -> str | None:
    """Trunca o identificador da conversa para uso em logs."""
    if not chat_id:
        return None
    return chat_id[:6] + "..."
