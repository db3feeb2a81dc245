"""Middleware de correlation_id por request.

O Telegram não envia correlation id próprio; cada entrega de webhook recebe
um UUID novo, a menos que um proxy já tenha definido `x-correlation-id`.
"""

from __future__ import annotations

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "x-correlation-id"

# Valores aceitos do header (evita injetar texto arbitrário nos logs)
_CORRELATION_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,64}$")

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id corrente (ou vazio fora de request)."""

    return _correlation_id.get()


def _accept_incoming(value: str | None) -> str | None:
    if value and _CORRELATION_ID_PATTERN.match(value):
        return value
    return None


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Propaga um correlation_id válido ou gera um novo por request."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        correlation_id = _accept_incoming(request.headers.get(CORRELATION_ID_HEADER)) or uuid.uuid4().hex
        token = _correlation_id.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            _correlation_id.reset(token)

        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
