"""Erros de domínio do motor de wizard.

`FetchError` carrega um código estável (`FetchErrorCode`) para que a política
de recuperação classifique falhas sem depender do texto da mensagem remota.
"""

from __future__ import annotations

from enum import StrEnum


class FetchErrorCode(StrEnum):
    """Códigos estáveis de falha de consulta remota."""

    TIME_RANGE_TOO_LARGE = "TIME_RANGE_TOO_LARGE"
    """Janela de tempo solicitada excede o limite do serviço."""

    UNKNOWN_VARIANT = "UNKNOWN_VARIANT"
    """Valor de enum (resolução/intervalo) rejeitado pelo serviço."""

    NOT_FOUND = "NOT_FOUND"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    TIMEOUT = "TIMEOUT"
    UPSTREAM = "UPSTREAM"
    """Falha genérica do serviço remoto (5xx, payload inválido, etc.)."""


class FetchError(Exception):
    """Falha de domínio retornada pelo cliente de consulta."""

    def __init__(
        self,
        code: FetchErrorCode,
        message: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message or code.value)
        self.code = code
        self.message = message or code.value
        self.status_code = status_code

    def __repr__(self) -> str:
        return f"FetchError(code={self.code.value!r}, status_code={self.status_code!r})"


class ConcurrentFetchError(Exception):
    """Já existe uma consulta em andamento para a mesma sessão."""


class FlowNotFoundError(KeyError):
    """flow_id não registrado."""


class InvalidCursorError(ValueError):
    """Cursor fora do intervalo [1, N] do fluxo."""


class InvalidTransitionError(Exception):
    """Transição de cena não permitida pela tabela."""
