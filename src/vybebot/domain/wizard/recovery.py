"""Política de recuperação de erros de consulta (rewind).

Conforme a política observada no domínio:
- Janela de tempo grande demais → volta ao passo que coleta o início da janela
- Valor de enum rejeitado pelo serviço → volta ao passo de resolução/intervalo
- Demais erros → sai do fluxo oferecendo "try again"

As regras são configuração por fluxo (`Flow.rewind_rules`), não lógica universal.
Cada erro mapeia para no máximo um alvo; o total de rewinds por execução é
limitado para evitar laços.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from vybebot.domain.errors import FetchError
from vybebot.domain.wizard.steps import Flow
from vybebot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

DEFAULT_FETCH_FAILURE_MESSAGE = "❌ Failed to fetch data from the API. Please try again later."
DEFAULT_INTERNAL_FAILURE_MESSAGE = "❌ Something went wrong. Please try again later."
REWINDS_EXHAUSTED_MESSAGE = (
    "❌ The service keeps rejecting this request. Please start over with different values."
)


@dataclass(frozen=True, slots=True)
class RewindTo:
    ordinal: int
    message: str
    retain_target: bool = False


@dataclass(frozen=True, slots=True)
class LeaveWithRetryAffordance:
    message: str
    exhausted: bool = False


@dataclass(frozen=True, slots=True)
class LeaveFatal:
    message: str


RecoveryAction = RewindTo | LeaveWithRetryAffordance | LeaveFatal


class ErrorRecovery:
    """Classifica falhas de consulta em ações de recuperação.

    Puro: não toca na sessão; o controlador aplica a ação.
    """

    def __init__(self, max_rewinds: int = 3) -> None:
        self._max_rewinds = max_rewinds

    def classify(
        self,
        error: BaseException,
        flow: Flow,
        rewinds_so_far: int = 0,
    ) -> RecoveryAction:
        if not isinstance(error, FetchError):
            return LeaveFatal(DEFAULT_INTERNAL_FAILURE_MESSAGE)

        rule = flow.rewind_rules.get(error.code)
        if rule is None:
            logger.info(
                "fetch_error_not_recoverable",
                extra={"flow_id": flow.flow_id, "code": error.code.value},
            )
            return LeaveWithRetryAffordance(DEFAULT_FETCH_FAILURE_MESSAGE)

        if rewinds_so_far >= self._max_rewinds:
            logger.warning(
                "rewind_limit_reached",
                extra={
                    "flow_id": flow.flow_id,
                    "code": error.code.value,
                    "rewinds": rewinds_so_far,
                },
            )
            return LeaveWithRetryAffordance(REWINDS_EXHAUSTED_MESSAGE, exhausted=True)

        ordinal = flow.ordinal_of(rule.target_field)
        logger.info(
            "fetch_error_rewind",
            extra={
                "flow_id": flow.flow_id,
                "code": error.code.value,
                "target_ordinal": ordinal,
            },
        )
        return RewindTo(
            ordinal=ordinal,
            message=rule.explanation,
            retain_target=rule.retain_target,
        )
