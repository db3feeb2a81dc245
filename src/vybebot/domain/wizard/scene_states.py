"""Estados de cena e tabela de transições.

Conforme o ciclo de vida de um fluxo guiado:
- IDLE → ENTERING → IN_PROGRESS → (COMPLETED | CANCELLED | INTERRUPTED | LEFT_ON_ERROR) → IDLE
- Re-entrada (try again) parte de COMPLETED/LEFT_ON_ERROR/CANCELLED de volta para ENTERING
- Validação pura: sem side effects
"""

from __future__ import annotations

from enum import StrEnum


class SceneState(StrEnum):
    """Estados canônicos de uma cena (fluxo inteiro, não passo)."""

    IDLE = "IDLE"
    """Nenhum fluxo ativo na conversa."""

    ENTERING = "ENTERING"
    """Fluxo solicitado; estado sendo semeado."""

    IN_PROGRESS = "IN_PROGRESS"
    """Coletando parâmetros (passos 1..N)."""

    # === Desfechos (transitórios: a sessão é limpa e volta a IDLE) ===
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    INTERRUPTED = "INTERRUPTED"
    LEFT_ON_ERROR = "LEFT_ON_ERROR"


TERMINAL_SCENE_STATES = frozenset({
    SceneState.COMPLETED,
    SceneState.CANCELLED,
    SceneState.INTERRUPTED,
    SceneState.LEFT_ON_ERROR,
})
"""Desfechos de uma execução de fluxo."""

ACTIVE_SCENE_STATES = frozenset({SceneState.ENTERING, SceneState.IN_PROGRESS})

_LEAVING = frozenset({
    SceneState.COMPLETED,
    SceneState.CANCELLED,
    SceneState.INTERRUPTED,
    SceneState.LEFT_ON_ERROR,
})

# Tabela: estado atual → destinos permitidos
SCENE_TRANSITIONS: dict[SceneState, frozenset[SceneState]] = {
    SceneState.IDLE: frozenset({SceneState.ENTERING}),
    # Entrada semeada pode concluir direto (ex.: sem passos pendentes) ou falhar
    SceneState.ENTERING: frozenset({SceneState.ENTERING, SceneState.IN_PROGRESS}) | _LEAVING,
    SceneState.IN_PROGRESS: frozenset({SceneState.IN_PROGRESS, SceneState.ENTERING}) | _LEAVING,
    SceneState.COMPLETED: frozenset({SceneState.IDLE, SceneState.ENTERING}),
    SceneState.CANCELLED: frozenset({SceneState.IDLE, SceneState.ENTERING}),
    SceneState.LEFT_ON_ERROR: frozenset({SceneState.IDLE, SceneState.ENTERING}),
    # Interrupção entrega o controle ao roteador externo; só volta a IDLE
    SceneState.INTERRUPTED: frozenset({SceneState.IDLE}),
}


def validate_transition(
    current: SceneState, target: SceneState
) -> tuple[bool, str]:
    """Valida se a transição de cena é permitida.

    Retorna:
    - (True, ""): transição válida
    - (False, motivo): transição inválida

    Nunca lança exceção; apenas valida.
    """
    allowed = SCENE_TRANSITIONS.get(current, frozenset())
    if target not in allowed:
        return False, f"No scene transition from {current} to {target}"
    return True, ""
