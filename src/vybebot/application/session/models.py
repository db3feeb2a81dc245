"""Models de sessão — WizardSession.

WizardSession é o registro mutável de uma conversa:
- Uma sessão = uma conversa (chave estável, ex.: chat_id)
- No máximo um fluxo ativo por vez (cursor + estado coletado)
- Serializável para Redis (JSON) sem perda
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from vybebot.domain.wizard.scene_states import SceneState


def _now() -> datetime:
    return datetime.now(tz=UTC)


class WizardSession(BaseModel):
    """Estado de wizard de uma conversa.

    - active_flow_id None significa "sem fluxo ativo" (cursor/estado irrelevantes)
    - generation é incrementado a cada (re)entrada em fluxo; uma consulta em
      andamento só limpa a sessão se a geração ainda for a mesma
    - is_fetching é o guard de concorrência (um fetch por sessão)
    """

    session_id: str
    active_flow_id: str | None = None
    cursor: int = Field(default=1, ge=1)
    state: dict[str, Any] = Field(default_factory=dict)
    is_fetching: bool = False
    scene_state: SceneState = SceneState.IDLE
    generation: int = Field(default=0, ge=0)
    rewinds: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def in_flow(self) -> bool:
        return self.active_flow_id is not None

    def touch(self) -> None:
        self.updated_at = _now()

    def reset_flow(self) -> None:
        """Descarta todos os campos do fluxo, preservando a identidade da conversa."""
        self.active_flow_id = None
        self.cursor = 1
        self.state = {}
        self.is_fetching = False
        self.scene_state = SceneState.IDLE
        self.rewinds = 0
        self.touch()
