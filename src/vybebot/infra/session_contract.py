"""Contrato assíncrono de persistência de sessão de wizard.

Backends implementam apenas `get/save/delete/exists`; `create_or_reset` e
`clear` são definidos aqui sobre essas primitivas para que todos os backends
apliquem exatamente a mesma semântica de reset.
"""

from __future__ import annotations

import logging

from vybebot.application.session import WizardSession
from vybebot.domain.protocols.session_store import AsyncSessionStoreProtocol
from vybebot.domain.wizard.scene_states import SceneState
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)

DEFAULT_SESSION_TTL_SECONDS = 3600


class SessionStoreError(Exception):
    """Erro ao persistir ou recuperar sessão."""

    pass


class AsyncSessionStore(AsyncSessionStoreProtocol):
    """Base para armazenamento de WizardSession com TTL de inatividade."""

    def __init__(self, ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS) -> None:
        self._ttl_seconds = ttl_seconds

    @property
    def ttl_seconds(self) -> int:
        return self._ttl_seconds

    async def create_or_reset(self, key: str, flow_id: str) -> WizardSession:
        """Inicia (ou reinicia) um fluxo: cursor=1, estado vazio, guard livre.

        A geração é incrementada para invalidar consultas ainda em andamento
        da execução anterior.
        """
        existing = await self.get(key)
        session = WizardSession(
            session_id=key,
            active_flow_id=flow_id,
            scene_state=SceneState.ENTERING,
            generation=(existing.generation + 1) if existing else 1,
        )
        if existing is not None:
            session.created_at = existing.created_at
        await self.save(session)
        logger.debug(
            "wizard_session_reset",
            extra={
                "chat_id": mask_chat_id(key),
                "flow_id": flow_id,
                "generation": session.generation,
            },
        )
        return session

    async def clear(self, key: str) -> WizardSession | None:
        """Remove os campos do fluxo sem destruir a identidade da conversa."""
        session = await self.get(key)
        if session is None:
            return None
        session.reset_flow()
        await self.save(session)
        logger.debug("wizard_session_cleared", extra={"chat_id": mask_chat_id(key)})
        return session
