"""Implementação de AsyncSessionStore em memória (apenas dev/testes)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from vybebot.application.session import WizardSession
from vybebot.infra.session_contract import DEFAULT_SESSION_TTL_SECONDS, AsyncSessionStore
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)


def _utc_timestamp() -> float:
    return datetime.now(tz=UTC).timestamp()


class InMemorySessionStore(AsyncSessionStore):
    """Armazenamento em memória (não usar em produção).

    Guarda cópias: quem carrega uma sessão trabalha sobre seu próprio objeto,
    como aconteceria com um backend serializado.
    """

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
        clock: Callable[[], float] | None = None,
    ) -> None:
        super().__init__(ttl_seconds)
        self._sessions: dict[str, tuple[WizardSession, float]] = {}
        self._fetch_marks: dict[str, tuple[int, float]] = {}
        self._clock = clock or _utc_timestamp

    async def get(self, key: str) -> WizardSession | None:
        entry = self._sessions.get(key)
        if entry is None:
            return None

        session, expire_at = entry
        if self._clock() > expire_at:
            del self._sessions[key]
            logger.debug("Session expired (in-memory)", extra={"chat_id": mask_chat_id(key)})
            return None

        return session.model_copy(deep=True)

    async def save(self, session: WizardSession) -> None:
        session.touch()
        expire_at = self._clock() + self._ttl_seconds
        self._sessions[session.session_id] = (session.model_copy(deep=True), expire_at)
        logger.debug(
            "Session saved (in-memory)",
            extra={"chat_id": mask_chat_id(session.session_id), "ttl_seconds": self._ttl_seconds},
        )

    async def delete(self, key: str) -> bool:
        if key in self._sessions:
            del self._sessions[key]
            return True
        return False

    async def exists(self, key: str) -> bool:
        return await self.get(key) is not None

    async def try_mark_fetching(self, key: str, generation: int) -> bool:
        entry = self._fetch_marks.get(key)
        if entry is not None and self._clock() <= entry[1]:
            return False
        self._fetch_marks[key] = (generation, self._clock() + self._ttl_seconds)
        return True

    async def release_fetching(self, key: str, generation: int) -> None:
        entry = self._fetch_marks.get(key)
        if entry is not None and entry[0] == generation:
            del self._fetch_marks[key]
