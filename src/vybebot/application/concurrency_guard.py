"""Guard de concorrência: no máximo um fetch em andamento por sessão.

A aquisição é uma marca atômica no store (SET NX no Redis), de modo que dois
updates concorrentes da mesma conversa (ex.: duplo clique no botão final) não
vencem juntos. O flag `is_fetching` da sessão é persistido em seguida para que
updates posteriores respondam "ocupado" sem tocar no passo.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from vybebot.application.session import WizardSession
from vybebot.domain.errors import ConcurrentFetchError
from vybebot.domain.protocols.session_store import AsyncSessionStoreProtocol
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)


class ConcurrencyGuard:
    def __init__(self, store: AsyncSessionStoreProtocol) -> None:
        self._store = store

    async def try_acquire(self, session: WizardSession) -> bool:
        """Retorna False se já há fetch em andamento para a conversa."""
        if session.is_fetching:
            return False
        if not await self._store.try_mark_fetching(session.session_id, session.generation):
            return False

        session.is_fetching = True
        try:
            await self._store.save(session)
        except Exception:
            session.is_fetching = False
            await self._store.release_fetching(session.session_id, session.generation)
            raise
        return True

    async def release(self, session: WizardSession) -> None:
        """Libera o flag sem reaproveitar dados do objeto em memória.

        Recarrega o registro persistido: se a conversa já iniciou outro fluxo
        (geração diferente), nada é alterado.
        """
        session.is_fetching = False
        await self._store.release_fetching(session.session_id, session.generation)
        stored = await self._store.get(session.session_id)
        if stored is None or stored.generation != session.generation:
            return
        if stored.is_fetching:
            stored.is_fetching = False
            await self._store.save(stored)

    @asynccontextmanager
    async def hold(self, session: WizardSession) -> AsyncIterator[WizardSession]:
        """Escopo de fetch: libera em qualquer saída, inclusive exceção.

        Raises:
            ConcurrentFetchError: fetch já em andamento para esta sessão
        """
        if not await self.try_acquire(session):
            logger.info(
                "concurrent_fetch_rejected",
                extra={"chat_id": mask_chat_id(session.session_id)},
            )
            raise ConcurrentFetchError(session.session_id)
        try:
            yield session
        finally:
            await self.release(session)
