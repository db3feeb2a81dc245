"""Protocolo de domínio para persistência de sessão de wizard (async)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from vybebot.application.session import WizardSession


class AsyncSessionStoreProtocol(ABC):
    """Contrato mínimo assíncrono para armazenamento de WizardSession."""

    @abstractmethod
    async def get(self, key: str) -> WizardSession | None: ...

    @abstractmethod
    async def create_or_reset(self, key: str, flow_id: str) -> WizardSession: ...

    @abstractmethod
    async def save(self, session: WizardSession) -> None: ...

    @abstractmethod
    async def clear(self, key: str) -> WizardSession | None: ...

    @abstractmethod
    async def delete(self, key: str) -> bool: ...

    @abstractmethod
    async def exists(self, key: str) -> bool: ...

    @abstractmethod
    async def try_mark_fetching(self, key: str, generation: int) -> bool:
        """Marca atomicamente o fetch da execução `generation`; False se já marcado."""

    @abstractmethod
    async def release_fetching(self, key: str, generation: int) -> None:
        """Remove a marca de fetch, somente se pertencer a `generation`."""
