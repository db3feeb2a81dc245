"""Implementação de AsyncSessionStore usando Redis (produção)."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from vybebot.application.session import WizardSession
from vybebot.infra.session_contract import (
    DEFAULT_SESSION_TTL_SECONDS,
    AsyncSessionStore,
    SessionStoreError,
)
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)

KEY_PREFIX = "wizard:"
FETCH_KEY_PREFIX = "wizard-fetch:"


def _key(session_key: str) -> str:
    return f"{KEY_PREFIX}{session_key}"


def _fetch_key(session_key: str) -> str:
    return f"{FETCH_KEY_PREFIX}{session_key}"


class RedisSessionStore(AsyncSessionStore):
    """Armazenamento em Redis (`redis.asyncio`) com TTL nativo.

    Payload corrompido é tratado como sessão ausente (a conversa recomeça do
    zero); falhas de conexão são propagadas como SessionStoreError.
    """

    def __init__(
        self,
        redis_client: Any,
        ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
    ) -> None:
        super().__init__(ttl_seconds)
        self._redis = redis_client

    async def get(self, key: str) -> WizardSession | None:
        try:
            payload = await self._redis.get(_key(key))
        except Exception as e:
            logger.error(
                "Failed to load session from Redis",
                extra={"chat_id": mask_chat_id(key), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis get failed: {e}") from e

        if not payload:
            return None

        if isinstance(payload, bytes):
            payload = payload.decode("utf-8")

        try:
            return WizardSession.model_validate_json(payload)
        except ValidationError:
            logger.warning(
                "Discarding unreadable session payload (Redis)",
                extra={"chat_id": mask_chat_id(key)},
            )
            return None

    async def save(self, session: WizardSession) -> None:
        session.touch()
        try:
            await self._redis.setex(
                _key(session.session_id),
                self._ttl_seconds,
                session.model_dump_json(),
            )
        except Exception as e:
            logger.error(
                "Failed to save session to Redis",
                extra={"chat_id": mask_chat_id(session.session_id), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis save failed: {e}") from e

        logger.debug(
            "Session saved (Redis)",
            extra={"chat_id": mask_chat_id(session.session_id), "ttl_seconds": self._ttl_seconds},
        )

    async def delete(self, key: str) -> bool:
        try:
            deleted = await self._redis.delete(_key(key))
        except Exception as e:
            raise SessionStoreError(f"Redis delete failed: {e}") from e
        return bool(deleted)

    async def exists(self, key: str) -> bool:
        try:
            return bool(await self._redis.exists(_key(key)))
        except Exception as e:
            raise SessionStoreError(f"Redis exists failed: {e}") from e

    async def try_mark_fetching(self, key: str, generation: int) -> bool:
        """SET NX com TTL: apenas um update da conversa vence a corrida."""
        try:
            was_set = await self._redis.set(
                _fetch_key(key),
                str(generation),
                nx=True,
                ex=self._ttl_seconds,
            )
        except Exception as e:
            logger.error(
                "Failed to mark fetch in Redis",
                extra={"chat_id": mask_chat_id(key), "error": type(e).__name__},
            )
            raise SessionStoreError(f"Redis set failed: {e}") from e

        acquired = bool(was_set)
        logger.debug(
            "Fetch mark (Redis)",
            extra={"chat_id": mask_chat_id(key), "acquired": acquired, "generation": generation},
        )
        return acquired

    async def release_fetching(self, key: str, generation: int) -> None:
        try:
            owner = await self._redis.get(_fetch_key(key))
            if isinstance(owner, bytes):
                owner = owner.decode("utf-8")
            if owner == str(generation):
                await self._redis.delete(_fetch_key(key))
        except Exception as e:
            raise SessionStoreError(f"Redis fetch release failed: {e}") from e
