"""Factory de session store conforme backend configurado."""

from __future__ import annotations

from typing import Any

from vybebot.infra.session_contract import DEFAULT_SESSION_TTL_SECONDS, AsyncSessionStore
from vybebot.infra.session_store_memory import InMemorySessionStore
from vybebot.infra.session_store_redis import RedisSessionStore


def create_session_store(
    backend: str,
    client: Any = None,
    ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS,
) -> AsyncSessionStore:
    """Cria o store de sessão.

    Args:
        backend: "memory" ou "redis"
        client: cliente `redis.asyncio.Redis` (obrigatório para "redis")
        ttl_seconds: inatividade máxima de uma sessão

    Raises:
        ValueError: backend desconhecido ou cliente ausente
    """
    backend = backend.lower()

    if backend == "memory":
        return InMemorySessionStore(ttl_seconds=ttl_seconds)

    if backend == "redis":
        if client is None:
            raise ValueError("redis backend requer client")
        return RedisSessionStore(client, ttl_seconds=ttl_seconds)

    raise ValueError(f"Unknown session store backend: {backend}")
