"""Camada de infraestrutura — adapters para serviços externos.

Este módulo exporta:

- Session: InMemorySessionStore, RedisSessionStore, create_session_store
- HTTP: HttpClient, HttpError
- Vybe: VybeApiClient

Uso típico:
    from vybebot.infra import create_session_store

Infraestrutura não decide regra de negócio; logs estruturados sem PII.
"""

from vybebot.infra.http import HttpClient, HttpClientConfig, HttpError
from vybebot.infra.session_contract import AsyncSessionStore, SessionStoreError
from vybebot.infra.session_store import create_session_store
from vybebot.infra.session_store_memory import InMemorySessionStore
from vybebot.infra.session_store_redis import RedisSessionStore
from vybebot.infra.vybe_client import VybeApiClient

__all__ = [
    "AsyncSessionStore",
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "InMemorySessionStore",
    "RedisSessionStore",
    "SessionStoreError",
    "VybeApiClient",
    "create_session_store",
]
