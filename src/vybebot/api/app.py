"""Fábrica da aplicação FastAPI."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import redis.asyncio as redis
from fastapi import FastAPI

from vybebot.adapters.telegram.outbound import TelegramTransport
from vybebot.api.routes import router
from vybebot.application.bot import create_scene_controller
from vybebot.config.settings import Settings, get_settings
from vybebot.infra.http import create_telegram_http_client, create_vybe_http_client
from vybebot.infra.session_store import create_session_store
from vybebot.infra.vybe_client import VybeApiClient
from vybebot.observability.logging import configure_logging, get_logger
from vybebot.observability.middleware import CorrelationIdMiddleware

logger = get_logger(__name__)


def _create_redis_client(redis_url: str | None) -> Any:
    """Cria cliente Redis assíncrono (conexão é lazy, no primeiro comando)."""
    if not redis_url:
        return None
    return redis.from_url(redis_url, decode_responses=True)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Cria a aplicação FastAPI.

    Raises:
        ValueError: configuração inválida (falha fechada no bootstrap)
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.service_name)

    validation_errors = settings.validate_all()
    if validation_errors:
        error_msg = "; ".join(validation_errors)
        raise ValueError(f"Configuração inválida: {error_msg}")

    redis_client = None
    backend = settings.session_store_backend.lower()
    if backend == "redis":
        redis_client = _create_redis_client(settings.redis_url)
        if redis_client is None:
            raise ValueError("SESSION_STORE_BACKEND=redis mas REDIS_URL não configurado")
    session_store = create_session_store(
        backend, client=redis_client, ttl_seconds=settings.session_ttl_seconds
    )

    vybe_http = create_vybe_http_client(settings)
    telegram_http = create_telegram_http_client(settings)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        yield
        await vybe_http.close()
        await telegram_http.close()
        if redis_client is not None:
            await redis_client.aclose()
        logger.info("app_shutdown_complete")

    app = FastAPI(title=settings.service_name, version=settings.version, lifespan=lifespan)
    app.add_middleware(CorrelationIdMiddleware)
    app.include_router(router)

    app.state.settings = settings
    app.state.session_store = session_store
    app.state.scene_controller = create_scene_controller(
        settings,
        transport=TelegramTransport(telegram_http),
        fetch_client=VybeApiClient(vybe_http, page_limit=settings.results_display_limit),
        store=session_store,
    )

    logger.info(
        "app_created",
        extra={"environment": settings.environment, "session_store_backend": backend},
    )
    return app


app = create_app()
