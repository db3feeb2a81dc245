"""Rotas HTTP: healthcheck e webhook do Telegram."""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from vybebot.adapters.telegram.models import WebhookResult
from vybebot.adapters.telegram.normalizer import normalize_update
from vybebot.adapters.telegram.signature import verify_secret_token
from vybebot.api.dependencies import get_scene_controller, get_settings
from vybebot.application.scene_controller import SceneController
from vybebot.config.settings import Settings
from vybebot.infra.http import HttpError
from vybebot.infra.session_contract import SessionStoreError
from vybebot.observability.logging import get_logger, mask_chat_id
from vybebot.observability.middleware import get_correlation_id

logger: logging.Logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
def health(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    """Healthcheck simples."""
    return {"status": "ok", "service": settings.service_name, "version": settings.version}


@router.post("/webhooks/telegram")
async def telegram_webhook(
    request: Request,
    settings: Settings = Depends(get_settings),
    controller: SceneController = Depends(get_scene_controller),
) -> dict[str, Any]:
    """Recebe um update do Telegram e o processa até o fim.

    Respostas 2xx encerram a entrega; o Telegram reenvia em 5xx. Falhas do
    Bot API ao responder o usuário não provocam reenvio (o update já foi
    aplicado à sessão).
    """
    secret_result = verify_secret_token(request.headers, settings.telegram_webhook_secret)
    if not secret_result.valid:
        logger.warning("telegram_webhook_rejected", extra={"reason": secret_result.error})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_secret_token")

    raw_body = await request.body()
    try:
        payload = json.loads(raw_body or b"{}")
    except json.JSONDecodeError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_json") from exc

    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="invalid_payload")

    update = normalize_update(payload)
    if update is None:
        update_id = payload.get("update_id")
        return WebhookResult(
            update_id=update_id if isinstance(update_id, int) else None,
            notes=["ignored"],
        ).model_dump()

    try:
        outcome = await controller.handle(update)
    except SessionStoreError as exc:
        logger.error(
            "session_store_unavailable",
            extra={"update_id": update.update_id, "error_type": type(exc).__name__},
        )
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "session_store_unavailable", "correlation_id": get_correlation_id()},
        ) from exc
    except HttpError as exc:
        logger.warning(
            "telegram_reply_failed",
            extra={
                "update_id": update.update_id,
                "chat_id": mask_chat_id(update.chat_id),
                "status_code": exc.status_code,
            },
        )
        return WebhookResult(ok=False, update_id=update.update_id, notes=["reply_failed"]).model_dump()

    logger.info(
        "telegram_update_processed",
        extra={
            "update_id": update.update_id,
            "chat_id": mask_chat_id(update.chat_id),
            "outcome": type(outcome).__name__,
        },
    )
    return WebhookResult(update_id=update.update_id, outcome=type(outcome).__name__).model_dump()
