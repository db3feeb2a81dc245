"""Dependências injetadas nas rotas."""

from __future__ import annotations

from fastapi import Request

from vybebot.application.scene_controller import SceneController
from vybebot.config.settings import Settings


def get_settings(request: Request) -> Settings:
    """Retorna settings da aplicação."""

    return request.app.state.settings


def get_scene_controller(request: Request) -> SceneController:
    """Retorna o controlador de cena (motor de wizard)."""

    return request.app.state.scene_controller
