"""Sessão de wizard — modelo persistido por conversa."""

from vybebot.application.session.models import WizardSession

__all__ = ["WizardSession"]
