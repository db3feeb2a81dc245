"""Configurações centralizadas do vybebot.

Este módulo exporta:
- Settings: classe de configuração via variáveis de ambiente
- get_settings: função cacheada para obter instância única
- Constantes das APIs externas (Telegram, Vybe)

Uso típico:
    from vybebot.config import get_settings
"""

from vybebot.config.settings import (
    TELEGRAM_API_BASE_URL,
    VYBE_API_BASE_URL,
    Settings,
    get_settings,
)

__all__ = [
    "Settings",
    "get_settings",
    "TELEGRAM_API_BASE_URL",
    "VYBE_API_BASE_URL",
]
