"""Configurações da aplicação via variáveis de ambiente.

Todas as configurações são carregadas de env vars (ou arquivo .env em dev).
Nunca hardcode tokens ou chaves de API.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# Constantes de APIs externas
# -----------------------------------------------------------------------------
TELEGRAM_API_BASE_URL: str = "https://api.telegram.org"
VYBE_API_BASE_URL: str = "https://api.vybenetwork.xyz"

VALID_SESSION_STORE_BACKENDS = frozenset({"memory", "redis"})


class Settings(BaseSettings):
    """Configurações lidas do ambiente."""

    model_config = SettingsConfigDict(
        env_prefix="",
        case_sensitive=False,
        env_file=".env",
        extra="ignore",
    )

    # Aplicação
    service_name: str = "vybebot"
    version: str = "0.1.0"
    environment: str = "development"
    log_level: str = "INFO"

    # Telegram (transporte)
    telegram_bot_token: str | None = None  # Token do BotFather
    telegram_api_base_url: str = TELEGRAM_API_BASE_URL
    telegram_webhook_secret: str | None = None  # Header X-Telegram-Bot-Api-Secret-Token
    telegram_request_timeout_seconds: float = 15.0

    # Vybe API (cliente de consulta, somente leitura)
    vybe_api_url: str = VYBE_API_BASE_URL
    vybe_api_key: str | None = None
    vybe_request_timeout_seconds: float = 30.0
    vybe_max_retries: int = 2
    vybe_circuit_breaker_enabled: bool = False
    vybe_circuit_breaker_fail_max: int = 5
    vybe_circuit_breaker_reset_timeout_seconds: float = 60.0

    # Sessão de wizard
    session_store_backend: str = "memory"  # memory | redis
    redis_url: str | None = None
    session_ttl_seconds: int = 3600  # Inatividade máxima de um fluxo

    # Motor de wizard
    command_prefix: str = "/"
    wizard_max_rewinds: int = 3  # Rewinds por execução de fluxo
    results_display_limit: int = 10

    @property
    def telegram_api_endpoint(self) -> str:
        """URL base do Bot API já com o token."""
        return f"{self.telegram_api_base_url}/bot{self.telegram_bot_token}"

    @property
    def is_production(self) -> bool:
        """Retorna True se ambiente é produção."""
        return self.environment.lower() in ("production", "prod")

    @property
    def is_staging(self) -> bool:
        """Retorna True se ambiente é staging."""
        return self.environment.lower() in ("staging", "stage")

    @property
    def is_development(self) -> bool:
        """Retorna True se ambiente é desenvolvimento."""
        return self.environment.lower() in ("development", "dev", "local")

    def validate_session_store_config(self) -> list[str]:
        """Valida backend de session store por ambiente.

        Em staging/prod, memory é proibido (várias réplicas não compartilham memória).
        Retorna lista de erros (vazia = tudo OK).
        """
        errors: list[str] = []
        backend = self.session_store_backend.lower()

        if backend not in VALID_SESSION_STORE_BACKENDS:
            errors.append(
                f"SESSION_STORE_BACKEND '{backend}' inválido. "
                f"Valores válidos: {sorted(VALID_SESSION_STORE_BACKENDS)}"
            )

        if backend == "memory" and (self.is_staging or self.is_production):
            errors.append(
                "SESSION_STORE_BACKEND=memory é proibido em staging/production. "
                "Configure 'redis'."
            )

        if backend == "redis" and not self.redis_url:
            errors.append("SESSION_STORE_BACKEND=redis requer REDIS_URL configurado")

        if self.session_ttl_seconds <= 0:
            errors.append("SESSION_TTL_SECONDS deve ser > 0")

        return errors

    def validate_telegram_config(self) -> list[str]:
        """Valida configurações mínimas do transporte Telegram."""
        errors: list[str] = []
        if (self.is_staging or self.is_production) and not self.telegram_bot_token:
            errors.append("TELEGRAM_BOT_TOKEN não configurado")
        if (self.is_staging or self.is_production) and not self.telegram_webhook_secret:
            errors.append("TELEGRAM_WEBHOOK_SECRET obrigatório em staging/production")
        return errors

    def validate_vybe_config(self) -> list[str]:
        """Valida configuração do cliente Vybe."""
        errors: list[str] = []
        if (self.is_staging or self.is_production) and not self.vybe_api_key:
            errors.append("VYBE_API_KEY não configurado")
        if self.vybe_max_retries < 0:
            errors.append("VYBE_MAX_RETRIES deve ser >= 0")
        return errors

    def validate_wizard_config(self) -> list[str]:
        """Valida parâmetros do motor de wizard."""
        errors: list[str] = []
        if not self.command_prefix:
            errors.append("COMMAND_PREFIX não pode ser vazio")
        if self.wizard_max_rewinds < 0:
            errors.append("WIZARD_MAX_REWINDS deve ser >= 0")
        if self.results_display_limit < 1:
            errors.append("RESULTS_DISPLAY_LIMIT deve ser >= 1")
        return errors

    def validate_all(self) -> list[str]:
        """Agrega todas as validações (usado no bootstrap)."""
        errors: list[str] = []
        errors.extend(self.validate_session_store_config())
        errors.extend(self.validate_telegram_config())
        errors.extend(self.validate_vybe_config())
        errors.extend(self.validate_wizard_config())
        return errors


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Retorna uma instância cacheada de Settings.

    A cache garante que mesmo múltiplas injeções não criam novos objetos.
    """
    return Settings()
