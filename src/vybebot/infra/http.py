"""Cliente HTTP centralizado com retry, timeout e logging.

Usado pelo cliente da Vybe API e pelo transporte do Telegram:
- Retry com backoff exponencial em 429/5xx, timeout e erro de conexão
- Circuit breaker opcional
- Logging estruturado sem credenciais (token do bot e X-API-KEY nunca logados)
- Corpo de respostas de erro preservado (truncado) para classificação a montante
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx

from vybebot.infra.circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitState
from vybebot.observability.logging import get_logger

if TYPE_CHECKING:
    from vybebot.config.settings import Settings

logger: logging.Logger = get_logger(__name__)

_BOT_TOKEN_PATTERN = re.compile(r"/bot[^/]+")
_MAX_ERROR_BODY_CHARS = 512


def _sanitize_url(url: str) -> str:
    """Remove o token do bot do path para logging seguro."""
    return _BOT_TOKEN_PATTERN.sub("/bot***", url)


@dataclass
class HttpClientConfig:
    """Configuração do cliente HTTP.

    Valores padrão são seguros e conservadores.
    """

    base_url: str = ""
    timeout_seconds: float = 30.0
    max_retries: int = 3
    backoff_base_seconds: float = 1.0
    backoff_max_seconds: float = 30.0
    default_headers: dict[str, str] = field(default_factory=dict)
    circuit_breaker_enabled: bool = False
    circuit_breaker_fail_max: int = 5
    circuit_breaker_reset_timeout_seconds: float = 60.0


class HttpError(Exception):
    """Erro de requisição HTTP sem expor informações sensíveis."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        is_retryable: bool = False,
        body: str = "",
        is_timeout: bool = False,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.is_retryable = is_retryable
        self.body = body
        self.is_timeout = is_timeout


def _is_retryable_status(status_code: int) -> bool:
    """429 ou 5xx."""
    return status_code == 429 or 500 <= status_code < 600


def _calculate_backoff(attempt: int, base_seconds: float, max_seconds: float) -> float:
    return min((2**attempt) * base_seconds, max_seconds)


def _error_body(response: httpx.Response) -> str:
    try:
        return response.text[:_MAX_ERROR_BODY_CHARS]
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return ""


def _transient_error(exc: Exception, method: str, url: str, attempt: int) -> HttpError:
    """Converte timeout/conexão em HttpError retentável; demais exceções propagam."""
    if isinstance(exc, httpx.TimeoutException):
        logger.warning(
            "http_timeout",
            extra={"method": method, "url": _sanitize_url(url), "attempt": attempt + 1},
        )
        return HttpError("Timeout", is_retryable=True, is_timeout=True)

    if isinstance(exc, httpx.TransportError):
        logger.warning(
            "http_connection_error",
            extra={
                "method": method,
                "url": _sanitize_url(url),
                "attempt": attempt + 1,
                "error_type": type(exc).__name__,
            },
        )
        return HttpError("Erro de conexão", is_retryable=True)

    logger.error(
        "http_unexpected_error",
        extra={"method": method, "url": _sanitize_url(url), "error_type": type(exc).__name__},
    )
    raise HttpError(f"Erro inesperado: {type(exc).__name__}") from exc


class HttpClient:
    """Cliente HTTP assíncrono com retry e logging.

    Uso típico:
        async with HttpClient(config) as client:
            response = await client.get("/price/...", params=...)
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config or HttpClientConfig()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._circuit_breaker: CircuitBreaker | None = None
        if self._config.circuit_breaker_enabled:
            self._circuit_breaker = CircuitBreaker(
                CircuitBreakerConfig(
                    enabled=True,
                    fail_max=self._config.circuit_breaker_fail_max,
                    reset_timeout_seconds=self._config.circuit_breaker_reset_timeout_seconds,
                )
            )

    @property
    def config(self) -> HttpClientConfig:
        return self._config

    async def _get_client(self) -> httpx.AsyncClient:
        """Retorna cliente httpx (lazy loading)."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=httpx.Timeout(self._config.timeout_seconds),
                headers=self._config.default_headers,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpClient:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def _request_with_retry(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        cfg = self._config
        last_error: HttpError | None = None

        for attempt in range(cfg.max_retries + 1):
            logger.debug(
                "http_request",
                extra={"method": method, "url": _sanitize_url(url), "attempt": attempt + 1},
            )
            try:
                response = await client.request(method, url, **kwargs)
            except Exception as exc:
                last_error = _transient_error(exc, method, url, attempt)
            else:
                if response.is_success:
                    return response

                body = _error_body(response)
                if not _is_retryable_status(response.status_code):
                    logger.warning(
                        "http_request_failed",
                        extra={
                            "method": method,
                            "url": _sanitize_url(url),
                            "status_code": response.status_code,
                        },
                    )
                    raise HttpError(
                        f"HTTP {response.status_code}",
                        status_code=response.status_code,
                        body=body,
                    )
                last_error = HttpError(
                    f"HTTP {response.status_code}",
                    status_code=response.status_code,
                    is_retryable=True,
                    body=body,
                )

            if attempt < cfg.max_retries:
                backoff = _calculate_backoff(attempt, cfg.backoff_base_seconds, cfg.backoff_max_seconds)
                logger.info(
                    "http_retry_backoff",
                    extra={"backoff_seconds": backoff, "next_attempt": attempt + 2},
                )
                await asyncio.sleep(backoff)

        logger.error(
            "http_retries_exhausted",
            extra={"method": method, "url": _sanitize_url(url), "total_attempts": cfg.max_retries + 1},
        )
        raise last_error or HttpError("Falha após todos os retries")

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Orquestra requisição com circuit breaker e retry."""
        breaker = self._circuit_breaker
        if breaker and not await breaker.allow_request():
            logger.warning(
                "circuit_breaker_open",
                extra={"method": method, "url": _sanitize_url(url)},
            )
            raise HttpError("Circuit breaker aberto", is_retryable=False)

        try:
            response = await self._request_with_retry(method, url, **kwargs)
        except HttpError as exc:
            if breaker:
                state = await breaker.record_failure(exc.is_retryable)
                if state is CircuitState.OPEN:
                    logger.error(
                        "circuit_breaker_tripped",
                        extra={"url": _sanitize_url(url), "breaker_failures": breaker.failure_count},
                    )
            raise

        if breaker:
            await breaker.record_success()
        return response

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, json: dict[str, Any] | None = None, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, json=json, **kwargs)


def create_vybe_http_client(settings: Settings) -> HttpClient:
    """Cliente HTTP da Vybe API (X-API-KEY em todas as requisições)."""
    headers = {
        "Accept": "application/json",
        "User-Agent": f"{settings.service_name}/{settings.version}",
    }
    if settings.vybe_api_key:
        headers["X-API-KEY"] = settings.vybe_api_key

    config = HttpClientConfig(
        base_url=settings.vybe_api_url.rstrip("/"),
        timeout_seconds=settings.vybe_request_timeout_seconds,
        max_retries=settings.vybe_max_retries,
        default_headers=headers,
        circuit_breaker_enabled=settings.vybe_circuit_breaker_enabled,
        circuit_breaker_fail_max=settings.vybe_circuit_breaker_fail_max,
        circuit_breaker_reset_timeout_seconds=settings.vybe_circuit_breaker_reset_timeout_seconds,
    )
    logger.info(
        "Cliente HTTP Vybe criado",
        extra={"timeout_seconds": config.timeout_seconds, "max_retries": config.max_retries},
    )
    return HttpClient(config)


def create_telegram_http_client(settings: Settings) -> HttpClient:
    """Cliente HTTP do Bot API (sem retry: respostas duplicadas são piores que perdidas)."""
    config = HttpClientConfig(
        base_url=settings.telegram_api_endpoint,
        timeout_seconds=settings.telegram_request_timeout_seconds,
        max_retries=0,
        default_headers={"User-Agent": f"{settings.service_name}/{settings.version}"},
    )
    return HttpClient(config)
