"""Testes do HttpClient (retry, classificação de erro, circuit breaker)."""

from __future__ import annotations

import httpx
import pytest

from vybebot.config.settings import Settings
from vybebot.infra.http import (
    HttpClient,
    HttpClientConfig,
    HttpError,
    _calculate_backoff,
    _sanitize_url,
    create_telegram_http_client,
    create_vybe_http_client,
)


def _client(handler, **overrides) -> HttpClient:
    params = {
        "base_url": "https://api.example.test",
        "max_retries": 2,
        "backoff_base_seconds": 0.0,
    }
    params.update(overrides)
    return HttpClient(HttpClientConfig(**params), transport=httpx.MockTransport(handler))


class TestHelpers:
    """Funções puras de suporte."""

    def test_sanitize_url_masks_bot_token(self):
        url = "https://api.telegram.org/bot123:ABC/sendMessage"
        assert _sanitize_url(url) == "https://api.telegram.org/bot***/sendMessage"

    def test_backoff_is_capped(self):
        assert _calculate_backoff(0, 1.0, 30.0) == 1.0
        assert _calculate_backoff(3, 1.0, 30.0) == 8.0
        assert _calculate_backoff(10, 1.0, 30.0) == 30.0


class TestHttpClientRetry:
    """Retry em 429/5xx/timeout; 4xx falha imediatamente."""

    @pytest.mark.asyncio
    async def test_success_first_try(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"data": []})

        async with _client(handler) as client:
            response = await client.get("/price/x/token-ohlcv", params={"resolution": "1h"})

        assert response.json() == {"data": []}
        assert len(calls) == 1
        assert calls[0].url.params["resolution"] == "1h"

    @pytest.mark.asyncio
    async def test_retries_on_5xx_then_succeeds(self):
        statuses = iter([503, 502, 200])

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(next(statuses), json={})

        async with _client(handler) as client:
            response = await client.get("/x")

        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_4xx_is_not_retried_and_keeps_body(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, text="Request time range is too large")

        async with _client(handler) as client:
            with pytest.raises(HttpError) as exc_info:
                await client.get("/x")

        assert len(calls) == 1
        assert exc_info.value.status_code == 400
        assert exc_info.value.is_retryable is False
        assert "time range" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_retries_exhausted_raises_last_error(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, text="oops")

        async with _client(handler, max_retries=1) as client:
            with pytest.raises(HttpError) as exc_info:
                await client.get("/x")

        assert len(calls) == 2
        assert exc_info.value.status_code == 500
        assert exc_info.value.is_retryable is True

    @pytest.mark.asyncio
    async def test_timeout_marked(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler, max_retries=0) as client:
            with pytest.raises(HttpError) as exc_info:
                await client.get("/x")

        assert exc_info.value.is_timeout is True


class TestHttpClientCircuitBreaker:
    """Circuito aberto falha rápido sem chamar o servidor."""

    @pytest.mark.asyncio
    async def test_opens_after_fail_max(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(503)

        client = _client(
            handler,
            max_retries=0,
            circuit_breaker_enabled=True,
            circuit_breaker_fail_max=2,
            circuit_breaker_reset_timeout_seconds=60.0,
        )
        for _ in range(2):
            with pytest.raises(HttpError):
                await client.get("/x")

        with pytest.raises(HttpError, match="Circuit breaker"):
            await client.get("/x")
        assert len(calls) == 2
        await client.close()


class TestClientFactories:
    """Fábricas a partir de Settings."""

    def test_vybe_client_sends_api_key(self):
        settings = Settings(_env_file=None, vybe_api_key="secret-key", vybe_max_retries=4)
        client = create_vybe_http_client(settings)
        assert client.config.default_headers["X-API-KEY"] == "secret-key"
        assert client.config.max_retries == 4

    def test_telegram_client_has_no_retries(self):
        settings = Settings(_env_file=None, telegram_bot_token="123:ABC")
        client = create_telegram_http_client(settings)
        assert client.config.base_url == "https://api.telegram.org/bot123:ABC"
        assert client.config.max_retries == 0
