"""Circuit breaker assíncrono para chamadas à Vybe API e ao Bot API."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum


class CircuitState(StrEnum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class CircuitBreakerConfig:
    """Configuração do circuit breaker (desligado por padrão)."""

    enabled: bool = False
    fail_max: int = 5
    reset_timeout_seconds: float = 60.0
    half_open_max_calls: int = 1


class CircuitBreaker:
    """Abre após `fail_max` falhas retentáveis consecutivas.

    Aberto: falha rápida até `reset_timeout_seconds`. Depois disso libera
    `half_open_max_calls` chamadas de teste; sucesso fecha, falha reabre.
    """

    def __init__(
        self,
        config: CircuitBreakerConfig,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = config
        self._clock = clock or time.monotonic
        self._lock = asyncio.Lock()
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at: float | None = None
        self._probes = 0

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failure_count(self) -> int:
        return self._failures

    async def allow_request(self) -> bool:
        if not self._config.enabled:
            return True

        async with self._lock:
            if self._state is CircuitState.OPEN:
                opened_at = self._opened_at if self._opened_at is not None else self._clock()
                if self._clock() - opened_at < self._config.reset_timeout_seconds:
                    return False
                self._state = CircuitState.HALF_OPEN
                self._probes = 0

            if self._state is CircuitState.HALF_OPEN:
                if self._probes >= self._config.half_open_max_calls:
                    return False
                self._probes += 1

            return True

    async def record_success(self) -> CircuitState:
        if not self._config.enabled:
            return CircuitState.CLOSED
        async with self._lock:
            self._close()
            return self._state

    async def record_failure(self, is_retryable: bool) -> CircuitState:
        """Falhas não retentáveis (4xx) não contam para abrir o circuito."""
        if not self._config.enabled:
            return CircuitState.CLOSED

        async with self._lock:
            if not is_retryable:
                self._close()
            elif self._state is CircuitState.HALF_OPEN:
                self._open()
            else:
                self._failures += 1
                if self._failures >= self._config.fail_max:
                    self._open()
            return self._state

    def _close(self) -> None:
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._opened_at = None
        self._probes = 0

    def _open(self) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = self._clock()
        self._probes = 0
