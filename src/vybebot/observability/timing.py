"""Medição de latência por componente (consulta externa, webhook)."""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator

from vybebot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

SLOW_THRESHOLD_MS = 5000.0


@contextlib.contextmanager
def timed(
    component: str,
    slow_threshold_ms: float = SLOW_THRESHOLD_MS,
    **fields: object,
) -> Iterator[None]:
    """Registra `component_latency` com elapsed_ms e o status do bloco.

    Exemplo:
        with timed("fetch", flow_id="token_ohlcv"):
            result = await client.fetch(...)

    Acima de `slow_threshold_ms` o registro sobe para WARNING. Exceções do
    bloco propagam (status="error").
    """
    start = time.perf_counter()
    status = "ok"
    try:
        yield
    except BaseException:
        status = "error"
        raise
    finally:
        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        level = logging.WARNING if elapsed_ms > slow_threshold_ms else logging.INFO
        logger.log(
            level,
            "component_latency",
            extra={"component": component, "elapsed_ms": elapsed_ms, "status": status, **fields},
        )
