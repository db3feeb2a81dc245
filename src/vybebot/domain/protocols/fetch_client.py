"""Protocolos dos colaboradores externos do motor de wizard."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


class FetchClientProtocol(ABC):
    """Cliente de consulta remota (somente leitura).

    Deve lançar `FetchError` com `FetchErrorCode` estável em falhas de domínio.
    """

    @abstractmethod
    async def fetch(self, operation: str, params: Mapping[str, Any]) -> Any: ...


@dataclass(frozen=True, slots=True)
class DetectedIntent:
    """Fluxo sugerido + parâmetros extraídos (podem estar incompletos)."""

    flow_id: str
    params: dict[str, Any] = field(default_factory=dict)


class IntentDetectorProtocol(ABC):
    """Pré-semeador de parâmetros (ex.: camada NLP)."""

    @abstractmethod
    async def detect(self, text: str) -> DetectedIntent | None: ...
