"""Despacho da consulta final de um fluxo."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vybebot.domain.protocols.fetch_client import FetchClientProtocol
from vybebot.domain.wizard.steps import Flow
from vybebot.observability.timing import timed


class FetchDispatcher:
    """Chama o cliente externo com o estado completo do wizard."""

    def __init__(self, client: FetchClientProtocol) -> None:
        self._client = client

    async def dispatch(self, flow: Flow, state: Mapping[str, Any]) -> Any:
        with timed("fetch", flow_id=flow.flow_id, operation=flow.operation):
            return await self._client.fetch(flow.operation, dict(state))
