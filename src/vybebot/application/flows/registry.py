"""Registro de fluxos por flow_id e por comando."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from vybebot.domain.errors import FlowNotFoundError
from vybebot.domain.wizard.steps import Flow


class FlowRegistry:
    def __init__(self, flows: Iterable[Flow] = ()) -> None:
        self._flows: dict[str, Flow] = {}
        self._by_command: dict[str, Flow] = {}
        for flow in flows:
            self.register(flow)

    def register(self, flow: Flow) -> None:
        if flow.flow_id in self._flows:
            raise ValueError(f"Flow already registered: {flow.flow_id}")
        if flow.command in self._by_command:
            raise ValueError(f"Command already bound to a flow: {flow.command}")
        self._flows[flow.flow_id] = flow
        self._by_command[flow.command] = flow

    def get(self, flow_id: str) -> Flow:
        try:
            return self._flows[flow_id]
        except KeyError:
            raise FlowNotFoundError(flow_id) from None

    def by_command(self, command: str) -> Flow | None:
        return self._by_command.get(command)

    def __contains__(self, flow_id: object) -> bool:
        return flow_id in self._flows

    def __iter__(self) -> Iterator[Flow]:
        return iter(self._flows.values())

    def __len__(self) -> int:
        return len(self._flows)
