"""Roteamento global de comandos e ações (tabelas, não switch por fluxo).

Uma única tabela de comandos atende todo hand-off de interrupção; a tabela
de ações atende botões que não pertencem ao passo atual (menu, entrada em
fluxo, fechar). Tokens exatos têm precedência sobre prefixos.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from vybebot.domain.protocols.transport import IncomingUpdate, Keyboard
from vybebot.domain.wizard.outcomes import Outcome
from vybebot.observability.logging import get_logger

if TYPE_CHECKING:
    from vybebot.application.rendering import OutcomePresenter
    from vybebot.application.scene_controller import SceneController

logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandContext:
    """Contexto entregue a um handler de comando ou ação.

    - name: nome do comando (sem prefixo) ou token da ação
    - argument: resto do comando, ou sufixo do token para rotas por prefixo
    """

    update: IncomingUpdate
    name: str
    argument: str | None
    controller: SceneController
    presenter: OutcomePresenter

    @property
    def chat_id(self) -> str:
        return self.update.chat_id

    async def reply(self, text: str, keyboard: Keyboard | None = None) -> None:
        await self.presenter.transport.reply(self.chat_id, text, keyboard)

    async def enter_flow(self, flow_id: str, seed: Mapping[str, Any] | None = None) -> Outcome:
        """Inicia um fluxo e mostra a primeira pergunta pendente."""
        outcome = await self.controller.enter(self.chat_id, flow_id, seed=seed)
        # O callback (se houver) é respondido uma única vez pelo controlador
        await self.presenter.render(dataclasses.replace(self.update, callback_query_id=None), outcome)
        return outcome


Handler = Callable[[CommandContext], Awaitable[None]]


class CommandRouter:
    def __init__(
        self,
        handlers: Mapping[str, Handler] | None = None,
        fallback: Handler | None = None,
    ) -> None:
        self._handlers: dict[str, Handler] = {}
        self._fallback = fallback
        for name, handler in (handlers or {}).items():
            self.register(name, handler)

    def register(self, name: str, handler: Handler) -> None:
        self._handlers[name.lower()] = handler

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._handlers

    @property
    def commands(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    async def dispatch(self, ctx: CommandContext) -> bool:
        handler = self._handlers.get(ctx.name.lower())
        if handler is None:
            logger.info("command_unrecognized", extra={"command": ctx.name[:32]})
            if self._fallback is not None:
                await self._fallback(ctx)
            return False
        logger.info("command_dispatched", extra={"command": ctx.name})
        await handler(ctx)
        return True


class ActionRouter:
    def __init__(self, fallback: Handler | None = None) -> None:
        self._exact: dict[str, Handler] = {}
        self._prefixes: list[tuple[str, Handler]] = []
        self._fallback = fallback

    def register(self, token: str, handler: Handler) -> None:
        self._exact[token] = handler

    def register_prefix(self, prefix: str, handler: Handler) -> None:
        self._prefixes.append((prefix, handler))
        # Prefixo mais longo vence
        self._prefixes.sort(key=lambda item: len(item[0]), reverse=True)

    def resolve(self, token: str) -> tuple[Handler, str | None] | None:
        handler = self._exact.get(token)
        if handler is not None:
            return handler, None
        for prefix, prefixed in self._prefixes:
            if token.startswith(prefix):
                return prefixed, token[len(prefix):]
        return None

    async def dispatch(self, ctx: CommandContext) -> bool:
        resolved = self.resolve(ctx.name)
        if resolved is None:
            logger.info("action_unrecognized")
            if self._fallback is not None:
                await self._fallback(ctx)
            return False
        handler, argument = resolved
        await handler(dataclasses.replace(ctx, argument=argument))
        return True
