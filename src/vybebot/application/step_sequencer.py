"""Sequenciador de passos — avanço, rewind e pré-semeadura.

Stateless e compartilhado entre sessões: toda informação vem da sessão
recebida. Regras de `advance`:
1. Interrupção → Interrupted (o controlador limpa a sessão e repassa o comando)
2. Ação fora dos tokens do passo atual → StaleAction (tela anterior)
3. Validação falhou → Reprompt; cursor e estado intactos
4. Passo não terminal aceito → grava valor, cursor+1, Advanced
5. Passo terminal aceito → guard + fetch → limpa sessão → Completed
   (Superseded se a conversa mudou de execução durante o fetch;
   erros de fetch propagam para a política de recuperação)
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from vybebot.application.concurrency_guard import ConcurrencyGuard
from vybebot.application.dispatcher import FetchDispatcher
from vybebot.application.flows.registry import FlowRegistry
from vybebot.application.session import WizardSession
from vybebot.domain.errors import ConcurrentFetchError
from vybebot.domain.protocols.session_store import AsyncSessionStoreProtocol
from vybebot.domain.wizard.events import ActionEvent, InputEvent, InterruptEvent
from vybebot.domain.wizard.outcomes import (
    Advanced,
    Busy,
    Completed,
    Interrupted,
    Outcome,
    Reprompt,
    StaleAction,
    Superseded,
)
from vybebot.domain.wizard.scene_states import SceneState
from vybebot.domain.wizard.steps import Flow, Step
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)

DispatchHook = Callable[[Flow], Awaitable[None]]


def reprompt_message(reason: str | None, step: Step) -> str:
    """Motivo curto + instrução original do passo."""
    if not reason:
        return step.prompt
    return f"{reason}\n\n{step.prompt}"


class StepSequencer:
    def __init__(
        self,
        flows: FlowRegistry,
        store: AsyncSessionStoreProtocol,
        guard: ConcurrencyGuard,
        dispatcher: FetchDispatcher,
    ) -> None:
        self._flows = flows
        self._store = store
        self._guard = guard
        self._dispatcher = dispatcher

    async def advance(
        self,
        session: WizardSession,
        event: InputEvent,
        on_dispatch: DispatchHook | None = None,
    ) -> Outcome:
        if isinstance(event, InterruptEvent):
            return Interrupted(command_name=event.command_name, argument=event.argument)

        flow = self._flows.get(session.active_flow_id or "")
        step = flow.step_at(session.cursor)

        if isinstance(event, ActionEvent):
            if not step.expects_token(event.token):
                return StaleAction(token=event.token)
            raw: Any = Step.token_value(event.token)
        elif not step.accepts_text:
            return Reprompt(flow.flow_id, session.cursor, step.prompt)
        else:
            raw = event.value

        result = step.validator(raw, session.state)
        if not result.ok:
            logger.info(
                "step_input_rejected",
                extra={"flow_id": flow.flow_id, "cursor": session.cursor},
            )
            return Reprompt(flow.flow_id, session.cursor, reprompt_message(result.reason, step))

        if not flow.is_terminal(session.cursor):
            session.state[step.field] = result.value
            session.cursor += 1
            session.scene_state = SceneState.IN_PROGRESS
            await self._store.save(session)
            return Advanced(flow.flow_id, session.cursor, flow.step_at(session.cursor).prompt)

        session.state[step.field] = result.value
        return await self._complete(session, flow, on_dispatch)

    async def _complete(
        self,
        session: WizardSession,
        flow: Flow,
        on_dispatch: DispatchHook | None,
    ) -> Outcome:
        try:
            async with self._guard.hold(session):
                if on_dispatch is not None:
                    await on_dispatch(flow)
                result = await self._dispatcher.dispatch(flow, session.state)
        except ConcurrentFetchError:
            return Busy()

        state = dict(session.state)
        if not await self._clear_if_current(session):
            return Superseded(flow.flow_id)
        logger.info(
            "flow_completed",
            extra={"flow_id": flow.flow_id, "chat_id": mask_chat_id(session.session_id)},
        )
        return Completed(flow_id=flow.flow_id, state=state, result=result)

    async def _clear_if_current(self, session: WizardSession) -> bool:
        """Limpa a sessão somente se ainda for a mesma execução de fluxo.

        Retorna False quando a conversa já seguiu adiante (cancelamento, outro
        fluxo ou try again); o resultado dessa consulta não é exibido.
        """
        stored = await self._store.get(session.session_id)
        if (
            stored is None
            or stored.generation != session.generation
            or stored.active_flow_id != session.active_flow_id
        ):
            logger.info(
                "fetch_result_superseded",
                extra={"chat_id": mask_chat_id(session.session_id)},
            )
            return False
        await self._store.clear(session.session_id)
        return True

    def rewind(self, session: WizardSession, ordinal: int, retain_target: bool = False) -> None:
        """Move o cursor para `ordinal` e descarta o estado dos passos posteriores.

        Com `retain_target`, o valor do próprio passo alvo é mantido como
        referência até ser substituído pela nova resposta.
        """
        flow = self._flows.get(session.active_flow_id or "")
        target = flow.step_at(ordinal)
        for field_name in flow.fields_after(ordinal):
            session.state.pop(field_name, None)
        if not retain_target:
            session.state.pop(target.field, None)
        session.cursor = ordinal

    def seed(self, session: WizardSession, params: Mapping[str, Any] | None) -> int:
        """Aplica parâmetros pré-extraídos aos passos não terminais, em ordem.

        Cada valor passa pelo mesmo validador do passo; para no primeiro
        ausente ou inválido. Retorna quantos passos foram pulados.
        """
        if not params:
            return 0
        flow = self._flows.get(session.active_flow_id or "")
        seeded = 0
        while not flow.is_terminal(session.cursor):
            step = flow.step_at(session.cursor)
            raw = params.get(step.field)
            if raw is None:
                break
            result = step.validator(raw, session.state)
            if not result.ok:
                logger.info(
                    "seed_value_rejected",
                    extra={"flow_id": flow.flow_id, "field": step.field},
                )
                break
            session.state[step.field] = result.value
            session.cursor += 1
            seeded += 1
        return seeded
