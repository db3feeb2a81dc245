"""Controlador de cena — ponto de entrada por update.

Responsabilidades:
- Classificar o update uma única vez e decidir: fluxo ativo ou roteamento global
- Entrar, reentrar (try again), cancelar e sair de fluxos
- Aplicar a política de recuperação (rewind / saída com retry)
- Ser a única fronteira de exceções inesperadas: log, limpa sessão, sai do
  fluxo e oferece "try again"

Fluxo:
update → classificador → (fora de fluxo) roteadores | (em fluxo) sequenciador
→ desfecho → apresentação
"""

from __future__ import annotations

import logging
from typing import Any

from vybebot.application.command_router import ActionRouter, CommandContext, CommandRouter
from vybebot.application.controls import CANCEL_TOKEN, again_token, parse_again_token
from vybebot.application.flows.registry import FlowRegistry
from vybebot.application.input_classifier import InputClassifier
from vybebot.application.rendering import OutcomePresenter
from vybebot.application.session import WizardSession
from vybebot.application.step_sequencer import StepSequencer
from vybebot.domain.errors import InvalidTransitionError
from vybebot.domain.protocols.fetch_client import IntentDetectorProtocol
from vybebot.domain.protocols.session_store import AsyncSessionStoreProtocol
from vybebot.domain.protocols.transport import IncomingUpdate
from vybebot.domain.wizard.events import ActionEvent, InputEvent, InterruptEvent, TextEvent
from vybebot.domain.wizard.outcomes import (
    Advanced,
    Busy,
    Cancelled,
    ErrorKind,
    Interrupted,
    LeftWithError,
    Outcome,
    Rewound,
    Routed,
    StaleAction,
    Superseded,
)
from vybebot.domain.wizard.recovery import (
    DEFAULT_INTERNAL_FAILURE_MESSAGE,
    ErrorRecovery,
    LeaveFatal,
    RewindTo,
)
from vybebot.domain.wizard.scene_states import SceneState, validate_transition
from vybebot.domain.wizard.steps import Flow
from vybebot.observability.logging import get_logger, mask_chat_id

logger: logging.Logger = get_logger(__name__)

CANCEL_COMMAND = "cancel"


def _transition(session: WizardSession, target: SceneState) -> None:
    ok, reason = validate_transition(session.scene_state, target)
    if not ok:
        raise InvalidTransitionError(reason)
    session.scene_state = target


class SceneController:
    def __init__(
        self,
        store: AsyncSessionStoreProtocol,
        flows: FlowRegistry,
        sequencer: StepSequencer,
        recovery: ErrorRecovery,
        classifier: InputClassifier,
        presenter: OutcomePresenter,
        commands: CommandRouter,
        actions: ActionRouter,
        intent_detector: IntentDetectorProtocol | None = None,
    ) -> None:
        self._store = store
        self._flows = flows
        self._sequencer = sequencer
        self._recovery = recovery
        self._classifier = classifier
        self._presenter = presenter
        self._commands = commands
        self._actions = actions
        self._intent_detector = intent_detector

    @property
    def flows(self) -> FlowRegistry:
        return self._flows

    async def handle(self, update: IncomingUpdate) -> Outcome:
        """Processa um update até o fim e apresenta o desfecho."""
        outcome = await self._process(update)
        await self._presenter.render(update, outcome)
        return outcome

    async def enter(
        self,
        key: str,
        flow_id: str,
        seed: dict[str, Any] | None = None,
    ) -> Outcome:
        """Entra (ou reentra) em um fluxo com estado novo e cursor no passo 1.

        Parâmetros pré-semeados válidos pulam os passos correspondentes.

        Raises:
            FlowNotFoundError: flow_id não registrado
        """
        flow = self._flows.get(flow_id)
        existing = await self._store.get(key)
        if existing is not None:
            if existing.is_fetching:
                return Busy()
            ok, reason = validate_transition(existing.scene_state, SceneState.ENTERING)
            if not ok:
                raise InvalidTransitionError(reason)

        session = await self._store.create_or_reset(key, flow_id)
        seeded = self._sequencer.seed(session, seed)
        _transition(session, SceneState.IN_PROGRESS)
        await self._store.save(session)

        logger.info(
            "flow_entered",
            extra={"flow_id": flow_id, "chat_id": mask_chat_id(key), "seeded_steps": seeded},
        )
        return Advanced(flow_id, session.cursor, flow.step_at(session.cursor).prompt)

    async def try_again(self, key: str, flow_id: str) -> Outcome:
        """Reentrada: nunca retoma; descarta tudo o que foi coletado antes."""
        logger.info("flow_try_again", extra={"flow_id": flow_id, "chat_id": mask_chat_id(key)})
        return await self.enter(key, flow_id)

    async def cancel(self, key: str) -> Outcome:
        return Cancelled(await self.leave(key, SceneState.CANCELLED))

    async def leave(self, key: str, reason: SceneState) -> str | None:
        """Sai do fluxo ativo (se houver) registrando o desfecho `reason`.

        Retorna o flow_id deixado, ou None fora de fluxo.
        """
        session = await self._store.get(key)
        if session is None or not session.in_flow:
            return None
        flow_id = session.active_flow_id
        await self._leave(session, reason)
        return flow_id

    async def _leave(self, session: WizardSession, reason: SceneState) -> None:
        _transition(session, reason)
        logger.info(
            "flow_left",
            extra={
                "flow_id": session.active_flow_id,
                "reason": reason.value,
                "chat_id": mask_chat_id(session.session_id),
            },
        )
        await self._store.clear(session.session_id)

    def _context(self, update: IncomingUpdate, name: str, argument: str | None) -> CommandContext:
        return CommandContext(
            update=update,
            name=name,
            argument=argument,
            controller=self,
            presenter=self._presenter,
        )

    async def _process(self, update: IncomingUpdate) -> Outcome:
        session = await self._store.get(update.chat_id)
        event = self._classifier.classify(update, session)

        if session is None or not session.in_flow:
            return await self._outside_flow(update, event)

        flow_id = session.active_flow_id or ""
        try:
            return await self._inside_flow(update, session, event)
        except Exception:  # noqa: BLE001 - fronteira única de exceções do fluxo
            logger.exception(
                "wizard_step_failed",
                extra={"flow_id": flow_id, "chat_id": mask_chat_id(update.chat_id)},
            )
            await self._store.clear(update.chat_id)
            return LeftWithError(
                ErrorKind.INTERNAL,
                DEFAULT_INTERNAL_FAILURE_MESSAGE,
                flow_id=flow_id,
                retry_token=again_token(flow_id),
            )

    async def _outside_flow(self, update: IncomingUpdate, event: InputEvent) -> Outcome:
        key = update.chat_id

        if isinstance(event, InterruptEvent):
            handled = await self._commands.dispatch(
                self._context(update, event.command_name, event.argument)
            )
            return Routed(target=f"command:{event.command_name}", handled=handled)

        if isinstance(event, ActionEvent):
            again = parse_again_token(event.token)
            if again is not None and again in self._flows:
                return await self.try_again(key, again)
            if event.token == CANCEL_TOKEN:
                return await self.cancel(key)
            handled = await self._actions.dispatch(self._context(update, event.token, None))
            return Routed(target="action", handled=handled)

        return await self._free_text(key, event)

    async def _free_text(self, key: str, event: TextEvent) -> Outcome:
        """Texto fora de fluxo: tenta pré-semear um fluxo via detector de intenção."""
        if self._intent_detector is not None and event.value:
            intent = await self._intent_detector.detect(event.value)
            if intent is not None and intent.flow_id in self._flows:
                logger.info("intent_detected", extra={"flow_id": intent.flow_id})
                return await self.enter(key, intent.flow_id, seed=intent.params)
        return Routed(target="text", handled=False)

    async def _inside_flow(
        self,
        update: IncomingUpdate,
        session: WizardSession,
        event: InputEvent,
    ) -> Outcome:
        key = update.chat_id

        if isinstance(event, InterruptEvent) and event.command_name == CANCEL_COMMAND:
            return await self.cancel(key)

        # Sem cancelamento no meio do fetch: só comandos passam
        if session.is_fetching and not isinstance(event, InterruptEvent):
            return Busy()

        if isinstance(event, ActionEvent):
            if event.token == CANCEL_TOKEN:
                return await self.cancel(key)
            again = parse_again_token(event.token)
            if again is not None and again in self._flows:
                return await self.try_again(key, again)

        flow = self._flows.get(session.active_flow_id or "")

        async def _on_dispatch(dispatched: Flow) -> None:
            await self._presenter.searching(update, dispatched)

        try:
            outcome = await self._sequencer.advance(session, event, on_dispatch=_on_dispatch)
        except Exception as exc:  # noqa: BLE001 - classificado pela política de recuperação
            return await self._recover(session, flow, exc)

        if isinstance(outcome, Interrupted):
            await self._leave(session, SceneState.INTERRUPTED)
            await self._commands.dispatch(
                self._context(update, outcome.command_name, outcome.argument)
            )
        elif isinstance(outcome, StaleAction):
            await self._leave(session, SceneState.INTERRUPTED)
            await self._actions.dispatch(self._context(update, outcome.token, None))
        return outcome

    async def _recover(self, session: WizardSession, flow: Flow, exc: Exception) -> Outcome:
        action = self._recovery.classify(exc, flow, session.rewinds)

        current = await self._store.get(session.session_id)
        if (
            current is None
            or current.generation != session.generation
            or current.active_flow_id != flow.flow_id
        ):
            logger.info("fetch_error_superseded", extra={"flow_id": flow.flow_id})
            return Superseded(flow.flow_id)

        if isinstance(action, RewindTo):
            self._sequencer.rewind(current, action.ordinal, retain_target=action.retain_target)
            current.rewinds += 1
            _transition(current, SceneState.IN_PROGRESS)
            await self._store.save(current)
            prompt = flow.step_at(current.cursor).prompt
            return Rewound(flow.flow_id, current.cursor, f"{action.message}\n\n{prompt}")

        if isinstance(action, LeaveFatal):
            logger.error(
                "wizard_fetch_crashed",
                exc_info=exc,
                extra={"flow_id": flow.flow_id, "error_type": type(exc).__name__},
            )
            kind = ErrorKind.INTERNAL
        else:
            kind = ErrorKind.REWINDS_EXHAUSTED if action.exhausted else ErrorKind.FETCH

        await self._leave(current, SceneState.LEFT_ON_ERROR)
        return LeftWithError(
            kind,
            action.message,
            flow_id=flow.flow_id,
            retry_token=again_token(flow.flow_id),
        )
