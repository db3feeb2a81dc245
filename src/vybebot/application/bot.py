"""Montagem do bot: tabelas globais de comandos/ações e controlador de cena.

Um único ponto de composição. Adapters (webhook, testes) recebem um
`SceneController` pronto e só chamam `handle(update)`.
"""

from __future__ import annotations

import html
import logging

from vybebot.application.command_router import ActionRouter, CommandContext, CommandRouter, Handler
from vybebot.application.concurrency_guard import ConcurrencyGuard
from vybebot.application.controls import CLOSE_TOKEN, FLOW_PREFIX, MAIN_MENU_TOKEN
from vybebot.application.dispatcher import FetchDispatcher
from vybebot.application.flows import FlowRegistry, build_default_flows
from vybebot.application.input_classifier import InputClassifier
from vybebot.application.rendering import OutcomePresenter, main_menu_keyboard
from vybebot.application.scene_controller import SceneController
from vybebot.application.step_sequencer import StepSequencer
from vybebot.config.settings import Settings
from vybebot.domain.protocols.fetch_client import FetchClientProtocol, IntentDetectorProtocol
from vybebot.domain.protocols.session_store import AsyncSessionStoreProtocol
from vybebot.domain.protocols.transport import TransportProtocol
from vybebot.domain.wizard.recovery import ErrorRecovery
from vybebot.domain.wizard.steps import Flow
from vybebot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

WELCOME_MESSAGE = (
    "👋 <b>Welcome to VybeBot!</b>\n\n"
    "I fetch on-chain analytics for Solana tokens, wallets and programs.\n"
    "Pick an option below or send /help to see every command."
)
EXPIRED_BUTTON_MESSAGE = "⌛ This button has expired. Please use the menu below."
NOTHING_TO_CANCEL_MESSAGE = "ℹ️ There is nothing to cancel."


def seed_from_argument(flow: Flow, argument: str | None) -> dict[str, str]:
    """Argumentos do comando (separados por espaço) → valores dos passos, em ordem."""
    if not argument:
        return {}
    return dict(zip(flow.fields, argument.split(), strict=False))


def help_message(flows: FlowRegistry, prefix: str = "/") -> str:
    lines = ["📖 <b>Available commands</b>", ""]
    lines.append(f"{prefix}start - Show the welcome screen")
    lines.append(f"{prefix}main_menu - Open the main menu")
    for flow in flows:
        lines.append(f"{prefix}{flow.command} - {html.escape(flow.title)}")
    lines.append(f"{prefix}cancel - Cancel the current operation")
    lines.append(f"{prefix}help - Show this message")
    lines += [
        "",
        "Tip: you can pass the first answers right away, "
        f"e.g. <code>{prefix}walletpnl &lt;address&gt;</code>.",
    ]
    return "\n".join(lines)


def _flow_command(flow: Flow) -> Handler:
    async def _enter(ctx: CommandContext) -> None:
        await ctx.enter_flow(flow.flow_id, seed=seed_from_argument(flow, ctx.argument))

    return _enter


def build_command_router(flows: FlowRegistry, prefix: str = "/") -> CommandRouter:
    async def _start(ctx: CommandContext) -> None:
        await ctx.presenter.main_menu(ctx.chat_id, WELCOME_MESSAGE)

    async def _help(ctx: CommandContext) -> None:
        await ctx.reply(help_message(flows, prefix))

    async def _main_menu(ctx: CommandContext) -> None:
        await ctx.presenter.main_menu(ctx.chat_id)

    async def _cancel(ctx: CommandContext) -> None:
        # Dentro de fluxo o /cancel é tratado pelo controlador
        await ctx.presenter.main_menu(ctx.chat_id, NOTHING_TO_CANCEL_MESSAGE)

    async def _unknown(ctx: CommandContext) -> None:
        await ctx.reply(
            f"❓ Unknown command: <code>{html.escape(prefix + ctx.name)}</code>\n"
            f"Send {prefix}help to see what I can do."
        )

    router = CommandRouter(
        {
            "start": _start,
            "help": _help,
            "main_menu": _main_menu,
            "menu": _main_menu,
            "cancel": _cancel,
        },
        fallback=_unknown,
    )
    for flow in flows:
        router.register(flow.command, _flow_command(flow))
    return router


def build_action_router(flows: FlowRegistry) -> ActionRouter:
    async def _main_menu(ctx: CommandContext) -> None:
        await ctx.presenter.main_menu(ctx.chat_id)

    async def _close(ctx: CommandContext) -> None:
        if ctx.update.message_id is not None:
            await ctx.presenter.transport.delete_message(ctx.chat_id, ctx.update.message_id)

    async def _expired(ctx: CommandContext) -> None:
        await ctx.reply(EXPIRED_BUTTON_MESSAGE, main_menu_keyboard(flows))

    async def _enter_flow(ctx: CommandContext) -> None:
        if ctx.argument not in flows:
            await _expired(ctx)
            return
        await ctx.enter_flow(ctx.argument)

    router = ActionRouter(fallback=_expired)
    router.register(MAIN_MENU_TOKEN, _main_menu)
    router.register(CLOSE_TOKEN, _close)
    router.register_prefix(FLOW_PREFIX, _enter_flow)
    return router


def create_scene_controller(
    settings: Settings,
    transport: TransportProtocol,
    fetch_client: FetchClientProtocol,
    store: AsyncSessionStoreProtocol,
    intent_detector: IntentDetectorProtocol | None = None,
    flows: FlowRegistry | None = None,
) -> SceneController:
    """Compõe o motor de wizard com as tabelas padrão."""
    registry = flows if flows is not None else build_default_flows()
    guard = ConcurrencyGuard(store)
    sequencer = StepSequencer(registry, store, guard, FetchDispatcher(fetch_client))
    presenter = OutcomePresenter(transport, registry, settings.results_display_limit)

    logger.info(
        "scene_controller_created",
        extra={
            "flows": [flow.flow_id for flow in registry],
            "max_rewinds": settings.wizard_max_rewinds,
        },
    )
    return SceneController(
        store=store,
        flows=registry,
        sequencer=sequencer,
        recovery=ErrorRecovery(max_rewinds=settings.wizard_max_rewinds),
        classifier=InputClassifier(settings.command_prefix),
        presenter=presenter,
        commands=build_command_router(registry, settings.command_prefix),
        actions=build_action_router(registry),
        intent_detector=intent_detector,
    )
