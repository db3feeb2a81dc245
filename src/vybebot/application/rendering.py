"""Apresentação de desfechos ao usuário (texto + teclados).

Transforma cada Outcome em chamadas ao transporte. Não toca na sessão.
Callback queries são sempre respondidas (o cliente do Telegram mantém o
spinner do botão até receber o answer).
"""

from __future__ import annotations

from vybebot.application.controls import (
    CANCEL_TOKEN,
    CLOSE_TOKEN,
    MAIN_MENU_TOKEN,
    again_token,
    flow_token,
)
from vybebot.application.flows.registry import FlowRegistry
from vybebot.domain.protocols.transport import (
    Button,
    IncomingUpdate,
    Keyboard,
    TransportProtocol,
)
from vybebot.domain.wizard.outcomes import (
    Advanced,
    Busy,
    Cancelled,
    Completed,
    LeftWithError,
    Outcome,
    Reprompt,
    Rewound,
    Routed,
)
from vybebot.domain.wizard.steps import Flow, Step

CANCELLED_MESSAGE = "❌ Operation cancelled."
MAIN_MENU_MESSAGE = "🏠 <b>Main Menu</b>\n\nChoose what you want to explore:"
UNKNOWN_INPUT_MESSAGE = "🤔 I didn't understand that. Send /help to see what I can do."

_BUTTONS_PER_ROW = 3
_MENU_BUTTONS_PER_ROW = 2


def _rows(buttons: list[Button], per_row: int) -> list[list[Button]]:
    return [buttons[i:i + per_row] for i in range(0, len(buttons), per_row)]


def control_row() -> list[Button]:
    return [Button("🚫 Cancel", CANCEL_TOKEN), Button("🏠 Main Menu", MAIN_MENU_TOKEN)]


def step_keyboard(step: Step) -> Keyboard:
    """Botões do passo (tokens esperados) + linha de controle."""
    buttons = [
        Button(step.button_labels.get(token, Step.token_value(token)), token)
        for token in step.action_tokens
    ]
    return [*_rows(buttons, _BUTTONS_PER_ROW), control_row()]


def result_keyboard(flow_id: str) -> Keyboard:
    return [
        [Button("🔄 Try Again", again_token(flow_id))],
        [Button("🏠 Main Menu", MAIN_MENU_TOKEN)],
    ]


def main_menu_keyboard(flows: FlowRegistry) -> Keyboard:
    buttons = [Button(flow.title, flow_token(flow.flow_id)) for flow in flows]
    return [*_rows(buttons, _MENU_BUTTONS_PER_ROW), [Button("❌ Close", CLOSE_TOKEN)]]


class OutcomePresenter:
    def __init__(
        self,
        transport: TransportProtocol,
        flows: FlowRegistry,
        results_display_limit: int = 10,
    ) -> None:
        self._transport = transport
        self._flows = flows
        self._limit = results_display_limit

    @property
    def transport(self) -> TransportProtocol:
        return self._transport

    async def render(self, update: IncomingUpdate, outcome: Outcome) -> None:
        if update.callback_query_id:
            ack = outcome.message if isinstance(outcome, Busy) else None
            await self._transport.answer(update.callback_query_id, ack)
            if isinstance(outcome, Busy):
                return

        chat_id = update.chat_id
        match outcome:
            case Reprompt(flow_id=flow_id, cursor=cursor, message=message):
                await self._prompt(chat_id, flow_id, cursor, message)
            case Advanced(flow_id=flow_id, cursor=cursor, prompt=prompt):
                await self._prompt(chat_id, flow_id, cursor, prompt)
            case Rewound(flow_id=flow_id, cursor=cursor, message=message):
                await self._prompt(chat_id, flow_id, cursor, message)
            case Completed():
                await self._completed(chat_id, outcome)
            case Cancelled():
                await self._transport.reply(
                    chat_id, CANCELLED_MESSAGE, main_menu_keyboard(self._flows)
                )
            case Busy(message=message):
                await self._transport.reply(chat_id, message)
            case LeftWithError(message=message, flow_id=flow_id):
                keyboard = result_keyboard(flow_id) if flow_id else None
                await self._transport.reply(chat_id, message, keyboard)
            case Routed(target="text", handled=False):
                await self._transport.reply(chat_id, UNKNOWN_INPUT_MESSAGE)
            case _:
                # Interrupted/StaleAction/Routed: o roteador já respondeu
                pass

    async def searching(self, update: IncomingUpdate, flow: Flow) -> None:
        await self._transport.reply(update.chat_id, flow.searching_message)

    async def main_menu(self, chat_id: str, text: str = MAIN_MENU_MESSAGE) -> None:
        await self._transport.reply(chat_id, text, main_menu_keyboard(self._flows))

    async def _prompt(self, chat_id: str, flow_id: str, cursor: int, text: str) -> None:
        step = self._flows.get(flow_id).step_at(cursor)
        await self._transport.reply(chat_id, text, step_keyboard(step))

    async def _completed(self, chat_id: str, outcome: Completed) -> None:
        flow = self._flows.get(outcome.flow_id)
        if flow.is_empty_result(outcome.result):
            text = flow.no_results_message
        elif flow.formatter is not None:
            text = flow.formatter(outcome.result, self._limit)
        else:
            text = str(outcome.result)
        await self._transport.reply(chat_id, text, result_keyboard(flow.flow_id))
