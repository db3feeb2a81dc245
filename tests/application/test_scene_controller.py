"""Testes ponta a ponta do controlador de cena (fluxo token OHLCV)."""

from __future__ import annotations

import asyncio

import pytest

from tests.helpers.fakes import CHAT_ID, MINT, YieldingRedis, action_update, text_update
from vybebot.application.controls import CANCEL_TOKEN, again_token
from vybebot.application.rendering import CANCELLED_MESSAGE
from vybebot.domain.errors import FetchError, FetchErrorCode
from vybebot.domain.wizard.outcomes import (
    Advanced,
    Busy,
    Cancelled,
    Completed,
    ErrorKind,
    LeftWithError,
    Reprompt,
    Rewound,
    Superseded,
)
from vybebot.domain.wizard.recovery import (
    DEFAULT_FETCH_FAILURE_MESSAGE,
    DEFAULT_INTERNAL_FAILURE_MESSAGE,
    REWINDS_EXHAUSTED_MESSAGE,
)
from vybebot.domain.wizard.scene_states import SceneState
from vybebot.infra.session_store_redis import RedisSessionStore

START = "1700000000"
END = "1700003600"


async def _fill_until_resolution(controller) -> None:
    """Percorre os passos 1-3 do fluxo OHLCV."""
    await controller.handle(text_update("/tokenohlcv"))
    await controller.handle(text_update(MINT))
    await controller.handle(text_update(START))
    outcome = await controller.handle(text_update(END))
    assert isinstance(outcome, Advanced)
    assert outcome.cursor == 4


class TestHappyPath:
    """Fluxo completo com consulta única."""

    @pytest.mark.asyncio
    async def test_collects_all_steps_and_fetches_once(
        self, controller, fetch_client, store, transport
    ):
        fetch_client.responses.append([{"time": 1700000000, "open": 1, "close": 2, "count": 3}])
        await _fill_until_resolution(controller)

        outcome = await controller.handle(action_update("resolution:1h", update_id=5))

        assert isinstance(outcome, Completed)
        assert outcome.state == {
            "mint_address": MINT,
            "start_time": 1700000000,
            "end_time": 1700003600,
            "resolution": "1h",
        }
        assert fetch_client.calls == [("token_ohlcv", outcome.state)]
        assert transport.answers == [("cbq-5", None)]
        assert transport.texts[-2] == "🔍 Fetching OHLCV data..."
        assert "Token OHLCV" in transport.last_text
        assert again_token("token_ohlcv") in transport.last_tokens

        stored = await store.get(CHAT_ID)
        assert stored.active_flow_id is None
        assert stored.is_fetching is False
        assert stored.scene_state is SceneState.IDLE

    @pytest.mark.asyncio
    async def test_step_prompt_shows_resolution_buttons(self, controller, transport):
        await _fill_until_resolution(controller)

        assert "resolution:1h" in transport.last_tokens
        assert CANCEL_TOKEN in transport.last_tokens

    @pytest.mark.asyncio
    async def test_empty_result_still_completes(self, controller, fetch_client, store, transport):
        fetch_client.responses.append([])
        await _fill_until_resolution(controller)

        outcome = await controller.handle(action_update("resolution:1d"))

        assert isinstance(outcome, Completed)
        assert transport.last_text == "🔍 No OHLCV data found for this token and time range."
        assert (await store.get(CHAT_ID)).active_flow_id is None

    @pytest.mark.asyncio
    async def test_command_argument_preseeds_steps(self, controller, store):
        outcome = await controller.handle(text_update(f"/tokenohlcv {MINT} {START}"))

        stored = await store.get(CHAT_ID)
        assert stored.cursor == 3
        assert stored.state == {"mint_address": MINT, "start_time": 1700000000}
        assert outcome.handled is True


class TestValidation:
    """Reprompts não alteram cursor nem estado."""

    @pytest.mark.asyncio
    async def test_invalid_address_reprompts(self, controller, store, transport):
        await controller.handle(text_update("/tokenohlcv"))
        outcome = await controller.handle(text_update("not-an-address"))

        assert isinstance(outcome, Reprompt)
        assert outcome.cursor == 1
        stored = await store.get(CHAT_ID)
        assert stored.cursor == 1
        assert stored.state == {}
        assert "mint address" in transport.last_text

    @pytest.mark.asyncio
    async def test_end_not_after_start_reprompts(self, controller, store):
        await controller.handle(text_update("/tokenohlcv"))
        await controller.handle(text_update(MINT))
        await controller.handle(text_update(START))
        outcome = await controller.handle(text_update(START))

        assert isinstance(outcome, Reprompt)
        assert outcome.cursor == 3
        assert (await store.get(CHAT_ID)).state == {
            "mint_address": MINT,
            "start_time": 1700000000,
        }

    @pytest.mark.asyncio
    async def test_same_invalid_input_twice_is_idempotent(self, controller, store):
        await controller.handle(text_update("/tokenohlcv"))
        first = await controller.handle(text_update("bad"))
        state_after_first = (await store.get(CHAT_ID)).model_dump(exclude={"updated_at"})
        second = await controller.handle(text_update("bad"))
        state_after_second = (await store.get(CHAT_ID)).model_dump(exclude={"updated_at"})

        assert first == second
        assert state_after_first == state_after_second


class TestLeaving:
    """Cancelamento, interrupção e ações obsoletas."""

    @pytest.mark.asyncio
    async def test_cancel_command_mid_flow(self, controller, fetch_client, store, transport):
        await controller.handle(text_update("/tokenohlcv"))
        await controller.handle(text_update(MINT))
        await controller.handle(text_update(START))

        outcome = await controller.handle(text_update("/cancel"))

        assert outcome == Cancelled("token_ohlcv")
        assert fetch_client.calls == []
        assert transport.last_text == CANCELLED_MESSAGE
        assert (await store.get(CHAT_ID)).active_flow_id is None

    @pytest.mark.asyncio
    async def test_cancel_button(self, controller, store, transport):
        await controller.handle(text_update("/walletpnl"))
        outcome = await controller.handle(action_update(CANCEL_TOKEN))

        assert isinstance(outcome, Cancelled)
        assert transport.answers == [("cbq-1", None)]
        assert (await store.get(CHAT_ID)).active_flow_id is None

    @pytest.mark.asyncio
    async def test_interrupt_at_terminal_step_hands_off(self, controller, fetch_client, store):
        await _fill_until_resolution(controller)

        await controller.handle(text_update("/walletpnl"))

        assert fetch_client.calls == []
        stored = await store.get(CHAT_ID)
        assert stored.active_flow_id == "wallet_pnl"
        assert stored.cursor == 1
        assert stored.state == {}

    @pytest.mark.asyncio
    async def test_unknown_command_clears_flow(self, controller, store, transport):
        await controller.handle(text_update("/tokenohlcv"))
        await controller.handle(text_update("/nope"))

        assert (await store.get(CHAT_ID)).active_flow_id is None
        assert "Unknown command" in transport.last_text

    @pytest.mark.asyncio
    async def test_stale_main_menu_button_leaves_flow(self, controller, store, transport):
        await controller.handle(text_update("/tokenohlcv"))
        await controller.handle(text_update(MINT))

        await controller.handle(action_update("MAIN_MENU_BUTTON"))

        assert (await store.get(CHAT_ID)).active_flow_id is None
        assert "Main Menu" in transport.last_text

    @pytest.mark.asyncio
    async def test_stale_step_button_from_previous_screen(self, controller, store, transport):
        await controller.handle(text_update("/tokenohlcv"))

        await controller.handle(action_update("resolution:1h"))

        assert (await store.get(CHAT_ID)).active_flow_id is None
        assert "expired" in transport.last_text


class TestRecovery:
    """Rewind e saídas com retry."""

    @pytest.mark.asyncio
    async def test_time_range_too_large_rewinds_to_start(self, controller, fetch_client, store):
        fetch_client.responses.append(FetchError(FetchErrorCode.TIME_RANGE_TOO_LARGE))
        await _fill_until_resolution(controller)

        outcome = await controller.handle(action_update("resolution:1h"))

        assert isinstance(outcome, Rewound)
        assert outcome.cursor == 2
        assert "too large" in outcome.message
        assert "start time" in outcome.message
        stored = await store.get(CHAT_ID)
        assert stored.cursor == 2
        assert stored.state == {"mint_address": MINT, "start_time": 1700000000}
        assert stored.rewinds == 1
        assert stored.is_fetching is False

        # A conversa continua do passo reposicionado
        advanced = await controller.handle(text_update("1700001800"))
        assert isinstance(advanced, Advanced)
        assert advanced.cursor == 3

    @pytest.mark.asyncio
    async def test_unknown_variant_rewinds_to_resolution(self, controller, fetch_client, store):
        fetch_client.responses.append(FetchError(FetchErrorCode.UNKNOWN_VARIANT))
        await _fill_until_resolution(controller)

        outcome = await controller.handle(action_update("resolution:1mo"))

        assert isinstance(outcome, Rewound)
        assert outcome.cursor == 4
        assert "resolution" not in (await store.get(CHAT_ID)).state

    @pytest.mark.asyncio
    async def test_rewinds_are_bounded(self, controller, fetch_client, store):
        fetch_client.responses.extend([FetchError(FetchErrorCode.UNKNOWN_VARIANT)] * 4)
        await _fill_until_resolution(controller)

        for _ in range(3):
            assert isinstance(await controller.handle(action_update("resolution:1h")), Rewound)
        outcome = await controller.handle(action_update("resolution:1h"))

        assert outcome == LeftWithError(
            ErrorKind.REWINDS_EXHAUSTED,
            REWINDS_EXHAUSTED_MESSAGE,
            flow_id="token_ohlcv",
            retry_token=again_token("token_ohlcv"),
        )
        assert (await store.get(CHAT_ID)).active_flow_id is None

    @pytest.mark.asyncio
    async def test_unrecoverable_error_leaves_with_retry(
        self, controller, fetch_client, store, transport
    ):
        fetch_client.responses.append(FetchError(FetchErrorCode.RATE_LIMITED))
        await _fill_until_resolution(controller)

        outcome = await controller.handle(action_update("resolution:1h"))

        assert isinstance(outcome, LeftWithError)
        assert outcome.error_kind is ErrorKind.FETCH
        assert transport.last_text == DEFAULT_FETCH_FAILURE_MESSAGE
        assert again_token("token_ohlcv") in transport.last_tokens
        assert (await store.get(CHAT_ID)).active_flow_id is None

    @pytest.mark.asyncio
    async def test_unexpected_exception_leaves_with_generic_message(
        self, controller, fetch_client, store, transport
    ):
        fetch_client.responses.append(RuntimeError("boom"))
        await _fill_until_resolution(controller)

        outcome = await controller.handle(action_update("resolution:1h"))

        assert outcome.error_kind is ErrorKind.INTERNAL
        assert transport.last_text == DEFAULT_INTERNAL_FAILURE_MESSAGE
        stored = await store.get(CHAT_ID)
        assert stored.active_flow_id is None
        assert stored.is_fetching is False

    @pytest.mark.asyncio
    async def test_corrupted_cursor_is_contained(self, controller, store, transport):
        await controller.handle(text_update("/tokenohlcv"))
        session = await store.get(CHAT_ID)
        session.cursor = 9
        await store.save(session)

        outcome = await controller.handle(text_update(MINT))

        assert isinstance(outcome, LeftWithError)
        assert outcome.error_kind is ErrorKind.INTERNAL
        assert (await store.get(CHAT_ID)).active_flow_id is None

    @pytest.mark.asyncio
    async def test_error_after_reentry_is_superseded(self, controller, fetch_client, store):
        await _fill_until_resolution(controller)

        async def _reenter_then_fail(operation, params):
            await store.create_or_reset(CHAT_ID, "wallet_pnl")
            raise FetchError(FetchErrorCode.TIME_RANGE_TOO_LARGE)

        fetch_client.fetch = _reenter_then_fail
        outcome = await controller.handle(action_update("resolution:1h"))

        assert outcome == Superseded("token_ohlcv")
        stored = await store.get(CHAT_ID)
        assert stored.active_flow_id == "wallet_pnl"
        assert stored.cursor == 1


class TestReentry:
    """Try again sempre recomeça do passo 1."""

    @pytest.mark.asyncio
    async def test_try_again_after_completion(self, controller, fetch_client, store):
        fetch_client.responses.append([{"time": 1}])
        await _fill_until_resolution(controller)
        await controller.handle(action_update("resolution:1h"))
        generation = (await store.get(CHAT_ID)).generation

        outcome = await controller.handle(action_update(again_token("token_ohlcv")))

        assert isinstance(outcome, Advanced)
        assert outcome.cursor == 1
        stored = await store.get(CHAT_ID)
        assert stored.state == {}
        assert stored.generation == generation + 1

    @pytest.mark.asyncio
    async def test_try_again_mid_flow_discards_state(self, controller, store):
        await controller.handle(text_update("/tokenohlcv"))
        await controller.handle(text_update(MINT))

        await controller.handle(action_update(again_token("token_ohlcv")))

        stored = await store.get(CHAT_ID)
        assert stored.cursor == 1
        assert stored.state == {}


class TestConcurrentTerminalStep:
    """Duplo clique no botão final: uma única consulta."""

    @pytest.mark.asyncio
    async def test_second_action_gets_busy(self, controller, fetch_client, transport):
        release = asyncio.Event()
        calls = []

        async def _slow_fetch(operation, params):
            calls.append(operation)
            await release.wait()
            return [{"time": 1}]

        fetch_client.fetch = _slow_fetch
        await _fill_until_resolution(controller)

        first = asyncio.create_task(controller.handle(action_update("resolution:1h", update_id=7)))
        for _ in range(5):
            await asyncio.sleep(0)
        second = await controller.handle(action_update("resolution:1h", update_id=8))
        release.set()
        first_outcome = await first

        assert isinstance(second, Busy)
        assert isinstance(first_outcome, Completed)
        assert calls == ["token_ohlcv"]
        assert ("cbq-8", Busy().message) in transport.answers

    @pytest.mark.asyncio
    async def test_text_while_fetching_is_busy(self, controller, store):
        await _fill_until_resolution(controller)
        session = await store.get(CHAT_ID)
        session.is_fetching = True
        await store.save(session)

        outcome = await controller.handle(text_update("hello"))

        assert isinstance(outcome, Busy)
        assert (await store.get(CHAT_ID)).cursor == 4

    @pytest.mark.asyncio
    async def test_new_flow_during_fetch_hides_old_result(
        self, controller, fetch_client, store, transport
    ):
        release = asyncio.Event()

        async def _slow_fetch(operation, params):
            await release.wait()
            return [{"time": 1700000000, "open": 1}]

        fetch_client.fetch = _slow_fetch
        await _fill_until_resolution(controller)

        pending = asyncio.create_task(controller.handle(action_update("resolution:1h", update_id=7)))
        for _ in range(5):
            await asyncio.sleep(0)
        await controller.handle(text_update("/tokenvolume"))
        texts_before_release = list(transport.texts)
        release.set()
        outcome = await pending

        assert outcome == Superseded("token_ohlcv")
        assert transport.texts == texts_before_release
        stored = await store.get(CHAT_ID)
        assert stored.active_flow_id == "token_volume"
        assert stored.cursor == 1
        assert stored.is_fetching is False

    @pytest.mark.asyncio
    async def test_cancel_during_fetch_hides_result(self, controller, fetch_client, transport):
        release = asyncio.Event()

        async def _slow_fetch(operation, params):
            await release.wait()
            return [{"time": 1700000000}]

        fetch_client.fetch = _slow_fetch
        await _fill_until_resolution(controller)

        pending = asyncio.create_task(controller.handle(action_update("resolution:1h", update_id=7)))
        for _ in range(5):
            await asyncio.sleep(0)
        cancelled = await controller.handle(text_update("/cancel"))
        release.set()
        outcome = await pending

        assert cancelled == Cancelled("token_ohlcv")
        assert outcome == Superseded("token_ohlcv")
        assert transport.last_text == CANCELLED_MESSAGE


class TestConcurrentTerminalStepOnRedis:
    """Dois webhooks da mesma conversa em paralelo sobre o backend Redis."""

    @pytest.fixture()
    def store(self):
        return RedisSessionStore(YieldingRedis(), ttl_seconds=600)

    @pytest.mark.asyncio
    async def test_parallel_final_taps_fetch_once(self, controller, fetch_client, store):
        calls = []

        async def _fetch(operation, params):
            calls.append(operation)
            await asyncio.sleep(0)
            return [{"time": 1700000000}]

        fetch_client.fetch = _fetch
        await _fill_until_resolution(controller)

        outcomes = await asyncio.gather(
            controller.handle(action_update("resolution:1h", update_id=7)),
            controller.handle(action_update("resolution:1h", update_id=8)),
        )

        assert calls == ["token_ohlcv"]
        assert sorted(type(outcome).__name__ for outcome in outcomes) == ["Busy", "Completed"]
        stored = await store.get(CHAT_ID)
        assert stored.active_flow_id is None
        assert stored.is_fetching is False
