"""Fluxos de token: OHLCV, trades e volume de transferências."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vybebot.application.flows.common import (
    address_step,
    choice_step,
    end_time_step,
    start_time_step,
    time_window_rewinds,
)
from vybebot.application.flows.formatting import (
    esc,
    fmt_number,
    fmt_time,
    fmt_usd,
    numbered_list,
    short_address,
)
from vybebot.domain.wizard.steps import Flow

OHLCV_RESOLUTIONS = (
    "1s", "1m", "3m", "5m", "15m", "30m", "1h", "2h", "3h", "4h", "1d", "1w", "1mo", "1y",
)
TRADES_RESOLUTIONS = ("1h", "1d", "1w", "1m", "1y")
VOLUME_INTERVALS = ("1h", "1d", "1w")

_VOLUME_LABELS = {"1h": "Hourly", "1d": "Daily", "1w": "Weekly"}

_MINT_PROMPT = (
    "Send the token <b>mint address</b>.\n"
    "Example: <code>So11111111111111111111111111111111111111112</code>"
)


def _ohlcv_item(index: int, candle: Mapping[str, Any]) -> str:
    return (
        f"<b>{index}. Time: {fmt_time(candle.get('time'))}</b>\n"
        f"📈 <b>Open:</b> {esc(candle.get('open'))}\n"
        f"⬆️ <b>High:</b> {esc(candle.get('high'))}\n"
        f"⬇️ <b>Low:</b> {esc(candle.get('low'))}\n"
        f"📉 <b>Close:</b> {esc(candle.get('close'))}\n"
        f"💹 <b>Volume:</b> {esc(candle.get('volume'))}\n"
        f"💵 <b>Volume USD:</b> {esc(candle.get('volumeUsd'))}\n"
        f"🔢 <b>Trade Count:</b> {fmt_number(candle.get('count'))}"
    )


def format_ohlcv(result: Any, limit: int) -> str:
    return numbered_list("📊 <b>Token OHLCV</b>", result, _ohlcv_item, limit)


def _trade_item(index: int, trade: Mapping[str, Any]) -> str:
    return (
        f"<b>{index}. {fmt_time(trade.get('blockTime'))}</b>\n"
        f"🔗 <b>Signature:</b> <code>{short_address(trade.get('signature'))}</code>\n"
        f"🏦 <b>Market:</b> <code>{short_address(trade.get('marketId'))}</code>\n"
        f"💲 <b>Price:</b> {esc(trade.get('price'))}\n"
        f"📦 <b>Base Size:</b> {esc(trade.get('baseSize'))}\n"
        f"💱 <b>Quote Size:</b> {esc(trade.get('quoteSize'))}"
    )


def format_trades(result: Any, limit: int) -> str:
    return numbered_list("💱 <b>Token Trades</b>", result, _trade_item, limit)


def _volume_item(index: int, bucket: Mapping[str, Any]) -> str:
    return (
        f"<b>{index}. {fmt_time(bucket.get('timeBucketStart'))}</b>\n"
        f"📦 <b>Amount:</b> {fmt_number(bucket.get('amount'))}\n"
        f"💵 <b>Volume:</b> {fmt_usd(bucket.get('volume'))}"
    )


def format_volume(result: Any, limit: int) -> str:
    return numbered_list("📦 <b>Token Transfer Volume</b>", result, _volume_item, limit)


def token_ohlcv_flow() -> Flow:
    return Flow(
        flow_id="token_ohlcv",
        title="📊 Token OHLCV",
        command="tokenohlcv",
        operation="token_ohlcv",
        steps=(
            address_step("mint_address", f"📊 <b>Token OHLCV</b>\n\n{_MINT_PROMPT}"),
            start_time_step(),
            end_time_step(),
            choice_step("resolution", "⏱️ Choose the candle <b>resolution</b>:", OHLCV_RESOLUTIONS),
        ),
        searching_message="🔍 Fetching OHLCV data...",
        no_results_message="🔍 No OHLCV data found for this token and time range.",
        formatter=format_ohlcv,
        rewind_rules=time_window_rewinds("resolution"),
    )


def token_trades_flow() -> Flow:
    return Flow(
        flow_id="token_trades",
        title="💱 Token Trades",
        command="tokentrades",
        operation="token_trades",
        steps=(
            address_step("mint_address", f"💱 <b>Token Trades</b>\n\n{_MINT_PROMPT}"),
            start_time_step(),
            end_time_step(),
            choice_step("resolution", "⏱️ Choose the <b>resolution</b>:", TRADES_RESOLUTIONS),
        ),
        searching_message="🔍 Fetching trades...",
        no_results_message="🔍 No trades found for this token and time range.",
        formatter=format_trades,
        rewind_rules=time_window_rewinds("resolution"),
    )


def token_volume_flow() -> Flow:
    return Flow(
        flow_id="token_volume",
        title="📦 Token Volume",
        command="tokenvolume",
        operation="token_volume",
        steps=(
            address_step("mint_address", f"📦 <b>Token Transfer Volume</b>\n\n{_MINT_PROMPT}"),
            start_time_step(),
            end_time_step(),
            choice_step(
                "interval",
                "⏱️ Choose the <b>interval</b>:",
                VOLUME_INTERVALS,
                labels=_VOLUME_LABELS,
            ),
        ),
        searching_message="🔍 Fetching transfer volume...",
        no_results_message="🔍 No transfer volume found for this token and time range.",
        formatter=format_volume,
        rewind_rules=time_window_rewinds("interval"),
    )
