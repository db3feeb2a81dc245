"""Fluxos de conta: PnL de carteira e contas conhecidas por rótulo."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vybebot.application.flows.common import address_step, choice_step
from vybebot.application.flows.formatting import (
    NOT_AVAILABLE,
    esc,
    fmt_number,
    fmt_percent,
    fmt_usd,
    numbered_list,
)
from vybebot.domain.wizard.steps import Flow, Step
from vybebot.domain.wizard.validators import chain, label_list, required

PNL_RESOLUTIONS = ("1d", "7d", "30d")
PNL_TOP_TOKENS = 5

INVALID_LABELS_MESSAGE = "❌ Please send at least one label, e.g. <code>DEFI,NFT</code>."

_PNL_LABELS = {"1d": "1 Day", "7d": "7 Days", "30d": "30 Days"}


def _summary(result: Any) -> Mapping[str, Any]:
    if isinstance(result, Mapping) and isinstance(result.get("summary"), Mapping):
        return result["summary"]
    return {}


def _token_metrics(result: Any) -> list[Mapping[str, Any]]:
    if isinstance(result, Mapping) and isinstance(result.get("tokenMetrics"), list):
        return result["tokenMetrics"]
    return []


def is_empty_pnl(result: Any) -> bool:
    """Sem métricas por token e sem nenhum trade no período."""
    if not result:
        return True
    return not _token_metrics(result) and not _summary(result).get("tradesCount")


def _token_item(index: int, metric: Mapping[str, Any]) -> str:
    return (
        f"<b>{index}. {esc(metric.get('tokenSymbol'))}</b> "
        f"(<code>{esc(metric.get('tokenAddress'))}</code>)\n"
        f"📈 <b>Buys:</b> {fmt_number(metric.get('buysTransactionCount'))} trades, "
        f"{fmt_usd(metric.get('buysVolumeUsd'))}\n"
        f"📉 <b>Sells:</b> {fmt_number(metric.get('sellsTransactionCount'))} trades, "
        f"{fmt_usd(metric.get('sellsVolumeUsd'))}\n"
        f"💰 <b>Realized PnL:</b> {fmt_usd(metric.get('realizedPnlUsd'))}\n"
        f"📊 <b>Unrealized PnL:</b> {fmt_usd(metric.get('unrealizedPnlUsd'))}"
    )


def format_pnl(result: Any, limit: int) -> str:
    summary = _summary(result)
    lines = [
        "💼 <b>Wallet PnL Summary</b>",
        "",
        f"📈 <b>Win Rate:</b> {fmt_percent(summary.get('winRate'))}",
        f"💰 <b>Realized PnL:</b> {fmt_usd(summary.get('realizedPnlUsd'))}",
        f"📊 <b>Unrealized PnL:</b> {fmt_usd(summary.get('unrealizedPnlUsd'))}",
        f"🔢 <b>Unique Tokens Traded:</b> {fmt_number(summary.get('uniqueTokensTraded'))}",
        f"💸 <b>Average Trade:</b> {fmt_usd(summary.get('averageTradeUsd'))}",
        f"📝 <b>Total Trades:</b> {fmt_number(summary.get('tradesCount'))}",
        f"✅ <b>Winning Trades:</b> {fmt_number(summary.get('winningTradesCount'))}",
        f"❌ <b>Losing Trades:</b> {fmt_number(summary.get('losingTradesCount'))}",
        f"📉 <b>Trade Volume:</b> {fmt_usd(summary.get('tradesVolumeUsd'))}",
        f"🏆 <b>Best Token:</b> {esc(summary.get('bestPerformingToken') or NOT_AVAILABLE)}",
        f"🥀 <b>Worst Token:</b> {esc(summary.get('worstPerformingToken') or NOT_AVAILABLE)}",
    ]
    top = _token_metrics(result)[: min(limit, PNL_TOP_TOKENS)]
    if top:
        lines += ["", "<b>Top Tokens</b>", ""]
        lines.append("\n\n".join(_token_item(i, metric) for i, metric in enumerate(top, start=1)))
    return "\n".join(lines)


def wallet_pnl_flow() -> Flow:
    return Flow(
        flow_id="wallet_pnl",
        title="💼 Wallet PnL",
        command="walletpnl",
        operation="wallet_pnl",
        steps=(
            address_step(
                "owner_address",
                "💼 <b>Wallet PnL</b>\n\nSend the <b>wallet address</b> to analyze.",
            ),
            choice_step(
                "resolution",
                "⏱️ Choose the <b>period</b>:",
                PNL_RESOLUTIONS,
                labels=_PNL_LABELS,
            ),
        ),
        searching_message="🔍 Calculating wallet PnL...",
        no_results_message="🔍 No trading activity found for this wallet in the selected period.",
        formatter=format_pnl,
        empty_result=is_empty_pnl,
    )


def _known_account_item(index: int, account: Mapping[str, Any]) -> str:
    labels = account.get("labels") or []
    return (
        f"<b>{index}. {esc(account.get('name') or 'Unnamed')}</b>\n"
        f"📍 <b>Address:</b> <code>{esc(account.get('ownerAddress'))}</code>\n"
        f"🏷️ <b>Labels:</b> {esc(', '.join(map(str, labels)) or 'None')}\n"
        f"🏢 <b>Entity:</b> {esc(account.get('entity') or NOT_AVAILABLE)}"
    )


def format_known_accounts(result: Any, limit: int) -> str:
    return numbered_list("🗂️ <b>Known Accounts</b>", result, _known_account_item, limit)


def known_accounts_flow() -> Flow:
    return Flow(
        flow_id="known_accounts",
        title="🗂️ Known Accounts",
        command="knownaccounts",
        operation="known_accounts",
        steps=(
            Step(
                field="labels",
                prompt=(
                    "🗂️ <b>Known Accounts</b>\n\n"
                    "Send one or more <b>labels</b> separated by commas.\n"
                    "Example: <code>DEFI,NFT</code>"
                ),
                validator=chain(
                    required(INVALID_LABELS_MESSAGE),
                    label_list(reason=INVALID_LABELS_MESSAGE),
                ),
            ),
        ),
        searching_message="🔃 Fetching accounts...",
        no_results_message="🛑 No accounts found for these labels.",
        formatter=format_known_accounts,
    )
