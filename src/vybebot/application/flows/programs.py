"""Fluxos de programa: usuários ativos diários e ranking de programas."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from vybebot.application.flows.common import address_step, choice_step
from vybebot.application.flows.formatting import esc, fmt_number, fmt_time, numbered_list
from vybebot.domain.errors import FetchErrorCode
from vybebot.domain.wizard.steps import Flow, RewindRule, Step
from vybebot.domain.wizard.validators import chain, int_range, integer, required

ACTIVE_USERS_RANGES = ("4h", "12h", "24h", "1d", "7d", "30d")

RANKING_LIMITS = ("10", "25", "50")
RANKING_MAX_LIMIT = 100
RANKING_INTERVALS = ("1d", "7d", "30d")

_RANKING_INTERVAL_LABELS = {"1d": "Daily", "7d": "Weekly", "30d": "Monthly"}

INVALID_LIMIT_MESSAGE = (
    f"❌ Invalid limit. Please send a whole number between 1 and {RANKING_MAX_LIMIT}."
)


def _active_users_item(index: int, row: Mapping[str, Any]) -> str:
    return (
        f"<b>{index}. {fmt_time(row.get('blockTime'))}</b>\n"
        f"👥 <b>Active Users:</b> {fmt_number(row.get('dau'))}"
    )


def format_active_users(result: Any, limit: int) -> str:
    return numbered_list("👥 <b>Program Active Users</b>", result, _active_users_item, limit)


def _ranking_item(index: int, row: Mapping[str, Any]) -> str:
    name = esc(row.get("programName") or "Unknown Program")
    return (
        f"<b>{index}. {name} (Rank {esc(row.get('programRank'))})</b>\n"
        f"🆔 <b>Program ID:</b> <code>{esc(row.get('programId'))}</code>\n"
        f"🏆 <b>Score:</b> {fmt_number(row.get('score'), decimals=4)}"
    )


def format_ranking(result: Any, limit: int) -> str:
    return numbered_list("🏆 <b>Program Ranking</b>", result, _ranking_item, limit)


def ranking_limit_step() -> Step:
    """Quantidade de programas: botões prontos ou número livre dentro da faixa."""
    return Step(
        field="limit",
        prompt=(
            "🏆 <b>Program Ranking</b>\n\n"
            f"How many programs should I rank? Pick one or send a number (1-{RANKING_MAX_LIMIT})."
        ),
        validator=chain(
            required(INVALID_LIMIT_MESSAGE),
            integer(reason=INVALID_LIMIT_MESSAGE),
            int_range(1, RANKING_MAX_LIMIT, INVALID_LIMIT_MESSAGE),
        ),
        action_tokens=tuple(f"limit:{value}" for value in RANKING_LIMITS),
    )


def program_active_users_flow() -> Flow:
    return Flow(
        flow_id="program_active_users",
        title="👥 Program Active Users",
        command="programactiveusers",
        operation="program_active_users",
        steps=(
            address_step(
                "program_address",
                "👥 <b>Program Active Users</b>\n\nSend the <b>program address</b>.",
            ),
            choice_step("range", "⏱️ Choose the <b>time range</b>:", ACTIVE_USERS_RANGES),
        ),
        searching_message="🔍 Fetching active users...",
        no_results_message="🔍 No active users found for this program.",
        formatter=format_active_users,
        rewind_rules={
            FetchErrorCode.UNKNOWN_VARIANT: RewindRule(
                "range", "⚠️ That time range is not supported. Please pick another one."
            ),
        },
    )


def program_ranking_flow() -> Flow:
    return Flow(
        flow_id="program_ranking",
        title="🏆 Program Ranking",
        command="programranking",
        operation="program_ranking",
        steps=(
            ranking_limit_step(),
            choice_step(
                "interval",
                "⏱️ Choose the ranking <b>interval</b>:",
                RANKING_INTERVALS,
                labels=_RANKING_INTERVAL_LABELS,
            ),
        ),
        searching_message="🔍 Fetching program ranking...",
        no_results_message="🔍 No ranking available for this interval.",
        formatter=format_ranking,
    )
