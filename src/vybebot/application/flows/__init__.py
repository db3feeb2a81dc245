"""Fluxos de consulta disponíveis no bot."""

from __future__ import annotations

from vybebot.application.flows.accounts import known_accounts_flow, wallet_pnl_flow
from vybebot.application.flows.programs import program_active_users_flow, program_ranking_flow
from vybebot.application.flows.registry import FlowRegistry
from vybebot.application.flows.tokens import (
    token_ohlcv_flow,
    token_trades_flow,
    token_volume_flow,
)


def build_default_flows() -> FlowRegistry:
    """Registro com todos os fluxos, na ordem exibida no menu principal."""
    return FlowRegistry(
        [
            token_ohlcv_flow(),
            token_trades_flow(),
            token_volume_flow(),
            wallet_pnl_flow(),
            known_accounts_flow(),
            program_active_users_flow(),
            program_ranking_flow(),
        ]
    )


__all__ = [
    "FlowRegistry",
    "build_default_flows",
    "known_accounts_flow",
    "program_active_users_flow",
    "program_ranking_flow",
    "token_ohlcv_flow",
    "token_trades_flow",
    "token_volume_flow",
    "wallet_pnl_flow",
]
