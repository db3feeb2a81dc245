"""Testes dos formatadores de resultado (HTML do Telegram)."""

from __future__ import annotations

from tests.helpers.fakes import MINT
from vybebot.application.flows.accounts import (
    PNL_TOP_TOKENS,
    format_known_accounts,
    format_pnl,
    is_empty_pnl,
)
from vybebot.application.flows.formatting import (
    NOT_AVAILABLE,
    esc,
    fmt_number,
    fmt_percent,
    fmt_time,
    fmt_usd,
    short_address,
)
from vybebot.application.flows.programs import format_ranking
from vybebot.application.flows.tokens import format_ohlcv, format_trades, format_volume


class TestFormattingHelpers:
    def test_esc_escapes_html_and_none(self):
        assert esc("<b>&") == "&lt;b&gt;&amp;"
        assert esc(None) == NOT_AVAILABLE

    def test_fmt_time_utc(self):
        assert fmt_time(1700000000) == "Tue, 14 Nov 2023 22:13:20 UTC"
        assert fmt_time("soon") == "soon"

    def test_numbers(self):
        assert fmt_number(1234567) == "1,234,567"
        assert fmt_number("12.5") == "12.5"
        assert fmt_number(3.14159, decimals=2) == "3.14"
        assert fmt_number(True) == "True"

    def test_usd_and_percent(self):
        assert fmt_usd(1234.5) == "$1,234.50"
        assert fmt_usd(None) == NOT_AVAILABLE
        assert fmt_percent(0.5) == "50.00%"
        assert fmt_percent("n/a") == "n/a"

    def test_short_address(self):
        assert short_address(MINT) == "So11...1112"
        assert short_address("short") == "short"


class TestListFormatters:
    """Listas numeradas respeitam o limite de exibição."""

    def test_ohlcv_limit_and_fields(self):
        candles = [{"time": 1700000000, "open": "1.5", "count": 1000} for _ in range(4)]
        text = format_ohlcv(candles, 3)

        assert text.startswith("📊 <b>Token OHLCV</b>")
        assert "<b>3. Time:" in text
        assert "<b>4. Time:" not in text
        assert "<b>Open:</b> 1.5" in text
        assert "<b>Trade Count:</b> 1,000" in text
        assert "<b>High:</b> N/A" in text

    def test_trades_escape_untrusted_values(self):
        text = format_trades([{"blockTime": 1700000000, "price": "<script>"}], 10)

        assert "&lt;script&gt;" in text
        assert "<script>" not in text

    def test_volume(self):
        text = format_volume([{"timeBucketStart": 1700000000, "amount": 5, "volume": 10}], 10)

        assert "<b>Amount:</b> 5" in text
        assert "<b>Volume:</b> $10.00" in text


class TestWalletPnl:
    """Resumo + top tokens."""

    def _payload(self, metrics: int) -> dict:
        return {
            "summary": {
                "winRate": 0.25,
                "realizedPnlUsd": 100,
                "tradesCount": 8,
                "bestPerformingToken": None,
            },
            "tokenMetrics": [
                {"tokenSymbol": f"T{i}", "tokenAddress": f"addr{i}", "realizedPnlUsd": i}
                for i in range(metrics)
            ],
        }

    def test_summary_lines(self):
        text = format_pnl(self._payload(0), 10)

        assert "<b>Win Rate:</b> 25.00%" in text
        assert "<b>Realized PnL:</b> $100.00" in text
        assert "<b>Total Trades:</b> 8" in text
        assert f"<b>Best Token:</b> {NOT_AVAILABLE}" in text
        assert "Top Tokens" not in text

    def test_top_tokens_capped(self):
        text = format_pnl(self._payload(PNL_TOP_TOKENS + 3), 10)

        assert f"<b>{PNL_TOP_TOKENS}. T{PNL_TOP_TOKENS - 1}</b>" in text
        assert f"<b>{PNL_TOP_TOKENS + 1}." not in text

    def test_display_limit_applies(self):
        text = format_pnl(self._payload(PNL_TOP_TOKENS), 2)
        assert "<b>2. T1</b>" in text
        assert "<b>3." not in text

    def test_empty_detection(self):
        assert is_empty_pnl(None)
        assert is_empty_pnl({})
        assert is_empty_pnl({"summary": {"tradesCount": 0}, "tokenMetrics": []})
        assert not is_empty_pnl({"summary": {"tradesCount": 2}, "tokenMetrics": []})
        assert not is_empty_pnl(self._payload(1))


class TestCatalogFormatters:
    """Ranking de programas e contas conhecidas."""

    def test_ranking_item(self):
        rows = [{"programName": "Jupiter", "programId": "JUP", "programRank": 1, "score": 0.98761}]
        text = format_ranking(rows, 10)

        assert text.startswith("🏆 <b>Program Ranking</b>")
        assert "<b>1. Jupiter (Rank 1)</b>" in text
        assert "<b>Score:</b> 0.9876" in text

    def test_ranking_unnamed_program(self):
        assert "Unknown Program" in format_ranking([{"programId": "x"}], 10)

    def test_known_accounts(self):
        accounts = [
            {"name": "Openbook", "ownerAddress": "addr", "labels": ["DEFI", "DEX"], "entity": None},
            {"ownerAddress": "other", "labels": []},
        ]
        text = format_known_accounts(accounts, 10)

        assert "<b>1. Openbook</b>" in text
        assert "<b>Labels:</b> DEFI, DEX" in text
        assert f"<b>Entity:</b> {NOT_AVAILABLE}" in text
        assert "<b>2. Unnamed</b>" in text
        assert "<b>Labels:</b> None" in text
