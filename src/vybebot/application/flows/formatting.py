"""Helpers de formatação HTML (parse_mode=HTML do Telegram).

Todo valor vindo da API passa por `esc` antes de entrar no texto.
"""

from __future__ import annotations

import html
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from itertools import islice
from typing import Any

NOT_AVAILABLE = "N/A"


def esc(value: Any) -> str:
    if value is None:
        return NOT_AVAILABLE
    return html.escape(str(value), quote=False)


def fmt_time(value: Any) -> str:
    """Unix (segundos) → data UTC legível; valores inválidos passam como texto."""
    try:
        moment = datetime.fromtimestamp(int(value), tz=UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return esc(value)
    return moment.strftime("%a, %d %b %Y %H:%M:%S UTC")


def fmt_number(value: Any, decimals: int | None = None) -> str:
    if isinstance(value, bool) or value is None:
        return esc(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return esc(value)
    if decimals is None:
        return f"{int(number):,}" if number.is_integer() else f"{number:,}"
    return f"{number:,.{decimals}f}"


def fmt_usd(value: Any) -> str:
    if not _is_numeric(value):
        return esc(value)
    return f"${fmt_number(value, decimals=2)}"


def fmt_percent(ratio: Any) -> str:
    if not _is_numeric(ratio):
        return esc(ratio)
    return f"{float(ratio) * 100:.2f}%"


def short_address(address: Any) -> str:
    text = esc(address)
    if len(text) <= 12:
        return text
    return f"{text[:4]}...{text[-4:]}"


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool) or value is None:
        return False
    try:
        float(value)
    except (TypeError, ValueError):
        return False
    return True


def numbered_list(
    header: str,
    items: Iterable[Mapping[str, Any]],
    render_item: Callable[[int, Mapping[str, Any]], str],
    limit: int,
) -> str:
    """Cabeçalho + até `limit` itens numerados, separados por linha em branco."""
    rendered = [
        render_item(index, item)
        for index, item in enumerate(islice(items, limit), start=1)
    ]
    return f"{header}\n\n" + "\n\n".join(rendered)
