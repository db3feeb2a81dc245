"""Passos reutilizados pelos fluxos de consulta."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from vybebot.domain.errors import FetchErrorCode
from vybebot.domain.wizard.steps import RewindRule, Step
from vybebot.domain.wizard.validators import (
    after_field,
    chain,
    one_of,
    required,
    solana_address,
    unix_timestamp,
)

INVALID_FORMAT_MESSAGE = "❌ Invalid format. Please follow the example format."
INVALID_ADDRESS_MESSAGE = "❌ Invalid address. Please send a valid Solana address."
INVALID_TIMESTAMP_MESSAGE = "❌ Invalid timestamp. Please send a Unix timestamp in seconds."
END_BEFORE_START_MESSAGE = "❌ The end time must be later than the start time."

TIME_RANGE_TOO_LARGE_MESSAGE = (
    "⚠️ The requested time range is too large. Please send a later start time."
)
UNKNOWN_VARIANT_MESSAGE = "⚠️ That option is not supported for this query. Please pick another one."

START_TIME_FIELD = "start_time"
END_TIME_FIELD = "end_time"

_EXAMPLE_TIMESTAMP = "1704067200"


def address_step(field: str, prompt: str) -> Step:
    return Step(
        field=field,
        prompt=prompt,
        validator=chain(required(INVALID_ADDRESS_MESSAGE), solana_address(INVALID_ADDRESS_MESSAGE)),
    )


def start_time_step() -> Step:
    return Step(
        field=START_TIME_FIELD,
        prompt=(
            "🕐 Send the <b>start time</b> as a Unix timestamp (seconds).\n"
            f"Example: <code>{_EXAMPLE_TIMESTAMP}</code>"
        ),
        validator=chain(required(INVALID_TIMESTAMP_MESSAGE), unix_timestamp(INVALID_TIMESTAMP_MESSAGE)),
    )


def end_time_step() -> Step:
    return Step(
        field=END_TIME_FIELD,
        prompt=(
            "🕑 Send the <b>end time</b> as a Unix timestamp (seconds).\n"
            "It must be later than the start time."
        ),
        validator=chain(
            required(INVALID_TIMESTAMP_MESSAGE),
            unix_timestamp(INVALID_TIMESTAMP_MESSAGE),
            after_field(START_TIME_FIELD, END_BEFORE_START_MESSAGE),
        ),
    )


def choice_step(
    field: str,
    prompt: str,
    choices: Sequence[str],
    labels: Mapping[str, str] | None = None,
) -> Step:
    """Passo de escolha: botões `field:valor` e texto livre validado pelo mesmo enum."""
    tokens = tuple(f"{field}:{choice}" for choice in choices)
    button_labels = {f"{field}:{choice}": label for choice, label in (labels or {}).items()}
    return Step(
        field=field,
        prompt=prompt,
        validator=chain(
            required(INVALID_FORMAT_MESSAGE),
            one_of(choices, reason=INVALID_FORMAT_MESSAGE),
        ),
        action_tokens=tokens,
        button_labels=button_labels,
    )


def time_window_rewinds(choice_field: str) -> dict[FetchErrorCode, RewindRule]:
    """Rewinds padrão dos fluxos com janela de tempo + resolução.

    A janela grande demais volta ao início da janela mantendo o valor antigo
    como referência; a variante rejeitada volta ao passo de escolha.
    """
    return {
        FetchErrorCode.TIME_RANGE_TOO_LARGE: RewindRule(
            START_TIME_FIELD, TIME_RANGE_TOO_LARGE_MESSAGE, retain_target=True
        ),
        FetchErrorCode.UNKNOWN_VARIANT: RewindRule(choice_field, UNKNOWN_VARIANT_MESSAGE),
    }
