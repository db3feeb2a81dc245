"""Cadeia de validadores por passo.

Cada validador é uma função pura `(raw, state) -> ValidationResult`:
- Não muta `state` (apenas lê campos já coletados, ex.: ordenação temporal)
- Produz o valor canônico (normalizado) quando aceito
- Nunca lança exceção para entrada inválida; retorna `reason`

Somente o sequenciador grava `ValidationResult.value` no estado do wizard.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

# Base58 (sem 0, O, I, l); chaves públicas Solana têm 32–44 caracteres
_SOLANA_ADDRESS_PATTERN = re.compile(r"^[1-9A-HJ-NP-Za-km-z]{32,44}$")


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    value: Any = None
    reason: str | None = None

    @classmethod
    def accept(cls, value: Any) -> ValidationResult:
        return cls(ok=True, value=value)

    @classmethod
    def reject(cls, reason: str) -> ValidationResult:
        return cls(ok=False, reason=reason)


Validator = Callable[[Any, Mapping[str, Any]], ValidationResult]


def chain(*validators: Validator) -> Validator:
    """Compõe validadores: a saída normalizada de um alimenta o próximo.

    Para no primeiro rejeite.
    """

    def _run(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        value = raw
        for validator in validators:
            result = validator(value, state)
            if not result.ok:
                return result
            value = result.value
        return ValidationResult.accept(value)

    return _run


def required(reason: str = "A value is required.") -> Validator:
    """Presença: rejeita None e strings vazias; remove espaços nas bordas."""

    def _required(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        if raw is None:
            return ValidationResult.reject(reason)
        if isinstance(raw, str):
            raw = raw.strip()
            if not raw:
                return ValidationResult.reject(reason)
        return ValidationResult.accept(raw)

    return _required


def is_solana_address(value: str) -> bool:
    return bool(_SOLANA_ADDRESS_PATTERN.match(value))


def solana_address(reason: str = "That doesn't look like a valid Solana address.") -> Validator:
    def _address(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        if not isinstance(raw, str) or not is_solana_address(raw):
            return ValidationResult.reject(reason)
        return ValidationResult.accept(raw)

    return _address


def integer(
    min_value: int | None = None,
    reason: str = "Please send a whole number.",
) -> Validator:
    """Parse de inteiro (normalizador) com limite inferior opcional."""

    def _integer(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        if isinstance(raw, bool):
            return ValidationResult.reject(reason)
        if isinstance(raw, int):
            parsed = raw
        else:
            try:
                parsed = int(str(raw).strip(), 10)
            except (TypeError, ValueError):
                return ValidationResult.reject(reason)
        if min_value is not None and parsed < min_value:
            return ValidationResult.reject(reason)
        return ValidationResult.accept(parsed)

    return _integer


def unix_timestamp(reason: str = "Please send a Unix timestamp in seconds (e.g. 1700000000).") -> Validator:
    return integer(min_value=0, reason=reason)


def int_range(low: int, high: int, reason: str | None = None) -> Validator:
    """Faixa numérica inclusiva para valores já normalizados como int."""
    message = reason or f"Please send a number between {low} and {high}."

    def _range(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        if not isinstance(raw, int) or not low <= raw <= high:
            return ValidationResult.reject(message)
        return ValidationResult.accept(raw)

    return _range


def one_of(
    choices: Iterable[str],
    normalize: Callable[[str], str] = str.lower,
    reason: str | None = None,
) -> Validator:
    """Pertinência a enum; o valor é normalizado antes da comparação."""
    allowed = tuple(choices)
    message = reason or f"Please choose one of: {', '.join(allowed)}."

    def _one_of(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        if not isinstance(raw, str):
            return ValidationResult.reject(message)
        candidate = normalize(raw.strip())
        if candidate not in allowed:
            return ValidationResult.reject(message)
        return ValidationResult.accept(candidate)

    return _one_of


def after_field(field: str, reason: str | None = None) -> Validator:
    """Ordenação cronológica: o valor deve ser estritamente maior que `state[field]`.

    Se o campo de referência ainda não foi coletado, não há o que comparar.
    """
    message = reason or f"This value must be later than the {field.replace('_', ' ')}."

    def _after(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        reference = state.get(field)
        if reference is not None and raw <= reference:
            return ValidationResult.reject(message)
        return ValidationResult.accept(raw)

    return _after


def label_list(separator: str = ",", reason: str = "Please send at least one label.") -> Validator:
    """Lista de rótulos separados por vírgula, normalizados em maiúsculas."""

    def _labels(raw: Any, state: Mapping[str, Any]) -> ValidationResult:
        if not isinstance(raw, str):
            return ValidationResult.reject(reason)
        labels = [part.strip().upper() for part in raw.split(separator) if part.strip()]
        if not labels:
            return ValidationResult.reject(reason)
        return ValidationResult.accept(labels)

    return _labels
