"""Cliente da Vybe API (somente leitura).

Traduz operações de fluxo em requisições HTTP e converte falhas em
`FetchError` com código estável. A classificação por texto do corpo de erro
fica restrita a este módulo: acima dele só circulam `FetchErrorCode`s.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from vybebot.domain.errors import FetchError, FetchErrorCode
from vybebot.domain.protocols.fetch_client import FetchClientProtocol
from vybebot.infra.http import HttpClient, HttpError
from vybebot.observability.logging import get_logger

logger: logging.Logger = get_logger(__name__)

# Assinaturas textuais devolvidas pela Vybe API
_TIME_RANGE_SIGNATURE = "request time range is too large"
_UNKNOWN_VARIANT_SIGNATURE = "unknown variant"

# Intervalo exibido no bot → valor aceito pelo endpoint de volume
VOLUME_INTERVALS: dict[str, str] = {"1h": "hour", "1d": "day", "1w": "week"}

_STATUS_CODES: dict[int, FetchErrorCode] = {
    401: FetchErrorCode.UNAUTHORIZED,
    403: FetchErrorCode.UNAUTHORIZED,
    404: FetchErrorCode.NOT_FOUND,
    429: FetchErrorCode.RATE_LIMITED,
}


def classify_http_error(exc: HttpError) -> FetchError:
    """Mapeia HttpError → FetchError (assinatura do corpo tem precedência)."""
    body = (exc.body or "").lower()
    if _TIME_RANGE_SIGNATURE in body:
        code = FetchErrorCode.TIME_RANGE_TOO_LARGE
    elif _UNKNOWN_VARIANT_SIGNATURE in body:
        code = FetchErrorCode.UNKNOWN_VARIANT
    elif exc.is_timeout:
        code = FetchErrorCode.TIMEOUT
    elif exc.status_code is not None and exc.status_code in _STATUS_CODES:
        code = _STATUS_CODES[exc.status_code]
    else:
        code = FetchErrorCode.UPSTREAM
    return FetchError(code, message=str(exc), status_code=exc.status_code)


def _unwrap(payload: Any) -> Any:
    """Endpoints de série temporal envelopam a lista em `data`."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


class VybeApiClient(FetchClientProtocol):
    """Implementa `fetch(operation, params)` sobre a Vybe API."""

    def __init__(self, http: HttpClient, page_limit: int = 10) -> None:
        self._http = http
        self._page_limit = page_limit
        self._operations: dict[str, Callable[[Mapping[str, Any]], Awaitable[Any]]] = {
            "token_ohlcv": self._token_ohlcv,
            "token_trades": self._token_trades,
            "token_volume": self._token_volume,
            "wallet_pnl": self._wallet_pnl,
            "known_accounts": self._known_accounts,
            "program_active_users": self._program_active_users,
            "program_ranking": self._program_ranking,
        }

    @property
    def operations(self) -> frozenset[str]:
        return frozenset(self._operations)

    async def fetch(self, operation: str, params: Mapping[str, Any]) -> Any:
        handler = self._operations.get(operation)
        if handler is None:
            raise ValueError(f"Unsupported Vybe operation: {operation}")
        return await handler(params)

    async def _get(self, path: str, query: Mapping[str, Any] | None = None) -> Any:
        try:
            response = await self._http.get(path, params=dict(query or {}))
        except HttpError as exc:
            error = classify_http_error(exc)
            logger.warning(
                "vybe_request_failed",
                extra={"path_prefix": path.split("/", 2)[1], "code": error.code.value},
            )
            raise error from exc

        try:
            return response.json()
        except ValueError as exc:
            raise FetchError(FetchErrorCode.UPSTREAM, "Invalid JSON payload") from exc

    async def _token_ohlcv(self, params: Mapping[str, Any]) -> Any:
        payload = await self._get(
            f"/price/{params['mint_address']}/token-ohlcv",
            {
                "resolution": params["resolution"],
                "timeStart": params["start_time"],
                "timeEnd": params["end_time"],
            },
        )
        return _unwrap(payload)

    async def _token_trades(self, params: Mapping[str, Any]) -> Any:
        payload = await self._get(
            "/token/trades",
            {
                "mintAddress": params["mint_address"],
                "timeStart": params["start_time"],
                "timeEnd": params["end_time"],
                "resolution": params["resolution"],
                "limit": self._page_limit,
                "sortByDesc": "blockTime",
            },
        )
        return _unwrap(payload)

    async def _token_volume(self, params: Mapping[str, Any]) -> Any:
        interval = params["interval"]
        payload = await self._get(
            f"/token/{params['mint_address']}/transfer-volume",
            {
                "startTime": params["start_time"],
                "endTime": params["end_time"],
                # Valor desconhecido segue adiante; a API responde "unknown variant"
                "interval": VOLUME_INTERVALS.get(interval, interval),
            },
        )
        return _unwrap(payload)

    async def _wallet_pnl(self, params: Mapping[str, Any]) -> Any:
        return await self._get(
            f"/account/pnl/{params['owner_address']}",
            {"resolution": params["resolution"]},
        )

    async def _program_active_users(self, params: Mapping[str, Any]) -> Any:
        payload = await self._get(
            f"/program/{params['program_address']}/active-users",
            {"range": params["range"]},
        )
        return _unwrap(payload)

    async def _known_accounts(self, params: Mapping[str, Any]) -> Any:
        # Lista vira parâmetro repetido: labels=DEFI&labels=NFT
        payload = await self._get("/account/known-accounts", {"labels": list(params["labels"])})
        if isinstance(payload, dict):
            return payload.get("accounts", [])
        return payload

    async def _program_ranking(self, params: Mapping[str, Any]) -> Any:
        payload = await self._get(
            "/program/ranking",
            {"limit": params["limit"], "interval": params["interval"]},
        )
        return _unwrap(payload)
