"""JSON gateway to the identity canister's remote methods."""

from __future__ import annotations

import logging
from typing import Any, cast

import httpx

from osintcafe.constants import ERROR_TRUNCATION_CHARS, ErrorKind
from osintcafe.resilience.errors import LedgerError, classify_error

logger = logging.getLogger(__name__)


class LedgerClient:
    """Calls ``{base}/canisters/{id}/call/{method}`` as a given caller.

    Update methods answer ``{"Ok": value}`` or ``{"Err": message}``;
    query methods may answer a bare value. Every call opens its own
    connection. Failures raise LedgerError carrying an ErrorKind.
    """

    def __init__(
        self,
        base_url: str,
        canister_id: str,
        timeout: float,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._canister_id = canister_id
        self._timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._base_url and self._canister_id)

    async def call(
        self,
        method: str,
        caller: str,
        args: list[Any] | None = None,
    ) -> Any:
        if not self.configured:
            raise LedgerError(
                method, "ledger endpoint not configured",
                ErrorKind.UNCONFIGURED,
            )

        url = (
            f"{self._base_url}/canisters/{self._canister_id}"
            f"/call/{method}"
        )
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.post(
                    url, json={"caller": caller, "args": args or []}
                )
        except httpx.TransportError as exc:
            raise LedgerError(method, str(exc), classify_error(exc)) from exc

        if not response.is_success:
            raise LedgerError(
                method,
                f"HTTP {response.status_code}: "
                f"{response.text[:ERROR_TRUNCATION_CHARS]}",
                ErrorKind.REJECTED,
            )
        try:
            body: Any = response.json()
        except ValueError as exc:
            raise LedgerError(
                method, "response is not JSON", ErrorKind.UNPARSEABLE
            ) from exc

        if isinstance(body, dict):
            variant = cast(dict[str, Any], body)
            if "Err" in variant:
                raise LedgerError(
                    method, str(variant["Err"]), ErrorKind.REJECTED
                )
            if "Ok" in variant:
                return variant["Ok"]
        logger.debug("event=ledger_call method=%s", method)
        return body
