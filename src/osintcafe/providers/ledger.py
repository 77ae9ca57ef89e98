"""Identity-verify provider backed by the ledger canister."""

from __future__ import annotations

from typing import Any, cast

from osintcafe.constants import Capability, ErrorKind
from osintcafe.identity.ledger import LedgerClient
from osintcafe.providers.base import (
    AnalysisRequest,
    BaseProvider,
    ProviderError,
    RawPayload,
)
from osintcafe.resilience.errors import LedgerError


class LedgerIdentityProvider(BaseProvider):
    """Calls ``verify_identity`` on behalf of the session subject."""

    def __init__(
        self, client: LedgerClient, timeout: float, *, name: str = "ledger"
    ) -> None:
        super().__init__(name, Capability.IDENTITY_VERIFY, timeout)
        self._client = client

    @property
    def configured(self) -> bool:
        return self._client.configured

    async def _invoke(self, request: AnalysisRequest) -> RawPayload:
        if not isinstance(request.payload, str) or not request.payload:
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "identity payload must be a subject"
            )
        return await self._remote("verify_identity", request.payload)

    async def _probe(self) -> RawPayload:
        stats = await self._remote_any("get_stats", "anonymous")
        return {"stats": stats}

    async def _remote(self, method: str, caller: str) -> RawPayload:
        result = await self._remote_any(method, caller)
        if not isinstance(result, dict):
            raise ProviderError(
                ErrorKind.UNPARSEABLE,
                f"{method} returned {type(result).__name__}",
            )
        return cast(dict[str, Any], result)

    async def _remote_any(self, method: str, caller: str) -> Any:
        try:
            return await self._client.call(method, caller)
        except LedgerError as exc:
            raise ProviderError(exc.kind, exc.detail) from exc
