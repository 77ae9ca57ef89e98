"""Dappier web-intelligence search over HTTPS JSON."""

from __future__ import annotations

import httpx

from osintcafe.constants import WEB_INTEL_RESULT_LIMIT, Capability, ErrorKind
from osintcafe.providers._http import request_json
from osintcafe.providers.base import (
    AnalysisRequest,
    BaseProvider,
    ProviderError,
    RawPayload,
)

SEARCH_SOURCES = ["news", "forums", "social", "security_reports"]
SEARCH_TIMEFRAME = "30d"


class DappierSearchProvider(BaseProvider):
    """``POST {base}/search`` returning a ``results`` list."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float,
        *,
        name: str = "dappier",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(name, Capability.WEB_INTEL, timeout)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _invoke(self, request: AnalysisRequest) -> RawPayload:
        if not isinstance(request.payload, str) or not request.payload.strip():
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "web-intel payload must be a query"
            )
        return await self._search(
            request.payload,
            int(request.context.get("limit", WEB_INTEL_RESULT_LIMIT)),
        )

    async def _probe(self) -> RawPayload:
        return await self._search("cybersecurity news", 1)

    async def _search(self, query: str, limit: int) -> RawPayload:
        body = await request_json(
            "POST",
            f"{self._base_url}/search",
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {self._api_key}"},
            json_body={
                "query": query,
                "limit": limit,
                "sources": SEARCH_SOURCES,
                "timeframe": SEARCH_TIMEFRAME,
            },
            transport=self._transport,
        )
        if not isinstance(body.get("results"), list):
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "response has no results list"
            )
        return body
