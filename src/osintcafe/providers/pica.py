"""Pica deepfake / manipulation detection over HTTPS JSON."""

from __future__ import annotations

import base64

import httpx

from osintcafe.constants import Capability, ErrorKind
from osintcafe.providers._http import request_json
from osintcafe.providers.base import (
    AnalysisRequest,
    BaseProvider,
    ProviderError,
    RawPayload,
)

DETECTION_TYPES = ["deepfake", "face_swap", "manipulation"]


class PicaImageProvider(BaseProvider):
    """``POST {base}/analyze`` returning per-detection confidences."""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float,
        *,
        name: str = "pica",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(name, Capability.IMAGE_RISK, timeout)
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    async def _invoke(self, request: AnalysisRequest) -> RawPayload:
        if not isinstance(request.payload, bytes):
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "image-risk payload must be bytes"
            )
        body = await request_json(
            "POST",
            f"{self._base_url}/analyze",
            timeout=self._timeout,
            headers=self._headers(),
            json_body={
                "image": base64.b64encode(request.payload).decode("ascii"),
                "detection_types": DETECTION_TYPES,
                "include_metadata": True,
            },
            transport=self._transport,
        )
        if not isinstance(body.get("detections"), dict):
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "response has no detections object"
            )
        return body

    async def _probe(self) -> RawPayload:
        return await request_json(
            "GET",
            f"{self._base_url}/account",
            timeout=self._timeout,
            headers=self._headers(),
            transport=self._transport,
        )
