"""LLM-backed providers for text-risk and image-risk."""

from __future__ import annotations

import base64

from osintcafe.constants import (
    LLM_TEMPERATURE,
    VISION_TEMPERATURE,
    Capability,
    ErrorKind,
)
from osintcafe.prompts import IMAGE_ANALYSIS_PROMPT, PROBE_PROMPT
from osintcafe.providers._llm_call import llm_completion
from osintcafe.providers.base import (
    AnalysisRequest,
    BaseProvider,
    ProviderError,
    RawPayload,
)


class TextLLMProvider(BaseProvider):
    """Sends the request payload as a single user prompt."""

    def __init__(
        self,
        name: str,
        model: str,
        api_key: str,
        timeout: float,
    ) -> None:
        super().__init__(name, Capability.TEXT_RISK, timeout)
        self._model = model
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _invoke(self, request: AnalysisRequest) -> RawPayload:
        if not isinstance(request.payload, str):
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "text-risk payload must be text"
            )
        return await self._complete(request.payload)

    async def _probe(self) -> RawPayload:
        return await self._complete(PROBE_PROMPT)

    async def _complete(self, prompt: str) -> str:
        result = await llm_completion(
            self._model,
            [{"role": "user", "content": prompt}],
            api_key=self._api_key,
            timeout=self._timeout,
            temperature=LLM_TEMPERATURE,
        )
        return result.content


class VisionLLMProvider(BaseProvider):
    """Sends image bytes as a base64 data URL alongside the image prompt."""

    def __init__(
        self,
        name: str,
        model: str,
        api_key: str,
        timeout: float,
    ) -> None:
        super().__init__(name, Capability.IMAGE_RISK, timeout)
        self._model = model
        self._api_key = api_key

    @property
    def configured(self) -> bool:
        return bool(self._api_key)

    async def _invoke(self, request: AnalysisRequest) -> RawPayload:
        if not isinstance(request.payload, bytes):
            raise ProviderError(
                ErrorKind.UNPARSEABLE, "image-risk payload must be bytes"
            )
        encoded = base64.b64encode(request.payload).decode("ascii")
        mime = str(request.context.get("mime_type", "image/jpeg"))
        result = await llm_completion(
            self._model,
            [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": IMAGE_ANALYSIS_PROMPT},
                        {
                            "type": "image_url",
                            "image_url": {
                                "url": f"data:{mime};base64,{encoded}"
                            },
                        },
                    ],
                }
            ],
            api_key=self._api_key,
            timeout=self._timeout,
            temperature=VISION_TEMPERATURE,
        )
        return result.content

    async def _probe(self) -> RawPayload:
        result = await llm_completion(
            self._model,
            [{"role": "user", "content": PROBE_PROMPT}],
            api_key=self._api_key,
            timeout=self._timeout,
            temperature=VISION_TEMPERATURE,
        )
        return result.content
