"""Tests for the litellm-backed text and vision providers."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, patch

from osintcafe.constants import Capability, ErrorKind
from osintcafe.prompts import PROBE_PROMPT
from osintcafe.providers.base import (
    AnalysisRequest,
    ProviderFailure,
    ProviderSuccess,
)
from osintcafe.providers.llm import TextLLMProvider, VisionLLMProvider

_PATCH_TARGET = "osintcafe.providers._llm_call._acompletion"


def _mock_response(content: str | None) -> Any:
    """Build a mock litellm response with usage metadata."""
    msg = type("Msg", (), {"content": content})()
    choice = type("Choice", (), {"message": msg})()
    usage = type(
        "Usage", (), {"prompt_tokens": 120, "completion_tokens": 40}
    )()
    return type(
        "Response", (), {"choices": [choice], "usage": usage}
    )()


class _StatusCodeError(Exception):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def _text_provider(api_key: str = "gk") -> TextLLMProvider:
    return TextLLMProvider("gemini", "gemini/gemini-1.5-flash", api_key, 5.0)


def _vision_provider(api_key: str = "dk") -> VisionLLMProvider:
    return VisionLLMProvider("deepseek", "deepseek/deepseek-chat", api_key, 5.0)


class TestTextProvider:
    async def test_success_returns_completion_text(self) -> None:
        mock = AsyncMock(return_value=_mock_response('{"overallRisk":"low"}'))
        with patch(_PATCH_TARGET, mock):
            result = await _text_provider().call(
                AnalysisRequest(Capability.TEXT_RISK, "analyze this")
            )

        assert isinstance(result, ProviderSuccess)
        assert result.raw == '{"overallRisk":"low"}'
        kwargs = mock.call_args.kwargs
        assert kwargs["model"] == "gemini/gemini-1.5-flash"
        assert kwargs["api_key"] == "gk"
        assert kwargs["num_retries"] == 0
        assert kwargs["timeout"] == 5.0
        assert kwargs["messages"] == [
            {"role": "user", "content": "analyze this"}
        ]

    async def test_missing_key_never_calls_litellm(self) -> None:
        mock = AsyncMock()
        with patch(_PATCH_TARGET, mock):
            result = await _text_provider(api_key="").call(
                AnalysisRequest(Capability.TEXT_RISK, "x")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.UNCONFIGURED
        assert result.detail == "missing credential"
        mock.assert_not_awaited()

    async def test_empty_completion_is_unparseable(self) -> None:
        with patch(_PATCH_TARGET, AsyncMock(return_value=_mock_response("  "))):
            result = await _text_provider().call(
                AnalysisRequest(Capability.TEXT_RISK, "x")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.UNPARSEABLE

    async def test_no_choices_is_unparseable(self) -> None:
        response = type("Response", (), {"choices": []})()
        with patch(_PATCH_TARGET, AsyncMock(return_value=response)):
            result = await _text_provider().call(
                AnalysisRequest(Capability.TEXT_RISK, "x")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.UNPARSEABLE

    async def test_timeout_is_unreachable(self) -> None:
        with patch(_PATCH_TARGET, AsyncMock(side_effect=TimeoutError())):
            result = await _text_provider().call(
                AnalysisRequest(Capability.TEXT_RISK, "x")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.UNREACHABLE

    async def test_auth_error_is_rejected(self) -> None:
        err = _StatusCodeError("invalid api key", 401)
        with patch(_PATCH_TARGET, AsyncMock(side_effect=err)):
            result = await _text_provider().call(
                AnalysisRequest(Capability.TEXT_RISK, "x")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.REJECTED
        assert "invalid api key" in result.detail

    async def test_bytes_payload_is_unparseable(self) -> None:
        mock = AsyncMock()
        with patch(_PATCH_TARGET, mock):
            result = await _text_provider().call(
                AnalysisRequest(Capability.TEXT_RISK, b"bytes")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.UNPARSEABLE
        mock.assert_not_awaited()

    async def test_probe_sends_probe_prompt(self) -> None:
        mock = AsyncMock(return_value=_mock_response("API test successful"))
        with patch(_PATCH_TARGET, mock):
            result = await _text_provider().probe()
        assert isinstance(result, ProviderSuccess)
        assert mock.call_args.kwargs["messages"][0]["content"] == PROBE_PROMPT


class TestVisionProvider:
    async def test_sends_data_url_with_mime_type(self) -> None:
        mock = AsyncMock(return_value=_mock_response('{"riskLevel":"low"}'))
        with patch(_PATCH_TARGET, mock):
            result = await _vision_provider().call(
                AnalysisRequest(
                    Capability.IMAGE_RISK, b"img", {"mime_type": "image/png"}
                )
            )

        assert isinstance(result, ProviderSuccess)
        content = mock.call_args.kwargs["messages"][0]["content"]
        image_part = next(p for p in content if p["type"] == "image_url")
        assert image_part["image_url"]["url"] == "data:image/png;base64,aW1n"

    async def test_defaults_to_jpeg(self) -> None:
        mock = AsyncMock(return_value=_mock_response("looks fine"))
        with patch(_PATCH_TARGET, mock):
            await _vision_provider().call(
                AnalysisRequest(Capability.IMAGE_RISK, b"img")
            )
        content = mock.call_args.kwargs["messages"][0]["content"]
        assert content[1]["image_url"]["url"].startswith(
            "data:image/jpeg;base64,"
        )

    async def test_text_payload_is_unparseable(self) -> None:
        mock = AsyncMock()
        with patch(_PATCH_TARGET, mock):
            result = await _vision_provider().call(
                AnalysisRequest(Capability.IMAGE_RISK, "not an image")
            )
        assert isinstance(result, ProviderFailure)
        assert result.reason == ErrorKind.UNPARSEABLE
        mock.assert_not_awaited()
