"""Shared LLM completion call through litellm."""

from __future__ import annotations

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import litellm

from osintcafe.constants import LLM_MAX_OUTPUT_TOKENS, ErrorKind
from osintcafe.providers.base import ProviderError

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types, so use a typed alias
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion


@dataclass(frozen=True)
class LLMCallResult:
    """Completion text with token metadata."""

    content: str
    model: str
    input_tokens: int
    output_tokens: int


async def llm_completion(
    model: str,
    messages: list[dict[str, Any]],
    *,
    api_key: str,
    timeout: float,
    temperature: float,
) -> LLMCallResult:
    """One litellm completion; no retries, no fallbacks.

    Fallback ordering belongs to the chain executor, so this makes
    exactly one request (``num_retries=0``). An empty completion is
    reported as Unparseable.
    """
    response: Any = await _acompletion(
        model=model,
        messages=messages,
        api_key=api_key,
        timeout=timeout,
        temperature=temperature,
        max_tokens=LLM_MAX_OUTPUT_TOKENS,
        num_retries=0,
    )

    try:
        content = str(response.choices[0].message.content or "")
    except (AttributeError, IndexError) as exc:
        raise ProviderError(
            ErrorKind.UNPARSEABLE, f"{model}: malformed completion"
        ) from exc
    if not content.strip():
        raise ProviderError(
            ErrorKind.UNPARSEABLE, f"{model}: empty completion"
        )

    usage: Any = getattr(response, "usage", None)
    input_tokens: int = getattr(usage, "prompt_tokens", 0) or 0
    output_tokens: int = getattr(usage, "completion_tokens", 0) or 0
    logger.debug(
        "event=llm_completion model=%s input_tokens=%d output_tokens=%d",
        model,
        input_tokens,
        output_tokens,
    )

    return LLMCallResult(
        content=content,
        model=model,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )
