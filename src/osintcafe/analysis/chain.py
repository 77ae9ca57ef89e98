"""Ordered fallback execution over providers for one capability."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

from osintcafe.constants import (
    RETRY_INITIAL_WAIT,
    RETRY_MAX_WAIT,
    Capability,
    ErrorKind,
)
from osintcafe.providers.base import (
    AnalysisRequest,
    Provider,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
)
from osintcafe.resilience.errors import is_retryable

logger = logging.getLogger(__name__)


def _should_retry(result: ProviderResult) -> bool:
    return isinstance(result, ProviderFailure) and is_retryable(result.reason)


def _last_result(state: RetryCallState) -> ProviderResult:
    """Return the final failure instead of raising RetryError."""
    if state.outcome is None:
        raise RuntimeError("unreachable: retry state without outcome")
    result: ProviderResult = state.outcome.result()
    return result


def aggregate_failures(
    capability: Capability, failures: Sequence[ProviderFailure]
) -> ProviderFailure:
    """Fold every attempt's failure into one, preserving attempt order.

    The aggregate reason is Unconfigured only when nothing was
    configured; otherwise it is the last attempt's reason.
    """
    if not failures:
        return ProviderFailure(
            f"chain:{capability}",
            ErrorKind.UNCONFIGURED,
            f"no providers registered for {capability}",
        )
    if all(f.reason is ErrorKind.UNCONFIGURED for f in failures):
        reason = ErrorKind.UNCONFIGURED
    else:
        reason = failures[-1].reason
    detail = "; ".join(
        f"{f.provider}: {f.reason} ({f.detail})" for f in failures
    )
    return ProviderFailure(f"chain:{capability}", reason, detail)


class FallbackChain:
    """Tries providers strictly in order; the first success wins.

    A later provider is never invoked once an earlier one succeeds.
    Unreachable attempts may be retried per provider when
    ``max_attempts`` > 1; other failures move straight to the next
    provider. Holds no per-invocation state.
    """

    def __init__(
        self,
        capability: Capability,
        providers: Sequence[Provider],
        *,
        max_attempts: int = 1,
        wait: wait_base | None = None,
    ) -> None:
        for provider in providers:
            if provider.capability != capability:
                raise ValueError(
                    f"provider '{provider.name}' implements "
                    f"{provider.capability}, not {capability}"
                )
        self._capability = capability
        self._providers = tuple(providers)
        self._max_attempts = max_attempts
        self._wait = wait or wait_exponential_jitter(
            initial=RETRY_INITIAL_WAIT, max=RETRY_MAX_WAIT
        )

    @property
    def capability(self) -> Capability:
        return self._capability

    @property
    def provider_names(self) -> list[str]:
        return [p.name for p in self._providers]

    async def execute(self, request: AnalysisRequest) -> ProviderResult:
        failures: list[ProviderFailure] = []
        for provider in self._providers:
            result = await self._attempt(provider, request)
            if isinstance(result, ProviderSuccess):
                logger.info(
                    "event=chain_success capability=%s provider=%s"
                    " prior_failures=%d",
                    self._capability,
                    provider.name,
                    len(failures),
                )
                return result
            failures.append(result)

        aggregate = aggregate_failures(self._capability, failures)
        logger.warning(
            "event=chain_exhausted capability=%s reason=%s attempts=%d",
            self._capability,
            aggregate.reason,
            len(failures),
        )
        return aggregate

    async def _attempt(
        self, provider: Provider, request: AnalysisRequest
    ) -> ProviderResult:
        if self._max_attempts == 1:
            return await provider.call(request)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=retry_if_result(_should_retry),
            retry_error_callback=_last_result,
        )
        result: ProviderResult = await retrying(provider.call, request)
        return result
