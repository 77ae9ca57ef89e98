"""Provider contract: one outbound call, typed result, never raises."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar, Literal, Protocol

from osintcafe.constants import ERROR_TRUNCATION_CHARS, Capability, ErrorKind
from osintcafe.resilience.errors import classify_error

logger = logging.getLogger(__name__)

type RawPayload = str | dict[str, Any]


@dataclass(frozen=True)
class AnalysisRequest:
    """One user action's worth of input for a single capability."""

    capability: Capability
    payload: str | bytes
    context: dict[str, Any] = field(default_factory=lambda: dict[str, Any]())


@dataclass(frozen=True)
class ProviderSuccess:
    provider: str
    raw: RawPayload
    ok: ClassVar[Literal[True]] = True


@dataclass(frozen=True)
class ProviderFailure:
    provider: str
    reason: ErrorKind
    detail: str
    ok: ClassVar[Literal[False]] = False


type ProviderResult = ProviderSuccess | ProviderFailure


class ProviderError(Exception):
    """Raised inside a provider to report a specific failure kind."""

    def __init__(self, kind: ErrorKind, detail: str) -> None:
        super().__init__(detail)
        self.kind = kind
        self.detail = detail


class Provider(Protocol):
    """Anything the fallback chain can call."""

    @property
    def name(self) -> str: ...

    @property
    def capability(self) -> Capability: ...

    async def call(self, request: AnalysisRequest) -> ProviderResult: ...

    async def probe(self) -> ProviderResult: ...


class BaseProvider(ABC):
    """Converts every failure inside ``_invoke`` into a ProviderFailure.

    Subclasses perform exactly one outbound call in ``_invoke`` and
    may raise anything; the base class classifies it. A provider
    without credentials fails with Unconfigured before any I/O.
    """

    def __init__(
        self, name: str, capability: Capability, timeout: float
    ) -> None:
        self._name = name
        self._capability = capability
        self._timeout = timeout

    @property
    def name(self) -> str:
        return self._name

    @property
    def capability(self) -> Capability:
        return self._capability

    @property
    @abstractmethod
    def configured(self) -> bool: ...

    @abstractmethod
    async def _invoke(self, request: AnalysisRequest) -> RawPayload: ...

    @abstractmethod
    async def _probe(self) -> RawPayload: ...

    async def call(self, request: AnalysisRequest) -> ProviderResult:
        if request.capability != self._capability:
            return ProviderFailure(
                self._name,
                ErrorKind.UNPARSEABLE,
                f"{self._name} does not implement {request.capability}",
            )
        return await self._guarded(lambda: self._invoke(request))

    async def probe(self) -> ProviderResult:
        return await self._guarded(self._probe)

    async def _guarded(
        self, operation: Callable[[], Awaitable[RawPayload]]
    ) -> ProviderResult:
        if not self.configured:
            return ProviderFailure(
                self._name,
                ErrorKind.UNCONFIGURED,
                "missing credential",
            )
        try:
            raw = await operation()
        except ProviderError as exc:
            failure = ProviderFailure(self._name, exc.kind, exc.detail)
        except Exception as exc:
            failure = ProviderFailure(
                self._name,
                classify_error(exc),
                f"{type(exc).__name__}: {exc}"[:ERROR_TRUNCATION_CHARS],
            )
        else:
            return ProviderSuccess(self._name, raw)

        logger.warning(
            "event=provider_failed provider=%s capability=%s reason=%s",
            self._name,
            self._capability,
            failure.reason,
        )
        return failure
