"""Shared test fixtures: scripted providers, settings, app state."""

import os

# Blank every provider credential so no test reaches a real provider,
# even when real keys are present in the shell environment.
for _key in (
    "GEMINI_API_KEY",
    "COHERE_API_KEY",
    "DEEPSEEK_API_KEY",
    "PICA_API_KEY",
    "DAPPIER_API_KEY",
    "LEDGER_BASE_URL",
    "API_KEY",
):
    os.environ[_key] = ""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from osintcafe.api.app_state import AppState, SessionRegistry
from osintcafe.analysis.factory import build_chains
from osintcafe.analysis.orchestrator import AnalysisOrchestrator
from osintcafe.config import Settings
from osintcafe.constants import Capability, ErrorKind
from osintcafe.identity.ledger import LedgerClient
from osintcafe.logger import AnalysisLogger
from osintcafe.main import app
from osintcafe.providers.base import (
    AnalysisRequest,
    Provider,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
)


class ScriptedProvider:
    """Provider double that replays scripted results and records calls."""

    def __init__(
        self,
        name: str,
        capability: Capability,
        results: Sequence[ProviderResult],
    ) -> None:
        self.name = name
        self.capability = capability
        self._results = list(results)
        self.requests: list[AnalysisRequest] = []
        self.probes = 0

    async def call(self, request: AnalysisRequest) -> ProviderResult:
        self.requests.append(request)
        index = min(len(self.requests), len(self._results)) - 1
        return self._results[index]

    async def probe(self) -> ProviderResult:
        self.probes += 1
        return self._results[0]


def ok(name: str, raw: Any) -> ProviderSuccess:
    return ProviderSuccess(name, raw)


def fail(
    name: str,
    reason: ErrorKind = ErrorKind.UNREACHABLE,
    detail: str = "boom",
) -> ProviderFailure:
    return ProviderFailure(name, reason, detail)


type ProviderFactory = Callable[..., ScriptedProvider]


@pytest.fixture
def make_provider() -> ProviderFactory:
    """Factory: make_provider(name, capability, *results)."""

    def _make(
        name: str, capability: Capability, *results: ProviderResult
    ) -> ScriptedProvider:
        return ScriptedProvider(name, capability, results)

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        log_dir=tmp_path / "logs",
    )


def build_orchestrator_from(
    settings: Settings, providers: dict[str, Provider]
) -> AnalysisOrchestrator:
    """Orchestrator whose chains only reference the given providers."""
    overrides: dict[str, list[str]] = {}
    for field, capability in (
        ("text_risk_chain", Capability.TEXT_RISK),
        ("image_risk_chain", Capability.IMAGE_RISK),
        ("web_intel_chain", Capability.WEB_INTEL),
        ("identity_verify_chain", Capability.IDENTITY_VERIFY),
    ):
        overrides[field] = [
            name for name in settings.chain_for(capability)
            if name in providers
        ]
    scoped = settings.model_copy(update=overrides)
    return AnalysisOrchestrator(build_chains(scoped, providers), scoped)


def setup_test_app(
    tmp_path: Path,
    providers: dict[str, Provider],
    *,
    ledger: LedgerClient | None = None,
    api_key: str = "",
) -> AppState:
    """Install a typed AppState on the app; ASGITransport skips lifespan."""
    settings = Settings(
        _env_file=None,  # type: ignore[call-arg]
        log_dir=tmp_path / "logs",
        api_key=api_key,
    )
    state = AppState(
        settings=settings,
        orchestrator=build_orchestrator_from(settings, providers),
        providers=providers,
        sessions=SessionRegistry(
            ledger or LedgerClient("", "canister", 1.0)
        ),
        logger=AnalysisLogger(log_dir=tmp_path / "logs", level="WARNING"),
    )
    app.state.typed = state
    return state
