"""Wire settings → providers → chains → orchestrator, once at startup."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from osintcafe.analysis.chain import FallbackChain
from osintcafe.analysis.orchestrator import AnalysisOrchestrator
from osintcafe.config import Settings
from osintcafe.constants import Capability
from osintcafe.providers.base import Provider
from osintcafe.providers.registry import build_providers


def build_chains(
    settings: Settings, providers: Mapping[str, Provider]
) -> dict[Capability, FallbackChain]:
    """One chain per capability, ordered as configured."""
    return {
        capability: FallbackChain(
            capability,
            [providers[name] for name in settings.chain_for(capability)],
            max_attempts=settings.chain_max_attempts,
        )
        for capability in Capability
    }


def build_orchestrator(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[AnalysisOrchestrator, dict[str, Provider]]:
    providers = build_providers(settings, transport)
    chains = build_chains(settings, providers)
    return AnalysisOrchestrator(chains, settings), providers
