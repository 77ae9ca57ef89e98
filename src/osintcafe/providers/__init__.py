"""Provider clients: one outbound call each, failures as data."""

from osintcafe.providers.base import (
    AnalysisRequest,
    BaseProvider,
    Provider,
    ProviderError,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
)
from osintcafe.providers.registry import build_ledger_client, build_providers

__all__ = [
    "AnalysisRequest",
    "BaseProvider",
    "Provider",
    "ProviderError",
    "ProviderFailure",
    "ProviderResult",
    "ProviderSuccess",
    "build_ledger_client",
    "build_providers",
]
