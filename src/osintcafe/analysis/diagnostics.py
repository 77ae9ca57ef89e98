"""Provider connectivity probes for the status page and CLI."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from osintcafe.constants import Capability
from osintcafe.providers.base import Provider, ProviderSuccess

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProbeResult:
    name: str
    capability: Capability
    ok: bool
    message: str


async def probe_provider(provider: Provider) -> ProbeResult:
    result = await provider.probe()
    if isinstance(result, ProviderSuccess):
        return ProbeResult(
            provider.name, provider.capability, True, "operational"
        )
    return ProbeResult(
        provider.name,
        provider.capability,
        False,
        f"{result.reason}: {result.detail}",
    )


async def run_probes(
    providers: Mapping[str, Provider],
    names: list[str] | None = None,
) -> list[ProbeResult]:
    """Probe providers one at a time, in registry order.

    Raises KeyError for an unknown provider name.
    """
    selected = names if names is not None else list(providers)
    results: list[ProbeResult] = []
    for name in selected:
        results.append(await probe_provider(providers[name]))
    healthy = sum(1 for r in results if r.ok)
    logger.info(
        "event=probes_complete healthy=%d total=%d", healthy, len(results)
    )
    return results
