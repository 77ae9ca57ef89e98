"""Tests for provider connectivity probes."""

from __future__ import annotations

import pytest

from osintcafe.analysis.diagnostics import probe_provider, run_probes
from osintcafe.constants import Capability, ErrorKind
from tests.conftest import ProviderFactory, fail, ok


async def test_probe_success(make_provider: ProviderFactory) -> None:
    provider = make_provider("gemini", Capability.TEXT_RISK, ok("gemini", "hi"))
    result = await probe_provider(provider)
    assert result.ok is True
    assert result.name == "gemini"
    assert result.capability == Capability.TEXT_RISK
    assert result.message == "operational"


async def test_probe_failure_message(make_provider: ProviderFactory) -> None:
    provider = make_provider(
        "pica",
        Capability.IMAGE_RISK,
        fail("pica", ErrorKind.UNCONFIGURED, "missing credential"),
    )
    result = await probe_provider(provider)
    assert result.ok is False
    assert result.message == "Unconfigured: missing credential"


async def test_run_probes_in_registry_order(
    make_provider: ProviderFactory,
) -> None:
    a = make_provider("gemini", Capability.TEXT_RISK, ok("gemini", ""))
    b = make_provider("dappier", Capability.WEB_INTEL, fail("dappier"))

    results = await run_probes({"gemini": a, "dappier": b})

    assert [r.name for r in results] == ["gemini", "dappier"]
    assert [r.ok for r in results] == [True, False]
    assert a.probes == 1 and b.probes == 1


async def test_run_probes_selected_names(
    make_provider: ProviderFactory,
) -> None:
    a = make_provider("gemini", Capability.TEXT_RISK, ok("gemini", ""))
    b = make_provider("cohere", Capability.TEXT_RISK, ok("cohere", ""))

    results = await run_probes({"gemini": a, "cohere": b}, ["cohere"])

    assert [r.name for r in results] == ["cohere"]
    assert a.probes == 0


async def test_unknown_name_raises_key_error(
    make_provider: ProviderFactory,
) -> None:
    a = make_provider("gemini", Capability.TEXT_RISK, ok("gemini", ""))
    with pytest.raises(KeyError):
        await run_probes({"gemini": a}, ["nonesuch"])
