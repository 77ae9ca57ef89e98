"""Build the provider set once from Settings."""

from __future__ import annotations

import logging

import httpx

from osintcafe.config import Settings
from osintcafe.identity.ledger import LedgerClient
from osintcafe.providers.base import Provider
from osintcafe.providers.dappier import DappierSearchProvider
from osintcafe.providers.ledger import LedgerIdentityProvider
from osintcafe.providers.llm import TextLLMProvider, VisionLLMProvider
from osintcafe.providers.pica import PicaImageProvider

logger = logging.getLogger(__name__)


def build_ledger_client(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> LedgerClient:
    return LedgerClient(
        settings.ledger_base_url,
        settings.ledger_canister_id,
        settings.provider_timeout_seconds,
        transport=transport,
    )


def build_providers(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Provider]:
    """Every known provider keyed by name, configured or not.

    Unconfigured providers are kept: they fail fast with
    Unconfigured, which the chain reports instead of hiding.
    """
    timeout = settings.provider_timeout_seconds
    providers: dict[str, Provider] = {
        "gemini": TextLLMProvider(
            "gemini", settings.gemini_model,
            settings.gemini_api_key, timeout,
        ),
        "cohere": TextLLMProvider(
            "cohere", settings.cohere_model,
            settings.cohere_api_key, timeout,
        ),
        "deepseek": VisionLLMProvider(
            "deepseek", settings.deepseek_model,
            settings.deepseek_api_key, timeout,
        ),
        "pica": PicaImageProvider(
            settings.pica_api_key, settings.pica_base_url,
            timeout, transport=transport,
        ),
        "dappier": DappierSearchProvider(
            settings.dappier_api_key, settings.dappier_base_url,
            timeout, transport=transport,
        ),
        "ledger": LedgerIdentityProvider(
            build_ledger_client(settings, transport), timeout
        ),
    }
    configured = [
        name for name, p in providers.items()
        if getattr(p, "configured", True)
    ]
    logger.info(
        "event=providers_built configured=%s",
        ",".join(configured) or "none",
    )
    return providers
