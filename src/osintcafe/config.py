"""Environment-based configuration for providers and the HTTP surface."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, NoDecode

from osintcafe.constants import (
    DEFAULT_SUSPICIOUS_KEYWORDS,
    SESSION_IDLE_SECONDS,
    SESSION_MAX_COUNT,
    Capability,
)

logger = logging.getLogger(__name__)

# Provider name → the capability it implements
PROVIDER_CAPABILITIES: dict[str, Capability] = {
    "gemini": Capability.TEXT_RISK,
    "cohere": Capability.TEXT_RISK,
    "deepseek": Capability.IMAGE_RISK,
    "pica": Capability.IMAGE_RISK,
    "dappier": Capability.WEB_INTEL,
    "ledger": Capability.IDENTITY_VERIFY,
}

_CHAIN_FIELDS: dict[str, Capability] = {
    "text_risk_chain": Capability.TEXT_RISK,
    "image_risk_chain": Capability.IMAGE_RISK,
    "web_intel_chain": Capability.WEB_INTEL,
    "identity_verify_chain": Capability.IDENTITY_VERIFY,
}


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # Provider credentials (empty = unconfigured, never fatal)
    gemini_api_key: str = ""
    cohere_api_key: str = ""
    deepseek_api_key: str = ""
    pica_api_key: str = ""
    dappier_api_key: str = ""

    # Provider models / endpoints
    gemini_model: str = "gemini/gemini-1.5-flash"
    cohere_model: str = "cohere/command-r"
    deepseek_model: str = "deepseek/deepseek-chat"
    pica_base_url: str = "https://api.picaos.com/v1"
    dappier_base_url: str = "https://api.dappier.com/app/dataapi/v1"
    ledger_base_url: str = ""
    ledger_canister_id: str = "uxrrr-q7777-77774-qaaaq-cai"

    # Per-capability chains (first = preferred, rest tried in order)
    text_risk_chain: Annotated[list[str], NoDecode] = ["gemini", "cohere"]
    image_risk_chain: Annotated[list[str], NoDecode] = ["deepseek", "pica"]
    web_intel_chain: Annotated[list[str], NoDecode] = ["dappier"]
    identity_verify_chain: Annotated[list[str], NoDecode] = ["ledger"]

    provider_timeout_seconds: float = 30.0
    # Attempts per provider for Unreachable failures (1 = no retry)
    chain_max_attempts: int = 1

    # Heuristics
    suspicious_keywords: Annotated[list[str], NoDecode] = list(
        DEFAULT_SUSPICIOUS_KEYWORDS
    )

    # Directories
    log_dir: Path = Path("logs")

    # Logging
    log_level: str = "INFO"
    debug_mode: bool = False

    # API
    api_key: str = ""
    cors_origins: str = "http://localhost:5173"
    session_idle_seconds: float = SESSION_IDLE_SECONDS
    max_sessions: int = SESSION_MAX_COUNT

    @field_validator(
        "text_risk_chain",
        "image_risk_chain",
        "web_intel_chain",
        "identity_verify_chain",
        "suspicious_keywords",
        mode="before",
    )
    @classmethod
    def _parse_list(cls, v: Any) -> Any:
        """Accept comma-separated string or JSON array."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator(
        "text_risk_chain",
        "image_risk_chain",
        "web_intel_chain",
        "identity_verify_chain",
    )
    @classmethod
    def _validate_chain(
        cls, v: list[str], info: ValidationInfo
    ) -> list[str]:
        capability = _CHAIN_FIELDS[info.field_name]
        seen: set[str] = set()
        dupes: list[str] = []
        for name in v:
            owner = PROVIDER_CAPABILITIES.get(name)
            if owner is None:
                raise ValueError(f"unknown provider '{name}'")
            if owner != capability:
                raise ValueError(
                    f"provider '{name}' implements {owner}, "
                    f"not {capability}"
                )
            if name in seen:
                dupes.append(name)
            seen.add(name)
        if dupes:
            logger.warning(
                "Duplicate providers in %s: %s",
                info.field_name.upper(),
                ", ".join(dupes),
            )
        return v

    @field_validator("suspicious_keywords")
    @classmethod
    def _lowercase_keywords(cls, v: list[str]) -> list[str]:
        return [k.lower() for k in v]

    @field_validator("chain_max_attempts")
    @classmethod
    def _validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("chain_max_attempts must be at least 1")
        return v

    @field_validator("max_sessions")
    @classmethod
    def _validate_max_sessions(cls, v: int) -> int:
        if v < 1:
            raise ValueError("max_sessions must be at least 1")
        return v

    @field_validator("session_idle_seconds")
    @classmethod
    def _validate_idle(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("session_idle_seconds must be positive")
        return v

    def chain_for(self, capability: Capability) -> list[str]:
        """Ordered provider names configured for a capability."""
        for field_name, cap in _CHAIN_FIELDS.items():
            if cap == capability:
                return list(getattr(self, field_name))
        raise KeyError(capability)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
        "frozen": True,
    }
