"""Process-wide logging setup, split around the litellm import.

``setup_logging`` runs first, before anything imports litellm: litellm
reads ``LITELLM_LOG`` when it is imported. ``cleanup_third_party_handlers``
runs after all imports and removes the StreamHandlers litellm attaches
to its own loggers, so each record is emitted once through the root.
Each step runs at most once per process.
"""

import logging
import os

LOG_FORMAT = "%(asctime)s - %(levelname)s - [%(name)s] - %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"

# Noisy dependency loggers and the level they are pinned to
_THIRD_PARTY_LEVELS: dict[str, int] = {
    "LiteLLM": logging.WARNING,
    "LiteLLM Router": logging.WARNING,
    "LiteLLM Proxy": logging.WARNING,
    "httpx": logging.WARNING,
    "httpcore": logging.WARNING,
}

# Loggers litellm decorates with its own handlers at import time
_LITELLM_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy")

_configured = False
_cleaned = False


def _resolve_level(level: str | None) -> int:
    """Explicit level, else LOG_LEVEL from the environment, else INFO."""
    name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger; call before importing litellm."""
    global _configured  # noqa: PLW0603
    if _configured:
        return
    _configured = True

    os.environ.setdefault("LITELLM_LOG", "WARNING")
    logging.basicConfig(
        level=_resolve_level(level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )
    for name, pinned in _THIRD_PARTY_LEVELS.items():
        logging.getLogger(name).setLevel(pinned)


def cleanup_third_party_handlers() -> None:
    """Drop litellm's own handlers and let its records reach the root."""
    global _cleaned  # noqa: PLW0603
    if _cleaned:
        return
    _cleaned = True

    for name in _LITELLM_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.propagate = True
