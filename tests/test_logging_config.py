"""Tests for the two-step process logging setup."""

from __future__ import annotations

import logging
import os
from unittest.mock import patch

import pytest

from osintcafe.logging_config import (
    _THIRD_PARTY_LEVELS,
    LOG_DATEFMT,
    LOG_FORMAT,
    _resolve_level,
    cleanup_third_party_handlers,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flags() -> None:
    """Reset the run-once flags before each test."""
    import osintcafe.logging_config as mod

    mod._configured = False
    mod._cleaned = False


def test_setup_logging_runs_once() -> None:
    with patch("osintcafe.logging_config.logging.basicConfig") as mock_bc:
        setup_logging()
        setup_logging()
        mock_bc.assert_called_once()


def test_setup_passes_explicit_level() -> None:
    with patch("osintcafe.logging_config.logging.basicConfig") as mock_bc:
        setup_logging("debug")
    assert mock_bc.call_args.kwargs["level"] == logging.DEBUG


def test_level_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOG_LEVEL", "error")
    assert _resolve_level(None) == logging.ERROR


def test_unknown_level_falls_back_to_info(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert _resolve_level("chatty") == logging.INFO
    assert _resolve_level(None) == logging.INFO


def test_litellm_log_env_var_set(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LITELLM_LOG", raising=False)
    setup_logging()
    assert os.environ.get("LITELLM_LOG") == "WARNING"


def test_litellm_log_env_var_preserves_existing(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("LITELLM_LOG", "ERROR")
    setup_logging()
    assert os.environ["LITELLM_LOG"] == "ERROR"


def test_third_party_loggers_pinned() -> None:
    setup_logging()
    for name, level in _THIRD_PARTY_LEVELS.items():
        assert logging.getLogger(name).level == level, name


def test_cleanup_clears_litellm_handlers() -> None:
    lg = logging.getLogger("LiteLLM")
    lg.addHandler(logging.StreamHandler())
    lg.propagate = False

    cleanup_third_party_handlers()
    assert lg.handlers == []
    assert lg.propagate is True


def test_cleanup_runs_once() -> None:
    lg = logging.getLogger("LiteLLM Router")
    cleanup_third_party_handlers()

    handler = logging.StreamHandler()
    lg.addHandler(handler)
    cleanup_third_party_handlers()
    try:
        assert handler in lg.handlers
    finally:
        lg.removeHandler(handler)


def test_log_format_constants() -> None:
    assert "%(name)s" in LOG_FORMAT
    assert LOG_DATEFMT
