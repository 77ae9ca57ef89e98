"""Tests for exception → ErrorKind classification."""

from __future__ import annotations

import asyncio
import json

import httpx

from osintcafe.constants import ErrorKind
from osintcafe.resilience.errors import (
    LedgerError,
    OsintCafeError,
    UnauthenticatedError,
    classify_error,
    is_retryable,
)


class _StatusCodeError(Exception):
    """Exception with a status_code attribute."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


# ── classify_error ───────────────────────────────────────────


def test_timeout_is_unreachable() -> None:
    assert classify_error(TimeoutError()) == ErrorKind.UNREACHABLE
    assert classify_error(asyncio.TimeoutError()) == ErrorKind.UNREACHABLE


def test_httpx_transport_errors_are_unreachable() -> None:
    request = httpx.Request("POST", "https://example.test")
    assert (
        classify_error(httpx.ConnectError("refused", request=request))
        == ErrorKind.UNREACHABLE
    )
    assert (
        classify_error(httpx.ReadTimeout("slow", request=request))
        == ErrorKind.UNREACHABLE
    )


def test_http_status_error_is_rejected() -> None:
    request = httpx.Request("GET", "https://example.test")
    response = httpx.Response(403, request=request)
    err = httpx.HTTPStatusError("forbidden", request=request, response=response)
    assert classify_error(err) == ErrorKind.REJECTED


def test_status_code_attribute_is_rejected() -> None:
    assert classify_error(_StatusCodeError("nope", 401)) == ErrorKind.REJECTED
    assert classify_error(_StatusCodeError("down", 503)) == ErrorKind.REJECTED


def test_json_and_shape_errors_are_unparseable() -> None:
    err = json.JSONDecodeError("bad", "{", 0)
    assert classify_error(err) == ErrorKind.UNPARSEABLE
    assert classify_error(KeyError("choices")) == ErrorKind.UNPARSEABLE
    assert classify_error(TypeError("NoneType")) == ErrorKind.UNPARSEABLE


def test_string_fallbacks() -> None:
    assert (
        classify_error(RuntimeError("Connection reset by peer"))
        == ErrorKind.UNREACHABLE
    )
    assert (
        classify_error(RuntimeError("server said 429 slow down"))
        == ErrorKind.REJECTED
    )


def test_unknown_defaults_to_unreachable() -> None:
    assert classify_error(RuntimeError("???")) == ErrorKind.UNREACHABLE


# ── is_retryable ─────────────────────────────────────────────


def test_only_unreachable_is_retryable() -> None:
    assert is_retryable(ErrorKind.UNREACHABLE) is True
    for kind in (
        ErrorKind.UNCONFIGURED,
        ErrorKind.REJECTED,
        ErrorKind.UNPARSEABLE,
        ErrorKind.UNAUTHENTICATED,
    ):
        assert is_retryable(kind) is False


# ── Exceptions ───────────────────────────────────────────────


def test_unauthenticated_error() -> None:
    err = UnauthenticatedError("get_stats")
    assert isinstance(err, OsintCafeError)
    assert err.kind == ErrorKind.UNAUTHENTICATED
    assert err.operation == "get_stats"
    assert "get_stats" in str(err)


def test_ledger_error_carries_kind() -> None:
    err = LedgerError("set_nickname", "taken", ErrorKind.REJECTED)
    assert isinstance(err, OsintCafeError)
    assert err.kind == ErrorKind.REJECTED
    assert str(err) == "set_nickname failed: taken"
