"""Error classification for provider calls.

Maps exceptions raised inside a provider call onto the ErrorKind
taxonomy so they can travel as data instead of as exceptions:

- Unreachable: transport failures, timeouts
- Rejected: the provider answered with a non-2xx status
- Unparseable: the provider answered 2xx but the body is unusable
"""

from __future__ import annotations

import asyncio
import json

import httpx
from litellm.exceptions import APIConnectionError as LitellmConnectionError
from litellm.exceptions import Timeout as LitellmTimeout

from osintcafe.constants import ErrorKind


class OsintCafeError(Exception):
    """Base class for errors raised past an orchestrator boundary."""

    kind: ErrorKind = ErrorKind.REJECTED


class UnauthenticatedError(OsintCafeError):
    """Identity-gated operation invoked without an active session."""

    kind = ErrorKind.UNAUTHENTICATED

    def __init__(self, operation: str) -> None:
        super().__init__(
            f"{operation} requires an authenticated identity session"
        )
        self.operation = operation


class LedgerError(OsintCafeError):
    """The identity ledger refused or failed a remote operation."""

    def __init__(self, operation: str, detail: str, kind: ErrorKind) -> None:
        super().__init__(f"{operation} failed: {detail}")
        self.operation = operation
        self.detail = detail
        self.kind = kind


def classify_error(error: BaseException) -> ErrorKind:
    """Classify an exception raised during one provider call.

    Checks exception types first (timeouts before status codes, since
    litellm timeouts carry a 408 status_code), then structured
    status_code attributes, then falls back to string matching.
    """
    # 1. Transport and timeout types
    if isinstance(
        error,
        (
            TimeoutError,
            asyncio.TimeoutError,
            httpx.TransportError,
            LitellmTimeout,
            LitellmConnectionError,
        ),
    ):
        return ErrorKind.UNREACHABLE

    # 2. Body shape problems
    if isinstance(error, (json.JSONDecodeError, KeyError, TypeError)):
        return ErrorKind.UNPARSEABLE

    # 3. Structured status codes (httpx responses, litellm exceptions)
    if isinstance(error, httpx.HTTPStatusError):
        return ErrorKind.REJECTED
    status_code = getattr(error, "status_code", None)
    if isinstance(status_code, int) and status_code >= 400:
        return ErrorKind.REJECTED

    # 4. Untyped exceptions
    msg = str(error).lower()
    if "timeout" in msg or "timed out" in msg or "connection" in msg:
        return ErrorKind.UNREACHABLE
    if any(code in msg for code in ("400", "401", "403", "404", "429")):
        return ErrorKind.REJECTED
    if any(code in msg for code in ("500", "502", "503", "504")):
        return ErrorKind.REJECTED

    return ErrorKind.UNREACHABLE


def is_retryable(kind: ErrorKind) -> bool:
    """Only unreachable providers are worth another attempt."""
    return kind is ErrorKind.UNREACHABLE
