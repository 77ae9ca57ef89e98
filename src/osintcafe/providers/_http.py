"""Single-shot JSON request over a fresh httpx client."""

from __future__ import annotations

import logging
from typing import Any, cast

import httpx

from osintcafe.constants import ERROR_TRUNCATION_CHARS, ErrorKind
from osintcafe.providers.base import ProviderError

logger = logging.getLogger(__name__)


async def request_json(
    method: str,
    url: str,
    *,
    timeout: float,
    headers: dict[str, str] | None = None,
    json_body: dict[str, Any] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Perform one HTTP call and return the decoded JSON object.

    Opens and closes its own connection. Non-2xx responses raise
    ProviderError(Rejected) carrying the status and a truncated body;
    a 2xx body that is not a JSON object raises Unparseable. Transport
    errors propagate for the caller's classifier.
    """
    async with httpx.AsyncClient(
        timeout=timeout, transport=transport
    ) as client:
        response = await client.request(
            method,
            url,
            headers={"Content-Type": "application/json", **(headers or {})},
            json=json_body,
        )

    if not response.is_success:
        raise ProviderError(
            ErrorKind.REJECTED,
            f"HTTP {response.status_code}: "
            f"{response.text[:ERROR_TRUNCATION_CHARS]}",
        )

    try:
        body: Any = response.json()
    except ValueError as exc:
        raise ProviderError(
            ErrorKind.UNPARSEABLE,
            f"response is not JSON ({len(response.content)} bytes)",
        ) from exc

    if not isinstance(body, dict):
        raise ProviderError(
            ErrorKind.UNPARSEABLE,
            f"expected JSON object, got {type(body).__name__}",
        )
    return cast(dict[str, Any], body)
