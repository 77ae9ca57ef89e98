"""Optional shared-key authentication for the analysis API."""

from __future__ import annotations

import hmac

from fastapi import Request, Response
from starlette.middleware.base import (
    BaseHTTPMiddleware,
    RequestResponseEndpoint,
)
from starlette.responses import JSONResponse

from osintcafe.api.schemas import APIResponse
from osintcafe.constants import (
    AUTH_EXEMPT_PATHS,
    AUTH_EXEMPT_PREFIXES,
)


def _is_public(path: str) -> bool:
    return path in AUTH_EXEMPT_PATHS or path.startswith(AUTH_EXEMPT_PREFIXES)


def _unauthorized() -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=APIResponse(
            success=False, error="Invalid or missing API key"
        ).model_dump(),
    )


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require a matching X-API-Key header when ``Settings.api_key`` is set.

    This guards the service itself; identity sessions are a separate
    concern carried by X-Session-Token. Health endpoints stay public
    for load balancers.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        expected: str = request.app.state.typed.settings.api_key
        if not expected or _is_public(request.url.path):
            return await call_next(request)

        provided = request.headers.get("X-API-Key", "")
        if not hmac.compare_digest(provided, expected):
            return _unauthorized()
        return await call_next(request)
