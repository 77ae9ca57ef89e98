"""FastAPI application with lifespan startup."""

import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

# Phase 1: logging before any osintcafe imports that pull in litellm
from osintcafe.logging_config import setup_logging

setup_logging()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.responses import JSONResponse  # noqa: E402

from osintcafe import __version__  # noqa: E402
from osintcafe.analysis.factory import build_orchestrator  # noqa: E402
from osintcafe.api.app_state import AppState, SessionRegistry  # noqa: E402
from osintcafe.api.middleware.auth import ApiKeyMiddleware  # noqa: E402
from osintcafe.api.routes import analysis, health, identity  # noqa: E402
from osintcafe.api.schemas import APIResponse  # noqa: E402
from osintcafe.config import Settings  # noqa: E402
from osintcafe.constants import ID_HEX_LENGTH  # noqa: E402
from osintcafe.logger import AnalysisLogger  # noqa: E402
from osintcafe.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)
from osintcafe.providers.registry import build_ledger_client  # noqa: E402
from osintcafe.resilience.errors import (  # noqa: E402
    LedgerError,
    UnauthenticatedError,
)

# Phase 2: clear litellm's duplicate handlers
cleanup_third_party_handlers()

_logger = logging.getLogger(__name__)


def build_state(settings: Settings) -> AppState:
    """Assemble providers, chains and sessions from settings."""
    orchestrator, providers = build_orchestrator(settings)
    return AppState(
        settings=settings,
        orchestrator=orchestrator,
        providers=providers,
        sessions=SessionRegistry(
            build_ledger_client(settings),
            idle_seconds=settings.session_idle_seconds,
            max_sessions=settings.max_sessions,
        ),
        logger=AnalysisLogger(
            log_dir=settings.log_dir, level=settings.log_level
        ),
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = _settings
    app.state.typed = build_state(settings)

    if not settings.api_key:
        _logger.warning(
            "event=no_api_key action=all_endpoints_public"
        )

    yield


app = FastAPI(
    title="OSINT Cafe",
    description=(
        "Dating-safety analysis over hosted providers,"
        " degrading gracefully when they fail"
    ),
    version=__version__,
    openapi_url="/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)


@app.exception_handler(UnauthenticatedError)
async def _unauthenticated(
    request: Request, exc: UnauthenticatedError
) -> JSONResponse:
    return JSONResponse(
        status_code=401,
        content=APIResponse(success=False, error=str(exc)).model_dump(),
    )


@app.exception_handler(LedgerError)
async def _ledger_failed(request: Request, exc: LedgerError) -> JSONResponse:
    request_id = uuid.uuid4().hex[:ID_HEX_LENGTH]
    _logger.warning(
        "event=ledger_error request_id=%s operation=%s kind=%s",
        request_id,
        exc.operation,
        exc.kind,
    )
    state: AppState = request.app.state.typed
    state.logger.log_error(request_id, f"ledger.{exc.operation}", str(exc))
    return JSONResponse(
        status_code=502,
        content=APIResponse(
            success=False,
            error=str(exc),
            metadata={"reason": str(exc.kind), "request_id": request_id},
        ).model_dump(),
    )


@app.exception_handler(ValueError)
async def _invalid_value(request: Request, exc: ValueError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content=APIResponse(success=False, error=str(exc)).model_dump(),
    )


# Middleware stack (Starlette LIFO: last added = outermost = runs first)
#
# CORS must be outermost so OPTIONS preflight is answered before
# ApiKeyMiddleware rejects for missing X-API-Key.
_settings = Settings()
_cors_origins = [
    o.strip()
    for o in _settings.cors_origins.split(",")
    if o.strip()
]

app.add_middleware(ApiKeyMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-API-Key", "X-Session-Token"],
    allow_credentials=False,
)

app.include_router(health.router)
app.include_router(analysis.router)
app.include_router(identity.router)
