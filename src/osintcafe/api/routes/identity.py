"""Identity session and ledger endpoints."""

from __future__ import annotations

import time
import uuid

from fastapi import APIRouter, Depends, Header

from osintcafe.analysis.schemas import ProfileInput
from osintcafe.api.app_state import AppState
from osintcafe.api.dependencies import get_identity, get_state
from osintcafe.api.schemas import (
    APIResponse,
    LoginRequest,
    NicknameRequest,
    TrustScoreRequest,
    outcome_response,
)
from osintcafe.constants import ID_HEX_LENGTH
from osintcafe.identity.session import ANONYMOUS, IdentityManager
from osintcafe.resilience.errors import UnauthenticatedError

router = APIRouter(prefix="/api/identity", tags=["identity"])


def _session_data(manager: IdentityManager | None) -> dict[str, object]:
    session = manager.snapshot() if manager else ANONYMOUS
    return {
        "authenticated": session.authenticated,
        "subject": session.subject,
        "trust_score": session.trust_score,
    }


def _require(manager: IdentityManager | None, operation: str) -> IdentityManager:
    if manager is None:
        raise UnauthenticatedError(operation)
    return manager


@router.post("/login")
async def login(
    body: LoginRequest,
    state: AppState = Depends(get_state),
) -> APIResponse:
    token, manager = state.sessions.create()
    try:
        await manager.login(body.subject)
    except ValueError:
        state.sessions.discard(token)
        raise
    return APIResponse(
        success=True,
        data={"token": token, "session": _session_data(manager)},
    )


@router.post("/logout")
async def logout(
    state: AppState = Depends(get_state),
    x_session_token: str | None = Header(default=None),
) -> APIResponse:
    if x_session_token:
        state.sessions.discard(x_session_token)
    return APIResponse(success=True, data=_session_data(None))


@router.get("/session")
async def session(
    manager: IdentityManager | None = Depends(get_identity),
) -> APIResponse:
    return APIResponse(success=True, data=_session_data(manager))


@router.post("/verify")
async def verify(
    body: ProfileInput | None = None,
    state: AppState = Depends(get_state),
    manager: IdentityManager | None = Depends(get_identity),
) -> APIResponse:
    """Verify the caller's identity; anonymous callers get a fixed report."""
    started = time.monotonic()
    snapshot = manager.snapshot() if manager else ANONYMOUS
    outcome = await state.orchestrator.verify_identity(snapshot, body)
    request_id = uuid.uuid4().hex[:ID_HEX_LENGTH]
    state.logger.log_analysis(
        request_id,
        "identity",
        outcome.report.score,
        outcome.degraded,
        round((time.monotonic() - started) * 1000, 1),
    )
    return outcome_response(outcome, request_id)


@router.get("/whoami")
async def whoami(
    manager: IdentityManager | None = Depends(get_identity),
) -> APIResponse:
    profile = await _require(manager, "who_am_i").who_am_i()
    return APIResponse(success=True, data=profile)


@router.get("/stats")
async def stats(
    manager: IdentityManager | None = Depends(get_identity),
) -> APIResponse:
    data = await _require(manager, "get_stats").get_stats()
    return APIResponse(success=True, data=data)


@router.post("/trust-score")
async def trust_score(
    body: TrustScoreRequest,
    manager: IdentityManager | None = Depends(get_identity),
) -> APIResponse:
    identity = _require(manager, "update_trust_score")
    message = await identity.update_trust_score(body.score)
    return APIResponse(
        success=True,
        data={"message": message, "session": _session_data(identity)},
    )


@router.post("/nickname")
async def nickname(
    body: NicknameRequest,
    manager: IdentityManager | None = Depends(get_identity),
) -> APIResponse:
    message = await _require(manager, "set_nickname").set_nickname(
        body.nickname
    )
    return APIResponse(success=True, data={"message": message})
