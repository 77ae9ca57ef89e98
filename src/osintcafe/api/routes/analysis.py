"""Analysis endpoints. Every response carries a report, degraded or not."""

from __future__ import annotations

import base64
import binascii
import time
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from osintcafe.analysis.outcome import Degraded, Outcome
from osintcafe.analysis.schemas import AnalysisReport, ProfileInput
from osintcafe.api.app_state import AppState
from osintcafe.api.dependencies import get_state
from osintcafe.api.schemas import (
    APIResponse,
    ConversationRequest,
    ImageRequest,
    ThreatSearchRequest,
    outcome_response,
)
from osintcafe.constants import ID_HEX_LENGTH, SAFETY_TIPS

router = APIRouter(prefix="/api/analysis", tags=["analysis"])


def _respond[R: AnalysisReport](
    state: AppState,
    feature: str,
    outcome: Outcome[R],
    started: float,
) -> APIResponse:
    request_id = uuid.uuid4().hex[:ID_HEX_LENGTH]
    state.logger.log_analysis(
        request_id,
        feature,
        outcome.report.score,
        outcome.degraded,
        round((time.monotonic() - started) * 1000, 1),
        detail=outcome.detail if isinstance(outcome, Degraded) else None,
    )
    return outcome_response(outcome, request_id)


@router.post("/profile")
async def analyze_profile(
    body: ProfileInput,
    state: AppState = Depends(get_state),
) -> APIResponse:
    started = time.monotonic()
    outcome = await state.orchestrator.analyze_profile(body)
    return _respond(state, "profile", outcome, started)


@router.post("/conversation")
async def analyze_conversation(
    body: ConversationRequest,
    state: AppState = Depends(get_state),
) -> APIResponse:
    started = time.monotonic()
    outcome = await state.orchestrator.analyze_conversation(body.messages)
    return _respond(state, "conversation", outcome, started)


@router.post("/image", response_model=None)
async def analyze_image(
    body: ImageRequest,
    state: AppState = Depends(get_state),
) -> APIResponse | JSONResponse:
    try:
        image = base64.b64decode(body.image_base64, validate=True)
    except binascii.Error:
        return JSONResponse(
            status_code=422,
            content=APIResponse(
                success=False, error="image_base64 is not valid base64"
            ).model_dump(),
        )
    started = time.monotonic()
    outcome = await state.orchestrator.analyze_image(image, body.mime_type)
    return _respond(state, "image", outcome, started)


@router.post("/threats")
async def search_threats(
    body: ThreatSearchRequest,
    state: AppState = Depends(get_state),
) -> APIResponse:
    started = time.monotonic()
    outcome = await state.orchestrator.search_threats(body.query)
    return _respond(state, "threats", outcome, started)


@router.get("/safety-tips")
async def safety_tips() -> APIResponse:
    return APIResponse(success=True, data=list(SAFETY_TIPS))
