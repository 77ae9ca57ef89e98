"""Request/response schemas for the HTTP API."""

from typing import Any

from pydantic import BaseModel, Field

from osintcafe.analysis.outcome import Degraded, Outcome
from osintcafe.analysis.schemas import AnalysisReport


class APIResponse(BaseModel):
    """Standard response envelope for all API endpoints."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class ConversationRequest(BaseModel):
    """Request body for POST /api/analysis/conversation."""

    messages: list[str] = Field(min_length=1, max_length=500)


class ImageRequest(BaseModel):
    """Request body for POST /api/analysis/image."""

    image_base64: str = Field(min_length=1)
    mime_type: str = Field(default="image/jpeg", pattern=r"^image/[\w.+-]+$")


class ThreatSearchRequest(BaseModel):
    """Request body for POST /api/analysis/threats."""

    query: str = Field(min_length=1, max_length=500)


class LoginRequest(BaseModel):
    """Request body for POST /api/identity/login."""

    subject: str = Field(min_length=1, max_length=200)


class TrustScoreRequest(BaseModel):
    score: int = Field(ge=0, le=100)


class NicknameRequest(BaseModel):
    nickname: str = Field(min_length=1, max_length=64)


def outcome_response[R: AnalysisReport](
    outcome: Outcome[R], request_id: str
) -> APIResponse:
    """Serialize an outcome; degradation only shows in metadata."""
    metadata: dict[str, Any] = {
        "request_id": request_id,
        "degraded": outcome.degraded,
    }
    if isinstance(outcome, Degraded):
        metadata["reason"] = str(outcome.reason)
    return APIResponse(
        success=True,
        data=outcome.report.model_dump(mode="json"),
        metadata=metadata,
    )
