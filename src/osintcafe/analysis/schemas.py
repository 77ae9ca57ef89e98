"""Pydantic models for analysis input and UI-facing reports."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from osintcafe.constants import RiskLevel, clamp_score


class ProfileInput(BaseModel):
    """Dating profile fields as submitted by the user."""

    name: str | None = None
    age: int | None = Field(default=None, ge=0, le=150)
    bio: str | None = None
    location: str | None = None
    occupation: str | None = None
    # None = not supplied; [] = supplied with no photos
    photos: list[str] | None = None
    profile_text: str | None = None

    def searchable_text(self) -> str:
        """All free-text fields joined, for keyword heuristics."""
        parts = (
            self.name, self.bio, self.location,
            self.occupation, self.profile_text,
        )
        return "\n".join(p for p in parts if p)


class AnalysisReport(BaseModel):
    """Normalized ``{score, flags, recommendations}`` result.

    Score is clamped into [0, 100]; list fields are never null.
    """

    model_config = ConfigDict(frozen=True)

    score: int = 0
    flags: list[str] = Field(default_factory=lambda: list[str]())
    recommendations: list[str] = Field(
        default_factory=lambda: list[str]()
    )

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, v: Any) -> int:
        try:
            return clamp_score(float(v))
        except (TypeError, ValueError, OverflowError):
            return 0

    @field_validator("flags", "recommendations", mode="before")
    @classmethod
    def _coerce_strings(cls, v: Any) -> list[str]:
        return _string_list(v)


class ConversationReport(AnalysisReport):
    scam_likelihood: int = 0
    manipulation_tactics: list[str] = Field(
        default_factory=lambda: list[str]()
    )
    risk_level: RiskLevel = RiskLevel.LOW

    @field_validator("scam_likelihood", mode="before")
    @classmethod
    def _clamp_likelihood(cls, v: Any) -> int:
        try:
            return clamp_score(float(v))
        except (TypeError, ValueError, OverflowError):
            return 0

    @field_validator("manipulation_tactics", mode="before")
    @classmethod
    def _coerce_tactics(cls, v: Any) -> list[str]:
        return _string_list(v)


class ImageReport(AnalysisReport):
    risk_level: RiskLevel = RiskLevel.MEDIUM
    details: list[str] = Field(default_factory=lambda: list[str]())
    is_authentic: bool = False
    face_detected: bool = False
    multiple_persons: bool = False
    manipulation_detected: bool = False
    reverse_search_results: list[str] = Field(
        default_factory=lambda: list[str]()
    )

    @field_validator("details", "reverse_search_results", mode="before")
    @classmethod
    def _coerce_details(cls, v: Any) -> list[str]:
        return _string_list(v)


class IdentityReport(AnalysisReport):
    verified: bool = False
    risk_level: RiskLevel = RiskLevel.HIGH
    trust_score: int | None = None
    identity_age: str | None = None
    verified_by: str = "anonymous"


class Threat(BaseModel):
    """One web-intel finding with an assessed severity."""

    model_config = ConfigDict(frozen=True)

    type: str
    severity: RiskLevel
    description: str
    source: str = "web"
    timestamp: str | None = None


class ThreatReport(AnalysisReport):
    risk_score: int = 0
    threats: list[Threat] = Field(default_factory=lambda: list[Threat]())
    summary: str = ""


def _string_list(v: Any) -> list[str]:
    if v is None:
        return []
    if isinstance(v, str):
        return [v] if v else []
    if isinstance(v, (list, tuple)):
        return [str(item) for item in v if item is not None]  # pyright: ignore[reportUnknownVariableType]
    return [str(v)]
