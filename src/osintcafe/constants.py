"""Shared constants used across modules.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON logs,
API payloads) works unchanged.
"""

from __future__ import annotations

import math
from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class Capability(StrEnum):
    """Logical analysis operations, independent of provider."""

    TEXT_RISK = "text-risk"
    IMAGE_RISK = "image-risk"
    IDENTITY_VERIFY = "identity-verify"
    WEB_INTEL = "web-intel"


class ErrorKind(StrEnum):
    """Failure taxonomy for provider calls and gated operations."""

    UNCONFIGURED = "Unconfigured"  # missing credential
    UNREACHABLE = "Unreachable"  # network error or timeout
    REJECTED = "Rejected"  # non-2xx with body
    UNPARSEABLE = "Unparseable"  # 2xx but unexpected shape
    UNAUTHENTICATED = "Unauthenticated"  # identity-gated, no session


class RiskLevel(StrEnum):
    """Categorical risk labels returned by providers."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# ── Scoring ──────────────────────────────────────────────

SCORE_MIN = 0
SCORE_MAX = 100

# Categorical risk → safety score band
RISK_SCORE_BANDS: dict[str, int] = {
    RiskLevel.LOW: 85,
    RiskLevel.MEDIUM: 60,
    RiskLevel.HIGH: 25,
}


def score_for_risk(level: str) -> int:
    """Map 'low'/'medium'/'high' to a score band; unknown → medium."""
    return RISK_SCORE_BANDS.get(
        level.lower(), RISK_SCORE_BANDS[RiskLevel.MEDIUM]
    )


def clamp_score(value: float) -> int:
    """Round and clamp a score into [SCORE_MIN, SCORE_MAX].

    Infinities clamp to the nearest bound; NaN raises ValueError.
    """
    if math.isnan(value):
        raise ValueError("score is NaN")
    return round(max(SCORE_MIN, min(SCORE_MAX, value)))


# Each matched suspicious keyword adds this much scam likelihood
KEYWORD_PENALTY = 20

DEFAULT_SUSPICIOUS_KEYWORDS: list[str] = [
    "money",
    "wire",
    "transfer",
    "emergency",
    "sick",
    "accident",
    "travel",
    "military",
]

# Conversation risk thresholds (matched keyword counts)
CONVERSATION_HIGH_RISK_KEYWORDS = 2  # strictly more than → high
CONVERSATION_MEDIUM_RISK_KEYWORDS = 0  # strictly more than → medium

# Detection confidence thresholds for structured image payloads
IMAGE_DEEPFAKE_THRESHOLD = 0.6
IMAGE_MEDIUM_THRESHOLD = 0.3
IMAGE_FACTOR_THRESHOLD = 0.5

# Web-intel severity weights
THREAT_WEIGHTS: dict[str, int] = {
    RiskLevel.HIGH: 30,
    RiskLevel.MEDIUM: 15,
}

HIGH_RISK_THREAT_KEYWORDS = (
    "scam",
    "fraud",
    "stolen",
    "fake",
    "phishing",
    "identity theft",
)
MEDIUM_RISK_THREAT_KEYWORDS = (
    "suspicious",
    "report",
    "warning",
    "caution",
    "verify",
)

# Identity trust heuristic
TRUST_BASE_SCORE = 50
TRUST_LONG_SUBJECT_LENGTH = 40
TRUST_LONG_SUBJECT_BONUS = 20
TRUST_DIGIT_BONUS = 10
TRUST_PRINCIPAL_SHAPE_BONUS = 20
TRUST_LOW_THRESHOLD = 60

IDENTITY_AGES = ("< 1 month", "1-6 months", "6+ months", "1+ year")

# ── Provider Defaults ────────────────────────────────────

CONVERSATION_SEPARATOR = "\n\n---\n\n"
LLM_MAX_OUTPUT_TOKENS = 1000
LLM_TEMPERATURE = 0.7
VISION_TEMPERATURE = 0.3
WEB_INTEL_RESULT_LIMIT = 10
WEB_INTEL_SNIPPET_CHARS = 100
THREAT_DESCRIPTION_CHARS = 200
IMAGE_PROSE_DETAIL_CHARS = 200

# ── Retry Strategy ───────────────────────────────────────

RETRY_INITIAL_WAIT = 1
RETRY_MAX_WAIT = 10

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
SHORT_SUBJECT_CHARS = 8
ID_HEX_LENGTH = 12

# Identity session registry bounds
SESSION_IDLE_SECONDS = 3600.0
SESSION_MAX_COUNT = 1000

AUTH_EXEMPT_PATHS = frozenset({
    "/api/health",
    "/api/docs",
    "/api/redoc",
    "/openapi.json",
})

AUTH_EXEMPT_PREFIXES = ("/api/health",)

SAFETY_TIPS: list[str] = [
    "Verify identity through video calls",
    "Never send money or financial information",
    "Meet in public places for first dates",
    "Tell friends about your plans",
    "Use reverse image search on photos",
    "Trust your instincts if something feels wrong",
    "Keep personal information private initially",
    "Use this platform's AI verification tools",
]
