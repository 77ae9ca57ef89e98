"""Parse provider output into reports: embedded JSON first, heuristics second.

LLM replies are not reliably clean JSON. Every public ``normalize_*``
function tries the first balanced ``{...}`` object in the reply and,
if it is missing or lacks the expected fields, scores the raw text
with keyword heuristics. Either path returns a complete report.
"""

from __future__ import annotations

import json
import logging
import math
from collections.abc import Iterable
from typing import Any, cast

from osintcafe.analysis.schemas import (
    AnalysisReport,
    ConversationReport,
    IdentityReport,
    ImageReport,
    ProfileInput,
    Threat,
    ThreatReport,
)
from osintcafe.constants import (
    CONVERSATION_HIGH_RISK_KEYWORDS,
    CONVERSATION_MEDIUM_RISK_KEYWORDS,
    HIGH_RISK_THREAT_KEYWORDS,
    IMAGE_DEEPFAKE_THRESHOLD,
    IMAGE_FACTOR_THRESHOLD,
    IMAGE_MEDIUM_THRESHOLD,
    IMAGE_PROSE_DETAIL_CHARS,
    KEYWORD_PENALTY,
    MEDIUM_RISK_THREAT_KEYWORDS,
    RISK_SCORE_BANDS,
    SCORE_MAX,
    SHORT_SUBJECT_CHARS,
    THREAT_DESCRIPTION_CHARS,
    THREAT_WEIGHTS,
    TRUST_LOW_THRESHOLD,
    RiskLevel,
    clamp_score,
    score_for_risk,
)
from osintcafe.providers.base import RawPayload

logger = logging.getLogger(__name__)

PROFILE_FALLBACK_FLAGS = ["Analysis completed with AI"]
PROFILE_FALLBACK_RECOMMENDATIONS = [
    "Proceed with caution",
    "Verify identity through video call",
]
CONVERSATION_FALLBACK_RECOMMENDATIONS = [
    "Verify identity",
    "Never send money",
    "Video call verification",
]
IMAGE_RECOMMENDATIONS: dict[RiskLevel, list[str]] = {
    RiskLevel.LOW: ["Image appears consistent; keep standard precautions"],
    RiskLevel.MEDIUM: [
        "Run a reverse image search on this photo",
        "Ask for a live video call before meeting",
    ],
    RiskLevel.HIGH: [
        "Treat this photo as potentially fake or manipulated",
        "Run a reverse image search on this photo",
        "Ask for a live video call before meeting",
    ],
}

_RISK_ORDER = (RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH)

# Structured image detections and their report labels
_DETECTION_LABELS = {
    "deepfake": "Deepfake detection",
    "manipulation": "Image manipulation",
    "face_swap": "Face swap detected",
}

_THREAT_CATEGORIES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("romance", "dating"), "Romance Scam"),
    (("financial", "money"), "Financial Fraud"),
    (("identity", "personal"), "Identity Theft"),
    (("phishing", "email"), "Phishing Attack"),
)


# ── Structured extraction ────────────────────────────────


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first balanced ``{...}`` in text parsed as a JSON object.

    Braces inside JSON strings are ignored. Returns None when there is
    no balanced object or it does not parse to a dict.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                try:
                    data: Any = json.loads(text[start : i + 1])
                except json.JSONDecodeError:
                    return None
                if isinstance(data, dict):
                    return cast(dict[str, Any], data)
                return None
    return None


def _payload(raw: RawPayload) -> tuple[dict[str, Any] | None, str]:
    """Split a provider payload into (structured data, searchable text)."""
    if isinstance(raw, dict):
        return raw, json.dumps(raw)
    return extract_json_object(raw), raw


def _risk_level(value: Any) -> RiskLevel:
    """Coerce a provider risk label; anything unrecognized is medium."""
    if isinstance(value, str):
        label = value.strip().lower()
        for level in _RISK_ORDER:
            if label == level:
                return level
    return RiskLevel.MEDIUM


def _escalate(current: RiskLevel, floor: RiskLevel) -> RiskLevel:
    return max(current, floor, key=_RISK_ORDER.index)


def _is_number(value: Any) -> bool:
    # json.loads accepts NaN and Infinity
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


# ── Profile ──────────────────────────────────────────────


def normalize_profile(raw: RawPayload) -> AnalysisReport:
    """Map ``overallRisk`` to the 85/60/25 band; flags from riskFactors."""
    data, text = _payload(raw)
    if data is not None and "overallRisk" in data:
        return AnalysisReport(
            score=score_for_risk(_risk_level(data["overallRisk"])),
            flags=data.get("riskFactors"),
            recommendations=data.get("recommendations"),
        )
    logger.info("event=normalizer_heuristic feature=profile")
    return profile_heuristic(text)


def profile_heuristic(text: str) -> AnalysisReport:
    lower = text.lower()
    if "high" in lower:
        risk = RiskLevel.HIGH
    elif "medium" in lower:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW
    return AnalysisReport(
        score=score_for_risk(risk),
        flags=list(PROFILE_FALLBACK_FLAGS),
        recommendations=list(PROFILE_FALLBACK_RECOMMENDATIONS),
    )


# ── Conversation ─────────────────────────────────────────


def normalize_conversation(
    raw: RawPayload, transcript: str, keywords: Iterable[str]
) -> ConversationReport:
    """Score = 100 - scamLikelihood; keyword heuristic over the transcript
    when the reply carries no usable likelihood."""
    data, _ = _payload(raw)
    if data is not None and _is_number(data.get("scamLikelihood")):
        likelihood = clamp_score(float(data["scamLikelihood"]))
        return ConversationReport(
            score=SCORE_MAX - likelihood,
            scam_likelihood=likelihood,
            flags=data.get("redFlags"),
            manipulation_tactics=data.get("manipulationTactics"),
            recommendations=data.get("recommendations"),
            risk_level=_risk_level(data.get("conversationRisk")),
        )
    logger.info("event=normalizer_heuristic feature=conversation")
    return conversation_heuristic(transcript, keywords)


def conversation_heuristic(
    transcript: str, keywords: Iterable[str]
) -> ConversationReport:
    """Each distinct suspicious keyword found adds 20 to scam likelihood."""
    lower = transcript.lower()
    found = [k for k in dict.fromkeys(keywords) if k and k in lower]
    likelihood = clamp_score(len(found) * KEYWORD_PENALTY)
    if len(found) > CONVERSATION_HIGH_RISK_KEYWORDS:
        risk = RiskLevel.HIGH
    elif len(found) > CONVERSATION_MEDIUM_RISK_KEYWORDS:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW
    return ConversationReport(
        score=SCORE_MAX - likelihood,
        scam_likelihood=likelihood,
        flags=[f"Mentions: {k}" for k in found],
        manipulation_tactics=["Keyword-based screening only"],
        recommendations=list(CONVERSATION_FALLBACK_RECOMMENDATIONS),
        risk_level=risk,
    )


# ── Image ────────────────────────────────────────────────


def normalize_image(raw: RawPayload) -> ImageReport:
    """Handles detection payloads, vision-model JSON, and plain prose."""
    data, text = _payload(raw)
    if data is not None and isinstance(data.get("detections"), dict):
        return _image_from_detections(data)
    if data is not None and "riskLevel" in data:
        return _image_from_assessment(data)
    logger.info("event=normalizer_heuristic feature=image")
    return image_heuristic(text)


def _confidence(entry: Any) -> float:
    if isinstance(entry, dict):
        entry = cast(dict[str, Any], entry).get("confidence", 0)
    if not _is_number(entry):
        return 0.0
    return max(0.0, min(1.0, float(entry)))


def _image_from_detections(data: dict[str, Any]) -> ImageReport:
    detections = cast(dict[str, Any], data["detections"])
    raw_meta: Any = data.get("metadata")
    metadata = cast(dict[str, Any], raw_meta) if isinstance(raw_meta, dict) else {}

    scores = {key: _confidence(detections.get(key)) for key in _DETECTION_LABELS}
    top = max(scores.values())
    if top > IMAGE_DEEPFAKE_THRESHOLD:
        risk = RiskLevel.HIGH
    elif top > IMAGE_MEDIUM_THRESHOLD:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW

    factors = [
        f"{_DETECTION_LABELS[key]}: {value * 100:.1f}%"
        for key, value in scores.items()
        if value > IMAGE_FACTOR_THRESHOLD
    ]
    faces: Any = metadata.get("faces_detected", 0)
    return ImageReport(
        score=score_for_risk(risk),
        risk_level=risk,
        flags=factors,
        details=[f"Highest manipulation score: {top * 100:.1f}%", *factors],
        recommendations=list(IMAGE_RECOMMENDATIONS[risk]),
        is_authentic=top <= IMAGE_DEEPFAKE_THRESHOLD,
        face_detected=_is_number(faces) and faces > 0,
        manipulation_detected=top > IMAGE_DEEPFAKE_THRESHOLD,
    )


def _flag(value: Any) -> bool:
    """True only for a JSON boolean or the string "true"."""
    if isinstance(value, bool):
        return value
    return isinstance(value, str) and value.strip().lower() == "true"


def _image_from_assessment(data: dict[str, Any]) -> ImageReport:
    risk = _risk_level(data.get("riskLevel"))
    is_authentic = _flag(data.get("isAuthentic"))
    face_detected = _flag(data.get("faceDetected"))
    multiple = _flag(data.get("multiplePersons"))
    manipulated = _flag(data.get("manipulationDetected"))

    flags: list[str] = []
    if manipulated:
        flags.append("Manipulation detected")
    if not is_authentic:
        flags.append("Authenticity could not be confirmed")
    if multiple:
        flags.append("Multiple persons in image")

    details: Any = data.get("details")
    if not details:
        details = [
            "AI image analysis complete",
            f"Risk level: {risk}",
            f"Face detection: {'Yes' if face_detected else 'No'}",
            f"Authenticity: {'Appears real' if is_authentic else 'Suspicious'}",
        ]
    return ImageReport(
        score=score_for_risk(risk),
        risk_level=risk,
        flags=flags,
        details=details,
        recommendations=list(IMAGE_RECOMMENDATIONS[risk]),
        is_authentic=is_authentic,
        face_detected=face_detected,
        multiple_persons=multiple,
        manipulation_detected=manipulated,
    )


def image_heuristic(text: str) -> ImageReport:
    lower = text.lower()
    if "high risk" in lower:
        risk = RiskLevel.HIGH
    elif "medium risk" in lower:
        risk = RiskLevel.MEDIUM
    else:
        risk = RiskLevel.LOW
    manipulated = "manipulated" in lower
    is_authentic = "fake" not in lower
    flags: list[str] = []
    if manipulated:
        flags.append("Manipulation mentioned in analysis")
    if not is_authentic:
        flags.append("Image described as fake")
    snippet = text[:IMAGE_PROSE_DETAIL_CHARS].strip()
    return ImageReport(
        score=score_for_risk(risk),
        risk_level=risk,
        flags=flags,
        details=[snippet] if snippet else [],
        recommendations=list(IMAGE_RECOMMENDATIONS[risk]),
        is_authentic=is_authentic,
        face_detected="face" in lower,
        multiple_persons="multiple" in lower,
        manipulation_detected=manipulated,
    )


def image_failure_report(detail: str) -> ImageReport:
    """Conservative high-risk result when no provider could analyze."""
    return ImageReport(
        score=RISK_SCORE_BANDS[RiskLevel.HIGH],
        risk_level=RiskLevel.HIGH,
        flags=["Image analysis unavailable"],
        details=[
            f"Error: {detail}",
            "Please check image analysis provider configuration",
        ],
        recommendations=list(IMAGE_RECOMMENDATIONS[RiskLevel.HIGH]),
        is_authentic=False,
        face_detected=True,
        multiple_persons=False,
        manipulation_detected=True,
        reverse_search_results=["Error: Could not complete analysis"],
    )


# ── Web intelligence ─────────────────────────────────────


def assess_threat_severity(content: str) -> RiskLevel:
    lower = content.lower()
    if any(k in lower for k in HIGH_RISK_THREAT_KEYWORDS):
        return RiskLevel.HIGH
    if any(k in lower for k in MEDIUM_RISK_THREAT_KEYWORDS):
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def categorize_threat(content: str) -> str:
    lower = content.lower()
    for words, category in _THREAT_CATEGORIES:
        if any(w in lower for w in words):
            return category
    return "General Threat"


def _threat(content: str, source: str, timestamp: Any) -> Threat | None:
    severity = assess_threat_severity(content)
    if severity is RiskLevel.LOW:
        return None
    return Threat(
        type=categorize_threat(content),
        severity=severity,
        description=content[:THREAT_DESCRIPTION_CHARS],
        source=source,
        timestamp=str(timestamp) if timestamp else None,
    )


def normalize_web_intel(raw: RawPayload, query: str) -> ThreatReport:
    """Keep non-low results as threats; high +30, medium +15, cap 100."""
    data, text = _payload(raw)
    threats: list[Threat] = []
    if data is not None and isinstance(data.get("results"), list):
        for raw_item in cast(list[Any], data["results"]):
            if not isinstance(raw_item, dict):
                continue
            item = cast(dict[str, Any], raw_item)
            content = str(item.get("content") or item.get("title") or "")
            threat = _threat(
                content,
                str(item.get("source") or "web"),
                item.get("timestamp"),
            )
            if threat is not None:
                threats.append(threat)
    elif text.strip():
        logger.info("event=normalizer_heuristic feature=web_intel")
        threat = _threat(text, "web", None)
        if threat is not None:
            threats.append(threat)

    risk_score = clamp_score(
        sum(THREAT_WEIGHTS.get(t.severity, 0) for t in threats)
    )
    return ThreatReport(
        score=SCORE_MAX - risk_score,
        risk_score=risk_score,
        threats=threats,
        flags=[f"{t.type}: {t.description}" for t in threats],
        recommendations=(
            ["Cross-check identity details against the reported sources"]
            if threats
            else []
        ),
        summary=(
            f'Found {len(threats)} potential threats for "{query}" '
            f"(Risk: {risk_score}/100)"
        ),
    )


# ── Identity ─────────────────────────────────────────────


def normalize_identity(
    raw: RawPayload,
    subject: str,
    fallback_trust: int,
    fallback_age: str,
    profile: ProfileInput | None = None,
) -> IdentityReport:
    """Build a verified report from the ledger's identity record.

    Missing trust score or age fall back to the supplied local values.
    """
    data, _ = _payload(raw)
    record = data or {}
    trust_value: Any = record.get("trust_score")
    trust = (
        clamp_score(float(trust_value))
        if _is_number(trust_value)
        else fallback_trust
    )
    age = str(record.get("identity_age") or fallback_age)
    risk = (
        _risk_level(record["risk_level"])
        if "risk_level" in record
        else RiskLevel.LOW
    )
    return identity_report(
        subject,
        trust,
        age,
        base_risk=risk,
        extra_recommendations=record.get("recommendations"),
        verified_by=record.get("verified_by"),
        profile=profile,
    )


def identity_report(
    subject: str,
    trust: int,
    age: str,
    *,
    base_risk: RiskLevel = RiskLevel.LOW,
    extra_recommendations: Any = None,
    verified_by: Any = None,
    profile: ProfileInput | None = None,
) -> IdentityReport:
    """Compose a verified-identity report, escalating risk per factor."""
    risk = base_risk
    factors: list[str] = []
    if trust < TRUST_LOW_THRESHOLD:
        factors.append("Low trust score for verifying identity")
        risk = _escalate(risk, RiskLevel.MEDIUM)
    if age == "< 1 month":
        factors.append("New identity - proceed with caution")
        risk = _escalate(
            risk,
            RiskLevel.HIGH if risk is not RiskLevel.LOW else RiskLevel.MEDIUM,
        )
    if profile is not None and profile.photos is not None and not profile.photos:
        factors.append("No profile photos - potential fake profile")
        risk = RiskLevel.HIGH

    extras = AnalysisReport(recommendations=extra_recommendations).recommendations
    return IdentityReport(
        verified=True,
        score=trust,
        trust_score=trust,
        identity_age=age,
        risk_level=risk,
        flags=factors,
        recommendations=[
            "Identity verified through Internet Computer Protocol",
            f"Trust score: {trust}/100",
            f"Identity age: {age}",
            *extras,
        ],
        verified_by=str(verified_by or f"{subject[:SHORT_SUBJECT_CHARS]}..."),
    )


def identity_not_verified_report() -> IdentityReport:
    """Fixed low-trust answer for callers without an identity session."""
    return IdentityReport(
        verified=False,
        score=RISK_SCORE_BANDS[RiskLevel.HIGH],
        risk_level=RiskLevel.HIGH,
        flags=["Identity not verified"],
        recommendations=[
            "Verify identity with Internet Identity before proceeding"
        ],
        verified_by="anonymous",
    )
