"""Consolidated LLM prompts for OSINT Cafe.

All prompts sent to text and vision providers live here. Each asks
for a JSON object, but callers must not assume the reply is clean
JSON: the normalizer extracts the first embedded object or falls
back to keyword heuristics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from osintcafe.analysis.schemas import ProfileInput

# ── Profile analysis ───────────────────────────────────────────────

PROFILE_ANALYSIS_PROMPT = """\
Analyze this dating profile for potential red flags and scam indicators:
Name: {name}
Age: {age}
Bio: {bio}
Location: {location}
Occupation: {occupation}
Photos: {photo_count} photos provided
{extra}
Provide a JSON response with:
- overallRisk: "low", "medium", or "high"
- riskFactors: array of specific concerns
- recommendations: array of safety advice
- verificationStatus: "verified", "suspicious", or "high-risk"
- detailedAnalysis: object with scores 0-100 for profileCompleteness, \
photoAuthenticity, behaviorPatterns, webPresence"""

# ── Conversation analysis ──────────────────────────────────────────

CONVERSATION_ANALYSIS_PROMPT = """\
Analyze this dating conversation for romance scam indicators and \
manipulation tactics:

CONVERSATION:
{transcript}

Provide a JSON response with:
- scamLikelihood: number 0-100
- redFlags: array of specific warning signs found
- manipulationTactics: array of manipulation techniques detected
- recommendations: array of safety advice
- conversationRisk: "low", "medium", or "high"

Look for: love bombing, urgency tactics, financial requests, avoiding \
video calls, inconsistent stories, grammar patterns, emotional manipulation"""

# ── Image analysis (vision providers) ──────────────────────────────

IMAGE_ANALYSIS_PROMPT = (
    "Analyze this image for dating safety. Check for: face detection, "
    "authenticity, manipulation signs, and provide a risk assessment. "
    "Return JSON with: isAuthentic (boolean), faceDetected (boolean), "
    "multiplePersons (boolean), manipulationDetected (boolean), "
    'riskLevel ("low"/"medium"/"high"), details (array of findings).'
)

# ── Web intelligence ───────────────────────────────────────────────

THREAT_QUERY_SUFFIX = "scam fraud dating romance threat"

PROBE_PROMPT = "Respond with exactly: 'API test successful'"


def build_profile_prompt(profile: ProfileInput) -> str:
    """Render the profile prompt, substituting 'Not provided' for gaps."""
    missing = "Not provided"
    extra = (
        f"Profile text: {profile.profile_text}\n"
        if profile.profile_text
        else ""
    )
    return PROFILE_ANALYSIS_PROMPT.format(
        name=profile.name or missing,
        age=profile.age if profile.age is not None else missing,
        bio=profile.bio or missing,
        location=profile.location or missing,
        occupation=profile.occupation or missing,
        photo_count=len(profile.photos or []),
        extra=extra,
    )


def build_conversation_prompt(transcript: str) -> str:
    return CONVERSATION_ANALYSIS_PROMPT.format(transcript=transcript)


def build_threat_query(subject: str) -> str:
    return f"{subject} {THREAT_QUERY_SUFFIX}"
