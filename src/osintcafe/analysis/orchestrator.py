"""Per-feature analysis entry points over the capability chains."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from osintcafe.analysis.chain import FallbackChain, aggregate_failures
from osintcafe.analysis.normalizer import (
    conversation_heuristic,
    identity_not_verified_report,
    identity_report,
    image_failure_report,
    normalize_conversation,
    normalize_identity,
    normalize_image,
    normalize_profile,
    normalize_web_intel,
)
from osintcafe.analysis.outcome import Completed, Degraded, Outcome
from osintcafe.analysis.schemas import (
    AnalysisReport,
    ConversationReport,
    IdentityReport,
    ImageReport,
    ProfileInput,
    ThreatReport,
)
from osintcafe.config import Settings
from osintcafe.constants import (
    CONVERSATION_SEPARATOR,
    SCORE_MAX,
    WEB_INTEL_SNIPPET_CHARS,
    Capability,
    ErrorKind,
)
from osintcafe.identity.session import IdentitySession
from osintcafe.identity.trust import (
    calculate_trust_score,
    estimate_identity_age,
)
from osintcafe.prompts import (
    build_conversation_prompt,
    build_profile_prompt,
    build_threat_query,
)
from osintcafe.providers.base import (
    AnalysisRequest,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
)

logger = logging.getLogger(__name__)


class AnalysisOrchestrator:
    """Sequences chains per feature and always returns a report.

    Holds only read-only collaborators (chains, settings), so
    concurrent calls share no mutable state. Provider failures come
    back as ``Degraded`` outcomes, never as exceptions.
    """

    def __init__(
        self,
        chains: Mapping[Capability, FallbackChain],
        settings: Settings,
    ) -> None:
        self._chains = dict(chains)
        self._keywords = list(settings.suspicious_keywords)

    async def _run(
        self,
        capability: Capability,
        payload: str | bytes,
        **context: object,
    ) -> ProviderResult:
        chain = self._chains.get(capability)
        if chain is None:
            return aggregate_failures(capability, [])
        return await chain.execute(
            AnalysisRequest(capability, payload, dict(context))
        )

    @staticmethod
    def _degraded[R: AnalysisReport](
        feature: str, report: R, failure: ProviderFailure
    ) -> Degraded[R]:
        logger.warning(
            "event=analysis_degraded feature=%s reason=%s detail=%s",
            feature,
            failure.reason,
            failure.detail,
        )
        return Degraded(report, failure.reason, failure.detail)

    # ── Profile ──────────────────────────────────────────

    async def analyze_profile(
        self, profile: ProfileInput
    ) -> Outcome[AnalysisReport]:
        """Text-risk once, plus best-effort web intel on the name."""
        result = await self._run(
            Capability.TEXT_RISK,
            build_profile_prompt(profile),
            feature="profile",
        )
        findings = (
            await self._web_findings(profile.name) if profile.name else []
        )

        if isinstance(result, ProviderSuccess):
            report = normalize_profile(result.raw)
            if findings:
                report = report.model_copy(
                    update={"flags": [*findings, *report.flags]}
                )
            return Completed(report)

        fallback = conversation_heuristic(
            profile.searchable_text(), self._keywords
        )
        report = AnalysisReport(
            score=fallback.score,
            flags=[
                *findings,
                *fallback.flags,
                "Automated profile analysis unavailable",
            ],
            recommendations=fallback.recommendations,
        )
        return self._degraded("profile", report, result)

    async def _web_findings(self, name: str) -> list[str]:
        """Web-intel threats as flag strings; any failure yields none."""
        result = await self._run(
            Capability.WEB_INTEL, build_threat_query(name), feature="profile"
        )
        if not isinstance(result, ProviderSuccess):
            logger.info(
                "event=web_intel_skipped reason=%s", result.reason
            )
            return []
        threats = normalize_web_intel(result.raw, name).threats
        return [
            f"Web search: {t.description[:WEB_INTEL_SNIPPET_CHARS]}"
            for t in threats
        ]

    # ── Conversation ─────────────────────────────────────

    async def analyze_conversation(
        self, messages: Sequence[str]
    ) -> Outcome[ConversationReport]:
        transcript = CONVERSATION_SEPARATOR.join(messages)
        result = await self._run(
            Capability.TEXT_RISK,
            build_conversation_prompt(transcript),
            feature="conversation",
        )
        if isinstance(result, ProviderSuccess):
            return Completed(
                normalize_conversation(result.raw, transcript, self._keywords)
            )
        return self._degraded(
            "conversation",
            conversation_heuristic(transcript, self._keywords),
            result,
        )

    # ── Image ────────────────────────────────────────────

    async def analyze_image(
        self, image: bytes, mime_type: str = "image/jpeg"
    ) -> Outcome[ImageReport]:
        if not image:
            failure = ProviderFailure(
                f"chain:{Capability.IMAGE_RISK}",
                ErrorKind.UNPARSEABLE,
                "no image data provided",
            )
            return self._degraded(
                "image", image_failure_report(failure.detail), failure
            )

        result = await self._run(
            Capability.IMAGE_RISK, image, mime_type=mime_type
        )
        if isinstance(result, ProviderSuccess):
            return Completed(normalize_image(result.raw))
        return self._degraded(
            "image", image_failure_report(result.detail), result
        )

    # ── Identity ─────────────────────────────────────────

    async def verify_identity(
        self,
        session: IdentitySession,
        profile: ProfileInput | None = None,
    ) -> Outcome[IdentityReport]:
        """Verify the session subject; no network call without a session."""
        if not session.authenticated or not session.subject:
            return Degraded(
                identity_not_verified_report(),
                ErrorKind.UNAUTHENTICATED,
                "no active identity session",
            )

        subject = session.subject
        trust = (
            session.trust_score
            if session.trust_score is not None
            else calculate_trust_score(subject)
        )
        age = estimate_identity_age(subject)

        result = await self._run(Capability.IDENTITY_VERIFY, subject)
        if isinstance(result, ProviderSuccess):
            return Completed(
                normalize_identity(result.raw, subject, trust, age, profile)
            )
        return self._degraded(
            "identity",
            identity_report(subject, trust, age, profile=profile),
            result,
        )

    # ── Threat search ────────────────────────────────────

    async def search_threats(self, query: str) -> Outcome[ThreatReport]:
        result = await self._run(
            Capability.WEB_INTEL, build_threat_query(query), feature="threats"
        )
        if isinstance(result, ProviderSuccess):
            return Completed(normalize_web_intel(result.raw, query))
        report = ThreatReport(
            score=SCORE_MAX,
            flags=["Web intelligence unavailable"],
            summary=f'No threat data available for "{query}"',
        )
        return self._degraded("threats", report, result)
