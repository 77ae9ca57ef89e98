"""Fallback chains, response normalization, and feature orchestration."""

from osintcafe.analysis.chain import FallbackChain, aggregate_failures
from osintcafe.analysis.diagnostics import ProbeResult, run_probes
from osintcafe.analysis.factory import build_chains, build_orchestrator
from osintcafe.analysis.orchestrator import AnalysisOrchestrator
from osintcafe.analysis.outcome import Completed, Degraded, Outcome
from osintcafe.analysis.schemas import (
    AnalysisReport,
    ConversationReport,
    IdentityReport,
    ImageReport,
    ProfileInput,
    Threat,
    ThreatReport,
)

__all__ = [
    "AnalysisOrchestrator",
    "AnalysisReport",
    "Completed",
    "ConversationReport",
    "Degraded",
    "FallbackChain",
    "IdentityReport",
    "ImageReport",
    "Outcome",
    "ProbeResult",
    "ProfileInput",
    "Threat",
    "ThreatReport",
    "aggregate_failures",
    "build_chains",
    "build_orchestrator",
    "run_probes",
]
