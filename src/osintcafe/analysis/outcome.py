"""Completed-or-Degraded result of an orchestrator call.

Both variants carry a usable report; only Degraded carries the
failure that forced the fallback, so callers can tell "genuinely
low risk" apart from "analysis unavailable".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from osintcafe.analysis.schemas import AnalysisReport
from osintcafe.constants import ErrorKind


@dataclass(frozen=True)
class Completed[R: AnalysisReport]:
    report: R
    degraded: ClassVar[bool] = False


@dataclass(frozen=True)
class Degraded[R: AnalysisReport]:
    report: R
    reason: ErrorKind
    detail: str
    degraded: ClassVar[bool] = True


type Outcome[R: AnalysisReport] = Completed[R] | Degraded[R]
