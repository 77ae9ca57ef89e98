"""Per-request JSON records written to ``analysis.log``."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from osintcafe.constants import ERROR_TRUNCATION_CHARS

__all__ = ["AnalysisLogger"]

# Outside the osintcafe.analysis tree so module loggers don't land here
_RECORD_LOGGER = "osintcafe.records"


class AnalysisLogger:
    """One JSON line per analysis or error, correlated by request_id."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger(_RECORD_LOGGER)
        self._logger.setLevel(getattr(logging, level.upper()))

        if not self._logger.handlers:
            handler = logging.FileHandler(log_dir / "analysis.log")
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)

    def _emit(self, level: int, record_type: str, **fields: Any) -> None:
        self._logger.log(
            level,
            json.dumps({
                "type": record_type,
                "timestamp": datetime.now(UTC).isoformat(),
                **fields,
            }),
        )

    def log_analysis(
        self,
        request_id: str,
        feature: str,
        score: int,
        degraded: bool,
        duration_ms: float,
        detail: str | None = None,
    ) -> None:
        self._emit(
            logging.INFO,
            "analysis",
            request_id=request_id,
            feature=feature,
            score=score,
            degraded=degraded,
            duration_ms=duration_ms,
            detail=detail[:ERROR_TRUNCATION_CHARS] if detail else None,
        )

    def log_error(
        self,
        request_id: str,
        component: str,
        error: str,
    ) -> None:
        self._emit(
            logging.ERROR,
            "error",
            request_id=request_id,
            component=component,
            error=error[:ERROR_TRUNCATION_CHARS],
        )
