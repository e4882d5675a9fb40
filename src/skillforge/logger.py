"""Structured JSON logger for external analysis calls."""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from skillforge.constants import ERROR_TRUNCATION_CHARS
from skillforge.logging_config import LOG_DATEFMT, LOG_FORMAT

__all__ = ["PipelineLogger", "LOG_FORMAT", "LOG_DATEFMT"]


class PipelineLogger:
    """Writes one JSON object per line to ``<log_dir>/pipeline.log``."""

    def __init__(self, log_dir: Path, level: str = "INFO") -> None:
        self._log_dir = log_dir
        self._log_dir.mkdir(parents=True, exist_ok=True)
        self._logger = logging.getLogger("skillforge.pipeline")
        self._logger.setLevel(getattr(logging, level.upper()))

        # One file handler per process; re-pointed if log_dir changes
        log_file = str((log_dir / "pipeline.log").resolve())
        for existing in list(self._logger.handlers):
            if getattr(existing, "baseFilename", None) != log_file:
                self._logger.removeHandler(existing)
                existing.close()
        if not self._logger.handlers:
            handler = logging.FileHandler(log_file)
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
        self._logger.propagate = False

    def log_api_call(
        self,
        model: str,
        prompt_tokens: int,
        response_tokens: int,
        duration_ms: float,
    ) -> None:
        self._logger.info(
            json.dumps({
                "type": "api_call",
                "timestamp": datetime.now(UTC).isoformat(),
                "model": model,
                "prompt_tokens": prompt_tokens,
                "response_tokens": response_tokens,
                "duration_ms": round(duration_ms, 1),
                "success": True,
            })
        )

    def log_api_error(
        self,
        kind: str,
        message: str,
        *,
        retryable: bool,
        status: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._logger.error(
            json.dumps({
                "type": "api_error",
                "timestamp": datetime.now(UTC).isoformat(),
                "kind": kind,
                "error": message[:ERROR_TRUNCATION_CHARS],
                "status": status,
                "retryable": retryable,
                "context": context or {},
            })
        )

    def log_quality_flag(
        self,
        analysis_id: str,
        issues: list[str],
    ) -> None:
        self._logger.warning(
            json.dumps({
                "type": "quality_flag",
                "timestamp": datetime.now(UTC).isoformat(),
                "analysis_id": analysis_id,
                "issues": issues,
            })
        )
