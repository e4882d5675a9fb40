"""Heuristic quality checks on a validated analysis.

These never fail an analysis; they produce a report that callers log
and surface so low-quality extractions can be reviewed.
"""

from __future__ import annotations

import logging
from typing import Any

from skillforge.analysis.schemas import AnalysisResult, QualityReport
from skillforge.constants import EMPTY_FIELD_RATIO, Confidence, ContentType

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def assess_quality(result: AnalysisResult) -> QualityReport:
    """Flag low confidence, missing key copy elements and sparse data."""
    issues: list[str] = []

    if result.confidence_defaulted:
        issues.append(
            "Confidence missing or invalid in service response"
            " - default substituted"
        )
    if result.confidence < Confidence.LOW:
        issues.append("Low confidence analysis - may need review")

    data = result.extracted_data
    if result.content_type == ContentType.COPYWRITING:
        core = data.get("core")
        core = core if isinstance(core, dict) else {}
        if _is_empty(core.get("bigIdea")):
            issues.append("Missing big idea - core concept not identified")
        if _is_empty(core.get("hook")):
            issues.append(
                "Missing hook - attention-grabbing element not found"
            )

    empty = sum(1 for value in data.values() if _is_empty(value))
    if data and empty > len(data) * EMPTY_FIELD_RATIO:
        issues.append(
            "More than 50% of fields are empty"
            " - content may not match expected type"
        )

    report = QualityReport(
        is_valid=not issues,
        issues=issues,
        requires_review=bool(issues)
        or result.confidence < Confidence.REVIEW,
    )
    if issues:
        logger.warning(
            "event=quality_flagged analysis_id=%s issues=%d",
            result.analysis_id,
            len(issues),
        )
    return report
