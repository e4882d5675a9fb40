"""Content analysis: input checks → cache → analysis service → audit row.

The miss path (prompt build, rate-limited retried call, parse,
validate) runs under one overall deadline. Nothing is cached or stored
until it has fully succeeded, so a cancelled or timed-out request
leaves no trace.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid

from skillforge.analysis.cache import AnalysisCache, fingerprint
from skillforge.analysis.client import AnalysisServiceClient
from skillforge.analysis.frameworks import get_framework
from skillforge.analysis.parser import parse_response, validate_analysis
from skillforge.analysis.quality import assess_quality
from skillforge.analysis.schemas import (
    AnalysisResult,
    ModelConfig,
    QualityReport,
)
from skillforge.constants import (
    ID_HEX_LENGTH,
    MAX_CONTENT_CHARS,
    MIN_CONTENT_CHARS,
    ContentType,
)
from skillforge.logger import PipelineLogger
from skillforge.models.analysis import ContentAnalysis
from skillforge.prompts import build_analysis_prompt, build_system_prompt
from skillforge.repositories.protocols import AnalysisRepository
from skillforge.resilience.errors import (
    NotFoundError,
    ServiceTimeoutError,
    ValidationError,
)
from skillforge.resilience.single_flight import SingleFlight

logger = logging.getLogger(__name__)


def check_content(content: str, content_type: str) -> ContentType:
    """Reject input that must never reach the analysis service.

    Order: length bounds, then content type.
    """
    if len(content) < MIN_CONTENT_CHARS:
        raise ValidationError(
            f"Content must be at least {MIN_CONTENT_CHARS} characters"
        )
    if len(content) > MAX_CONTENT_CHARS:
        raise ValidationError(
            f"Content must be less than {MAX_CONTENT_CHARS:,} characters"
        )
    try:
        ct = ContentType(content_type)
    except ValueError as exc:
        raise ValidationError(
            "Content type must be one of: "
            + ", ".join(c.value for c in ContentType)
        ) from exc
    return ct


class ContentAnalysisService:
    """Turns raw content into a validated, cached ``AnalysisResult``."""

    def __init__(
        self,
        client: AnalysisServiceClient,
        cache: AnalysisCache,
        repository: AnalysisRepository,
        model_config: ModelConfig,
        *,
        request_timeout: float = 300.0,
        pipeline_logger: PipelineLogger | None = None,
    ) -> None:
        self._client = client
        self._cache = cache
        self._repository = repository
        self._model_config = model_config
        self._timeout = request_timeout
        self._pipeline_logger = pipeline_logger
        self._flights: SingleFlight[AnalysisResult] = SingleFlight()

    async def analyze(
        self, content: str, content_type: str
    ) -> AnalysisResult:
        ct = check_content(content, content_type)
        key = fingerprint(content, ct)

        cached = self._cache.get(key)
        if cached is not None:
            logger.info(
                "event=analysis_cache_hit analysis_id=%s",
                cached.analysis_id,
            )
            return cached

        return await self._flights.run(
            key, lambda: self._analyze_uncached(key, content, ct)
        )

    async def _analyze_uncached(
        self, key: str, content: str, content_type: ContentType
    ) -> AnalysisResult:
        start = time.perf_counter()
        system_prompt = build_system_prompt(content_type)
        user_prompt = build_analysis_prompt(
            content, content_type, get_framework(content_type)
        )
        try:
            async with asyncio.timeout(self._timeout):
                raw = await self._client.analyze(
                    user_prompt, system_prompt, self._model_config
                )
        except TimeoutError as exc:
            logger.warning(
                "event=analysis_deadline_exceeded timeout_s=%.1f",
                self._timeout,
            )
            raise ServiceTimeoutError(
                f"Analysis did not complete within {self._timeout:g}s"
            ) from exc

        validated = validate_analysis(parse_response(raw))
        result = AnalysisResult(
            analysis_id=uuid.uuid4().hex[:ID_HEX_LENGTH],
            content_type=content_type,
            extracted_data=validated.extracted_data,
            confidence=validated.confidence,
            processing_time=time.perf_counter() - start,
            notes=validated.notes,
            confidence_defaulted=validated.confidence_defaulted,
        )

        await self._repository.create(
            ContentAnalysis(
                id=result.analysis_id,
                source_content=content,
                content_type=str(content_type),
                analysis_result=result.extracted_data,
                confidence=result.confidence,
                confidence_defaulted=result.confidence_defaulted,
                notes=result.notes,
                processing_time=result.processing_time,
                created_at=result.created_at,
            )
        )
        self._cache.put(key, result)

        report = self.assess(result)
        if report.issues and self._pipeline_logger is not None:
            self._pipeline_logger.log_quality_flag(
                result.analysis_id, report.issues
            )
        logger.info(
            "event=analysis_complete analysis_id=%s content_type=%s"
            " confidence=%.2f duration_s=%.2f",
            result.analysis_id,
            content_type,
            result.confidence,
            result.processing_time,
        )
        return result

    def assess(self, result: AnalysisResult) -> QualityReport:
        return assess_quality(result)

    async def get_analysis(self, analysis_id: str) -> AnalysisResult:
        """Reload a stored analysis by id (NotFoundError if absent)."""
        row = await self._repository.get(analysis_id)
        if row is None:
            raise NotFoundError(f"Analysis {analysis_id} not found")
        return AnalysisResult(
            analysis_id=row.id,
            content_type=ContentType(row.content_type),
            extracted_data=row.analysis_result,
            confidence=row.confidence,
            processing_time=row.processing_time or 0.0,
            notes=row.notes or "",
            confidence_defaulted=row.confidence_defaulted,
            created_at=row.created_at,
        )
