"""Pydantic models for analysis requests and results."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from skillforge.constants import (
    LLM_MAX_OUTPUT_TOKENS,
    LLM_TEMPERATURE,
    ContentType,
)


class ModelConfig(BaseModel):
    """Parameters forwarded to the analysis service with each call."""

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model: str
    max_output_tokens: int = LLM_MAX_OUTPUT_TOKENS
    temperature: float = LLM_TEMPERATURE


class ValidatedAnalysis(BaseModel):
    """Structurally valid service output, before it gets an identity."""

    model_config = ConfigDict(frozen=True)

    extracted_data: dict[str, Any]
    confidence: float = Field(ge=0.0, le=1.0)
    notes: str = ""
    # True when the service omitted or garbled confidence
    confidence_defaulted: bool = False


class AnalysisResult(BaseModel):
    """A validated analysis. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    analysis_id: str
    content_type: ContentType
    extracted_data: dict[str, Any]
    confidence: float = Field(ge=0.0, le=1.0)
    processing_time: float = 0.0  # seconds
    notes: str = ""
    confidence_defaulted: bool = False
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC)
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysisId": self.analysis_id,
            "contentType": str(self.content_type),
            "extractedData": self.extracted_data,
            "confidence": self.confidence,
            "confidenceDefaulted": self.confidence_defaulted,
            "processingTime": self.processing_time,
            "notes": self.notes,
            "timestamp": self.created_at.isoformat(),
        }


class QualityReport(BaseModel):
    """Heuristic quality assessment of an analysis."""

    is_valid: bool
    issues: list[str] = Field(default_factory=lambda: list[str]())
    requires_review: bool = False
