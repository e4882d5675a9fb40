"""ContentAnalysis ORM model — audit row for each validated analysis."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from skillforge.models.base import Base


class ContentAnalysis(Base):
    __tablename__ = "content_analyses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    skill_id: Mapped[int | None] = mapped_column(
        ForeignKey("skills.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    source_content: Mapped[str] = mapped_column(Text)
    content_type: Mapped[str] = mapped_column(String(100), index=True)
    analysis_result: Mapped[dict[str, Any]] = mapped_column(JSON)
    confidence: Mapped[float]
    confidence_defaulted: Mapped[bool] = mapped_column(default=False)
    notes: Mapped[str] = mapped_column(Text, default="")
    processing_time: Mapped[float | None] = mapped_column(nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            "confidence >= 0 AND confidence <= 1",
            name="ck_analysis_confidence",
        ),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "analysisId": self.id,
            "skillId": self.skill_id,
            "contentType": self.content_type,
            "extractedData": self.analysis_result,
            "confidence": self.confidence,
            "confidenceDefaulted": self.confidence_defaulted,
            "processingTime": self.processing_time,
            "notes": self.notes,
            "timestamp": self.created_at.isoformat(),
        }
