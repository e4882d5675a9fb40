"""Skill, SkillVersion and SkillUsage ORM models."""

from datetime import UTC, datetime
from typing import Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from skillforge.constants import USAGE_RATING_MAX, USAGE_RATING_MIN
from skillforge.models.base import Base

_SKILL_TYPES = "'copywriting', 'process', 'technical'"


class Skill(Base):
    """Live row of a generated skill; ``version`` starts at 1."""

    __tablename__ = "skills"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    skill_type: Mapped[str] = mapped_column(String(100))
    version: Mapped[int] = mapped_column(default=1)
    main_content: Mapped[str] = mapped_column(Text)
    references: Mapped[dict[str, str]] = mapped_column(
        JSON, default=dict
    )
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            f"skill_type IN ({_SKILL_TYPES})", name="ck_skill_type"
        ),
        Index("idx_skills_type", "skill_type"),
        Index("idx_skills_created_at", "created_at"),
    )

    def to_summary(self) -> dict[str, Any]:
        """Listing view: everything except the document bodies."""
        metadata = self.metadata_ or {}
        tags = metadata.get("tags") or []
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "skillType": self.skill_type,
            "version": self.version,
            "tags": tags,
            "metadata": {
                "tags": tags,
                "fileCount": metadata.get("fileCount", 0),
                "totalSize": metadata.get("totalSize", 0),
                "extractedFrom": metadata.get("extractedFrom"),
                "github": metadata.get("github"),
            },
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "skillType": self.skill_type,
            "version": self.version,
            "mainContent": self.main_content,
            "references": self.references or {},
            "metadata": self.metadata_ or {},
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class SkillVersion(Base):
    """Immutable snapshot of a skill taken just before an update."""

    __tablename__ = "skill_versions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    skill_id: Mapped[int] = mapped_column(
        ForeignKey("skills.id", ondelete="CASCADE")
    )
    version: Mapped[int]
    main_content: Mapped[str] = mapped_column(Text)
    references: Mapped[dict[str, str]] = mapped_column(
        JSON, default=dict
    )
    metadata_: Mapped[dict[str, Any]] = mapped_column(
        "metadata", JSON, default=dict
    )
    change_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        UniqueConstraint(
            "skill_id", "version", name="uq_skill_version"
        ),
        Index("idx_skill_versions_skill_id", "skill_id"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "skillId": self.skill_id,
            "version": self.version,
            "mainContent": self.main_content,
            "references": self.references or {},
            "metadata": self.metadata_ or {},
            "changeNotes": self.change_notes,
            "createdAt": self.created_at.isoformat(),
        }


class SkillUsage(Base):
    """One recorded use of a skill, with optional feedback."""

    __tablename__ = "skill_usage"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    skill_id: Mapped[int] = mapped_column(
        ForeignKey("skills.id", ondelete="CASCADE")
    )
    usage_context: Mapped[str | None] = mapped_column(Text, nullable=True)
    feedback_rating: Mapped[int | None] = mapped_column(nullable=True)
    improvement_notes: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    used_at: Mapped[datetime] = mapped_column(
        default=lambda: datetime.now(UTC),
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            f"feedback_rating >= {USAGE_RATING_MIN}"
            f" AND feedback_rating <= {USAGE_RATING_MAX}",
            name="ck_feedback_rating",
        ),
        Index("idx_skill_usage_skill_id", "skill_id"),
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "skillId": self.skill_id,
            "usageContext": self.usage_context,
            "feedbackRating": self.feedback_rating,
            "improvementNotes": self.improvement_notes,
            "usedAt": self.used_at.isoformat(),
        }
