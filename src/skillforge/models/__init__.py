"""SQLAlchemy ORM models."""

from skillforge.models.analysis import ContentAnalysis
from skillforge.models.base import Base
from skillforge.models.skill import Skill, SkillUsage, SkillVersion

__all__ = [
    "Base",
    "ContentAnalysis",
    "Skill",
    "SkillUsage",
    "SkillVersion",
]
