"""Protocol-based repository interfaces.

SQL implementations satisfy these protocols structurally (no inheritance).
Test doubles can be plain classes or mocks matching the same signature.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from skillforge.models.analysis import ContentAnalysis
from skillforge.models.skill import Skill, SkillUsage, SkillVersion


@dataclass(frozen=True)
class SkillChanges:
    """Partial update of a skill; None means "leave unchanged".

    ``metadata_updates`` is merged key-by-key into the stored metadata
    inside the update transaction, so concurrent updates touching
    different keys do not clobber each other.
    """

    name: str | None = None
    description: str | None = None
    main_content: str | None = None
    references: dict[str, str] | None = None
    metadata_updates: dict[str, Any] = field(
        default_factory=lambda: dict[str, Any]()
    )
    change_notes: str | None = None


class SkillRepository(Protocol):
    async def create(self, skill: Skill) -> Skill: ...
    async def get(self, skill_id: int) -> Skill | None: ...
    async def get_by_name(self, name: str) -> Skill | None: ...
    async def list_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Skill]: ...
    async def count_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
    ) -> int: ...
    async def update(self, skill_id: int, changes: SkillChanges) -> int: ...
    async def delete(self, skill_id: int) -> Skill | None: ...
    async def list_versions(self, skill_id: int) -> list[SkillVersion]: ...
    async def get_version(
        self, skill_id: int, version: int
    ) -> SkillVersion | None: ...
    async def record_usage(self, usage: SkillUsage) -> SkillUsage: ...
    async def list_usage(self, skill_id: int) -> list[SkillUsage]: ...


class AnalysisRepository(Protocol):
    async def create(self, analysis: ContentAnalysis) -> ContentAnalysis: ...
    async def get(self, analysis_id: str) -> ContentAnalysis | None: ...
    async def link_skill(self, analysis_id: str, skill_id: int) -> None: ...
