"""In-memory fake repositories for testing.

Dict-backed implementations of both repository protocols.
No SQLAlchemy, no I/O, instant operations for unit tests.
"""

from __future__ import annotations

import itertools
from datetime import UTC, datetime

from skillforge.models.analysis import ContentAnalysis
from skillforge.models.skill import Skill, SkillUsage, SkillVersion
from skillforge.repositories.protocols import SkillChanges
from skillforge.resilience.errors import ConflictError, NotFoundError


class FakeSkillRepository:
    """Dict-backed SkillRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[int, Skill] = {}
        self._versions: dict[int, list[SkillVersion]] = {}
        self._usage: dict[int, list[SkillUsage]] = {}
        self._ids = itertools.count(1)
        self._version_ids = itertools.count(1)
        self._usage_ids = itertools.count(1)

    def _name_taken(self, name: str, exclude: int | None = None) -> bool:
        return any(
            s.name == name and s.id != exclude for s in self._store.values()
        )

    async def create(self, skill: Skill) -> Skill:
        if self._name_taken(skill.name):
            raise ConflictError(
                f"Skill with name '{skill.name}' already exists"
            )
        now = datetime.now(UTC)
        skill.id = next(self._ids)
        skill.version = 1
        skill.references = dict(skill.references or {})
        skill.metadata_ = dict(skill.metadata_ or {})
        skill.created_at = now
        skill.updated_at = now
        self._store[skill.id] = skill
        return skill

    async def get(self, skill_id: int) -> Skill | None:
        return self._store.get(skill_id)

    async def get_by_name(self, name: str) -> Skill | None:
        return next(
            (s for s in self._store.values() if s.name == name), None
        )

    def _matching(
        self, search: str | None, skill_type: str | None
    ) -> list[Skill]:
        results = list(self._store.values())
        if search:
            q = search.lower()
            results = [
                s
                for s in results
                if q in s.name.lower() or q in (s.description or "").lower()
            ]
        if skill_type:
            results = [s for s in results if s.skill_type == skill_type]
        return results

    async def list_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Skill]:
        results = sorted(
            self._matching(search, skill_type),
            key=lambda s: s.id,
            reverse=True,
        )
        return results[offset : offset + limit]

    async def count_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
    ) -> int:
        return len(self._matching(search, skill_type))

    async def update(self, skill_id: int, changes: SkillChanges) -> int:
        skill = self._store.get(skill_id)
        if skill is None:
            raise NotFoundError(f"Skill {skill_id} not found")
        if changes.name is not None and self._name_taken(
            changes.name, exclude=skill_id
        ):
            raise ConflictError(
                f"Skill with name '{changes.name}' already exists"
            )
        self._versions.setdefault(skill_id, []).append(
            SkillVersion(
                id=next(self._version_ids),
                skill_id=skill_id,
                version=skill.version,
                main_content=skill.main_content,
                references=dict(skill.references),
                metadata_=dict(skill.metadata_),
                change_notes=changes.change_notes,
                created_at=datetime.now(UTC),
            )
        )
        if changes.name is not None:
            skill.name = changes.name
        if changes.description is not None:
            skill.description = changes.description
        if changes.main_content is not None:
            skill.main_content = changes.main_content
        if changes.references is not None:
            skill.references = dict(changes.references)
        if changes.metadata_updates:
            skill.metadata_ = {**skill.metadata_, **changes.metadata_updates}
        skill.version += 1
        skill.updated_at = datetime.now(UTC)
        return skill.version

    async def delete(self, skill_id: int) -> Skill | None:
        self._versions.pop(skill_id, None)
        self._usage.pop(skill_id, None)
        return self._store.pop(skill_id, None)

    async def list_versions(self, skill_id: int) -> list[SkillVersion]:
        return sorted(
            self._versions.get(skill_id, []),
            key=lambda v: v.version,
            reverse=True,
        )

    async def get_version(
        self, skill_id: int, version: int
    ) -> SkillVersion | None:
        return next(
            (
                v
                for v in self._versions.get(skill_id, [])
                if v.version == version
            ),
            None,
        )

    async def record_usage(self, usage: SkillUsage) -> SkillUsage:
        if usage.skill_id not in self._store:
            raise NotFoundError(f"Skill {usage.skill_id} not found")
        usage.id = next(self._usage_ids)
        usage.used_at = datetime.now(UTC)
        self._usage.setdefault(usage.skill_id, []).append(usage)
        return usage

    async def list_usage(self, skill_id: int) -> list[SkillUsage]:
        return list(reversed(self._usage.get(skill_id, [])))


class FakeAnalysisRepository:
    """Dict-backed AnalysisRepository for testing."""

    def __init__(self) -> None:
        self._store: dict[str, ContentAnalysis] = {}

    async def create(self, analysis: ContentAnalysis) -> ContentAnalysis:
        if analysis.created_at is None:
            analysis.created_at = datetime.now(UTC)
        self._store[analysis.id] = analysis
        return analysis

    async def get(self, analysis_id: str) -> ContentAnalysis | None:
        return self._store.get(analysis_id)

    async def link_skill(self, analysis_id: str, skill_id: int) -> None:
        analysis = self._store.get(analysis_id)
        if analysis is not None:
            analysis.skill_id = skill_id
