"""SQL implementation of SkillRepository — the versioned mutation store.

Every update snapshots the current row into ``skill_versions`` and
bumps ``version`` in one transaction. The bump is a compare-and-set on
the version read at the start of the transaction; a lost race (or a
snapshot uniqueness violation) rolls the whole transaction back and
the update is retried against the fresh row.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete as sa_delete
from sqlalchemy import Select, func, or_, select
from sqlalchemy import update as sa_update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillforge.constants import UPDATE_MAX_ATTEMPTS
from skillforge.models.analysis import ContentAnalysis
from skillforge.models.skill import Skill, SkillUsage, SkillVersion
from skillforge.repositories.protocols import SkillChanges
from skillforge.resilience.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class _StaleVersion(Exception):
    """The row's version moved between read and compare-and-set."""


def _filtered(
    stmt: Select[Any], search: str | None, skill_type: str | None
) -> Select[Any]:
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(
            or_(
                Skill.name.like(pattern),
                Skill.description.like(pattern),
            )
        )
    if skill_type:
        stmt = stmt.where(Skill.skill_type == skill_type)
    return stmt


class SqlSkillRepository:
    """Skill repo that owns its own sessions.

    Each operation runs in a short-lived session so an update is always
    exactly one transaction, independent of any caller's session.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._session_factory = session_factory

    async def create(self, skill: Skill) -> Skill:
        try:
            async with self._session_factory() as session, session.begin():
                existing = await session.execute(
                    select(Skill.id).where(Skill.name == skill.name)
                )
                if existing.scalar_one_or_none() is not None:
                    raise ConflictError(
                        f"Skill with name '{skill.name}' already exists"
                    )
                skill.version = 1
                session.add(skill)
        except IntegrityError as exc:
            raise ConflictError(
                f"Skill with name '{skill.name}' already exists"
            ) from exc
        logger.info(
            "event=skill_created skill_id=%d name=%s", skill.id, skill.name
        )
        return skill

    async def get(self, skill_id: int) -> Skill | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Skill).where(Skill.id == skill_id)
            )
            return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> Skill | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(Skill).where(Skill.name == name)
            )
            return result.scalar_one_or_none()

    async def list_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Skill]:
        stmt = _filtered(select(Skill), search, skill_type)
        stmt = (
            stmt.order_by(Skill.created_at.desc(), Skill.id.desc())
            .limit(limit)
            .offset(offset)
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def count_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
    ) -> int:
        stmt = _filtered(
            select(func.count()).select_from(Skill), search, skill_type
        )
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def update(self, skill_id: int, changes: SkillChanges) -> int:
        """Snapshot the current revision and apply ``changes``.

        Returns the new version. Raises NotFoundError for an unknown
        skill and ConflictError when the new name is taken or the
        compare-and-set keeps losing to concurrent writers.
        """
        for attempt in range(1, UPDATE_MAX_ATTEMPTS + 1):
            try:
                return await self._update_once(skill_id, changes)
            except (_StaleVersion, IntegrityError):
                logger.warning(
                    "event=skill_update_retry skill_id=%d attempt=%d",
                    skill_id,
                    attempt,
                )
        raise ConflictError(
            f"Skill {skill_id} was modified concurrently; update aborted"
            f" after {UPDATE_MAX_ATTEMPTS} attempts"
        )

    async def _update_once(self, skill_id: int, changes: SkillChanges) -> int:
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                select(Skill).where(Skill.id == skill_id)
            )
            current = result.scalar_one_or_none()
            if current is None:
                raise NotFoundError(f"Skill {skill_id} not found")

            if changes.name is not None and changes.name != current.name:
                taken = await session.execute(
                    select(Skill.id).where(
                        Skill.name == changes.name, Skill.id != skill_id
                    )
                )
                if taken.scalar_one_or_none() is not None:
                    raise ConflictError(
                        f"Skill with name '{changes.name}' already exists"
                    )

            base_version = current.version
            session.add(
                SkillVersion(
                    skill_id=skill_id,
                    version=base_version,
                    main_content=current.main_content,
                    references=dict(current.references or {}),
                    metadata_=dict(current.metadata_ or {}),
                    change_notes=changes.change_notes,
                )
            )
            await session.flush()

            values: dict[Any, Any] = {
                Skill.version: base_version + 1,
                Skill.updated_at: datetime.now(UTC),
            }
            if changes.name is not None:
                values[Skill.name] = changes.name
            if changes.description is not None:
                values[Skill.description] = changes.description
            if changes.main_content is not None:
                values[Skill.main_content] = changes.main_content
            if changes.references is not None:
                values[Skill.references] = dict(changes.references)
            if changes.metadata_updates:
                values[Skill.metadata_] = {
                    **(current.metadata_ or {}),
                    **changes.metadata_updates,
                }

            cas = await session.execute(
                sa_update(Skill)
                .where(Skill.id == skill_id, Skill.version == base_version)
                .values(values)
                .execution_options(synchronize_session=False)
            )
            rowcount: int = getattr(cas, "rowcount", 0) or 0
            if rowcount != 1:
                raise _StaleVersion()

        logger.info(
            "event=skill_updated skill_id=%d version=%d",
            skill_id,
            base_version + 1,
        )
        return base_version + 1

    async def delete(self, skill_id: int) -> Skill | None:
        """Remove a skill with its snapshots and usage rows.

        Analyses that produced the skill survive with ``skill_id`` unset.
        """
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                select(Skill).where(Skill.id == skill_id)
            )
            skill = result.scalar_one_or_none()
            if skill is None:
                return None
            await session.execute(
                sa_delete(SkillVersion).where(
                    SkillVersion.skill_id == skill_id
                )
            )
            await session.execute(
                sa_delete(SkillUsage).where(SkillUsage.skill_id == skill_id)
            )
            await session.execute(
                sa_update(ContentAnalysis)
                .where(ContentAnalysis.skill_id == skill_id)
                .values(skill_id=None)
            )
            await session.delete(skill)
        logger.info("event=skill_deleted skill_id=%d", skill_id)
        return skill

    async def list_versions(self, skill_id: int) -> list[SkillVersion]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SkillVersion)
                .where(SkillVersion.skill_id == skill_id)
                .order_by(SkillVersion.version.desc())
            )
            return list(result.scalars().all())

    async def get_version(
        self, skill_id: int, version: int
    ) -> SkillVersion | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SkillVersion).where(
                    SkillVersion.skill_id == skill_id,
                    SkillVersion.version == version,
                )
            )
            return result.scalar_one_or_none()

    async def record_usage(self, usage: SkillUsage) -> SkillUsage:
        async with self._session_factory() as session, session.begin():
            exists = await session.execute(
                select(Skill.id).where(Skill.id == usage.skill_id)
            )
            if exists.scalar_one_or_none() is None:
                raise NotFoundError(f"Skill {usage.skill_id} not found")
            session.add(usage)
        return usage

    async def list_usage(self, skill_id: int) -> list[SkillUsage]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(SkillUsage)
                .where(SkillUsage.skill_id == skill_id)
                .order_by(SkillUsage.used_at.desc(), SkillUsage.id.desc())
            )
            return list(result.scalars().all())
