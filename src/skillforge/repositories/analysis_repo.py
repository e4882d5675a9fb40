"""SQL implementation of AnalysisRepository."""

from sqlalchemy import select
from sqlalchemy import update as sa_update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillforge.models.analysis import ContentAnalysis


class SqlAnalysisRepository:
    """Audit log of validated analyses, one short-lived session per call."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
    ) -> None:
        self._session_factory = session_factory

    async def create(self, analysis: ContentAnalysis) -> ContentAnalysis:
        async with self._session_factory() as session, session.begin():
            session.add(analysis)
        return analysis

    async def get(self, analysis_id: str) -> ContentAnalysis | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ContentAnalysis).where(
                    ContentAnalysis.id == analysis_id
                )
            )
            return result.scalar_one_or_none()

    async def link_skill(self, analysis_id: str, skill_id: int) -> None:
        async with self._session_factory() as session, session.begin():
            await session.execute(
                sa_update(ContentAnalysis)
                .where(ContentAnalysis.id == analysis_id)
                .values(skill_id=skill_id)
            )
