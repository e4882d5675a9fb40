"""Typed container for everything the lifespan builds."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillforge.analysis.cache import AnalysisCache
from skillforge.config import Settings
from skillforge.logger import PipelineLogger
from skillforge.publishing.github import GitHubPublisher
from skillforge.resilience.rate_limiter import RateLimiter
from skillforge.services.analysis_service import ContentAnalysisService
from skillforge.services.skill_service import SkillGenerationService


@dataclass
class AppState:
    """Typed container for app.state attributes."""

    settings: Settings
    session_factory: async_sessionmaker[AsyncSession]
    rate_limiter: RateLimiter
    cache: AnalysisCache
    pipeline_logger: PipelineLogger
    analysis_service: ContentAnalysisService
    skill_service: SkillGenerationService
    publisher_factory: Callable[[str], GitHubPublisher]
