"""FastAPI application with lifespan startup."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

# Phase 1: logging MUST be configured before any skillforge import
# that pulls in litellm (it reads LITELLM_LOG at import time)
from skillforge.logging_config import setup_logging

setup_logging()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
)

from skillforge.analysis.cache import AnalysisCache  # noqa: E402
from skillforge.analysis.client import AnalysisServiceClient  # noqa: E402
from skillforge.analysis.schemas import ModelConfig  # noqa: E402
from skillforge.api.app_state import AppState  # noqa: E402
from skillforge.api.errors import register_error_handlers  # noqa: E402
from skillforge.api.routes import analyze, health, skills  # noqa: E402
from skillforge.config import Settings, create_app_engine  # noqa: E402
from skillforge.export.archive import ArtifactPackager  # noqa: E402
from skillforge.logger import PipelineLogger  # noqa: E402
from skillforge.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)
from skillforge.models.base import Base  # noqa: E402
from skillforge.publishing.github import GitHubPublisher  # noqa: E402
from skillforge.repositories.analysis_repo import (  # noqa: E402
    SqlAnalysisRepository,
)
from skillforge.repositories.skill_repo import (  # noqa: E402
    SqlSkillRepository,
)
from skillforge.resilience.rate_limiter import RateLimiter  # noqa: E402
from skillforge.resilience.retry import RetryPolicy  # noqa: E402
from skillforge.services.analysis_service import (  # noqa: E402
    ContentAnalysisService,
)
from skillforge.services.skill_service import (  # noqa: E402
    SkillGenerationService,
)

# Phase 2: all imports (litellm included) are done
cleanup_third_party_handlers()

_logger = logging.getLogger(__name__)


def build_state(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AppState:
    """Wire the pipeline; one limiter and one cache per process."""
    pipeline_logger = PipelineLogger(
        log_dir=settings.log_dir, level=settings.log_level
    )
    rate_limiter = RateLimiter(
        settings.rate_limit_max_requests, settings.rate_limit_window_ms
    )
    client = AnalysisServiceClient(
        rate_limiter,
        RetryPolicy(
            settings.retry_max_retries,
            settings.retry_base_delay_ms,
            settings.retry_max_delay_ms,
        ),
        timeout_seconds=settings.llm_timeout_seconds,
        pipeline_logger=pipeline_logger,
    )
    cache = AnalysisCache(
        settings.analysis_cache_ttl_seconds,
        settings.analysis_cache_max_entries,
    )
    analyses = SqlAnalysisRepository(session_factory)
    analysis_service = ContentAnalysisService(
        client,
        cache,
        analyses,
        ModelConfig(
            model=settings.litellm_model,
            max_output_tokens=settings.llm_max_output_tokens,
            temperature=settings.llm_temperature,
        ),
        request_timeout=settings.request_timeout_seconds,
        pipeline_logger=pipeline_logger,
    )
    skill_service = SkillGenerationService(
        SqlSkillRepository(session_factory),
        analyses,
        packager=ArtifactPackager(settings.archive_main_filename),
    )

    def publisher_factory(token: str) -> GitHubPublisher:
        return GitHubPublisher(token, settings.github_api_url)

    return AppState(
        settings=settings,
        session_factory=session_factory,
        rate_limiter=rate_limiter,
        cache=cache,
        pipeline_logger=pipeline_logger,
        analysis_service=analysis_service,
        skill_service=skill_service,
        publisher_factory=publisher_factory,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = _settings

    # SQLite engine (WAL + foreign keys via pool-connect listener)
    engine = create_app_engine(
        settings.database_url, echo=settings.debug_mode
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    app.state.typed = build_state(settings, session_factory)

    if not settings.anthropic_api_key:
        _logger.warning(
            "event=no_api_key action=analysis_requests_will_fail"
        )

    yield

    await engine.dispose()


app = FastAPI(
    title="SkillForge",
    description="Turns example content into reusable, packaged skills",
    version="0.1.0",
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

_settings = Settings()
_cors_origins = [
    o.strip() for o in _settings.cors_origins.split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-GitHub-Token"],
    allow_credentials=False,
)
register_error_handlers(app)

# Routes
app.include_router(health.router)
app.include_router(analyze.router)
app.include_router(skills.router)
