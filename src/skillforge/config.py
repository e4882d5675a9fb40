"""Environment-based configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from skillforge.constants import (
    ANALYSIS_CACHE_MAX_ENTRIES,
    ANALYSIS_CACHE_TTL_SECONDS,
    LLM_MAX_OUTPUT_TOKENS,
    LLM_TEMPERATURE,
    MAIN_DOCUMENT_NAMES,
    RATE_LIMIT_MAX_REQUESTS,
    RATE_LIMIT_WINDOW_MS,
    RETRY_BASE_DELAY_MS,
    RETRY_MAX_DELAY_MS,
    RETRY_MAX_RETRIES,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Reads from .env file and environment variables."""

    # LLM Provider
    anthropic_api_key: str = ""
    litellm_model: str = "anthropic/claude-3-5-sonnet-20241022"
    llm_max_output_tokens: int = LLM_MAX_OUTPUT_TOKENS
    llm_temperature: float = LLM_TEMPERATURE
    llm_timeout_seconds: int = 60

    # Outbound throttling (shared across all requests in a process)
    rate_limit_max_requests: int = RATE_LIMIT_MAX_REQUESTS
    rate_limit_window_ms: int = RATE_LIMIT_WINDOW_MS

    # Retry
    retry_max_retries: int = RETRY_MAX_RETRIES
    retry_base_delay_ms: int = RETRY_BASE_DELAY_MS
    retry_max_delay_ms: int = RETRY_MAX_DELAY_MS

    # Analysis cache
    analysis_cache_ttl_seconds: int = ANALYSIS_CACHE_TTL_SECONDS
    analysis_cache_max_entries: int = ANALYSIS_CACHE_MAX_ENTRIES

    # Overall deadline for one analysis request
    request_timeout_seconds: float = 300.0

    # Database
    database_url: str = "sqlite:///data/skillforge.db"

    # Directories
    log_dir: Path = Path("logs")

    # Logging
    log_level: str = "INFO"
    debug_mode: bool = False

    # Packaging
    archive_main_filename: str = "skill.md"

    # API
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Publishing
    github_token: str = ""
    github_api_url: str = "https://api.github.com"

    @field_validator("archive_main_filename")
    @classmethod
    def _validate_main_filename(cls, v: str) -> str:
        if v not in MAIN_DOCUMENT_NAMES:
            raise ValueError(
                "archive_main_filename must be one of: "
                + ", ".join(MAIN_DOCUMENT_NAMES)
            )
        return v

    @field_validator(
        "rate_limit_max_requests", "rate_limit_window_ms"
    )
    @classmethod
    def _validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("rate limit settings must be positive")
        return v

    @field_validator("retry_max_retries")
    @classmethod
    def _validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("retry_max_retries cannot be negative")
        if v > 10:
            logger.warning(
                "event=high_retry_budget retry_max_retries=%d", v
            )
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "",
        "extra": "ignore",
    }


def create_app_engine(
    url: str, *, echo: bool = False
) -> AsyncEngine:
    """Create async SQLite engine with WAL journal and enforced FKs.

    Handles URL conversion (sqlite:/// → sqlite+aiosqlite:///) and
    sets both pragmas via a pool-connect event listener so they fire
    once per raw DBAPI connection, not per ORM session. SQLite ignores
    ON DELETE CASCADE / SET NULL unless foreign_keys is on.
    """
    if url.startswith("sqlite:///"):
        db_url = "sqlite+aiosqlite:///" + url[len("sqlite:///"):]
    else:
        db_url = url
    engine = create_async_engine(db_url, echo=echo)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(
            dbapi_conn: object,
            _connection_record: object,
        ) -> None:
            cursor = dbapi_conn.cursor()  # type: ignore[attr-defined]
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine
