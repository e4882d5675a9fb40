"""Health check endpoints."""

from __future__ import annotations

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from skillforge.api.app_state import AppState
from skillforge.api.dependencies import get_app_state
from skillforge.constants import HealthStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["health"])

_VERSION = "0.1.0"


async def _database_ok(state: AppState) -> bool:
    try:
        async with state.session_factory() as session:
            await session.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.error("event=health_db_failed error=%s", exc)
        return False
    return True


@router.get("/health")
async def health(
    state: AppState = Depends(get_app_state),
) -> JSONResponse:
    """Basic health check for load balancers (503 when degraded)."""
    db_ok = await _database_ok(state)
    api_key_ok = bool(state.settings.anthropic_api_key)
    healthy = db_ok and api_key_ok
    return JSONResponse(
        status_code=200 if healthy else 503,
        content={
            "status": (
                HealthStatus.HEALTHY if healthy else HealthStatus.DEGRADED
            ),
            "version": _VERSION,
            "timestamp": datetime.now(UTC).isoformat(),
            "services": {
                "database": db_ok,
                "analysisService": api_key_ok,
            },
        },
    )


@router.get("/health/detailed")
async def health_detailed(
    state: AppState = Depends(get_app_state),
) -> dict[str, object]:
    """Detailed health check with component-level status."""
    db_ok = await _database_ok(state)
    components = {
        "database": {
            "status": "connected" if db_ok else "disconnected"
        },
        "analysis_service": {
            "status": (
                "configured"
                if state.settings.anthropic_api_key
                else "unconfigured"
            ),
            "model": state.settings.litellm_model,
        },
        "cache": {
            "status": "available",
            "entries": len(state.cache),
            "hits": state.cache.hits,
            "misses": state.cache.misses,
        },
        "rate_limiter": {
            "status": "available",
            "in_window": state.rate_limiter.in_window,
            "max_requests": state.rate_limiter.max_requests,
        },
    }
    healthy = db_ok and bool(state.settings.anthropic_api_key)
    return {
        "status": (
            HealthStatus.HEALTHY if healthy else HealthStatus.DEGRADED
        ),
        "version": _VERSION,
        "components": components,
        "timestamp": datetime.now(UTC).isoformat(),
    }
