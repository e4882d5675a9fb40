"""FastAPI dependency injection for services held on app state."""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Request

from skillforge.api.app_state import AppState
from skillforge.config import Settings
from skillforge.publishing.github import GitHubPublisher
from skillforge.services.analysis_service import ContentAnalysisService
from skillforge.services.skill_service import SkillGenerationService


def get_app_state(request: Request) -> AppState:
    return request.app.state.typed  # type: ignore[no-any-return]


def get_settings(request: Request) -> Settings:
    return get_app_state(request).settings


def get_analysis_service(request: Request) -> ContentAnalysisService:
    return get_app_state(request).analysis_service


def get_skill_service(request: Request) -> SkillGenerationService:
    return get_app_state(request).skill_service


def get_publisher_factory(
    request: Request,
) -> Callable[[str], GitHubPublisher]:
    """Factory building a publisher for a caller-supplied token."""
    return get_app_state(request).publisher_factory
