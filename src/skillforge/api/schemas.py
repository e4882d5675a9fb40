"""Request/response schemas for the HTTP API.

Request fields accept the camelCase names used by existing clients
(``contentType``, ``skillName``) as well as their snake_case names.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from skillforge.constants import (
    MAX_CONTENT_CHARS,
    MIN_MAIN_CONTENT_CHARS,
    SKILL_NAME_MAX_CHARS,
    SKILL_NAME_MIN_CHARS,
    USAGE_RATING_MAX,
    USAGE_RATING_MIN,
    ContentType,
)


class APIResponse(BaseModel):
    """Standard response envelope for all API endpoints."""

    success: bool
    data: Any | None = None
    error: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AnalyzeRequest(_Request):
    """Request body for POST /api/analyze.

    Only the upper bound is enforced here; the service owns the
    lower bound so short content fails with its own message.
    """

    content: str = Field(max_length=MAX_CONTENT_CHARS)
    content_type: ContentType = Field(alias="contentType")


class GenerateSkillRequest(_Request):
    """Request body for POST /api/generate-skill."""

    analysis_id: str = Field(alias="analysisId", min_length=1)
    skill_name: str = Field(
        alias="skillName",
        min_length=SKILL_NAME_MIN_CHARS,
        max_length=SKILL_NAME_MAX_CHARS,
    )
    skill_type: ContentType = Field(alias="skillType")
    description: str | None = None
    tags: list[str] = Field(default_factory=list)


class UpdateSkillRequest(_Request):
    """Request body for PUT /api/skills/{id}."""

    name: str | None = Field(
        default=None,
        min_length=SKILL_NAME_MIN_CHARS,
        max_length=SKILL_NAME_MAX_CHARS,
    )
    description: str | None = None
    main_content: str | None = Field(
        default=None,
        alias="mainContent",
        min_length=MIN_MAIN_CONTENT_CHARS,
    )
    references: dict[str, str] | None = None
    tags: list[str] | None = None
    change_notes: str | None = Field(default=None, alias="changeNotes")


class PublishRequest(_Request):
    """Request body for POST /api/skills/{id}/publish."""

    github_token: str | None = Field(default=None, alias="githubToken")
    is_private: bool = Field(default=True, alias="isPrivate")
    owner: str | None = None


class UsageRequest(_Request):
    """Request body for POST /api/skills/{id}/usage."""

    usage_context: str | None = Field(default=None, alias="usageContext")
    feedback_rating: int | None = Field(
        default=None,
        alias="feedbackRating",
        ge=USAGE_RATING_MIN,
        le=USAGE_RATING_MAX,
    )
    improvement_notes: str | None = Field(
        default=None, alias="improvementNotes"
    )
