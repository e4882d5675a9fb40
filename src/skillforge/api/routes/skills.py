"""Skill generation, lifecycle, and publication routes."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Header, Query
from fastapi.responses import Response

from skillforge.api.dependencies import (
    get_analysis_service,
    get_publisher_factory,
    get_settings,
    get_skill_service,
)
from skillforge.api.schemas import (
    APIResponse,
    GenerateSkillRequest,
    PublishRequest,
    UpdateSkillRequest,
    UsageRequest,
)
from skillforge.config import Settings
from skillforge.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, ContentType
from skillforge.export.archive import archive_filename
from skillforge.publishing.github import GitHubPublisher
from skillforge.resilience.errors import PublishAuthError
from skillforge.services.analysis_service import ContentAnalysisService
from skillforge.services.skill_service import (
    SkillGenerationService,
    SkillUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["skills"])


@router.post("/generate-skill", status_code=201)
async def generate_skill(
    body: GenerateSkillRequest,
    analyses: ContentAnalysisService = Depends(get_analysis_service),
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    """Render, store and package a skill from a stored analysis."""
    analysis = await analyses.get_analysis(body.analysis_id)
    generated = await skills.generate(
        analysis,
        body.skill_name,
        body.skill_type,
        description=body.description,
        tags=body.tags,
    )
    return APIResponse(success=True, data=generated.to_dict())


@router.get("/skills")
async def list_skills(
    search: str | None = None,
    skill_type: ContentType | None = Query(default=None, alias="type"),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    """List stored skills, newest first."""
    page = await skills.list_skills(
        search=search, skill_type=skill_type, limit=limit, offset=offset
    )
    return APIResponse(
        success=True,
        data=[s.to_summary() for s in page.skills],
        metadata={
            "pagination": {
                "total": page.total,
                "limit": page.limit,
                "offset": page.offset,
                "hasMore": page.has_more,
            }
        },
    )


@router.get("/skills/{skill_id}")
async def get_skill(
    skill_id: int,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    skill = await skills.get(skill_id)
    return APIResponse(success=True, data=skill.to_dict())


@router.put("/skills/{skill_id}")
async def update_skill(
    skill_id: int,
    body: UpdateSkillRequest,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    """Apply an edit; the previous revision is kept as a snapshot."""
    version = await skills.update(
        skill_id,
        SkillUpdate(
            name=body.name,
            description=body.description,
            main_content=body.main_content,
            references=body.references,
            tags=body.tags,
            change_notes=body.change_notes,
        ),
    )
    skill = await skills.get(skill_id)
    return APIResponse(
        success=True,
        data=skill.to_dict(),
        metadata={"version": version},
    )


@router.delete("/skills/{skill_id}")
async def delete_skill(
    skill_id: int,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    skill = await skills.delete(skill_id)
    return APIResponse(
        success=True, data={"skillId": skill_id, "name": skill.name}
    )


@router.get("/skills/{skill_id}/versions")
async def list_versions(
    skill_id: int,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    """Snapshots of earlier revisions, newest first."""
    versions = await skills.versions(skill_id)
    return APIResponse(
        success=True, data=[v.to_dict() for v in versions]
    )


@router.get("/skills/{skill_id}/download")
async def download_skill(
    skill_id: int,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> Response:
    """Zip archive of the current revision."""
    name, archive = await skills.download(skill_id)
    return Response(
        content=archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{archive_filename(name)}"'
            ),
        },
    )


@router.post("/skills/{skill_id}/publish")
async def publish_skill(
    skill_id: int,
    body: PublishRequest,
    x_github_token: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
    skills: SkillGenerationService = Depends(get_skill_service),
    publisher_factory: Callable[[str], GitHubPublisher] = Depends(
        get_publisher_factory
    ),
) -> APIResponse:
    """Publish the current revision to a new GitHub repository."""
    skill = await skills.get(skill_id)
    token = body.github_token or x_github_token or settings.github_token
    if not token:
        raise PublishAuthError(
            "GitHub token is required. Provide it in the request body"
            " or the X-GitHub-Token header."
        )
    publisher = publisher_factory(token)
    result = await publisher.publish(
        skill.name,
        skill.description or "",
        skill.main_content,
        skill.references or {},
        private=body.is_private,
        owner=body.owner,
    )
    version = await skills.record_publication(
        skill_id,
        {
            "repositoryUrl": result.repository_url,
            "repositoryName": result.repository_name,
            "publishedAt": datetime.now(UTC).isoformat(),
        },
    )
    logger.info(
        "event=skill_publish_recorded skill_id=%d repo=%s version=%d",
        skill_id,
        result.repository_name,
        version,
    )
    return APIResponse(success=True, data=result.to_dict())


@router.post("/skills/{skill_id}/usage", status_code=201)
async def record_usage(
    skill_id: int,
    body: UsageRequest,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    usage = await skills.record_usage(
        skill_id,
        usage_context=body.usage_context,
        feedback_rating=body.feedback_rating,
        improvement_notes=body.improvement_notes,
    )
    return APIResponse(success=True, data=usage.to_dict())


@router.get("/skills/{skill_id}/usage")
async def list_usage(
    skill_id: int,
    skills: SkillGenerationService = Depends(get_skill_service),
) -> APIResponse:
    usage = await skills.usage(skill_id)
    return APIResponse(success=True, data=[u.to_dict() for u in usage])
