"""Skill generation: render → validate → store → package.

Also owns the skill lifecycle operations behind the API (update,
download, versions, usage, delete) so routes stay thin.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from skillforge.analysis.schemas import AnalysisResult
from skillforge.constants import (
    DEFAULT_PAGE_SIZE,
    MAX_PACKAGE_BYTES,
    MIN_MAIN_CONTENT_CHARS,
    MIN_MARKDOWN_CHARS,
    SKILL_NAME_MAX_CHARS,
    SKILL_NAME_MIN_CHARS,
    SKILL_NAME_PATTERN,
    USAGE_RATING_MAX,
    USAGE_RATING_MIN,
    ContentType,
)
from skillforge.export.archive import ArtifactPackager, check_reference_name
from skillforge.models.skill import Skill, SkillUsage, SkillVersion
from skillforge.rendering.blocks import TemplateData
from skillforge.rendering.renderer import RenderedSkill, TemplateRenderer
from skillforge.repositories.protocols import (
    AnalysisRepository,
    SkillChanges,
    SkillRepository,
)
from skillforge.resilience.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")
_SKILL_NAME_RE = re.compile(SKILL_NAME_PATTERN)


# ── Naming and description ───────────────────────────────


def normalize_skill_name(name: str) -> str:
    """Lowercase slug: runs of non-alphanumerics become one hyphen.

    Idempotent: ``normalize_skill_name("My Skill!!") == "my-skill"``.
    """
    slug = _NON_SLUG_RE.sub("-", name.lower().strip())
    return slug.strip("-")


def validate_skill_name(name: str) -> str:
    """Check raw-name length and slug shape; returns the slug."""
    if len(name) < SKILL_NAME_MIN_CHARS:
        raise ValidationError(
            f"Skill name must be at least {SKILL_NAME_MIN_CHARS} characters"
        )
    if len(name) > SKILL_NAME_MAX_CHARS:
        raise ValidationError(
            f"Skill name must be at most {SKILL_NAME_MAX_CHARS} characters"
        )
    slug = normalize_skill_name(name)
    if not slug or not _SKILL_NAME_RE.match(slug):
        raise ValidationError(
            "Skill name must contain only lowercase letters, numbers,"
            " and hyphens"
        )
    return slug


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _dig(data: dict[str, Any], *keys: str) -> Any:
    node: Any = data
    for key in keys:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def generate_description(
    extracted_data: dict[str, Any], skill_type: str
) -> str:
    """One-line description derived from the analysis."""
    if skill_type == ContentType.COPYWRITING:
        tone = _dig(extracted_data, "style", "toneVoice") or "effective"
        flow = _dig(extracted_data, "structure", "narrativeFlow") or "proven"
        return f"Generates {tone} copy using the {flow} framework"
    if skill_type == ContentType.PROCESS:
        step = _first(_dig(extracted_data, "workflow", "steps"))
        name = step.get("name") if isinstance(step, dict) else None
        return f"Structured workflow for {name or 'process execution'}"
    if skill_type == ContentType.TECHNICAL:
        concept = _first(_dig(extracted_data, "concepts", "mainConcepts"))
        return f"Technical guide for {concept or 'implementation'}"
    return f"Skill for {skill_type} tasks"


# ── Package validation ───────────────────────────────────


@dataclass(frozen=True)
class PackageReport:
    is_valid: bool
    issues: list[str]
    package_size: int


def _is_valid_markdown(content: str) -> bool:
    return (
        "#" in content
        and len(content) > MIN_MARKDOWN_CHARS
        and "{{" not in content
    )


def validate_skill_package(rendered: RenderedSkill) -> PackageReport:
    """Structural checks on a rendered skill before it is stored."""
    issues: list[str] = []
    main = rendered.main_document
    if not main:
        issues.append("Missing main skill document")
    elif len(main) < MIN_MAIN_CONTENT_CHARS:
        issues.append("Main skill document seems too short")
    if not _is_valid_markdown(main):
        issues.append("Main skill document contains invalid markdown")
    if not rendered.references:
        issues.append(
            "No reference files generated - skill may be incomplete"
        )
    size = rendered.total_size
    if size > MAX_PACKAGE_BYTES:
        issues.append(
            "Skill package is larger than 1MB - may be too verbose"
        )
    return PackageReport(
        is_valid=not issues, issues=issues, package_size=size
    )


# ── Results ──────────────────────────────────────────────


@dataclass(frozen=True)
class GeneratedSkill:
    skill_id: int
    skill_name: str
    version: int
    files: RenderedSkill
    metadata: dict[str, Any]
    archive: bytes
    created_at: datetime
    package_issues: tuple[str, ...] = ()

    @property
    def download_url(self) -> str:
        return f"/api/skills/{self.skill_id}/download"

    def to_dict(self) -> dict[str, Any]:
        return {
            "skillId": self.skill_id,
            "skillName": self.skill_name,
            "version": self.version,
            "downloadUrl": self.download_url,
            "createdAt": self.created_at.isoformat(),
            "metadata": self.metadata,
            "warnings": list(self.package_issues),
        }


@dataclass(frozen=True)
class SkillUpdate:
    """User-requested edit; any subset of fields may be set."""

    name: str | None = None
    description: str | None = None
    main_content: str | None = None
    references: dict[str, str] | None = None
    tags: list[str] | None = None
    change_notes: str | None = None


@dataclass(frozen=True)
class SkillPage:
    skills: list[Skill]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        return self.offset + self.limit < self.total


# ── Service ──────────────────────────────────────────────


class SkillGenerationService:
    """Generates skills from analyses and manages their lifecycle."""

    def __init__(
        self,
        skills: SkillRepository,
        analyses: AnalysisRepository,
        renderer: TemplateRenderer | None = None,
        packager: ArtifactPackager | None = None,
    ) -> None:
        self._skills = skills
        self._analyses = analyses
        self._renderer = renderer or TemplateRenderer()
        self._packager = packager or ArtifactPackager()

    async def generate(
        self,
        analysis: AnalysisResult,
        skill_name: str,
        skill_type: str,
        description: str | None = None,
        tags: list[str] | None = None,
    ) -> GeneratedSkill:
        name = validate_skill_name(skill_name)
        if not self._renderer.supports(skill_type):
            raise ValidationError(
                f"Invalid skill type: {skill_type}. Valid types: "
                + ", ".join(c.value for c in ContentType)
            )

        description = description or generate_description(
            analysis.extracted_data, skill_type
        )
        rendered = self._renderer.render(
            skill_type,
            TemplateData(
                skill_name=name,
                description=description,
                extracted_data=analysis.extracted_data,
            ),
        )
        report = validate_skill_package(rendered)
        if not report.is_valid:
            # Advisory: issues are logged and returned, not raised
            logger.warning(
                "event=skill_package_issues name=%s issues=%s",
                name,
                "; ".join(report.issues),
            )

        metadata: dict[str, Any] = {
            "tags": list(tags or []),
            "fileCount": 1 + len(rendered.references),
            "totalSize": report.package_size,
            "extractedFrom": {
                "analysisId": analysis.analysis_id,
                "contentType": str(analysis.content_type),
                "analysisDate": analysis.created_at.isoformat(),
                "confidence": analysis.confidence,
            },
        }
        skill = await self._skills.create(
            Skill(
                name=name,
                description=description,
                skill_type=skill_type,
                main_content=rendered.main_document,
                references=dict(rendered.references),
                metadata_=metadata,
            )
        )
        await self._analyses.link_skill(analysis.analysis_id, skill.id)

        archive = self._packager.package(
            rendered.main_document, rendered.references, name
        )
        logger.info(
            "event=skill_generated skill_id=%d name=%s type=%s",
            skill.id,
            name,
            skill_type,
        )
        return GeneratedSkill(
            skill_id=skill.id,
            skill_name=name,
            version=skill.version,
            files=rendered,
            metadata=metadata,
            archive=archive,
            created_at=datetime.now(UTC),
            package_issues=tuple(report.issues),
        )

    async def get(self, skill_id: int) -> Skill:
        skill = await self._skills.get(skill_id)
        if skill is None:
            raise NotFoundError(f"Skill {skill_id} not found")
        return skill

    async def list_skills(
        self,
        search: str | None = None,
        skill_type: str | None = None,
        limit: int = DEFAULT_PAGE_SIZE,
        offset: int = 0,
    ) -> SkillPage:
        skills = await self._skills.list_skills(
            search=search, skill_type=skill_type, limit=limit, offset=offset
        )
        total = await self._skills.count_skills(
            search=search, skill_type=skill_type
        )
        return SkillPage(
            skills=skills, total=total, limit=limit, offset=offset
        )

    async def update(self, skill_id: int, update: SkillUpdate) -> int:
        """Apply a user edit as a new version; returns that version."""
        name = (
            validate_skill_name(update.name)
            if update.name is not None
            else None
        )
        if (
            update.main_content is not None
            and len(update.main_content) < MIN_MAIN_CONTENT_CHARS
        ):
            raise ValidationError(
                "Content must be at least"
                f" {MIN_MAIN_CONTENT_CHARS} characters"
            )
        if update.references is not None:
            for filename in update.references:
                check_reference_name(filename)
        metadata_updates: dict[str, Any] = {}
        if update.tags is not None:
            metadata_updates["tags"] = list(update.tags)
        return await self._skills.update(
            skill_id,
            SkillChanges(
                name=name,
                description=update.description,
                main_content=update.main_content,
                references=update.references,
                metadata_updates=metadata_updates,
                change_notes=update.change_notes,
            ),
        )

    async def record_publication(
        self, skill_id: int, github: dict[str, Any]
    ) -> int:
        """Store publish details under ``metadata.github`` (new version)."""
        return await self._skills.update(
            skill_id,
            SkillChanges(
                metadata_updates={"github": github},
                change_notes="Published to GitHub",
            ),
        )

    async def download(self, skill_id: int) -> tuple[str, bytes]:
        """Archive the stored revision; returns (skill name, zip bytes)."""
        skill = await self.get(skill_id)
        archive = self._packager.package(
            skill.main_content, skill.references or {}, skill.name
        )
        return skill.name, archive

    async def versions(self, skill_id: int) -> list[SkillVersion]:
        await self.get(skill_id)
        return await self._skills.list_versions(skill_id)

    async def delete(self, skill_id: int) -> Skill:
        skill = await self._skills.delete(skill_id)
        if skill is None:
            raise NotFoundError(f"Skill {skill_id} not found")
        return skill

    async def record_usage(
        self,
        skill_id: int,
        usage_context: str | None = None,
        feedback_rating: int | None = None,
        improvement_notes: str | None = None,
    ) -> SkillUsage:
        if feedback_rating is not None and not (
            USAGE_RATING_MIN <= feedback_rating <= USAGE_RATING_MAX
        ):
            raise ValidationError(
                f"Rating must be between {USAGE_RATING_MIN}"
                f" and {USAGE_RATING_MAX}"
            )
        return await self._skills.record_usage(
            SkillUsage(
                skill_id=skill_id,
                usage_context=usage_context,
                feedback_rating=feedback_rating,
                improvement_notes=improvement_notes,
            )
        )

    async def usage(self, skill_id: int) -> list[SkillUsage]:
        await self.get(skill_id)
        return await self._skills.list_usage(skill_id)
