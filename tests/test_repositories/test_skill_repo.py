"""Tests for SqlSkillRepository — the versioned skill store."""

from __future__ import annotations

import asyncio

import pytest

from skillforge.models.analysis import ContentAnalysis
from skillforge.models.skill import Skill, SkillUsage
from skillforge.repositories.analysis_repo import SqlAnalysisRepository
from skillforge.repositories.protocols import SkillChanges
from skillforge.repositories.skill_repo import SqlSkillRepository
from skillforge.resilience.errors import ConflictError, NotFoundError


def _skill(name: str = "email-writer", **overrides: object) -> Skill:
    fields: dict[str, object] = {
        "name": name,
        "description": "Writes emails",
        "skill_type": "copywriting",
        "main_content": "# Email Writer\n\nOriginal body.",
        "references": {"practices.md": "# Practices"},
        "metadata_": {"tags": ["email"], "fileCount": 2},
    }
    fields.update(overrides)
    return Skill(**fields)


async def test_create_and_get(skill_repo: SqlSkillRepository) -> None:
    created = await skill_repo.create(_skill())
    assert created.id is not None
    assert created.version == 1

    fetched = await skill_repo.get(created.id)
    assert fetched is not None
    assert fetched.name == "email-writer"
    assert fetched.references == {"practices.md": "# Practices"}
    assert fetched.metadata_["tags"] == ["email"]
    assert await skill_repo.get_by_name("email-writer") is not None


async def test_duplicate_name_conflicts(skill_repo: SqlSkillRepository) -> None:
    await skill_repo.create(_skill())
    with pytest.raises(ConflictError):
        await skill_repo.create(_skill())


async def test_update_snapshots_previous_revision(
    skill_repo: SqlSkillRepository,
) -> None:
    skill = await skill_repo.create(_skill())

    v2 = await skill_repo.update(
        skill.id,
        SkillChanges(main_content="# Email Writer\n\nSecond body."),
    )
    v3 = await skill_repo.update(
        skill.id,
        SkillChanges(
            main_content="# Email Writer\n\nThird body.",
            change_notes="tighten copy",
        ),
    )

    assert (v2, v3) == (2, 3)
    current = await skill_repo.get(skill.id)
    assert current is not None
    assert current.version == 3
    assert current.main_content.endswith("Third body.")

    versions = await skill_repo.list_versions(skill.id)
    assert [v.version for v in versions] == [2, 1]
    assert versions[0].main_content.endswith("Second body.")
    assert versions[0].change_notes == "tighten copy"
    assert versions[1].main_content.endswith("Original body.")

    v1 = await skill_repo.get_version(skill.id, 1)
    assert v1 is not None
    assert v1.references == {"practices.md": "# Practices"}


async def test_metadata_updates_merge(skill_repo: SqlSkillRepository) -> None:
    skill = await skill_repo.create(_skill())
    await skill_repo.update(
        skill.id,
        SkillChanges(metadata_updates={"github": {"repositoryName": "o/r"}}),
    )
    current = await skill_repo.get(skill.id)
    assert current is not None
    assert current.metadata_ == {
        "tags": ["email"],
        "fileCount": 2,
        "github": {"repositoryName": "o/r"},
    }


async def test_update_missing_skill(skill_repo: SqlSkillRepository) -> None:
    with pytest.raises(NotFoundError):
        await skill_repo.update(999, SkillChanges(description="x"))


async def test_rename_to_taken_name_conflicts(
    skill_repo: SqlSkillRepository,
) -> None:
    await skill_repo.create(_skill("first-skill"))
    second = await skill_repo.create(_skill("second-skill"))

    with pytest.raises(ConflictError):
        await skill_repo.update(second.id, SkillChanges(name="first-skill"))

    unchanged = await skill_repo.get(second.id)
    assert unchanged is not None
    assert unchanged.version == 1
    assert await skill_repo.list_versions(second.id) == []


async def test_concurrent_updates_lose_no_snapshot(
    skill_repo: SqlSkillRepository,
) -> None:
    skill = await skill_repo.create(_skill())

    results = await asyncio.gather(
        *(
            skill_repo.update(
                skill.id, SkillChanges(description=f"edit {n}")
            )
            for n in range(3)
        )
    )

    assert sorted(results) == [2, 3, 4]
    versions = await skill_repo.list_versions(skill.id)
    assert [v.version for v in versions] == [3, 2, 1]
    current = await skill_repo.get(skill.id)
    assert current is not None
    assert current.version == 4


async def test_list_search_filter_and_count(
    skill_repo: SqlSkillRepository,
) -> None:
    await skill_repo.create(_skill("email-writer"))
    await skill_repo.create(
        _skill("deploy-runbook", skill_type="process", description="Ship")
    )
    await skill_repo.create(
        _skill("api-guide", skill_type="technical", description="REST")
    )

    assert await skill_repo.count_skills() == 3
    assert await skill_repo.count_skills(skill_type="process") == 1
    found = await skill_repo.list_skills(search="REST")
    assert [s.name for s in found] == ["api-guide"]
    page = await skill_repo.list_skills(limit=2, offset=0)
    assert len(page) == 2


async def test_delete_removes_history_and_unlinks_analysis(
    skill_repo: SqlSkillRepository,
    analysis_repo: SqlAnalysisRepository,
) -> None:
    skill = await skill_repo.create(_skill())
    await analysis_repo.create(
        ContentAnalysis(
            id="an-1",
            source_content="Some source content",
            content_type="copywriting",
            analysis_result={},
            confidence=0.9,
        )
    )
    await analysis_repo.link_skill("an-1", skill.id)
    await skill_repo.update(skill.id, SkillChanges(description="v2"))
    await skill_repo.record_usage(
        SkillUsage(skill_id=skill.id, feedback_rating=5)
    )

    deleted = await skill_repo.delete(skill.id)

    assert deleted is not None
    assert await skill_repo.get(skill.id) is None
    assert await skill_repo.list_versions(skill.id) == []
    assert await skill_repo.list_usage(skill.id) == []
    analysis = await analysis_repo.get("an-1")
    assert analysis is not None
    assert analysis.skill_id is None
    assert await skill_repo.delete(skill.id) is None


async def test_usage_for_missing_skill(skill_repo: SqlSkillRepository) -> None:
    with pytest.raises(NotFoundError):
        await skill_repo.record_usage(SkillUsage(skill_id=42))
