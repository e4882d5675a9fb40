"""Shared test fixtures — file-backed SQLite, repos, canned analyses."""

import os

# Force a demo API key for all tests; no real service calls.
os.environ["ANTHROPIC_API_KEY"] = "for-demo-purposes-only"

import json
from pathlib import Path
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from skillforge.analysis.schemas import AnalysisResult
from skillforge.config import create_app_engine
from skillforge.constants import ContentType
from skillforge.models.base import Base
from skillforge.repositories.analysis_repo import SqlAnalysisRepository
from skillforge.repositories.fakes import (
    FakeAnalysisRepository,
    FakeSkillRepository,
)
from skillforge.repositories.skill_repo import SqlSkillRepository

COPYWRITING_DATA: dict[str, Any] = {
    "core": {
        "bigIdea": "Save ten hours a week",
        "hook": "What would you do with an extra day?",
        "problemPain": "Teams drown in repetitive busywork",
        "enemyVillain": "Manual spreadsheets",
        "promise": "Automation without the setup",
        "mechanism": "Prebuilt workflow recipes",
        "proof": ["10,000 teams", "4.8 star rating"],
        "offer": "14-day free trial, then $29/month",
        "cta": "Start your free trial today",
    },
    "style": {
        "toneVoice": "conversational",
        "psychologicalTriggers": ["Social proof", "Scarcity"],
        "emotionalTone": "relief",
    },
    "structure": {
        "sentenceStructure": {
            "averageLength": 9,
            "patterns": ["Short punchy opens", "Question leads"],
            "variety": "Mostly short with one long explainer",
        },
        "copyCadence": "fast",
        "paragraphFlow": "Pain, then promise, then proof",
        "formattingPatterns": ["Bullet points", "Bold text"],
        "narrativeFlow": "Problem-Agitate-Solve",
    },
    "language": {
        "languageStyle": "Direct",
        "signaturePhrases": ["Get your day back"],
        "wordChoice": "Plain everyday verbs",
        "powerWords": ["instantly", "free"],
    },
}


@pytest.fixture
def copywriting_data() -> dict[str, Any]:
    return json.loads(json.dumps(COPYWRITING_DATA))


@pytest.fixture
def analysis_result(copywriting_data: dict[str, Any]) -> AnalysisResult:
    return AnalysisResult(
        analysis_id="a" * 32,
        content_type=ContentType.COPYWRITING,
        extracted_data=copywriting_data,
        confidence=0.9,
        processing_time=1.5,
        notes="Strong example",
    )


@pytest.fixture
async def session_factory(tmp_path: Path):
    """File-backed DB so every repo session sees the same data."""
    engine = create_app_engine(f"sqlite:///{tmp_path}/test.db")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    await engine.dispose()


@pytest.fixture
def skill_repo(session_factory) -> SqlSkillRepository:
    return SqlSkillRepository(session_factory)


@pytest.fixture
def analysis_repo(session_factory) -> SqlAnalysisRepository:
    return SqlAnalysisRepository(session_factory)


@pytest.fixture
def fake_skills() -> FakeSkillRepository:
    return FakeSkillRepository()


@pytest.fixture
def fake_analyses() -> FakeAnalysisRepository:
    return FakeAnalysisRepository()
