"""Tests for ContentAnalysisService: checks, cache, dedup, deadline."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from skillforge.analysis.cache import AnalysisCache
from skillforge.analysis.schemas import ModelConfig
from skillforge.constants import Confidence, ContentType
from skillforge.repositories.fakes import FakeAnalysisRepository
from skillforge.resilience.errors import (
    NotFoundError,
    ParseError,
    ServiceTimeoutError,
    ValidationError,
)
from skillforge.services.analysis_service import (
    ContentAnalysisService,
    check_content,
)

CONTENT = "Tired of busywork? Our tool saves ten hours a week."


class StubClient:
    """Stands in for AnalysisServiceClient; counts calls."""

    def __init__(
        self,
        payload: dict[str, Any] | str,
        *,
        delay: float = 0.0,
    ) -> None:
        self.payload = payload
        self.delay = delay
        self.calls = 0

    async def analyze(
        self, prompt: str, system: str, model_config: ModelConfig
    ) -> str:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(self.payload)


def _service(
    client: StubClient,
    repo: FakeAnalysisRepository,
    *,
    timeout: float = 5.0,
) -> ContentAnalysisService:
    return ContentAnalysisService(
        client,  # type: ignore[arg-type]
        AnalysisCache(),
        repo,
        ModelConfig(model="test/model"),
        request_timeout=timeout,
    )


@pytest.fixture
def payload(copywriting_data: dict[str, Any]) -> dict[str, Any]:
    return {
        "extractedData": copywriting_data,
        "confidence": 0.92,
        "notes": "clear structure",
    }


# ── check_content ────────────────────────────────────────────


def test_short_content_rejected() -> None:
    with pytest.raises(ValidationError, match="at least 10"):
        check_content("tiny", "copywriting")


def test_long_content_rejected() -> None:
    with pytest.raises(ValidationError, match="less than"):
        check_content("x" * 50_001, "copywriting")


def test_content_at_char_cap_accepted() -> None:
    assert check_content("x" * 50_000, "process") == ContentType.PROCESS


def test_unknown_type_rejected() -> None:
    with pytest.raises(ValidationError, match="Content type must be"):
        check_content(CONTENT, "poetry")


# ── analyze ──────────────────────────────────────────────────


async def test_invalid_input_never_reaches_service(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    client = StubClient(payload)
    with pytest.raises(ValidationError):
        await _service(client, fake_analyses).analyze("hello", "copywriting")
    assert client.calls == 0


async def test_analyze_persists_and_returns_result(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    service = _service(StubClient(payload), fake_analyses)

    result = await service.analyze(CONTENT, "copywriting")

    assert result.confidence == 0.92
    assert result.notes == "clear structure"
    assert len(result.analysis_id) == 32
    stored = await fake_analyses.get(result.analysis_id)
    assert stored is not None
    assert stored.source_content == CONTENT
    reloaded = await service.get_analysis(result.analysis_id)
    assert reloaded.extracted_data == result.extracted_data


async def test_repeat_content_served_from_cache(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    client = StubClient(payload)
    service = _service(client, fake_analyses)

    first = await service.analyze(CONTENT, "copywriting")
    second = await service.analyze(CONTENT, "copywriting")

    assert client.calls == 1
    assert second.analysis_id == first.analysis_id


async def test_same_content_different_type_not_shared(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    client = StubClient(payload)
    service = _service(client, fake_analyses)
    await service.analyze(CONTENT, "copywriting")
    await service.analyze(CONTENT, "technical")
    assert client.calls == 2


async def test_concurrent_identical_requests_share_one_call(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    client = StubClient(payload, delay=0.05)
    service = _service(client, fake_analyses)

    results = await asyncio.gather(
        *(service.analyze(CONTENT, "copywriting") for _ in range(4))
    )

    assert client.calls == 1
    assert len({r.analysis_id for r in results}) == 1


async def test_missing_confidence_defaulted(
    fake_analyses: FakeAnalysisRepository,
) -> None:
    client = StubClient({"extractedData": {"workflow": {"steps": []}}})
    service = _service(client, fake_analyses)

    result = await service.analyze("Step 1: plan. Step 2: do.", "process")

    assert result.confidence == Confidence.DEFAULT
    assert result.confidence_defaulted
    assert service.assess(result).requires_review


async def test_unparseable_response_not_cached(
    fake_analyses: FakeAnalysisRepository,
) -> None:
    client = StubClient("I cannot help with that.")
    service = _service(client, fake_analyses)

    for _ in range(2):
        with pytest.raises(ParseError):
            await service.analyze(CONTENT, "copywriting")
    assert client.calls == 2


async def test_deadline_exceeded(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    client = StubClient(payload, delay=1.0)
    service = _service(client, fake_analyses, timeout=0.01)

    with pytest.raises(ServiceTimeoutError):
        await service.analyze(CONTENT, "copywriting")
    assert fake_analyses._store == {}


async def test_get_missing_analysis(
    fake_analyses: FakeAnalysisRepository, payload: dict[str, Any]
) -> None:
    with pytest.raises(NotFoundError):
        await _service(StubClient(payload), fake_analyses).get_analysis("x")
