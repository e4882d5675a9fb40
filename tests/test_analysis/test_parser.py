"""Tests for response parsing and structural validation."""

from __future__ import annotations

import pytest

from skillforge.analysis.parser import parse_response, validate_analysis
from skillforge.constants import Confidence
from skillforge.resilience.errors import ParseError, ValidationError

# ── parse_response ───────────────────────────────────────────


def test_bare_json() -> None:
    assert parse_response('{"a": 1}') == {"a": 1}


def test_fenced_json_block() -> None:
    raw = 'Here you go:\n```json\n{"extractedData": {}}\n```\nThanks'
    assert parse_response(raw) == {"extractedData": {}}


def test_embedded_object_in_prose() -> None:
    raw = 'Sure! {"confidence": 0.8, "notes": "a } in text"} done'
    assert parse_response(raw) == {"confidence": 0.8, "notes": "a } in text"}


def test_skips_unbalanced_prefix() -> None:
    raw = 'broken { "x": and then {"ok": true}'
    assert parse_response(raw) == {"ok": True}


def test_no_object_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        parse_response("I could not analyze this content.")


def test_top_level_array_is_not_an_object() -> None:
    with pytest.raises(ParseError):
        parse_response("[1, 2, 3]")


# ── validate_analysis ────────────────────────────────────────


def test_valid_response() -> None:
    v = validate_analysis(
        {"extractedData": {"core": {}}, "confidence": 0.9, "notes": "n"}
    )
    assert v.extracted_data == {"core": {}}
    assert v.confidence == 0.9
    assert v.notes == "n"
    assert not v.confidence_defaulted


def test_missing_extracted_data_rejected() -> None:
    with pytest.raises(ValidationError, match="extractedData"):
        validate_analysis({"confidence": 0.9})


def test_non_object_extracted_data_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_analysis({"extractedData": ["a"], "confidence": 0.9})


def test_non_object_response_rejected() -> None:
    with pytest.raises(ValidationError):
        validate_analysis(["not", "an", "object"])


@pytest.mark.parametrize("raw", [None, "high", 1.5, -0.1, True])
def test_bad_confidence_defaulted_and_flagged(raw: object) -> None:
    payload: dict[str, object] = {"extractedData": {}}
    if raw is not None:
        payload["confidence"] = raw
    v = validate_analysis(payload)
    assert v.confidence == Confidence.DEFAULT
    assert v.confidence_defaulted


def test_missing_notes_become_empty() -> None:
    v = validate_analysis({"extractedData": {}, "confidence": 1})
    assert v.notes == ""
    assert v.confidence == 1.0
