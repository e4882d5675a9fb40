"""Extract and validate structured JSON from analysis-service text.

The service is asked for bare JSON but sometimes wraps it in a
markdown fence or surrounds it with prose, so parsing tries, in order:
the whole text, fenced blocks labelled ``json``, then balanced
``{...}`` substrings.
"""

from __future__ import annotations

import json
import logging
import math
import re
from collections.abc import Iterator
from typing import Any, cast

from skillforge.analysis.schemas import ValidatedAnalysis
from skillforge.constants import Confidence
from skillforge.resilience.errors import ParseError, ValidationError

logger = logging.getLogger(__name__)

_FENCED_JSON_RE = re.compile(
    r"```[ \t]*json[ \t]*\r?\n(.*?)```", re.DOTALL | re.IGNORECASE
)


def parse_response(raw_text: str) -> dict[str, Any]:
    """Return the first JSON object recoverable from ``raw_text``.

    Raises ParseError when no strategy yields an object.
    """
    parsed = _loads_object(raw_text.strip())
    if parsed is not None:
        return parsed

    for match in _FENCED_JSON_RE.finditer(raw_text):
        parsed = _loads_object(match.group(1).strip())
        if parsed is not None:
            logger.debug("event=parsed_fenced_json")
            return parsed

    for candidate in _balanced_objects(raw_text):
        parsed = _loads_object(candidate)
        if parsed is not None:
            logger.debug("event=parsed_embedded_json")
            return parsed

    logger.warning(
        "event=response_parse_failed response_len=%d", len(raw_text)
    )
    raise ParseError("No valid JSON object found in response")


def validate_analysis(parsed: Any) -> ValidatedAnalysis:
    """Enforce the structural contract of an analysis response.

    ``extractedData`` must be an object. A missing, non-numeric or
    out-of-range ``confidence`` is replaced by the default and flagged
    rather than rejected.
    """
    if not isinstance(parsed, dict):
        raise ValidationError("Response must be an object")
    data = cast(dict[str, Any], parsed)

    extracted = data.get("extractedData")
    if not isinstance(extracted, dict):
        raise ValidationError("Missing extractedData field")

    raw_confidence = data.get("confidence")
    defaulted = not _is_probability(raw_confidence)
    if defaulted:
        logger.warning(
            "event=confidence_defaulted raw=%r default=%.1f",
            raw_confidence,
            Confidence.DEFAULT,
        )
        confidence = Confidence.DEFAULT
    else:
        confidence = float(raw_confidence)

    notes = data.get("notes")
    return ValidatedAnalysis(
        extracted_data=cast(dict[str, Any], extracted),
        confidence=confidence,
        notes="" if notes is None else str(notes),
        confidence_defaulted=defaulted,
    )


def _is_probability(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value) and 0.0 <= value <= 1.0


def _loads_object(text: str) -> dict[str, Any] | None:
    if not text:
        return None
    try:
        value = json.loads(text)
    except ValueError:
        return None
    return cast(dict[str, Any], value) if isinstance(value, dict) else None


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield each balanced ``{...}`` substring, leftmost first."""
    start = text.find("{")
    while start != -1:
        end = _balanced_end(text, start)
        if end is not None:
            yield text[start : end + 1]
        start = text.find("{", start + 1)


def _balanced_end(text: str, start: int) -> int | None:
    """Index of the brace closing the one at ``start`` (string-aware)."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None
