"""Shared constants — single source of truth for cross-module values.

All magic strings and numbers that appear in 2+ files belong here.
StrEnum members are str-compatible, so downstream code (JSON, SQL,
HTTP payloads) works unchanged.
"""

from __future__ import annotations

import math
from enum import StrEnum

# ── String Enums ─────────────────────────────────────────


class ContentType(StrEnum):
    """Content categories with a registered analysis framework."""

    COPYWRITING = "copywriting"
    PROCESS = "process"
    TECHNICAL = "technical"


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"


# ── Content Limits ───────────────────────────────────────

MIN_CONTENT_CHARS = 10
MAX_CONTENT_CHARS = 50_000

# ── Confidence ───────────────────────────────────────────


class Confidence:
    """Named confidence thresholds — single source of truth."""

    DEFAULT = 0.5  # substituted when the service omits/garbles it
    LOW = 0.7  # below this the analysis is flagged
    REVIEW = 0.8  # below this the analysis needs human review
    FLOOR = 0.0
    CEILING = 1.0


EMPTY_FIELD_RATIO = 0.5  # > half the sections empty → mismatch flag

# ── Rate Limit / Retry Defaults ──────────────────────────

RATE_LIMIT_MAX_REQUESTS = 50
RATE_LIMIT_WINDOW_MS = 60_000

RETRY_MAX_RETRIES = 3
RETRY_BASE_DELAY_MS = 1_000
RETRY_MAX_DELAY_MS = 30_000
DEFAULT_RETRY_AFTER_SECONDS = 60

# ── Analysis Cache ───────────────────────────────────────

ANALYSIS_CACHE_TTL_SECONDS = 15 * 60
ANALYSIS_CACHE_MAX_ENTRIES = 1024

# ── LLM Output ───────────────────────────────────────────

LLM_MAX_OUTPUT_TOKENS = 4096
LLM_TEMPERATURE = 0.3

# ── Skill Naming ─────────────────────────────────────────

SKILL_NAME_MIN_CHARS = 3
SKILL_NAME_MAX_CHARS = 50
SKILL_NAME_PATTERN = r"^[a-z0-9-]+$"

# ── Skill Package ────────────────────────────────────────

MAIN_DOCUMENT_NAMES = ("skill.md", "SKILL.md")
REFERENCES_DIR = "references"
MIN_MAIN_CONTENT_CHARS = 100
MIN_MARKDOWN_CHARS = 50
MAX_PACKAGE_BYTES = 1024 * 1024
ARCHIVE_COMPRESS_LEVEL = 9
# Fixed zip entry timestamp so identical content → identical bytes
ARCHIVE_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)

# ── Store ────────────────────────────────────────────────

UPDATE_MAX_ATTEMPTS = 5  # CAS retries for concurrent version bumps
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200

# ── Misc ─────────────────────────────────────────────────

ERROR_TRUNCATION_CHARS = 200
ID_HEX_LENGTH = 32
USAGE_RATING_MIN = 1
USAGE_RATING_MAX = 5

# ── Token Estimation ────────────────────────────────────

CHARS_PER_TOKEN_ESTIMATE = 4


def estimate_tokens(text: str) -> int:
    """Rough token estimate using chars-per-token ratio (rounded up)."""
    return math.ceil(len(text) / CHARS_PER_TOKEN_ESTIMATE)
