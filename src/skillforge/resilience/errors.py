"""Typed error taxonomy and retry classification.

Every failure the pipeline can surface is a ``SkillForgeError``
subclass carrying a machine-checkable ``kind``. Retry decisions and
HTTP status mapping read that kind; nothing here inspects message
text.
"""

from __future__ import annotations

from enum import Enum, StrEnum
from typing import Any, ClassVar

from skillforge.constants import DEFAULT_RETRY_AFTER_SECONDS


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    SERVICE = "service"
    TIMEOUT = "timeout"
    PARSE = "parse"
    CONFLICT = "conflict"
    CONFIGURATION = "configuration"
    NOT_FOUND = "not_found"
    PUBLISH = "publish"
    UNKNOWN = "unknown"


class SkillForgeError(Exception):
    """Base class for all classified pipeline errors."""

    kind: ClassVar[ErrorKind] = ErrorKind.UNKNOWN
    retryable: ClassVar[bool] = False
    http_status: ClassVar[int] = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self.kind),
            "message": self.message,
            "retryable": self.retryable,
        }


class ValidationError(SkillForgeError):
    """Caller-supplied input (or a required response field) is malformed."""

    kind = ErrorKind.VALIDATION
    http_status = 400


class AuthError(SkillForgeError):
    kind = ErrorKind.AUTH
    http_status = 401


class RateLimitError(SkillForgeError):
    """Upstream throttled us; ``retry_after`` is in seconds."""

    kind = ErrorKind.RATE_LIMIT
    retryable = True
    http_status = 429

    def __init__(
        self,
        message: str,
        retry_after: float = DEFAULT_RETRY_AFTER_SECONDS,
    ) -> None:
        super().__init__(message)
        self.retry_after = retry_after

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["retry_after"] = self.retry_after
        return data


class ServiceError(SkillForgeError):
    """Transient server-side fault (5xx)."""

    kind = ErrorKind.SERVICE
    retryable = True
    http_status = 502

    def __init__(
        self, message: str, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code


class ServiceTimeoutError(SkillForgeError):
    """Network timeout/reset, or the request deadline expired."""

    kind = ErrorKind.TIMEOUT
    retryable = True
    http_status = 504


class ParseError(SkillForgeError):
    """Service output could not be interpreted as structured data."""

    kind = ErrorKind.PARSE
    http_status = 502


class ConflictError(SkillForgeError):
    """Duplicate skill name — callers should pick another name."""

    kind = ErrorKind.CONFLICT
    http_status = 409


class ConfigurationError(SkillForgeError):
    """Unknown content type / template set — a deployment defect."""

    kind = ErrorKind.CONFIGURATION
    http_status = 500


class NotFoundError(SkillForgeError):
    kind = ErrorKind.NOT_FOUND
    http_status = 404


class UnexpectedServiceError(SkillForgeError):
    """Upstream failure that fits no other category; not retried."""

    kind = ErrorKind.UNKNOWN
    http_status = 502


class PublishError(SkillForgeError):
    """Code-host API rejected a publish step."""

    kind = ErrorKind.PUBLISH
    http_status = 502


class PublishConflictError(PublishError):
    """Target repository name is already taken."""

    kind = ErrorKind.CONFLICT
    http_status = 409


class PublishAuthError(PublishError):
    """Code-host token missing, invalid or expired."""

    kind = ErrorKind.AUTH
    http_status = 401


class ErrorClass(Enum):
    TRANSIENT = "transient"  # rate limited, retryable
    SERVER = "server"  # 5xx, retryable
    TIMEOUT = "timeout"  # network timeout/reset, retryable
    CLIENT = "client"  # auth, malformed request, parse: do NOT retry
    UNKNOWN = "unknown"  # unclassified: do NOT retry


_KIND_TO_CLASS: dict[ErrorKind, ErrorClass] = {
    ErrorKind.RATE_LIMIT: ErrorClass.TRANSIENT,
    ErrorKind.SERVICE: ErrorClass.SERVER,
    ErrorKind.TIMEOUT: ErrorClass.TIMEOUT,
    ErrorKind.AUTH: ErrorClass.CLIENT,
    ErrorKind.VALIDATION: ErrorClass.CLIENT,
    ErrorKind.PARSE: ErrorClass.CLIENT,
    ErrorKind.CONFLICT: ErrorClass.CLIENT,
    ErrorKind.NOT_FOUND: ErrorClass.CLIENT,
}

_RETRYABLE = frozenset({
    ErrorClass.TRANSIENT,
    ErrorClass.SERVER,
    ErrorClass.TIMEOUT,
})


def classify_error(error: BaseException) -> ErrorClass:
    """Classify an error by its declared kind.

    Only ``SkillForgeError`` instances are classified; anything else
    has not been translated at its origin and is UNKNOWN.
    """
    if not isinstance(error, SkillForgeError):
        return ErrorClass.UNKNOWN
    return _KIND_TO_CLASS.get(error.kind, ErrorClass.UNKNOWN)


def is_retryable(error: BaseException) -> bool:
    """Return True if the error category supports retry."""
    return classify_error(error) in _RETRYABLE
