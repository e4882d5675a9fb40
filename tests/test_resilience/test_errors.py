"""Tests for typed error classification."""

from __future__ import annotations

from skillforge.resilience.errors import (
    AuthError,
    ConflictError,
    ErrorClass,
    ErrorKind,
    ParseError,
    PublishConflictError,
    RateLimitError,
    ServiceError,
    ServiceTimeoutError,
    UnexpectedServiceError,
    ValidationError,
    classify_error,
    is_retryable,
)

# ── classify_error ───────────────────────────────────────────


def test_rate_limit_is_transient() -> None:
    assert classify_error(RateLimitError("slow down")) == ErrorClass.TRANSIENT


def test_service_error_is_server() -> None:
    err = ServiceError("boom", status_code=503)
    assert classify_error(err) == ErrorClass.SERVER


def test_timeout_is_timeout() -> None:
    assert classify_error(ServiceTimeoutError("t")) == ErrorClass.TIMEOUT


def test_client_kinds() -> None:
    for err in (
        AuthError("nope"),
        ValidationError("bad"),
        ParseError("garbled"),
        ConflictError("dup"),
    ):
        assert classify_error(err) == ErrorClass.CLIENT


def test_untranslated_exception_is_unknown() -> None:
    """Raw exceptions are never classified by message text."""
    assert classify_error(RuntimeError("rate limit 429")) == ErrorClass.UNKNOWN
    assert classify_error(TimeoutError()) == ErrorClass.UNKNOWN


# ── is_retryable ─────────────────────────────────────────────


def test_retryable_kinds() -> None:
    assert is_retryable(RateLimitError("x"))
    assert is_retryable(ServiceError("x"))
    assert is_retryable(ServiceTimeoutError("x"))


def test_non_retryable_kinds() -> None:
    assert not is_retryable(AuthError("x"))
    assert not is_retryable(ParseError("x"))
    assert not is_retryable(UnexpectedServiceError("x"))


# ── serialization / HTTP mapping ─────────────────────────────


def test_rate_limit_to_dict_carries_retry_after() -> None:
    err = RateLimitError("slow", retry_after=12)
    assert err.to_dict() == {
        "error": "rate_limit",
        "message": "slow",
        "retryable": True,
        "retry_after": 12,
    }
    assert err.http_status == 429


def test_publish_conflict_maps_to_409() -> None:
    err = PublishConflictError("taken")
    assert err.kind == ErrorKind.CONFLICT
    assert err.http_status == 409
