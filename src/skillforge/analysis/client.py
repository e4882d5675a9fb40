"""Rate-limited, retried calls to the external analysis service."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Coroutine, Mapping
from typing import TYPE_CHECKING, Any

import httpx
import litellm

from skillforge.analysis.schemas import ModelConfig
from skillforge.constants import (
    DEFAULT_RETRY_AFTER_SECONDS,
    ERROR_TRUNCATION_CHARS,
    estimate_tokens,
)
from skillforge.logger import PipelineLogger
from skillforge.resilience.errors import (
    AuthError,
    RateLimitError,
    ServiceError,
    ServiceTimeoutError,
    SkillForgeError,
    UnexpectedServiceError,
    ValidationError,
)
from skillforge.resilience.rate_limiter import RateLimiter
from skillforge.resilience.retry import RetryPolicy

logger = logging.getLogger(__name__)

# litellm stubs have partially unknown types; typed alias
if TYPE_CHECKING:
    _acompletion: Callable[..., Coroutine[Any, Any, Any]]
else:
    _acompletion = litellm.acompletion

_NETWORK_ERRORS: tuple[type[BaseException], ...] = (
    litellm.Timeout,
    litellm.APIConnectionError,
    httpx.TimeoutException,
    httpx.NetworkError,
    TimeoutError,
    ConnectionError,
)

_MALFORMED_REQUEST_STATUSES = frozenset({400, 404, 413, 422})


def translate_error(exc: BaseException) -> SkillForgeError:
    """Map a transport-level failure onto the typed taxonomy.

    This is the single place upstream failures are classified; the
    retry policy only ever sees the result. Classification uses the
    exception type and its ``status_code`` attribute.
    """
    if isinstance(exc, SkillForgeError):
        return exc
    if isinstance(exc, _NETWORK_ERRORS):
        return ServiceTimeoutError("Network timeout")

    status_code = getattr(exc, "status_code", None)
    detail = str(exc)[:ERROR_TRUNCATION_CHARS]
    if isinstance(status_code, int):
        if status_code == 429:
            retry_after = _retry_after_seconds(exc)
            return RateLimitError(
                f"Rate limit exceeded. Retry after {retry_after:g}s",
                retry_after=retry_after,
            )
        if status_code in (401, 403):
            return AuthError("Invalid API key")
        if status_code == 408:
            return ServiceTimeoutError("Network timeout")
        if status_code in _MALFORMED_REQUEST_STATUSES:
            return ValidationError(f"Invalid request: {detail}")
        if 500 <= status_code < 600:
            return ServiceError(
                "Analysis service server error",
                status_code=status_code,
            )
    return UnexpectedServiceError(
        f"Unexpected analysis service failure: {detail}"
    )


def _retry_after_seconds(exc: BaseException) -> float:
    """Read a numeric Retry-After header off the failed response."""
    headers: Mapping[str, str] | None = None
    response = getattr(exc, "response", None)
    if response is not None:
        headers = getattr(response, "headers", None)
    if not headers:
        headers = getattr(exc, "litellm_response_headers", None)
    if not headers:
        return DEFAULT_RETRY_AFTER_SECONDS
    raw = headers.get("retry-after") or headers.get("Retry-After")
    try:
        value = float(raw) if raw is not None else None
    except (TypeError, ValueError):
        value = None  # HTTP-date form: fall back to the default
    if value is None or value < 0:
        return DEFAULT_RETRY_AFTER_SECONDS
    return value


class AnalysisServiceClient:
    """Invokes the analysis service and returns its raw text.

    Each ``analyze`` call reserves one rate-limiter slot, then runs the
    network call under the retry policy.
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        retry_policy: RetryPolicy,
        *,
        timeout_seconds: int = 60,
        pipeline_logger: PipelineLogger | None = None,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._retry_policy = retry_policy
        self._timeout = timeout_seconds
        self._pipeline_logger = pipeline_logger

    async def analyze(
        self,
        prompt: str,
        system_instructions: str,
        model_config: ModelConfig,
    ) -> str:
        await self._rate_limiter.acquire()
        return await self._retry_policy.run(
            lambda: self._call(prompt, system_instructions, model_config)
        )

    async def _call(
        self,
        prompt: str,
        system_instructions: str,
        model_config: ModelConfig,
    ) -> str:
        messages = [
            {"role": "system", "content": system_instructions},
            {"role": "user", "content": prompt},
        ]
        start = time.perf_counter()
        try:
            response: Any = await _acompletion(
                model=model_config.model,
                messages=messages,
                max_tokens=model_config.max_output_tokens,
                temperature=model_config.temperature,
                timeout=self._timeout,
                num_retries=0,  # RetryPolicy owns retries
            )
        except Exception as exc:
            error = translate_error(exc)
            logger.warning(
                "event=analysis_call_failed model=%s kind=%s retryable=%s",
                model_config.model,
                error.kind,
                error.retryable,
            )
            if self._pipeline_logger is not None:
                self._pipeline_logger.log_api_error(
                    str(error.kind),
                    error.message,
                    retryable=error.retryable,
                    status=getattr(exc, "status_code", None),
                    context={"model": model_config.model},
                )
            if error is exc:
                raise
            raise error from exc

        text = str(response.choices[0].message.content or "")
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "event=analysis_call_ok model=%s duration_ms=%d"
            " response_len=%d",
            model_config.model,
            duration_ms,
            len(text),
        )
        if self._pipeline_logger is not None:
            self._pipeline_logger.log_api_call(
                model_config.model,
                estimate_tokens(system_instructions + prompt),
                estimate_tokens(text),
                duration_ms,
            )
        return text
