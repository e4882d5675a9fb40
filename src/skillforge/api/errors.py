"""Exception handlers mapping typed errors onto HTTP responses."""

from __future__ import annotations

import logging
import math

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from skillforge.resilience.errors import (
    ErrorKind,
    RateLimitError,
    SkillForgeError,
)

logger = logging.getLogger(__name__)


async def handle_skillforge_error(
    request: Request, exc: SkillForgeError
) -> JSONResponse:
    """Body: ``{success, error, message, retryable[, retry_after]}``."""
    if exc.http_status >= 500:
        logger.error(
            "event=request_failed path=%s kind=%s message=%s",
            request.url.path,
            exc.kind,
            exc.message,
        )
    headers: dict[str, str] = {}
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(math.ceil(exc.retry_after))
    return JSONResponse(
        status_code=exc.http_status,
        content={"success": False, **exc.to_dict()},
        headers=headers,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies are validation errors (400)."""
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ())[1:]),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": str(ErrorKind.VALIDATION),
            "message": "Validation failed",
            "retryable": False,
            "details": details,
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SkillForgeError, handle_skillforge_error)
    app.add_exception_handler(
        RequestValidationError, handle_request_validation
    )
