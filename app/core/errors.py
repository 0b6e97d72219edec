"""Standardized error responses across all API endpoints."""
from typing import Any

import sentry_sdk
import structlog
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

logger = structlog.get_logger()


class ErrorResponse(BaseModel):
    """Standard error envelope returned by all API error handlers."""
    error: str
    message: str
    detail: Any = None
    request_id: str = "unknown"


def _envelope(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    detail: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        detail=detail,
        request_id=request.headers.get("x-request-id", "unknown"),
    )
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(body),
        headers=headers,
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch unhandled exceptions and return a consistent JSON envelope."""
    logger.error(
        "unhandled_exception",
        error=str(exc),
        error_type=type(exc).__name__,
        path=request.url.path,
        method=request.method,
        request_id=request.headers.get("x-request-id", "unknown"),
    )

    sentry_sdk.capture_exception(exc)

    return _envelope(
        request,
        500,
        "internal_server_error",
        "An unexpected error occurred. Our team has been notified.",
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Standardize HTTPException responses into the same JSON envelope."""
    if isinstance(exc.detail, dict):
        error = exc.detail.get("error", f"http_{exc.status_code}")
        message = exc.detail.get("message", str(exc.detail))
        detail: Any = exc.detail.get("detail")
    else:
        error = f"http_{exc.status_code}"
        message = str(exc.detail)
        # Plain-string detail is kept so clients can keep reading resp["detail"]
        detail = exc.detail

    return _envelope(
        request,
        exc.status_code,
        error,
        message,
        detail,
        headers=dict(exc.headers or {}),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report request validation failures (bad year, malformed numbers) as 422."""
    errors = [{k: v for k, v in e.items() if k != "ctx"} for e in exc.errors()]
    first = errors[0]["msg"] if errors else "Invalid request"
    logger.info("request_validation_failed", path=request.url.path, errors=len(errors))
    return _envelope(request, 422, "validation_error", first, errors)
