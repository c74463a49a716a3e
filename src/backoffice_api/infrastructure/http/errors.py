# src/backoffice_api/infrastructure/http/errors.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Exception handlers producing the canonical error envelope.

Every handler answers ``{"error": {code, http_status, message, details,
trace_id}}`` where ``trace_id`` is the request id assigned by
:class:`RequestIdMiddleware`.
"""

from __future__ import annotations

from typing import Any, Final

from fastapi import HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.responses import Response

from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

DOMAIN_ERROR_STATUS: Final[dict[str, int]] = {
    "DOCUMENT_NOT_FOUND": 404,
    "DOCUMENT_CONFLICT": 409,
    "DUPLICATE_NUMBER": 409,
    "DOCUMENT_DELETION_REFUSED": 409,
    "INVALID_TRANSITION": 409,
    "CONVERSION_NOT_ALLOWED": 409,
    "NO_LINE_ITEMS": 422,
    "DOCUMENT_VALIDATION_ERROR": 422,
    "INVALID_MONETARY_VALUE": 422,
    "INVOICE_CREATION_FAILED": 502,
    "DOCUMENT_STORE_UNAVAILABLE": 503,
}


def status_for_domain_error(exc: DomainError) -> int:
    """Return the HTTP status for ``exc`` (500 for unmapped codes)."""
    return DOMAIN_ERROR_STATUS.get(exc.code, 500)


def _trace_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
    }
    if details is not None:
        err["details"] = jsonable_encoder(details)
    if trace_id is not None:
        err["trace_id"] = trace_id
    return {"error": err}


async def handle_domain_error(request: Request, exc: DomainError) -> Response:
    """Map an escaped :class:`DomainError` to its HTTP status."""
    http_status = status_for_domain_error(exc)
    payload = error_envelope(
        code=exc.code,
        http_status=http_status,
        message=exc.message,
        details=exc.details,
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=http_status, content=payload)


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": exc.errors()},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=422, content=payload)


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=exc.status_code, content=payload)


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    logger.exception(
        "http.unhandled_exception",
        extra={"path": request.url.path, "error": type(exc).__name__},
    )
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        details=None,
        trace_id=_trace_id(request),
    )
    return JSONResponse(status_code=500, content=payload)
