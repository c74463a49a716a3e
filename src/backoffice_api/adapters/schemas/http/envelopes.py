# src/backoffice_api/adapters/schemas/http/envelopes.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""HTTP Envelopes (Adapters Layer).

Purpose:
    Canonical transport-facing HTTP envelopes:
      - ErrorEnvelope: ``{"error": ErrorObject}``
      - SuccessEnvelope[T]: ``{"data": T}``
      - WarningEnvelope[T]: ``{"data": T, "warning": ErrorObject}`` for
        operations that produced a resource but did not complete (partial
        conversion). Clients must not treat it as a plain success.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backoffice_api.adapters.schemas.http.base import BaseHTTPSchema

__all__ = [
    "ErrorEnvelope",
    "ErrorObject",
    "SuccessEnvelope",
    "WarningEnvelope",
]


class ErrorObject(BaseModel):
    """Structured error object inside ErrorEnvelope and WarningEnvelope.

    Error codes are UPPER_SNAKE_CASE, stable across releases and testable.
    """

    model_config = ConfigDict(
        title="ErrorObject",
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "code": "CONVERSION_NOT_ALLOWED",
                    "http_status": 409,
                    "message": "Only accepted quotations can be converted to invoices.",
                    "details": {"quotation_id": "42", "status": "Draft"},
                    "trace_id": "req-123",
                }
            ]
        },
    )

    code: str = Field(..., description="Stable machine-readable error code.")
    http_status: int = Field(..., description="Associated HTTP status.")
    message: str = Field(..., description="Human-readable error description.")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional structured details safe for clients.",
    )
    trace_id: str | None = Field(
        default=None,
        description="Request correlation identifier.",
    )


class ErrorEnvelope(BaseHTTPSchema):
    r"""Canonical error envelope: {"error": ErrorObject}."""

    model_config = ConfigDict(title="ErrorEnvelope", extra="forbid")

    error: ErrorObject = Field(..., description="Structured error details.")


class SuccessEnvelope[T](BaseHTTPSchema):
    r"""Success envelope: {"data": T}."""

    model_config = ConfigDict(title="SuccessEnvelope", extra="forbid")

    data: T = Field(..., description="Returned resource or value.")


class WarningEnvelope[T](BaseHTTPSchema):
    r"""Incomplete-success envelope: {"data": T, "warning": ErrorObject}."""

    model_config = ConfigDict(title="WarningEnvelope", extra="forbid")

    data: T = Field(..., description="Resource that was created.")
    warning: ErrorObject = Field(..., description="What did not complete.")
