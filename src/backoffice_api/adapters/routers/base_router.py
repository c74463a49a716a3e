# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Base Router (Adapters Layer)

Purpose:
    Canonical APIRouter wrapper and shared utilities for Backoffice HTTP endpoints:
      - Versioned routing with stable prefixes (e.g., "/v1/quotations").
      - Standard error response mapping using ErrorEnvelope.
      - Helpers to emit presenter results with headers (X-Request-ID).

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from backoffice_api.adapters.presenters.base_presenter import PresentResult
from backoffice_api.adapters.schemas.http.envelopes import ErrorEnvelope
from backoffice_api.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)

TagType = str | Enum


class BaseRouter(APIRouter):
    """Canonical router wrapper for Backoffice HTTP endpoints.

    Args:
        version: API version segment (e.g., "v1").
        resource: Plural resource segment (e.g., "quotations").
        prefix: Optional explicit prefix (overrides version/resource).
        tags: Default tags applied to all routes mounted on this router.
        dependencies: Optional global dependencies for all routes.
        **kwargs: Additional APIRouter kwargs.
    """

    def __init__(
        self,
        *,
        version: str,
        resource: str,
        prefix: str | None = None,
        tags: Sequence[TagType] | None = None,
        dependencies: Sequence[Any] | None = None,
        **kwargs: Any,
    ) -> None:
        computed_prefix = prefix or f"/{version}/{resource}"
        super().__init__(
            prefix=computed_prefix,
            tags=list(tags) if tags is not None else None,
            dependencies=list(dependencies) if dependencies is not None else None,
            **kwargs,
        )
        _LOGGER.info(
            "router_initialized",
            extra={
                "service": "backoffice-api",
                "prefix": computed_prefix,
                "tags": [str(t) for t in tags or []],
            },
        )

    # -------------------------------------------------------------------------
    # Response helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def trace_id(request: Request) -> str | None:
        """Return the request id assigned by RequestIdMiddleware."""
        return getattr(request.state, "request_id", None)

    @staticmethod
    def send(response: Response, result: PresentResult[Any]) -> Any:
        """Apply presenter headers/status to ``response`` and return the body.

        Use for bodies matching the route's ``response_model``.
        """
        response.headers.update(dict(result.headers))
        if result.status_code is not None:
            response.status_code = result.status_code
        return result.body

    @staticmethod
    def send_json(result: PresentResult[Any]) -> JSONResponse:
        """Render ``result`` as a standalone JSONResponse.

        Use for error and warning envelopes, which must bypass the route's
        success ``response_model``.
        """
        return JSONResponse(
            status_code=result.status_code or 200,
            content=result.body.model_dump(mode="json"),
            headers=dict(result.headers),
        )

    # -------------------------------------------------------------------------
    # OpenAPI Error Responses
    # -------------------------------------------------------------------------

    @staticmethod
    def std_error_responses(*extra: int) -> dict[int | str, dict[str, Any]]:
        """Return the canonical error response mapping for endpoints.

        Args:
            *extra: Additional statuses documented with ErrorEnvelope.

        Returns:
            Mapping from HTTP status code → OpenAPI response object with
            ErrorEnvelope as the model.
        """
        responses: dict[int | str, dict[str, Any]] = {
            404: {"model": ErrorEnvelope, "description": "Not found."},
            409: {"model": ErrorEnvelope, "description": "Conflict."},
            422: {"model": ErrorEnvelope, "description": "Unprocessable content."},
            500: {"model": ErrorEnvelope, "description": "Internal server error."},
            503: {"model": ErrorEnvelope, "description": "Document Store unavailable."},
        }
        for code in extra:
            responses.setdefault(code, {"model": ErrorEnvelope, "description": "Error."})
        return responses
