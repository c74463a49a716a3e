# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Presenter utilities and canonical envelope helpers.

Purpose:
    Thin, framework-aware helpers used by routers to consistently shape HTTP
    responses and headers.

Responsibilities:
    * Build SuccessEnvelope, WarningEnvelope and ErrorEnvelope instances.
    * Echo ``X-Request-ID`` on every presented response.
    * Map domain errors to their HTTP status by stable code.
    * Apply headers and status overrides to the outgoing response.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fastapi import Response
from fastapi.encoders import jsonable_encoder

from backoffice_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    SuccessEnvelope,
    WarningEnvelope,
)
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.infrastructure.http.errors import status_for_domain_error
from backoffice_api.infrastructure.logging.logger import get_json_logger

_LOGGER = get_json_logger(__name__)


@dataclass(slots=True)
class PresentResult[T]:
    """Presentation result envelope.

    Attributes:
        body: A Pydantic envelope instance.
        headers: Extra HTTP headers to apply.
        status_code: Optional HTTP status override.
    """

    body: T
    headers: Mapping[str, str]
    status_code: int | None = None


def _trace_headers(trace_id: str | None) -> dict[str, str]:
    return {"X-Request-ID": trace_id} if trace_id else {}


class BasePresenter:
    """Base presenter for HTTP response shaping in adapter layers.

    Provides helpers to assemble standard envelopes and headers, leaving all
    business decisions to the use-case/application layer.
    """

    def present_success(
        self,
        *,
        data: Any,
        trace_id: str | None = None,
        status_code: int | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Build a SuccessEnvelope and attach ``X-Request-ID``."""
        body = SuccessEnvelope[Any](data=data)
        return PresentResult(body=body, headers=_trace_headers(trace_id), status_code=status_code)

    def present_warning(
        self,
        *,
        data: Any,
        code: str,
        http_status: int,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> PresentResult[WarningEnvelope[Any]]:
        """Build a WarningEnvelope: a resource plus what did not complete."""
        warning = ErrorObject(
            code=code,
            http_status=http_status,
            message=message,
            details=details or {},
            trace_id=trace_id,
        )
        body = WarningEnvelope[Any](data=data, warning=warning)
        return PresentResult(
            body=body, headers=_trace_headers(trace_id), status_code=int(http_status)
        )

    def present_error(
        self,
        *,
        code: str,
        http_status: int,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> PresentResult[ErrorEnvelope]:
        """Build an ErrorEnvelope and attach ``X-Request-ID``."""
        err = ErrorObject(
            code=code,
            http_status=http_status,
            message=message,
            details=details or {},
            trace_id=trace_id,
        )
        body = ErrorEnvelope(error=err)
        return PresentResult(
            body=body, headers=_trace_headers(trace_id), status_code=int(http_status)
        )

    @staticmethod
    def apply_headers(result: PresentResult[Any], response: Response) -> None:
        """Apply headers and optional status code to the outgoing response."""
        try:
            response.headers.update(dict(result.headers))
        except Exception:  # pragma: no cover
            _LOGGER.exception("presenter_apply_headers_failed", extra={"headers": result.headers})

        if result.status_code is not None:
            response.status_code = result.status_code

    def present_domain_error(
        self, exc: DomainError, *, trace_id: str | None = None
    ) -> PresentResult[ErrorEnvelope]:
        """Build an ErrorEnvelope for a domain error, keyed by its stable code."""
        return self.present_error(
            code=exc.code,
            http_status=status_for_domain_error(exc),
            message=exc.message,
            trace_id=trace_id,
            details=jsonable_encoder(exc.details),
        )
