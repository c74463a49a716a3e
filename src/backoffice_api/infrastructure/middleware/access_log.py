# src/backoffice_api/infrastructure/middleware/access_log.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Access Log Middleware.

Summary:
    Emits one structured ``access_log`` record per request/response pair.

Fields:
    method, path, status (500 if the handler raised), elapsed_ms,
    client_ip, request_id, ok.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from backoffice_api.infrastructure.logging.logger import get_json_logger

_logger: logging.Logger = get_json_logger(__name__)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Structured access logging middleware."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            record: dict[str, Any] = {
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code if response is not None else 500,
                "elapsed_ms": round((time.perf_counter() - started) * 1000.0, 2),
                "client_ip": request.client.host if request.client else None,
                "request_id": getattr(request.state, "request_id", None),
                "ok": response is not None,
            }
            _logger.info("access_log", extra=record)
