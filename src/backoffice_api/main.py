# src/backoffice_api/main.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires middleware, exception handlers and all
    routers. Provides an application factory (``create_app``) and a
    module-level eager app (``app``) for tooling.

Design:
    • Bootstrap only (no business logic): routers + middleware + handlers.
    • Lifespan builds the shared HTTP client, Document Store gateway and
      conversion guard, and tears them down safely.
    • Root JSON logging configured at import time.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response as StarletteResponse

from backoffice_api.adapters.routers import invoices, metrics, quotations
from backoffice_api.config.settings import Settings, get_settings
from backoffice_api.dependencies.core.bootstrap import bootstrap
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.infrastructure.http.errors import (
    handle_domain_error,
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
)
from backoffice_api.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from backoffice_api.infrastructure.middleware.access_log import AccessLogMiddleware
from backoffice_api.infrastructure.middleware.request_id import RequestIdMiddleware

# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
configure_root_logging()
logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId, e.g. ``post__v1_quotations_quotation_id_convert``."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


# -----------------------------------------------------------------------------
# Lifespan
# -----------------------------------------------------------------------------
@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Expose the bootstrapped infrastructure on ``app.state``.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to FastAPI to serve requests.
    """
    async with bootstrap() as state:
        app.state.settings = state.settings
        app.state.http_client = state.http_client
        app.state.document_store = state.document_store
        app.state.conversion_guard = state.conversion_guard
        yield


# -----------------------------------------------------------------------------
# Middleware & CORS
# -----------------------------------------------------------------------------
def _attach_middlewares(app: FastAPI) -> None:
    """Attach core middleware.

    Starlette runs the last added middleware first, so the access log is
    added before RequestIdMiddleware to see ``request.state.request_id``.
    """
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIdMiddleware)


def _attach_cors(app: FastAPI, settings: Settings) -> None:
    """Attach CORS middleware based on settings."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )


def _patch_exception_handlers(app: FastAPI) -> None:
    """Install structured equivalents of the default exception handlers."""

    async def _http_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, HTTPException):
            raise exc
        return await handle_http_exception(request, exc)

    async def _validation_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, RequestValidationError):
            raise exc
        return await handle_validation_error(request, exc)

    async def _domain_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, DomainError):
            raise exc
        return await handle_domain_error(request, exc)

    async def _unhandled_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        return await handle_unhandled_exception(request, exc)

    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(DomainError, _domain_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


# -----------------------------------------------------------------------------
# App factory
# -----------------------------------------------------------------------------
def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Fully configured application instance.
    """
    settings: Settings = get_settings()

    app = FastAPI(
        title="Backoffice API",
        version=settings.service_version,
        description="Quotation lifecycle and quotation-to-invoice conversion.",
        lifespan=runtime_lifespan,
        docs_url=settings.docs_url,
        openapi_url=settings.openapi_url,
        generate_unique_id_function=_stable_operation_id,
    )

    _patch_exception_handlers(app)
    _attach_middlewares(app)
    _attach_cors(app, settings)

    app.include_router(quotations)
    app.include_router(invoices)
    app.include_router(metrics)

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> JSONResponse:
        """Liveness probe."""
        return JSONResponse({"status": "ok"})

    logger.info(
        "service_startup",
        extra={
            "service": settings.service_name,
            "env": settings.environment.value,
            "version": settings.service_version,
            "store_backend": settings.document_store_backend,
        },
    )
    return app


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "backoffice_api.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8080")),
        reload=True,
    )
