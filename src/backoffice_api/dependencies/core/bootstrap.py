# src/backoffice_api/dependencies/core/bootstrap.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Core bootstrap for shared infrastructure (HTTP client, Document Store).

This module owns the lifecycle of the objects every request shares. It is
intentionally thin: configuration is read from Settings, and all heavy
lifting is delegated to the infrastructure and adapter modules.

The single public surface is :func:`bootstrap`, an async context manager that
yields the resolved Settings, the shared HTTP client, the Document Store
gateway and the process-wide conversion guard.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from backoffice_api.adapters.gateways.http_document_store_gateway import HttpDocumentStoreGateway
from backoffice_api.adapters.gateways.in_memory_document_store import InMemoryDocumentStore
from backoffice_api.config.settings import Settings, get_settings
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.domain.services.conversion_guard import ConversionGuard
from backoffice_api.infrastructure.external_apis.document_store.client import DocumentStoreClient
from backoffice_api.infrastructure.external_apis.document_store.settings import (
    DocumentStoreSettings,
)
from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


@dataclass
class BootstrapState:
    """State yielded by the bootstrap context manager."""

    settings: Settings
    http_client: httpx.AsyncClient
    document_store: DocumentStoreGateway
    conversion_guard: ConversionGuard


def build_document_store(
    settings: Settings, http_client: httpx.AsyncClient
) -> DocumentStoreGateway:
    """Select the Document Store implementation from settings.

    The REST gateway is used whenever a base URL is configured and the backend
    is ``http``; otherwise an empty in-process store is returned.
    """
    if settings.document_store_backend == "http" and settings.document_store_base_url is not None:
        store_settings = DocumentStoreSettings(base_url=settings.document_store_base_url)
        client = DocumentStoreClient(store_settings, http=http_client)
        logger.info(
            "bootstrap.document_store", extra={"backend": "http", "base_url": client.base_url}
        )
        return HttpDocumentStoreGateway(client)

    logger.info("bootstrap.document_store", extra={"backend": "memory"})
    return InMemoryDocumentStore()


@asynccontextmanager
async def bootstrap(
    settings: Settings | None = None,
) -> AsyncGenerator[BootstrapState, None]:
    """Initialize and tear down shared infrastructure.

    Responsibilities:
        * Load application settings.
        * Create a shared HTTPX AsyncClient.
        * Build the Document Store gateway and the conversion guard.
        * Close the HTTP client on exit, even on error.

    Args:
        settings: Optional explicit settings; defaults to :func:`get_settings`.

    Yields:
        BootstrapState: Resolved settings and shared infrastructure.
    """
    settings = settings or get_settings()
    logger.info("bootstrap.start")

    http_client = httpx.AsyncClient()
    state = BootstrapState(
        settings=settings,
        http_client=http_client,
        document_store=build_document_store(settings, http_client),
        conversion_guard=ConversionGuard(),
    )

    try:
        yield state
    finally:
        try:
            await http_client.aclose()
        except Exception:
            logger.exception("bootstrap.http_client_close_failed")
        logger.info("bootstrap.stop")
