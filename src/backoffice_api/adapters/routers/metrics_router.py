# src/backoffice_api/adapters/routers/metrics_router.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (``/metrics``).

Lazily created collectors are touched before rendering so their series
appear on the very first scrape (cold start), including the conversion
counter for every outcome.

Layer:
    adapters/routers
"""

from __future__ import annotations

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from backoffice_api.application.schemas.dto.conversion import ConversionOutcome
from backoffice_api.infrastructure.logging.logger import get_json_logger
from backoffice_api.infrastructure.observability.metrics import (
    get_conversions_total,
    get_document_store_latency_seconds,
    get_invoice_number_collisions_total,
    get_line_total_mismatches_total,
)

logger = get_json_logger(__name__)
router = APIRouter()


def _warm_collectors() -> None:
    """Create every collector and each conversion outcome series at zero."""
    conversions = get_conversions_total()
    for outcome in ConversionOutcome:
        conversions.labels(outcome=outcome.value)
    get_document_store_latency_seconds()
    get_line_total_mismatches_total()
    get_invoice_number_collisions_total()


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in the text exposition format."""
    try:
        _warm_collectors()
    except Exception as exc:  # pragma: no cover
        logger.debug("metrics_router.warm_failed", extra={"error": str(exc)})
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
