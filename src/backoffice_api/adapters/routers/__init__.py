"""Routers Package Export (Adapters Layer).

Purpose:
    Stable, explicit exports of the concrete router instances the FastAPI
    application mounts during startup.

Layer:
    adapters/routers
"""

from __future__ import annotations

from .invoices_router import router as invoices  # noqa: F401
from .metrics_router import router as metrics  # noqa: F401
from .quotations_router import router as quotations  # noqa: F401

__all__ = ["invoices", "metrics", "quotations"]
