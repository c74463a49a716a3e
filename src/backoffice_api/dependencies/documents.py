# src/backoffice_api/dependencies/documents.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Dependency wiring for quotations and invoices (gateway, use cases).

Overview:
    FastAPI dependency providers resolving the shared Document Store gateway
    and conversion guard from ``app.state`` (populated by the lifespan
    bootstrap) and building the use cases the routers consume.

Layer:
    dependencies

Design:
    * Always return the real use case types.
    * The store is read from ``app.state`` per request, so tests can swap it
      without touching the dependency graph.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from backoffice_api.application.use_cases.invoices.get_invoice import GetInvoice
from backoffice_api.application.use_cases.invoices.list_invoices import ListInvoices
from backoffice_api.application.use_cases.invoices.transition_invoice_status import (
    TransitionInvoiceStatus,
)
from backoffice_api.application.use_cases.quotations.convert_quotation_to_invoice import (
    ConvertQuotationToInvoice,
)
from backoffice_api.application.use_cases.quotations.delete_quotation import DeleteQuotation
from backoffice_api.application.use_cases.quotations.get_quotation import GetQuotation
from backoffice_api.application.use_cases.quotations.list_quotations import ListQuotations
from backoffice_api.application.use_cases.quotations.transition_quotation_status import (
    TransitionQuotationStatus,
)
from backoffice_api.config.settings import Settings, get_settings
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.domain.services.conversion_guard import ConversionGuard

_FALLBACK_GUARD = ConversionGuard()


def get_app_settings(request: Request) -> Settings:
    """Return the settings resolved at startup, or the cached singleton."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_document_store(request: Request) -> DocumentStoreGateway:
    """Return the Document Store gateway built by the lifespan bootstrap.

    Raises:
        RuntimeError: If the application was started without its lifespan.
    """
    store = getattr(request.app.state, "document_store", None)
    if store is None:
        raise RuntimeError("Document Store is not initialized; was the lifespan run?")
    return store


def get_conversion_guard(request: Request) -> ConversionGuard:
    """Return the process-wide conversion guard."""
    guard = getattr(request.app.state, "conversion_guard", None)
    return guard if guard is not None else _FALLBACK_GUARD


StoreDep = Annotated[DocumentStoreGateway, Depends(get_document_store)]


def get_list_quotations_uc(store: StoreDep) -> ListQuotations:
    return ListQuotations(store)


def get_get_quotation_uc(store: StoreDep) -> GetQuotation:
    return GetQuotation(store)


def get_transition_quotation_status_uc(store: StoreDep) -> TransitionQuotationStatus:
    return TransitionQuotationStatus(store)


def get_delete_quotation_uc(store: StoreDep) -> DeleteQuotation:
    return DeleteQuotation(store)


def get_convert_quotation_uc(
    store: StoreDep,
    guard: Annotated[ConversionGuard, Depends(get_conversion_guard)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> ConvertQuotationToInvoice:
    """Build the conversion use case with the configured due days and retries."""
    return ConvertQuotationToInvoice(
        store,
        guard=guard,
        due_days=settings.invoice_due_days,
        number_retries=settings.conversion_number_retries,
    )


def get_list_invoices_uc(store: StoreDep) -> ListInvoices:
    return ListInvoices(store)


def get_get_invoice_uc(store: StoreDep) -> GetInvoice:
    return GetInvoice(store)


def get_transition_invoice_status_uc(store: StoreDep) -> TransitionInvoiceStatus:
    return TransitionInvoiceStatus(store)
