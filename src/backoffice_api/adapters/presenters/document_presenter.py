# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Presenter: Quotations & Invoices.

Maps domain entities to their HTTP schemas and wraps them in envelopes.
Each resource carries ``allowed_transitions`` so clients can render only the
status actions the state machine permits.

Layer: adapters/presenters
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from backoffice_api.adapters.presenters.base_presenter import BasePresenter, PresentResult
from backoffice_api.adapters.schemas.http.documents import InvoiceHTTP, LineItemHTTP, QuotationHTTP
from backoffice_api.adapters.schemas.http.envelopes import SuccessEnvelope
from backoffice_api.domain.entities.invoice import Invoice
from backoffice_api.domain.entities.line_item import LineItem
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.services.status_machine import (
    INVOICE_STATUS_MACHINE,
    QUOTATION_STATUS_MACHINE,
)


def line_item_to_http(item: LineItem) -> LineItemHTTP:
    return LineItemHTTP(
        product_service_id=item.product_service_id,
        description=item.description,
        quantity=item.quantity,
        unit_price=item.unit_price,
        tax_rate=item.tax_rate,
        line_total=item.line_total,
    )


def quotation_to_http(quotation: Quotation) -> QuotationHTTP:
    """Map a :class:`Quotation` to its transport shape."""
    allowed = QUOTATION_STATUS_MACHINE.allowed_targets(quotation.status)
    return QuotationHTTP(
        id=quotation.id,
        quotation_number=quotation.number,
        customer_id=quotation.customer_id,
        customer_name=quotation.customer_name,
        quotation_date=quotation.issue_date,
        expiry_date=quotation.expiry_date,
        currency=quotation.currency,
        status=quotation.status,
        total_amount=quotation.total_amount,
        notes=quotation.notes,
        line_items=[line_item_to_http(item) for item in quotation.line_items],
        allowed_transitions=[s for s in QuotationStatus if s in allowed],
        created_at=quotation.created_at,
        updated_at=quotation.updated_at,
    )


def invoice_to_http(invoice: Invoice) -> InvoiceHTTP:
    """Map an :class:`Invoice` to its transport shape."""
    allowed = INVOICE_STATUS_MACHINE.allowed_targets(invoice.status)
    return InvoiceHTTP(
        id=invoice.id,
        invoice_number=invoice.number,
        customer_id=invoice.customer_id,
        customer_name=invoice.customer_name,
        invoice_date=invoice.issue_date,
        due_date=invoice.due_date,
        currency=invoice.currency,
        status=invoice.status,
        total_amount=invoice.total_amount,
        notes=invoice.notes,
        line_items=[line_item_to_http(item) for item in invoice.line_items],
        allowed_transitions=[s for s in InvoiceStatus if s in allowed],
        created_at=invoice.created_at,
        updated_at=invoice.updated_at,
    )


class DocumentPresenter(BasePresenter):
    """Presenter for quotation and invoice resources."""

    def present_quotation(
        self, quotation: Quotation, *, trace_id: str | None = None
    ) -> PresentResult[SuccessEnvelope[Any]]:
        return self.present_success(data=quotation_to_http(quotation), trace_id=trace_id)

    def present_quotations(
        self, quotations: Sequence[Quotation], *, trace_id: str | None = None
    ) -> PresentResult[SuccessEnvelope[Any]]:
        return self.present_success(
            data=[quotation_to_http(q) for q in quotations], trace_id=trace_id
        )

    def present_invoice(
        self, invoice: Invoice, *, trace_id: str | None = None
    ) -> PresentResult[SuccessEnvelope[Any]]:
        return self.present_success(data=invoice_to_http(invoice), trace_id=trace_id)

    def present_invoices(
        self, invoices: Sequence[Invoice], *, trace_id: str | None = None
    ) -> PresentResult[SuccessEnvelope[Any]]:
        return self.present_success(data=[invoice_to_http(i) for i in invoices], trace_id=trace_id)
