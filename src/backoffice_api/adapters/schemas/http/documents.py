# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
HTTP Schemas: Quotations & Invoices

Purpose:
    Transport shapes for the ``/v1/quotations`` and ``/v1/invoices`` routes.
    Amounts are ``Decimal`` and serialize as strings (``"575.00"``).

Layer: adapters/schemas/http
"""
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from backoffice_api.adapters.schemas.http.base import BaseHTTPSchema
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus


class LineItemHTTP(BaseHTTPSchema):
    """One priced line (tax included in ``line_total``)."""

    product_service_id: str | None = None
    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal = Field(description="Tax as a fraction, e.g. 0.15.")
    line_total: Decimal


class QuotationHTTP(BaseHTTPSchema):
    """Quotation resource."""

    id: str
    quotation_number: str
    customer_id: str
    customer_name: str | None = None
    quotation_date: date
    expiry_date: date | None = None
    currency: str
    status: QuotationStatus
    total_amount: Decimal
    notes: str | None = None
    line_items: list[LineItemHTTP]
    allowed_transitions: list[QuotationStatus] = Field(
        default_factory=list,
        description="Statuses this quotation may move to next.",
    )
    created_at: datetime
    updated_at: datetime


class InvoiceHTTP(BaseHTTPSchema):
    """Invoice resource."""

    id: str
    invoice_number: str
    customer_id: str
    customer_name: str | None = None
    invoice_date: date
    due_date: date
    currency: str
    status: InvoiceStatus
    total_amount: Decimal
    notes: str | None = None
    line_items: list[LineItemHTTP]
    allowed_transitions: list[InvoiceStatus] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class ConversionHTTP(BaseHTTPSchema):
    """Result of converting a quotation."""

    quotation_id: str
    outcome: str
    invoice: InvoiceHTTP


class QuotationStatusChangeHTTP(BaseHTTPSchema):
    """Request body for ``POST /v1/quotations/{id}/status``."""

    status: QuotationStatus


class InvoiceStatusChangeHTTP(BaseHTTPSchema):
    """Request body for ``POST /v1/invoices/{id}/status``."""

    status: InvoiceStatus
