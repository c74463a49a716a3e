# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Invoice Entities

Purpose:
    ``InvoiceDraft`` is the create payload sent to the Document Store;
    ``Invoice`` is the persisted record it returns.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal

from backoffice_api.domain.enums.document_status import InvoiceStatus
from backoffice_api.domain.value_objects.money import document_total

from .base import BaseEntity, ensure_utc
from .line_item import LineItem


def _check_dates(issue_date: date, due_date: date) -> None:
    if due_date < issue_date:
        raise ValueError("due_date must not precede issue_date")


@dataclass(frozen=True, slots=True)
class InvoiceDraft(BaseEntity):
    """Invoice payload that has not been persisted yet.

    Args:
        number: Invoice number to claim in the store.
        customer_id: Customer reference (snapshot, not a live link).
        issue_date: Invoice date.
        due_date: Payment due date.
        currency: ISO 4217 code.
        line_items: Independent line item copies.
        total_amount: Document total of ``line_items``.
        status: Initial status (Draft for conversions).
        notes: Free text, including provenance for conversions.
        source_quotation_id: Quotation this draft was derived from, if any.
    """

    number: str
    customer_id: str
    issue_date: date
    due_date: date
    currency: str
    line_items: tuple[LineItem, ...]
    total_amount: Decimal
    status: InvoiceStatus = InvoiceStatus.DRAFT
    notes: str | None = None
    source_quotation_id: str | None = None

    def __post_init__(self) -> None:
        if not self.number:
            raise ValueError("invoice number must be non-empty")
        _check_dates(self.issue_date, self.due_date)
        object.__setattr__(self, "line_items", tuple(self.line_items))
        object.__setattr__(self, "currency", self.currency.upper())

    def with_number(self, number: str) -> InvoiceDraft:
        """Return the same draft under a different invoice number."""
        return replace(self, number=number)


@dataclass(frozen=True, slots=True)
class Invoice(BaseEntity):
    """Billing document demanding payment.

    Args:
        id: Store identifier (immutable).
        number: Unique invoice number.
        customer_id: Customer reference.
        issue_date: Invoice date.
        due_date: Payment due date.
        currency: ISO 4217 code.
        status: Current lifecycle state.
        line_items: Ordered line items owned by this invoice.
        total_amount: Stored document total.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        notes: Optional free text.
        customer_name: Optional display name joined in by the store.
    """

    id: str
    number: str
    customer_id: str
    issue_date: date
    due_date: date
    currency: str
    status: InvoiceStatus
    line_items: tuple[LineItem, ...]
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    notes: str | None = None
    customer_name: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("invoice id must be non-empty")
        _check_dates(self.issue_date, self.due_date)
        object.__setattr__(self, "line_items", tuple(self.line_items))
        object.__setattr__(self, "currency", self.currency.upper())
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))
        object.__setattr__(self, "updated_at", ensure_utc(self.updated_at))

    @property
    def computed_total(self) -> Decimal:
        """Document total recomputed from the line items."""
        return document_total(item.computed_total for item in self.line_items)
