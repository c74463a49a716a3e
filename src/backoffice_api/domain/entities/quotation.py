# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Quotation Entity

Purpose:
    Immutable snapshot of a quotation as read from the Document Store.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from backoffice_api.domain.enums.document_status import QuotationStatus
from backoffice_api.domain.value_objects.money import document_total

from .base import BaseEntity, ensure_utc
from .line_item import LineItem


@dataclass(frozen=True, slots=True)
class Quotation(BaseEntity):
    """Proposed sale awaiting customer acceptance.

    Args:
        id: Store identifier (immutable).
        number: Human-readable quotation number, e.g. ``"Q-1"``.
        customer_id: Customer reference.
        issue_date: Quotation date.
        currency: ISO 4217 code.
        status: Current lifecycle state.
        line_items: Ordered line items owned by this quotation.
        total_amount: Stored document total.
        created_at: Creation timestamp (UTC).
        updated_at: Last modification timestamp (UTC).
        expiry_date: Optional validity end date.
        notes: Optional free text.
        customer_name: Optional display name joined in by the store.

    Raises:
        ValueError: If identifiers are blank or the expiry precedes the issue date.
    """

    id: str
    number: str
    customer_id: str
    issue_date: date
    currency: str
    status: QuotationStatus
    line_items: tuple[LineItem, ...]
    total_amount: Decimal
    created_at: datetime
    updated_at: datetime
    expiry_date: date | None = None
    notes: str | None = None
    customer_name: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("quotation id must be non-empty")
        if not self.number:
            raise ValueError("quotation number must be non-empty")
        if self.expiry_date is not None and self.expiry_date < self.issue_date:
            raise ValueError("expiry_date must not precede issue_date")
        object.__setattr__(self, "line_items", tuple(self.line_items))
        object.__setattr__(self, "currency", self.currency.upper())
        object.__setattr__(self, "created_at", ensure_utc(self.created_at))
        object.__setattr__(self, "updated_at", ensure_utc(self.updated_at))

    @property
    def computed_total(self) -> Decimal:
        """Document total recomputed from the line items."""
        return document_total(item.computed_total for item in self.line_items)

    @property
    def is_invoiced(self) -> bool:
        """True once the quotation has been converted."""
        return self.status is QuotationStatus.INVOICED
