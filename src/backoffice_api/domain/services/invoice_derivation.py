# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Quotation → invoice derivation (Domain Layer).

Purpose:
    Build an :class:`InvoiceDraft` from an accepted quotation snapshot while
    preserving numeric integrity.

Rules:
    * Customer, currency and line items are copied; every line item is a new
      instance whose ``line_total`` is recomputed rather than trusted.
    * Stored vs recomputed disagreements are reported as
      :class:`LineTotalMismatch` entries. They never block derivation: the
      recomputed value is authoritative.
    * ``total_amount`` is the document total of the copied lines.
    * ``due_date = issue_date + due_days``.
    * Notes carry a provenance annotation:
      ``"Converted from Quotation {number}. {notes}"``.

Layer:
    domain/services
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Final

from backoffice_api.domain.entities.invoice import InvoiceDraft
from backoffice_api.domain.entities.line_item import LineItem
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus
from backoffice_api.domain.value_objects.money import document_total

DEFAULT_DUE_DAYS: Final[int] = 7


@dataclass(frozen=True, slots=True)
class LineTotalMismatch:
    """A line whose stored total disagrees with the recomputed one."""

    position: int
    description: str
    stored: Decimal
    recomputed: Decimal


@dataclass(frozen=True, slots=True)
class InvoiceDerivation:
    """Result of deriving an invoice draft from a quotation.

    Attributes:
        draft: The invoice payload ready to be created.
        line_mismatches: Lines whose stored totals were corrected.
        stored_total: The quotation's stored ``total_amount``.
    """

    draft: InvoiceDraft
    line_mismatches: tuple[LineTotalMismatch, ...]
    stored_total: Decimal

    @property
    def total_mismatch(self) -> bool:
        """True when the quotation's stored total differs from the draft total."""
        return self.stored_total != self.draft.total_amount


def provenance_note(quotation_number: str, notes: str | None) -> str:
    """Return the provenance annotation for a converted invoice."""
    return f"Converted from Quotation {quotation_number}. {notes or ''}".strip()


def derive_invoice_draft(
    quotation: Quotation,
    *,
    number: str,
    issue_date: date,
    due_days: int = DEFAULT_DUE_DAYS,
) -> InvoiceDerivation:
    """Derive an invoice draft from ``quotation``.

    Preconditions (Accepted, non-empty) are the caller's responsibility; see
    :class:`~backoffice_api.domain.services.conversion_guard.ConversionGuard`.

    Args:
        quotation: Fresh quotation snapshot.
        number: Invoice number to use.
        issue_date: Invoice issue date.
        due_days: Days between issue and due date (>= 0).

    Returns:
        The draft plus any line total corrections.

    Raises:
        ValueError: If ``due_days`` is negative.
    """
    if due_days < 0:
        raise ValueError("due_days must be >= 0")

    copies: list[LineItem] = []
    mismatches: list[LineTotalMismatch] = []
    for position, item in enumerate(quotation.line_items):
        copy = item.recomputed()
        if copy.line_total != item.line_total:
            mismatches.append(
                LineTotalMismatch(
                    position=position,
                    description=item.description,
                    stored=item.line_total,
                    recomputed=copy.line_total,
                )
            )
        copies.append(copy)

    draft = InvoiceDraft(
        number=number,
        customer_id=quotation.customer_id,
        issue_date=issue_date,
        due_date=issue_date + timedelta(days=due_days),
        currency=quotation.currency,
        line_items=tuple(copies),
        total_amount=document_total(c.line_total for c in copies),
        status=InvoiceStatus.DRAFT,
        notes=provenance_note(quotation.number, quotation.notes),
        source_quotation_id=quotation.id,
    )
    return InvoiceDerivation(
        draft=draft,
        line_mismatches=tuple(mismatches),
        stored_total=quotation.total_amount,
    )
