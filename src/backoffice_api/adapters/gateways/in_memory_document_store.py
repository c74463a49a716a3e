# src/backoffice_api/adapters/gateways/in_memory_document_store.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""In-process Document Store.

Implements :class:`DocumentStoreGateway` over dictionaries guarded by an
``asyncio.Lock``. Used for local development (``DOCUMENT_STORE_BACKEND=memory``)
and as the store double in tests.

Behaves like the REST store on the points the workflow relies on:

* reads return the latest write (no caching);
* invoice numbers are unique (``DuplicateDocumentNumber``);
* ``expected_current_status`` makes status writes conditional
  (``DocumentConflict``);
* Invoiced quotations cannot be deleted (``DocumentDeletionRefused``).
"""

from __future__ import annotations

import asyncio
import itertools
from collections.abc import Callable, Iterable
from dataclasses import replace
from datetime import UTC, datetime

from backoffice_api.domain.entities.invoice import Invoice, InvoiceDraft
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.exceptions.documents import (
    DocumentConflict,
    DocumentDeletionRefused,
    DocumentNotFound,
    DuplicateDocumentNumber,
)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class InMemoryDocumentStore:
    """Dictionary-backed implementation of :class:`DocumentStoreGateway`."""

    def __init__(
        self,
        *,
        quotations: Iterable[Quotation] = (),
        invoices: Iterable[Invoice] = (),
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._clock = clock
        self._lock = asyncio.Lock()
        self._quotations: dict[str, Quotation] = {q.id: q for q in quotations}
        self._invoices: dict[str, Invoice] = {i.id: i for i in invoices}
        self._invoice_ids = itertools.count(len(self._invoices) + 1)

    # ------------------------------------------------------------------ #
    # Seeding / inspection
    # ------------------------------------------------------------------ #

    def put_quotation(self, quotation: Quotation) -> None:
        """Insert or replace a quotation as-is."""
        self._quotations[quotation.id] = quotation

    def put_invoice(self, invoice: Invoice) -> None:
        """Insert or replace an invoice as-is."""
        self._invoices[invoice.id] = invoice

    @property
    def invoice_count(self) -> int:
        """Number of stored invoices."""
        return len(self._invoices)

    # ------------------------------------------------------------------ #
    # Quotations
    # ------------------------------------------------------------------ #

    async def get_quotation(self, quotation_id: str) -> Quotation:
        try:
            return self._quotations[quotation_id]
        except KeyError:
            raise DocumentNotFound(
                "Quotation not found.", details={"quotation_id": quotation_id}
            ) from None

    async def list_quotations(self) -> list[Quotation]:
        return sorted(self._quotations.values(), key=lambda q: q.created_at, reverse=True)

    async def update_quotation_status(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        *,
        expected_current_status: QuotationStatus | None = None,
    ) -> Quotation:
        async with self._lock:
            current = await self.get_quotation(quotation_id)
            if (
                expected_current_status is not None
                and current.status is not expected_current_status
            ):
                raise DocumentConflict(
                    "Quotation status changed concurrently.",
                    details={
                        "quotation_id": quotation_id,
                        "expected_status": expected_current_status.value,
                        "actual_status": current.status.value,
                    },
                )
            updated = replace(current, status=new_status, updated_at=self._clock())
            self._quotations[quotation_id] = updated
            return updated

    async def delete_quotation(self, quotation_id: str) -> None:
        async with self._lock:
            current = await self.get_quotation(quotation_id)
            if current.is_invoiced:
                raise DocumentDeletionRefused(
                    "Invoiced quotations cannot be deleted.",
                    details={"quotation_id": quotation_id, "status": current.status.value},
                )
            del self._quotations[quotation_id]

    # ------------------------------------------------------------------ #
    # Invoices
    # ------------------------------------------------------------------ #

    async def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        async with self._lock:
            if any(inv.number == draft.number for inv in self._invoices.values()):
                raise DuplicateDocumentNumber(
                    "Invoice number already exists.", details={"invoice_number": draft.number}
                )
            now = self._clock()
            invoice = Invoice(
                id=f"inv-{next(self._invoice_ids)}",
                number=draft.number,
                customer_id=draft.customer_id,
                issue_date=draft.issue_date,
                due_date=draft.due_date,
                currency=draft.currency,
                status=draft.status,
                line_items=draft.line_items,
                total_amount=draft.total_amount,
                created_at=now,
                updated_at=now,
                notes=draft.notes,
            )
            self._invoices[invoice.id] = invoice
            return invoice

    async def get_invoice(self, invoice_id: str) -> Invoice:
        try:
            return self._invoices[invoice_id]
        except KeyError:
            raise DocumentNotFound(
                "Invoice not found.", details={"invoice_id": invoice_id}
            ) from None

    async def list_invoices(self) -> list[Invoice]:
        return sorted(self._invoices.values(), key=lambda i: i.created_at, reverse=True)

    async def update_invoice_status(
        self,
        invoice_id: str,
        new_status: InvoiceStatus,
        *,
        expected_current_status: InvoiceStatus | None = None,
    ) -> Invoice:
        async with self._lock:
            current = await self.get_invoice(invoice_id)
            if (
                expected_current_status is not None
                and current.status is not expected_current_status
            ):
                raise DocumentConflict(
                    "Invoice status changed concurrently.",
                    details={
                        "invoice_id": invoice_id,
                        "expected_status": expected_current_status.value,
                        "actual_status": current.status.value,
                    },
                )
            updated = replace(current, status=new_status, updated_at=self._clock())
            self._invoices[invoice_id] = updated
            return updated
