# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Document Store Gateway Protocol.

Synopsis:
    Domain-level Protocol (PEP 544) abstracting the Document Store that persists
    quotations and invoices. Concrete implementations (HTTP, in-memory) live in
    the adapters layer and must satisfy this contract.

Consistency contract:
    * Reads are strongly consistent with the most recent status write made
      through the same store. Implementations must not serve cached snapshots;
      the conversion idempotency guard relies on this.
    * ``update_quotation_status`` with ``expected_current_status`` is a
      conditional write: it fails with :class:`DocumentConflict` if the stored
      status differs at write time.

Layer:
    domain/interfaces/gateways
"""

from __future__ import annotations

from typing import Protocol

from backoffice_api.domain.entities.invoice import Invoice, InvoiceDraft
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus


class DocumentStoreGateway(Protocol):
    """Abstraction over the quotation/invoice Document Store.

    Implementations translate transport failures into domain exceptions:
    ``DocumentNotFound``, ``DocumentConflict``, ``DocumentValidationError``
    (``DuplicateDocumentNumber`` for number collisions),
    ``DocumentStoreUnavailable`` and ``DocumentDeletionRefused``.
    """

    async def get_quotation(self, quotation_id: str) -> Quotation:
        """Return the current quotation with its line items.

        Raises:
            DocumentNotFound: Unknown id.
            DocumentStoreUnavailable: Store unreachable.
        """
        ...

    async def list_quotations(self) -> list[Quotation]:
        """Return all quotations (line items may be omitted by the store)."""
        ...

    async def update_quotation_status(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        *,
        expected_current_status: QuotationStatus | None = None,
    ) -> Quotation:
        """Persist a new quotation status.

        Args:
            quotation_id: Quotation to update.
            new_status: Status to store.
            expected_current_status: When given, the write only applies if the
                stored status still equals this value.

        Returns:
            The updated quotation.

        Raises:
            DocumentNotFound: Unknown id.
            DocumentConflict: Stored status differs from ``expected_current_status``.
            DocumentStoreUnavailable: Store unreachable.
        """
        ...

    async def delete_quotation(self, quotation_id: str) -> None:
        """Delete a quotation.

        Raises:
            DocumentNotFound: Unknown id.
            DocumentDeletionRefused: The quotation is Invoiced.
        """
        ...

    async def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        """Persist a new invoice.

        Raises:
            DuplicateDocumentNumber: ``draft.number`` already exists.
            DocumentValidationError: Payload rejected.
            DocumentStoreUnavailable: Store unreachable.
        """
        ...

    async def get_invoice(self, invoice_id: str) -> Invoice:
        """Return the current invoice with its line items."""
        ...

    async def list_invoices(self) -> list[Invoice]:
        """Return all invoices."""
        ...

    async def update_invoice_status(
        self,
        invoice_id: str,
        new_status: InvoiceStatus,
        *,
        expected_current_status: InvoiceStatus | None = None,
    ) -> Invoice:
        """Persist a new invoice status (conditional when ``expected_current_status`` is set)."""
        ...
