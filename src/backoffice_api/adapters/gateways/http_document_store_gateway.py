# src/backoffice_api/adapters/gateways/http_document_store_gateway.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Adapter Gateway: Document Store REST API → domain entities.

This gateway sits on top of :class:`DocumentStoreClient` and implements the
:class:`DocumentStoreGateway` protocol.

Endpoints (relative to ``{base_url}/api``):

* ``GET /quotations``, ``GET|PUT|DELETE /quotations/{id}``
* ``GET /invoices``, ``POST /invoices``, ``GET|PUT /invoices/{id}``

Design principles:
    * Status updates are a ``PUT`` of the full current document with the new
      ``status`` and an ``expected_status`` field; the store rejects the write
      with 409 when the stored status no longer matches.
    * The gateway also compares ``expected_current_status`` against the fresh
      read it needs for the PUT body and fails fast with ``DocumentConflict``.
    * Invoiced quotations are never sent a ``DELETE``.
    * A 2xx reply to ``POST /invoices`` always yields an :class:`Invoice`, even
      when its body cannot be mapped.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from typing import Any
from urllib.parse import quote

from backoffice_api.adapters.mappers.document_mapper import (
    invoice_draft_to_wire,
    invoice_from_wire,
    invoice_to_wire,
    line_item_to_wire,
    quotation_from_wire,
    quotation_to_wire,
    unwrap_list,
    unwrap_object,
)
from backoffice_api.domain.entities.invoice import Invoice, InvoiceDraft
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.domain.exceptions.documents import (
    DocumentConflict,
    DocumentDeletionRefused,
    DocumentValidationError,
)
from backoffice_api.infrastructure.external_apis.document_store.client import DocumentStoreClient
from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def _path(collection: str, document_id: str | None = None) -> str:
    if document_id is None:
        return f"/{collection}"
    return f"/{collection}/{quote(str(document_id), safe='')}"


class HttpDocumentStoreGateway:
    """REST adapter implementing :class:`DocumentStoreGateway`."""

    def __init__(
        self, client: DocumentStoreClient, *, clock: Callable[[], datetime] = _utc_now
    ) -> None:
        """Initialize the gateway.

        Args:
            client: Configured Document Store transport client.
            clock: Timestamp source for invoices rebuilt from their draft.
        """
        self._client = client
        self._clock = clock

    # ------------------------------------------------------------------ #
    # Quotations
    # ------------------------------------------------------------------ #

    async def get_quotation(self, quotation_id: str) -> Quotation:
        payload = await self._client.get_json(
            _path("quotations", quotation_id), operation="get_quotation"
        )
        return quotation_from_wire(unwrap_object(payload, document="quotation"))

    async def list_quotations(self) -> list[Quotation]:
        payload = await self._client.get_json(_path("quotations"), operation="list_quotations")
        return [quotation_from_wire(row) for row in unwrap_list(payload, document="quotation")]

    async def update_quotation_status(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        *,
        expected_current_status: QuotationStatus | None = None,
    ) -> Quotation:
        current = await self.get_quotation(quotation_id)
        if expected_current_status is not None and current.status is not expected_current_status:
            raise DocumentConflict(
                "Quotation status changed concurrently.",
                details={
                    "quotation_id": quotation_id,
                    "expected_status": expected_current_status.value,
                    "actual_status": current.status.value,
                },
            )

        body = quotation_to_wire(current)
        body["status"] = new_status.value
        if expected_current_status is not None:
            body["expected_status"] = expected_current_status.value

        payload = await self._client.put_json(
            _path("quotations", quotation_id), body, operation="update_quotation_status"
        )
        if _is_document(payload):
            return quotation_from_wire(unwrap_object(payload, document="quotation"))
        return await self.get_quotation(quotation_id)

    async def delete_quotation(self, quotation_id: str) -> None:
        current = await self.get_quotation(quotation_id)
        if current.is_invoiced:
            raise DocumentDeletionRefused(
                "Invoiced quotations cannot be deleted.",
                details={"quotation_id": quotation_id, "status": current.status.value},
            )
        await self._client.delete(_path("quotations", quotation_id), operation="delete_quotation")

    # ------------------------------------------------------------------ #
    # Invoices
    # ------------------------------------------------------------------ #

    async def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        """Create an invoice from ``draft``.

        Once the store has accepted the POST the invoice exists, so an
        unreadable reply never surfaces as an error. The invoice is then
        re-read by the returned id, looked up by number, or, as a last resort,
        rebuilt from the draft.
        """
        payload = await self._client.post_json(
            _path("invoices"), invoice_draft_to_wire(draft), operation="create_invoice"
        )
        try:
            raw = dict(unwrap_object(payload, document="invoice"))
            # Some store versions answer with the header row only.
            raw.setdefault("line_items", [line_item_to_wire(item) for item in draft.line_items])
            return invoice_from_wire(raw)
        except DocumentValidationError as exc:
            logger.warning(
                "document_store.created_invoice_unreadable",
                extra={"invoice_number": draft.number, "error": exc.details},
            )
            return await self._resolve_created_invoice(draft, _returned_id(payload))

    async def _resolve_created_invoice(
        self, draft: InvoiceDraft, invoice_id: str | None
    ) -> Invoice:
        if invoice_id is not None:
            try:
                return await self.get_invoice(invoice_id)
            except DomainError as exc:
                logger.warning(
                    "document_store.created_invoice_reread_failed",
                    extra={"invoice_id": invoice_id, "error_code": exc.code},
                )
        else:
            try:
                for invoice in await self.list_invoices():
                    if invoice.number == draft.number:
                        return invoice
            except DomainError as exc:
                logger.warning(
                    "document_store.created_invoice_lookup_failed",
                    extra={"invoice_number": draft.number, "error_code": exc.code},
                )

        # The number is unique in the store, so it stands in for an unknown id.
        now = self._clock()
        logger.warning(
            "document_store.created_invoice_rebuilt",
            extra={"invoice_id": invoice_id, "invoice_number": draft.number},
        )
        return Invoice(
            id=invoice_id or draft.number,
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

    async def get_invoice(self, invoice_id: str) -> Invoice:
        payload = await self._client.get_json(
            _path("invoices", invoice_id), operation="get_invoice"
        )
        return invoice_from_wire(unwrap_object(payload, document="invoice"))

    async def list_invoices(self) -> list[Invoice]:
        payload = await self._client.get_json(_path("invoices"), operation="list_invoices")
        return [invoice_from_wire(row) for row in unwrap_list(payload, document="invoice")]

    async def update_invoice_status(
        self,
        invoice_id: str,
        new_status: InvoiceStatus,
        *,
        expected_current_status: InvoiceStatus | None = None,
    ) -> Invoice:
        current = await self.get_invoice(invoice_id)
        if expected_current_status is not None and current.status is not expected_current_status:
            raise DocumentConflict(
                "Invoice status changed concurrently.",
                details={
                    "invoice_id": invoice_id,
                    "expected_status": expected_current_status.value,
                    "actual_status": current.status.value,
                },
            )

        body = invoice_to_wire(current)
        body["status"] = new_status.value
        if expected_current_status is not None:
            body["expected_status"] = expected_current_status.value

        payload = await self._client.put_json(
            _path("invoices", invoice_id), body, operation="update_invoice_status"
        )
        if _is_document(payload):
            return invoice_from_wire(unwrap_object(payload, document="invoice"))
        return await self.get_invoice(invoice_id)


def _is_document(payload: Any) -> bool:
    """True when a write response carries the updated document."""
    if not isinstance(payload, Mapping):
        return False
    inner = payload.get("data")
    doc = inner if isinstance(inner, Mapping) else payload
    return "status" in doc and "id" in doc


def _returned_id(payload: Any) -> str | None:
    """Id carried by a create reply, wrapped in ``data`` or not."""
    if not isinstance(payload, Mapping):
        return None
    inner = payload.get("data")
    doc = inner if isinstance(inner, Mapping) else payload
    value = doc.get("id")
    if value is None or value == "":
        return None
    return str(value)
