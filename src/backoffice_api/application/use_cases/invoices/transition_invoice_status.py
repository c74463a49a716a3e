# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: Transition Invoice Status

Purpose:
    Move an invoice along Draft → Sent → Paid / Overdue, and Overdue → Paid
    when a late payment settles it.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.domain.entities.invoice import Invoice
from backoffice_api.domain.enums.document_status import InvoiceStatus
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.domain.services.status_machine import INVOICE_STATUS_MACHINE
from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class TransitionInvoiceStatus:
    """Apply a legal status change to an invoice.

    Raises:
        InvalidTransition: Illegal move.
        DocumentNotFound: Unknown id.
        DocumentConflict: The status changed between read and write.
    """

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, invoice_id: str, target: InvoiceStatus) -> Invoice:
        current = await self._store.get_invoice(invoice_id)
        INVOICE_STATUS_MACHINE.ensure_transition(current.status, target)
        updated = await self._store.update_invoice_status(
            invoice_id, target, expected_current_status=current.status
        )
        logger.info(
            "invoice.status_changed",
            extra={
                "invoice_id": invoice_id,
                "from_status": current.status.value,
                "to_status": updated.status.value,
            },
        )
        return updated
