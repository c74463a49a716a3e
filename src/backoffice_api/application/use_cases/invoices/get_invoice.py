# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: Get Invoice

Purpose:
    Fetch one invoice with its line items straight from the Document Store.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.domain.entities.invoice import Invoice
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)


class GetInvoice:
    """Use case to fetch a single invoice."""

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, invoice_id: str) -> Invoice:
        return await self._store.get_invoice(invoice_id)
