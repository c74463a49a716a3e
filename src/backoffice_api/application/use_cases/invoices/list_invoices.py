# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: List Invoices

Purpose:
    Return invoices, optionally filtered by a case-insensitive search over the
    invoice number and customer name.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.application.schemas.dto.documents import InvoiceListQueryDTO
from backoffice_api.application.use_cases.quotations.list_quotations import matches_search
from backoffice_api.domain.entities.invoice import Invoice
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)


class ListInvoices:
    """Use case to list invoices."""

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, query: InvoiceListQueryDTO | None = None) -> list[Invoice]:
        query = query or InvoiceListQueryDTO()
        invoices = await self._store.list_invoices()
        return [i for i in invoices if matches_search(query.search, i.number, i.customer_name)]
