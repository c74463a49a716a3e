# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: List Quotations

Purpose:
    Return quotations for the working list. Converted (Invoiced) quotations
    are hidden unless explicitly requested; an optional search term matches
    the quotation number or the customer name, case-insensitively.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.application.schemas.dto.documents import QuotationListQueryDTO
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)


def matches_search(term: str | None, *fields: str | None) -> bool:
    """True when ``term`` is blank or a case-insensitive substring of any field."""
    if not term or not term.strip():
        return True
    needle = term.strip().casefold()
    return any(needle in value.casefold() for value in fields if value)


class ListQuotations:
    """Use case to list quotations with the list-view filters applied."""

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, query: QuotationListQueryDTO | None = None) -> list[Quotation]:
        """List quotations.

        Args:
            query: Filters; defaults hide Invoiced quotations and apply no search.

        Returns:
            Matching quotations in store order.
        """
        query = query or QuotationListQueryDTO()
        quotations = await self._store.list_quotations()
        return [
            q
            for q in quotations
            if (query.include_invoiced or not q.is_invoiced)
            and matches_search(query.search, q.number, q.customer_name)
        ]
