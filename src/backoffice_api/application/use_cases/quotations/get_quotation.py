# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: Get Quotation

Purpose:
    Fetch one quotation with its line items straight from the Document Store.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)


class GetQuotation:
    """Use case to fetch a single quotation.

    Raises:
        DocumentNotFound: Unknown id.
        DocumentStoreUnavailable: Store unreachable.
    """

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, quotation_id: str) -> Quotation:
        return await self._store.get_quotation(quotation_id)
