# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: Delete Quotation

Purpose:
    Delete a quotation that has not been converted. Invoiced quotations are
    the conversion record and are never deleted; the request is refused
    before anything is sent to the store.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.domain.exceptions.documents import DocumentDeletionRefused
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class DeleteQuotation:
    """Use case to delete a non-invoiced quotation.

    Raises:
        DocumentDeletionRefused: The quotation is Invoiced.
        DocumentNotFound: Unknown id.
    """

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, quotation_id: str) -> None:
        current = await self._store.get_quotation(quotation_id)
        if current.is_invoiced:
            raise DocumentDeletionRefused(
                "Invoiced quotations cannot be deleted.",
                details={"quotation_id": quotation_id, "status": current.status.value},
            )
        await self._store.delete_quotation(quotation_id)
        logger.info(
            "quotation.deleted",
            extra={"quotation_id": quotation_id, "quotation_number": current.number},
        )
