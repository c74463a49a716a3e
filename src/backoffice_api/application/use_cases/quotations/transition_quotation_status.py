# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Use Case: Transition Quotation Status

Purpose:
    Move a quotation along its lifecycle (Draft → Sent → Accepted / Declined /
    Expired). ``Invoiced`` is reachable only through conversion and is refused
    here.

Layer: application/use_cases
"""

from __future__ import annotations

from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import QuotationStatus
from backoffice_api.domain.exceptions.lifecycle import InvalidTransition
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.domain.services.status_machine import QUOTATION_STATUS_MACHINE
from backoffice_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


class TransitionQuotationStatus:
    """Apply a legal, non-conversion status change to a quotation.

    Raises:
        InvalidTransition: Illegal move, or a request for ``Invoiced``.
        DocumentNotFound: Unknown id.
        DocumentConflict: The status changed between read and write.
    """

    def __init__(self, store: DocumentStoreGateway) -> None:
        self._store = store

    async def execute(self, quotation_id: str, target: QuotationStatus) -> Quotation:
        """Transition ``quotation_id`` to ``target``.

        The write is conditional on the status read just before it.
        """
        current = await self._store.get_quotation(quotation_id)
        if target is QuotationStatus.INVOICED:
            raise InvalidTransition(
                "Quotations become Invoiced only through conversion.",
                details={
                    "document": QUOTATION_STATUS_MACHINE.name,
                    "current": current.status.value,
                    "target": target.value,
                    "allowed": sorted(
                        s.value
                        for s in QUOTATION_STATUS_MACHINE.allowed_targets(current.status)
                        if s is not QuotationStatus.INVOICED
                    ),
                },
            )
        QUOTATION_STATUS_MACHINE.ensure_transition(current.status, target)

        updated = await self._store.update_quotation_status(
            quotation_id, target, expected_current_status=current.status
        )
        logger.info(
            "quotation.status_changed",
            extra={
                "quotation_id": quotation_id,
                "from_status": current.status.value,
                "to_status": updated.status.value,
            },
        )
        return updated
