# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Conversion idempotency guard (Domain Layer).

Purpose:
    Ensure a quotation produces at most one invoice.

Layers of protection:
    1. Precondition check on a *fresh* snapshot: only ``Accepted`` quotations
       with at least one line item convert. A successful conversion moves the
       quotation to ``Invoiced``, so a repeated call fails here.
    2. In-process claim: a second conversion of the same id started while the
       first is still in flight (same event loop) is rejected before any read
       or write.
    3. The final status write is conditional on the quotation still being
       ``Accepted`` (enforced by the Document Store, see the gateway protocol).

    Layer 3 is what narrows the cross-process race; layers 1 and 2 are
    cheap early exits.

Layer:
    domain/services
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import QuotationStatus
from backoffice_api.domain.exceptions.conversion import ConversionNotAllowed, NoLineItems

CONVERTIBLE_STATUS = QuotationStatus.ACCEPTED


class ConversionGuard:
    """Precondition checks and in-flight claims for quotation conversion."""

    def __init__(self) -> None:
        self._in_flight: set[str] = set()

    def in_flight(self, quotation_id: str) -> bool:
        """True while a conversion of ``quotation_id`` holds a claim."""
        return quotation_id in self._in_flight

    @staticmethod
    def check(quotation: Quotation) -> None:
        """Validate that ``quotation`` may be converted.

        Raises:
            ConversionNotAllowed: If the quotation is not Accepted.
            NoLineItems: If the quotation carries no line items.
        """
        if quotation.status is not CONVERTIBLE_STATUS:
            raise ConversionNotAllowed(
                "Only accepted quotations can be converted to invoices.",
                details={
                    "quotation_id": quotation.id,
                    "quotation_number": quotation.number,
                    "status": quotation.status.value,
                    "required_status": CONVERTIBLE_STATUS.value,
                },
            )
        if not quotation.line_items:
            raise NoLineItems(
                "Quotation has no line items to convert to an invoice.",
                details={"quotation_id": quotation.id, "quotation_number": quotation.number},
            )

    def acquire(self, quotation_id: str) -> None:
        """Take the in-process claim on ``quotation_id``.

        The caller owns the claim until it calls :meth:`release`, which may
        happen in a different task than the one that acquired it.

        Raises:
            ConversionNotAllowed: If another conversion of the same id is in flight.
        """
        if quotation_id in self._in_flight:
            raise ConversionNotAllowed(
                "A conversion of this quotation is already in progress.",
                details={"quotation_id": quotation_id, "reason": "conversion_in_progress"},
            )
        self._in_flight.add(quotation_id)

    def release(self, quotation_id: str) -> None:
        """Drop the claim on ``quotation_id``; a no-op when none is held."""
        self._in_flight.discard(quotation_id)

    @asynccontextmanager
    async def claim(self, quotation_id: str) -> AsyncIterator[None]:
        """Hold the claim on ``quotation_id`` for the body of an ``async with``.

        Raises:
            ConversionNotAllowed: If another conversion of the same id is in flight.
        """
        self.acquire(quotation_id)
        try:
            yield
        finally:
            self.release(quotation_id)
