# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Quotation → Invoice Conversion Exceptions

Purpose:
    Typed failures of the conversion workflow. The conversion use case never
    lets these escape; it returns them inside a ``ConversionResult`` so that
    callers must branch on the outcome explicitly.

Layer: domain/exceptions
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .base import DomainError

if TYPE_CHECKING:
    from backoffice_api.domain.entities.invoice import Invoice


class ConversionError(DomainError):
    """Base class for conversion workflow failures."""

    code = "CONVERSION_ERROR"


class ConversionNotAllowed(ConversionError):
    """The quotation is not in a state that permits conversion (must be Accepted)."""

    code = "CONVERSION_NOT_ALLOWED"


class NoLineItems(ConversionError):
    """The quotation has no line items, so an invoice would carry no economic content."""

    code = "NO_LINE_ITEMS"


class InvoiceCreationFailed(ConversionError):
    """The invoice write failed; the quotation was left untouched."""

    code = "INVOICE_CREATION_FAILED"


class PartialConversionWarning(ConversionError):
    """The invoice exists but the quotation status update did not commit.

    This is the only conversion failure that carries a created resource. An
    operator must reconcile the quotation, which is still Accepted.

    Attributes:
        invoice: The invoice that was created by the first write.
    """

    code = "PARTIAL_CONVERSION"

    def __init__(
        self,
        message: str = "",
        *,
        invoice: Invoice,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.invoice = invoice
