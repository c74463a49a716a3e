# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Conversion result types (Application Layer).

Synopsis:
    :class:`ConvertQuotationToInvoice` never lets a failure escape as an
    exception. Every call returns a :class:`ConversionResult` whose
    ``outcome`` tells the caller which path was taken.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from backoffice_api.domain.entities.invoice import Invoice
from backoffice_api.domain.exceptions.base import DomainError


class ConversionOutcome(str, Enum):
    """Terminal state of one conversion attempt."""

    CONVERTED = "converted"
    NOT_FOUND = "not_found"
    NOT_ALLOWED = "not_allowed"
    NO_LINE_ITEMS = "no_line_items"
    CREATION_FAILED = "creation_failed"
    PARTIAL = "partial"
    SOURCE_UNAVAILABLE = "source_unavailable"


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of converting one quotation.

    Attributes:
        outcome: Which path the conversion took.
        quotation_id: The quotation that was asked to convert.
        invoice: The created invoice (``CONVERTED`` and ``PARTIAL`` only).
        error: The failure (every outcome except ``CONVERTED``).

    Invariants:
        * ``CONVERTED``: ``invoice`` set, ``error`` unset.
        * ``PARTIAL``: both set; ``error`` is a ``PartialConversionWarning``.
        * anything else: ``error`` set, ``invoice`` unset.
    """

    outcome: ConversionOutcome
    quotation_id: str
    invoice: Invoice | None = None
    error: DomainError | None = None

    def __post_init__(self) -> None:
        has_invoice = self.invoice is not None
        has_error = self.error is not None
        if self.outcome is ConversionOutcome.CONVERTED:
            ok = has_invoice and not has_error
        elif self.outcome is ConversionOutcome.PARTIAL:
            ok = has_invoice and has_error
        else:
            ok = has_error and not has_invoice
        if not ok:
            raise ValueError(f"inconsistent ConversionResult for outcome {self.outcome.value}")

    @property
    def succeeded(self) -> bool:
        """True only for a complete conversion."""
        return self.outcome is ConversionOutcome.CONVERTED

    @property
    def invoice_created(self) -> bool:
        """True when an invoice exists in the store as a result of this call."""
        return self.invoice is not None
