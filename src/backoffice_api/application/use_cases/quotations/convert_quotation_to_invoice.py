# src/backoffice_api/application/use_cases/quotations/convert_quotation_to_invoice.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Use case: Convert an accepted quotation into an invoice.

Synopsis:
    Reads the authoritative quotation, validates it, derives an invoice draft
    under a fresh invoice number, creates the invoice, then marks the
    quotation Invoiced. The two writes are not atomic; a failure of the
    second is reported as a partial conversion and the invoice is kept.

Responsibilities:
    * Fresh read of the quotation (never a cached or caller-supplied copy).
    * Precondition checks through :class:`ConversionGuard`.
    * Line total recomputation; mismatches are logged and counted.
    * Invoice creation, regenerating the number after a duplicate-number
      rejection (bounded retries).
    * Conditional status write (``expected_current_status=Accepted``).
    * The write phase is shielded from caller cancellation, and the in-process
      claim is held until it ends.
    * Every attempt returns a :class:`ConversionResult` and increments
      ``backoffice_conversions_total{outcome}``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import UTC, datetime

from backoffice_api.application.schemas.dto.conversion import (
    ConversionOutcome,
    ConversionResult,
)
from backoffice_api.domain.entities.invoice import Invoice, InvoiceDraft
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import QuotationStatus
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.domain.exceptions.conversion import (
    ConversionNotAllowed,
    InvoiceCreationFailed,
    NoLineItems,
    PartialConversionWarning,
)
from backoffice_api.domain.exceptions.documents import (
    DocumentNotFound,
    DocumentStoreUnavailable,
    DuplicateDocumentNumber,
)
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.domain.services.conversion_guard import CONVERTIBLE_STATUS, ConversionGuard
from backoffice_api.domain.services.invoice_derivation import (
    DEFAULT_DUE_DAYS,
    InvoiceDerivation,
    derive_invoice_draft,
)
from backoffice_api.domain.services.invoice_numbering import InvoiceNumberGenerator
from backoffice_api.domain.services.status_machine import QUOTATION_STATUS_MACHINE
from backoffice_api.infrastructure.logging.logger import get_json_logger
from backoffice_api.infrastructure.observability.metrics import (
    get_invoice_number_collisions_total,
    get_line_total_mismatches_total,
    inc_conversion,
)

logger = get_json_logger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class ConvertQuotationToInvoice:
    """Convert one quotation into exactly one invoice.

    Args:
        store: Document Store gateway.
        numbering: Invoice number generator; defaults to one sharing ``clock``.
        guard: Conversion guard; share one instance per process so in-flight
            claims are visible across requests.
        clock: Zero-arg callable returning the current time; its date is the
            invoice issue date.
        due_days: Days between issue date and due date.
        number_retries: Extra attempts after a duplicate-number rejection.
    """

    def __init__(
        self,
        store: DocumentStoreGateway,
        *,
        numbering: InvoiceNumberGenerator | None = None,
        guard: ConversionGuard | None = None,
        clock: Callable[[], datetime] = _utc_now,
        due_days: int = DEFAULT_DUE_DAYS,
        number_retries: int = 1,
    ) -> None:
        if due_days < 0:
            raise ValueError("due_days must be >= 0")
        if number_retries < 0:
            raise ValueError("number_retries must be >= 0")
        self._store = store
        self._clock = clock
        self._numbering = numbering or InvoiceNumberGenerator(clock=clock)
        self._guard = guard or ConversionGuard()
        self._due_days = due_days
        self._number_retries = number_retries

    async def execute(self, quotation_id: str) -> ConversionResult:
        """Run the conversion.

        Args:
            quotation_id: Store id of the quotation to convert.

        Returns:
            The conversion result. Store and domain failures, expected or not,
            are reported through ``result.outcome`` and ``result.error``.
        """
        logger.info("conversion.start", extra={"quotation_id": quotation_id})
        try:
            self._guard.acquire(quotation_id)
        except ConversionNotAllowed as exc:
            result = ConversionResult(
                outcome=ConversionOutcome.NOT_ALLOWED, quotation_id=quotation_id, error=exc
            )
        else:
            result = await self._convert(quotation_id)

        inc_conversion(result.outcome.value)
        logger.info(
            "conversion.finished",
            extra={
                "quotation_id": quotation_id,
                "outcome": result.outcome.value,
                "invoice_id": result.invoice.id if result.invoice else None,
                "error_code": result.error.code if result.error else None,
            },
        )
        return result

    # ------------------------------------------------------------------ #
    # Read + validate
    # ------------------------------------------------------------------ #

    async def _convert(self, quotation_id: str) -> ConversionResult:
        """Run the read phase, then hand the claim over to the write phase.

        The claim taken in :meth:`execute` is released here when the read phase
        ends without writing (including on cancellation), and by
        :meth:`_write_and_release` otherwise.
        """
        handed_off = False
        try:
            result = await self._read_and_validate(quotation_id)
            if isinstance(result, ConversionResult):
                return result
            quotation, draft = result
            handed_off = True
            # Past this point the invoice may exist; finish even if the caller goes away.
            return await asyncio.shield(self._write_and_release(quotation, draft))
        finally:
            if not handed_off:
                self._guard.release(quotation_id)

    async def _read_and_validate(
        self, quotation_id: str
    ) -> ConversionResult | tuple[Quotation, InvoiceDraft]:
        try:
            quotation = await self._store.get_quotation(quotation_id)
        except DocumentNotFound as exc:
            return ConversionResult(
                outcome=ConversionOutcome.NOT_FOUND, quotation_id=quotation_id, error=exc
            )
        except DomainError as exc:
            logger.warning(
                "conversion.source_unavailable",
                extra={"quotation_id": quotation_id, "error_code": exc.code},
            )
            return ConversionResult(
                outcome=ConversionOutcome.SOURCE_UNAVAILABLE, quotation_id=quotation_id, error=exc
            )
        except Exception as exc:  # noqa: BLE001
            logger.exception(
                "conversion.source_unavailable",
                extra={"quotation_id": quotation_id, "error_code": type(exc).__name__},
            )
            error = DocumentStoreUnavailable(
                "The quotation could not be read.",
                details={"quotation_id": quotation_id, "cause": type(exc).__name__},
            )
            error.__cause__ = exc
            return ConversionResult(
                outcome=ConversionOutcome.SOURCE_UNAVAILABLE, quotation_id=quotation_id, error=error
            )

        try:
            ConversionGuard.check(quotation)
            QUOTATION_STATUS_MACHINE.ensure_transition(quotation.status, QuotationStatus.INVOICED)
        except ConversionNotAllowed as exc:
            return ConversionResult(
                outcome=ConversionOutcome.NOT_ALLOWED, quotation_id=quotation_id, error=exc
            )
        except NoLineItems as exc:
            return ConversionResult(
                outcome=ConversionOutcome.NO_LINE_ITEMS, quotation_id=quotation_id, error=exc
            )

        derivation = derive_invoice_draft(
            quotation,
            number=self._numbering.next_number(),
            issue_date=self._clock().date(),
            due_days=self._due_days,
        )
        self._report_mismatches(quotation, derivation)
        return quotation, derivation.draft

    @staticmethod
    def _report_mismatches(quotation: Quotation, derivation: InvoiceDerivation) -> None:
        for mismatch in derivation.line_mismatches:
            logger.warning(
                "conversion.line_total_mismatch",
                extra={
                    "quotation_id": quotation.id,
                    "quotation_number": quotation.number,
                    "position": mismatch.position,
                    "description": mismatch.description,
                    "stored": mismatch.stored,
                    "recomputed": mismatch.recomputed,
                },
            )
        if derivation.line_mismatches:
            get_line_total_mismatches_total().inc(len(derivation.line_mismatches))
        if derivation.total_mismatch:
            logger.warning(
                "conversion.document_total_mismatch",
                extra={
                    "quotation_id": quotation.id,
                    "stored": derivation.stored_total,
                    "recomputed": derivation.draft.total_amount,
                },
            )

    # ------------------------------------------------------------------ #
    # Write phase
    # ------------------------------------------------------------------ #

    async def _write_and_release(
        self, quotation: Quotation, draft: InvoiceDraft
    ) -> ConversionResult:
        try:
            return await self._write(quotation, draft)
        finally:
            self._guard.release(quotation.id)

    async def _write(self, quotation: Quotation, draft: InvoiceDraft) -> ConversionResult:
        try:
            invoice = await self._create_invoice(quotation, draft)
        except InvoiceCreationFailed as exc:
            return ConversionResult(
                outcome=ConversionOutcome.CREATION_FAILED, quotation_id=quotation.id, error=exc
            )

        logger.info(
            "conversion.invoice_created",
            extra={
                "quotation_id": quotation.id,
                "quotation_number": quotation.number,
                "invoice_id": invoice.id,
                "invoice_number": invoice.number,
                "total_amount": invoice.total_amount,
            },
        )

        try:
            await self._store.update_quotation_status(
                quotation.id,
                QuotationStatus.INVOICED,
                expected_current_status=CONVERTIBLE_STATUS,
            )
        except Exception as exc:  # noqa: BLE001
            # The invoice exists: report it whatever the status write raised.
            cause_code = exc.code if isinstance(exc, DomainError) else type(exc).__name__
            warning = PartialConversionWarning(
                "Invoice created but the quotation status could not be updated.",
                invoice=invoice,
                details={
                    "quotation_id": quotation.id,
                    "quotation_number": quotation.number,
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.number,
                    "cause": cause_code,
                    "cause_message": str(exc),
                },
            )
            warning.__cause__ = exc
            logger.error(
                "conversion.partial_failure",
                extra={
                    "quotation_id": quotation.id,
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.number,
                    "cause": cause_code,
                },
            )
            return ConversionResult(
                outcome=ConversionOutcome.PARTIAL,
                quotation_id=quotation.id,
                invoice=invoice,
                error=warning,
            )

        return ConversionResult(
            outcome=ConversionOutcome.CONVERTED, quotation_id=quotation.id, invoice=invoice
        )

    async def _create_invoice(self, quotation: Quotation, draft: InvoiceDraft) -> Invoice:
        """Create the invoice, regenerating its number after duplicate rejections.

        Raises:
            InvoiceCreationFailed: On any failure, or once retries are spent.
        """
        attempt = 0
        while True:
            try:
                return await self._store.create_invoice(draft)
            except DuplicateDocumentNumber as exc:
                get_invoice_number_collisions_total().inc()
                logger.warning(
                    "conversion.invoice_number_collision",
                    extra={
                        "quotation_id": quotation.id,
                        "invoice_number": draft.number,
                        "attempt": attempt + 1,
                    },
                )
                if attempt >= self._number_retries:
                    raise self._creation_failed(quotation, draft, exc) from exc
                attempt += 1
                draft = draft.with_number(self._numbering.next_number())
            except Exception as exc:  # noqa: BLE001
                raise self._creation_failed(quotation, draft, exc) from exc

    @staticmethod
    def _creation_failed(
        quotation: Quotation, draft: InvoiceDraft, cause: Exception
    ) -> InvoiceCreationFailed:
        cause_code = cause.code if isinstance(cause, DomainError) else type(cause).__name__
        logger.error(
            "conversion.invoice_creation_failed",
            extra={
                "quotation_id": quotation.id,
                "invoice_number": draft.number,
                "cause": cause_code,
            },
        )
        return InvoiceCreationFailed(
            "The invoice could not be created; the quotation was left unchanged.",
            details={
                "quotation_id": quotation.id,
                "quotation_number": quotation.number,
                "invoice_number": draft.number,
                "cause": cause_code,
                "cause_message": str(cause),
            },
        )
