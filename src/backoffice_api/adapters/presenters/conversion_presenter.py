# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Presenter: Quotation → Invoice conversion.

Turns a :class:`ConversionResult` into exactly one of three response shapes:

* ``201`` + ``SuccessEnvelope[ConversionHTTP]`` for a complete conversion;
* ``207`` + ``WarningEnvelope[ConversionHTTP]`` when the invoice exists but
  the quotation could not be marked Invoiced;
* an ``ErrorEnvelope`` for every other outcome.

Layer: adapters/presenters
"""

from __future__ import annotations

from typing import Any, Final

from fastapi import status

from backoffice_api.adapters.presenters.base_presenter import BasePresenter, PresentResult
from backoffice_api.adapters.presenters.document_presenter import invoice_to_http
from backoffice_api.adapters.schemas.http.documents import ConversionHTTP
from backoffice_api.application.schemas.dto.conversion import ConversionOutcome, ConversionResult
from backoffice_api.domain.entities.invoice import Invoice

_ERROR_STATUS: Final[dict[ConversionOutcome, int]] = {
    ConversionOutcome.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ConversionOutcome.NOT_ALLOWED: status.HTTP_409_CONFLICT,
    ConversionOutcome.NO_LINE_ITEMS: 422,
    ConversionOutcome.CREATION_FAILED: status.HTTP_502_BAD_GATEWAY,
    ConversionOutcome.SOURCE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

# A missing quotation is reported under its own code rather than the store's.
_ERROR_CODE_OVERRIDES: Final[dict[ConversionOutcome, str]] = {
    ConversionOutcome.NOT_FOUND: "QUOTATION_NOT_FOUND",
}


class ConversionPresenter(BasePresenter):
    """Presenter for ``POST /v1/quotations/{id}/convert``."""

    def present_conversion(
        self, result: ConversionResult, *, trace_id: str | None = None
    ) -> PresentResult[Any]:
        error = result.error
        if error is None:
            if result.invoice is None:
                raise ValueError("conversion result carries neither an invoice nor an error")
            return self.present_success(
                data=self._body(result, result.invoice),
                trace_id=trace_id,
                status_code=status.HTTP_201_CREATED,
            )

        if result.outcome is ConversionOutcome.PARTIAL and result.invoice is not None:
            return self.present_warning(
                data=self._body(result, result.invoice),
                code=error.code,
                http_status=status.HTTP_207_MULTI_STATUS,
                message=error.message,
                trace_id=trace_id,
                details=error.details,
            )

        return self.present_error(
            code=_ERROR_CODE_OVERRIDES.get(result.outcome, error.code),
            http_status=_ERROR_STATUS.get(result.outcome, status.HTTP_500_INTERNAL_SERVER_ERROR),
            message=error.message,
            trace_id=trace_id,
            details=error.details,
        )

    @staticmethod
    def _body(result: ConversionResult, invoice: Invoice) -> ConversionHTTP:
        return ConversionHTTP(
            quotation_id=result.quotation_id,
            outcome=result.outcome.value,
            invoice=invoice_to_http(invoice),
        )
