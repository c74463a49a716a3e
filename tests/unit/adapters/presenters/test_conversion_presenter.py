from __future__ import annotations

from types import SimpleNamespace

import pytest

from backoffice_api.adapters.presenters.conversion_presenter import ConversionPresenter
from backoffice_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    SuccessEnvelope,
    WarningEnvelope,
)
from backoffice_api.application.schemas.dto.conversion import ConversionOutcome, ConversionResult
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.domain.exceptions.conversion import (
    ConversionNotAllowed,
    InvoiceCreationFailed,
    NoLineItems,
    PartialConversionWarning,
)
from backoffice_api.domain.exceptions.documents import DocumentNotFound, DocumentStoreUnavailable
from builders import make_invoice

presenter = ConversionPresenter()


def test_converted_is_201_success() -> None:
    result = ConversionResult(
        outcome=ConversionOutcome.CONVERTED, quotation_id="q-1", invoice=make_invoice()
    )

    out = presenter.present_conversion(result, trace_id="t-1")

    assert out.status_code == 201
    assert out.headers == {"X-Request-ID": "t-1"}
    assert isinstance(out.body, SuccessEnvelope)
    body = out.body.model_dump(mode="json")
    assert body["data"]["outcome"] == "converted"
    assert body["data"]["invoice"]["total_amount"] == "575.00"
    assert body["data"]["invoice"]["allowed_transitions"] == ["Sent"]


def test_partial_is_207_warning_with_invoice() -> None:
    invoice = make_invoice()
    warning = PartialConversionWarning(
        "Invoice created but the quotation status could not be updated.",
        invoice=invoice,
        details={"invoice_id": invoice.id, "cause": "DOCUMENT_CONFLICT"},
    )
    result = ConversionResult(
        outcome=ConversionOutcome.PARTIAL, quotation_id="q-1", invoice=invoice, error=warning
    )

    out = presenter.present_conversion(result)

    assert out.status_code == 207
    assert out.headers == {}
    assert isinstance(out.body, WarningEnvelope)
    body = out.body.model_dump(mode="json")
    assert body["data"]["invoice"]["id"] == "inv-100"
    assert body["warning"]["code"] == "PARTIAL_CONVERSION"
    assert body["warning"]["details"]["cause"] == "DOCUMENT_CONFLICT"


@pytest.mark.parametrize(
    ("outcome", "error", "status", "code"),
    [
        (ConversionOutcome.NOT_FOUND, DocumentNotFound("gone"), 404, "QUOTATION_NOT_FOUND"),
        (
            ConversionOutcome.NOT_ALLOWED,
            ConversionNotAllowed("no"),
            409,
            "CONVERSION_NOT_ALLOWED",
        ),
        (ConversionOutcome.NO_LINE_ITEMS, NoLineItems("empty"), 422, "NO_LINE_ITEMS"),
        (
            ConversionOutcome.CREATION_FAILED,
            InvoiceCreationFailed("store said no"),
            502,
            "INVOICE_CREATION_FAILED",
        ),
        (
            ConversionOutcome.SOURCE_UNAVAILABLE,
            DocumentStoreUnavailable("down"),
            503,
            "DOCUMENT_STORE_UNAVAILABLE",
        ),
    ],
)
def test_failures_map_to_error_envelopes(
    outcome: ConversionOutcome, error: DomainError, status: int, code: str
) -> None:
    result = ConversionResult(outcome=outcome, quotation_id="q-1", error=error)

    out = presenter.present_conversion(result, trace_id="t-9")

    assert out.status_code == status
    assert isinstance(out.body, ErrorEnvelope)
    assert out.body.error.code == code
    assert out.body.error.http_status == status
    assert out.body.error.trace_id == "t-9"


def test_result_without_invoice_or_error_is_rejected() -> None:
    empty = SimpleNamespace(
        outcome=ConversionOutcome.CONVERTED, quotation_id="q-1", invoice=None, error=None
    )
    with pytest.raises(ValueError):
        presenter.present_conversion(empty)  # type: ignore[arg-type]
