# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Quotations Router.

Summary:
    List, read, transition, delete and convert quotations.

Layer:
    adapters/routers

Versioning:
    Exposed under ``/v1/quotations``.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query, Request, Response, status

from backoffice_api.adapters.presenters.conversion_presenter import ConversionPresenter
from backoffice_api.adapters.presenters.document_presenter import DocumentPresenter
from backoffice_api.adapters.routers.base_router import BaseRouter
from backoffice_api.adapters.schemas.http.documents import (
    ConversionHTTP,
    QuotationHTTP,
    QuotationStatusChangeHTTP,
)
from backoffice_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    SuccessEnvelope,
    WarningEnvelope,
)
from backoffice_api.application.schemas.dto.documents import QuotationListQueryDTO
from backoffice_api.application.use_cases.quotations.convert_quotation_to_invoice import (
    ConvertQuotationToInvoice,
)
from backoffice_api.application.use_cases.quotations.delete_quotation import DeleteQuotation
from backoffice_api.application.use_cases.quotations.get_quotation import GetQuotation
from backoffice_api.application.use_cases.quotations.list_quotations import ListQuotations
from backoffice_api.application.use_cases.quotations.transition_quotation_status import (
    TransitionQuotationStatus,
)
from backoffice_api.dependencies.documents import (
    get_convert_quotation_uc,
    get_delete_quotation_uc,
    get_get_quotation_uc,
    get_list_quotations_uc,
    get_transition_quotation_status_uc,
)
from backoffice_api.domain.enums.document_status import QuotationStatus
from backoffice_api.domain.exceptions.base import DomainError

router = BaseRouter(version="v1", resource="quotations", tags=["Quotations"])
presenter = DocumentPresenter()
conversion_presenter = ConversionPresenter()


@router.get(
    "",
    response_model=SuccessEnvelope[list[QuotationHTTP]],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="List quotations",
)
async def list_quotations(
    request: Request,
    response: Response,
    uc: Annotated[ListQuotations, Depends(get_list_quotations_uc)],
    search: Annotated[
        str | None,
        Query(max_length=200, description="Matches quotation number or customer name."),
    ] = None,
    include_invoiced: Annotated[
        bool, Query(description="Also return quotations already converted to invoices.")
    ] = False,
) -> SuccessEnvelope[list[QuotationHTTP]] | Response:
    """Return quotations, newest first. Invoiced quotations are hidden by default."""
    trace_id = BaseRouter.trace_id(request)
    try:
        quotations = await uc.execute(
            QuotationListQueryDTO(search=search, include_invoiced=include_invoiced)
        )
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    return BaseRouter.send(response, presenter.present_quotations(quotations, trace_id=trace_id))


@router.get(
    "/{quotation_id}",
    response_model=SuccessEnvelope[QuotationHTTP],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Get a quotation",
)
async def get_quotation(
    quotation_id: str,
    request: Request,
    response: Response,
    uc: Annotated[GetQuotation, Depends(get_get_quotation_uc)],
) -> SuccessEnvelope[QuotationHTTP] | Response:
    """Return one quotation, read fresh from the Document Store."""
    trace_id = BaseRouter.trace_id(request)
    try:
        quotation = await uc.execute(quotation_id)
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    return BaseRouter.send(response, presenter.present_quotation(quotation, trace_id=trace_id))


@router.post(
    "/{quotation_id}/status",
    response_model=SuccessEnvelope[QuotationHTTP],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Change a quotation's status",
)
async def change_quotation_status(
    quotation_id: str,
    body: QuotationStatusChangeHTTP,
    request: Request,
    response: Response,
    uc: Annotated[TransitionQuotationStatus, Depends(get_transition_quotation_status_uc)],
) -> SuccessEnvelope[QuotationHTTP] | Response:
    """Apply one state machine transition.

    ``Invoiced`` is rejected here; it is reachable only through ``/convert``.
    """
    trace_id = BaseRouter.trace_id(request)
    try:
        quotation = await uc.execute(quotation_id, QuotationStatus(body.status))
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    return BaseRouter.send(response, presenter.present_quotation(quotation, trace_id=trace_id))


@router.delete(
    "/{quotation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=BaseRouter.std_error_responses(),
    summary="Delete a quotation",
)
async def delete_quotation(
    quotation_id: str,
    request: Request,
    uc: Annotated[DeleteQuotation, Depends(get_delete_quotation_uc)],
) -> Response:
    """Delete a quotation. Invoiced quotations answer 409."""
    trace_id = BaseRouter.trace_id(request)
    try:
        await uc.execute(quotation_id)
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    headers = {"X-Request-ID": trace_id} if trace_id else None
    return Response(status_code=status.HTTP_204_NO_CONTENT, headers=headers)


@router.post(
    "/{quotation_id}/convert",
    response_model=SuccessEnvelope[ConversionHTTP],
    status_code=status.HTTP_201_CREATED,
    responses={
        207: {
            "model": WarningEnvelope[ConversionHTTP],
            "description": "Invoice created; the quotation could not be marked Invoiced.",
        },
        502: {"model": ErrorEnvelope, "description": "The invoice could not be created."},
        **BaseRouter.std_error_responses(),
    },
    summary="Convert an accepted quotation into an invoice",
)
async def convert_quotation(
    quotation_id: str,
    request: Request,
    response: Response,
    uc: Annotated[ConvertQuotationToInvoice, Depends(get_convert_quotation_uc)],
) -> SuccessEnvelope[ConversionHTTP] | Response:
    """Create one Draft invoice from an Accepted quotation and mark it Invoiced.

    Returns:
        201 with the invoice, 207 with the invoice and a ``PARTIAL_CONVERSION``
        warning, or an ErrorEnvelope (404/409/422/502/503).
    """
    trace_id = BaseRouter.trace_id(request)
    result = await uc.execute(quotation_id)
    presented = conversion_presenter.present_conversion(result, trace_id=trace_id)
    if result.succeeded:
        return BaseRouter.send(response, presented)
    return BaseRouter.send_json(presented)
