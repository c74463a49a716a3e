# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Invoices Router.

Summary:
    List, read and transition invoices. Invoices are created only by
    converting a quotation (``POST /v1/quotations/{id}/convert``).

Layer:
    adapters/routers
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query, Request, Response, status

from backoffice_api.adapters.presenters.document_presenter import DocumentPresenter
from backoffice_api.adapters.routers.base_router import BaseRouter
from backoffice_api.adapters.schemas.http.documents import InvoiceHTTP, InvoiceStatusChangeHTTP
from backoffice_api.adapters.schemas.http.envelopes import SuccessEnvelope
from backoffice_api.application.schemas.dto.documents import InvoiceListQueryDTO
from backoffice_api.application.use_cases.invoices.get_invoice import GetInvoice
from backoffice_api.application.use_cases.invoices.list_invoices import ListInvoices
from backoffice_api.application.use_cases.invoices.transition_invoice_status import (
    TransitionInvoiceStatus,
)
from backoffice_api.dependencies.documents import (
    get_get_invoice_uc,
    get_list_invoices_uc,
    get_transition_invoice_status_uc,
)
from backoffice_api.domain.enums.document_status import InvoiceStatus
from backoffice_api.domain.exceptions.base import DomainError

router = BaseRouter(version="v1", resource="invoices", tags=["Invoices"])
presenter = DocumentPresenter()


@router.get(
    "",
    response_model=SuccessEnvelope[list[InvoiceHTTP]],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="List invoices",
)
async def list_invoices(
    request: Request,
    response: Response,
    uc: Annotated[ListInvoices, Depends(get_list_invoices_uc)],
    search: Annotated[
        str | None,
        Query(max_length=200, description="Matches invoice number or customer name."),
    ] = None,
) -> SuccessEnvelope[list[InvoiceHTTP]] | Response:
    trace_id = BaseRouter.trace_id(request)
    try:
        invoices = await uc.execute(InvoiceListQueryDTO(search=search))
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    return BaseRouter.send(response, presenter.present_invoices(invoices, trace_id=trace_id))


@router.get(
    "/{invoice_id}",
    response_model=SuccessEnvelope[InvoiceHTTP],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Get an invoice",
)
async def get_invoice(
    invoice_id: str,
    request: Request,
    response: Response,
    uc: Annotated[GetInvoice, Depends(get_get_invoice_uc)],
) -> SuccessEnvelope[InvoiceHTTP] | Response:
    trace_id = BaseRouter.trace_id(request)
    try:
        invoice = await uc.execute(invoice_id)
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    return BaseRouter.send(response, presenter.present_invoice(invoice, trace_id=trace_id))


@router.post(
    "/{invoice_id}/status",
    response_model=SuccessEnvelope[InvoiceHTTP],
    status_code=status.HTTP_200_OK,
    responses=BaseRouter.std_error_responses(),
    summary="Change an invoice's status",
)
async def change_invoice_status(
    invoice_id: str,
    body: InvoiceStatusChangeHTTP,
    request: Request,
    response: Response,
    uc: Annotated[TransitionInvoiceStatus, Depends(get_transition_invoice_status_uc)],
) -> SuccessEnvelope[InvoiceHTTP] | Response:
    """Apply one invoice state machine transition (e.g. Sent → Paid)."""
    trace_id = BaseRouter.trace_id(request)
    try:
        invoice = await uc.execute(invoice_id, InvoiceStatus(body.status))
    except DomainError as exc:
        return BaseRouter.send_json(presenter.present_domain_error(exc, trace_id=trace_id))
    return BaseRouter.send(response, presenter.present_invoice(invoice, trace_id=trace_id))
