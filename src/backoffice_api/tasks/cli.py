# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Backoffice CLI: operator commands against the Document Store.

Commands:
    quotations list        List quotations (Invoiced hidden unless --include-invoiced).
    quotations show        Print one quotation.
    quotations status      Move a quotation to another status.
    quotations delete      Delete a quotation (refused once Invoiced).
    quotations convert     Convert an Accepted quotation into a Draft invoice.
    invoices list          List invoices.
    invoices status        Move an invoice to another status.

Environment:
    DOCUMENT_STORE_BASE_URL   Base URL of the Document Store REST API.
    DOCUMENT_STORE_API_KEY    Optional API key sent as X-Api-Key.
    INVOICE_DUE_DAYS          Due date offset for converted invoices (default 7).
    CONVERSION_NUMBER_RETRIES Invoice number regenerations after a duplicate (default 1).

Exit codes:
    0 success, 1 domain error, 2 conversion refused (not allowed / no line
    items), 3 partial conversion, 4 not found, 5 store or creation failure.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Any, Final, TypeVar

import typer
from fastapi.encoders import jsonable_encoder

from backoffice_api.adapters.gateways.http_document_store_gateway import HttpDocumentStoreGateway
from backoffice_api.adapters.presenters.document_presenter import invoice_to_http, quotation_to_http
from backoffice_api.application.schemas.dto.conversion import ConversionOutcome
from backoffice_api.application.schemas.dto.documents import (
    InvoiceListQueryDTO,
    QuotationListQueryDTO,
)
from backoffice_api.application.use_cases.invoices.list_invoices import ListInvoices
from backoffice_api.application.use_cases.invoices.transition_invoice_status import (
    TransitionInvoiceStatus,
)
from backoffice_api.application.use_cases.quotations.convert_quotation_to_invoice import (
    ConvertQuotationToInvoice,
)
from backoffice_api.application.use_cases.quotations.delete_quotation import DeleteQuotation
from backoffice_api.application.use_cases.quotations.get_quotation import GetQuotation
from backoffice_api.application.use_cases.quotations.list_quotations import ListQuotations
from backoffice_api.application.use_cases.quotations.transition_quotation_status import (
    TransitionQuotationStatus,
)
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.domain.exceptions.documents import DocumentNotFound
from backoffice_api.domain.interfaces.gateways.document_store_gateway import (
    DocumentStoreGateway,
)
from backoffice_api.infrastructure.external_apis.document_store.client import DocumentStoreClient
from backoffice_api.infrastructure.external_apis.document_store.settings import (
    DocumentStoreSettings,
)
from backoffice_api.infrastructure.logging.logger import configure_root_logging, get_json_logger

configure_root_logging()
log = get_json_logger(__name__)

T = TypeVar("T")

app = typer.Typer(add_completion=False, no_args_is_help=True)
quotations_app = typer.Typer(no_args_is_help=True)
invoices_app = typer.Typer(no_args_is_help=True)
app.add_typer(quotations_app, name="quotations")
app.add_typer(invoices_app, name="invoices")

EXIT_DOMAIN_ERROR: Final[int] = 1
EXIT_REFUSED: Final[int] = 2
EXIT_PARTIAL: Final[int] = 3
EXIT_NOT_FOUND: Final[int] = 4
EXIT_UNAVAILABLE: Final[int] = 5

CONVERSION_EXIT_CODES: Final[dict[ConversionOutcome, int]] = {
    ConversionOutcome.CONVERTED: 0,
    ConversionOutcome.NOT_FOUND: EXIT_NOT_FOUND,
    ConversionOutcome.NOT_ALLOWED: EXIT_REFUSED,
    ConversionOutcome.NO_LINE_ITEMS: EXIT_REFUSED,
    ConversionOutcome.PARTIAL: EXIT_PARTIAL,
    ConversionOutcome.CREATION_FAILED: EXIT_UNAVAILABLE,
    ConversionOutcome.SOURCE_UNAVAILABLE: EXIT_UNAVAILABLE,
}


@asynccontextmanager
async def open_store(store_url: str) -> AsyncIterator[DocumentStoreGateway]:
    """Yield a REST Document Store gateway, closing its client on exit."""
    client = DocumentStoreClient(DocumentStoreSettings(base_url=store_url))
    try:
        yield HttpDocumentStoreGateway(client)
    finally:
        await client.aclose()


def _emit(payload: Any) -> None:
    typer.echo(json.dumps(jsonable_encoder(payload), indent=2, sort_keys=True))


def _fail(exc: DomainError) -> typer.Exit:
    typer.echo(json.dumps({"error": jsonable_encoder(exc.as_dict())}, sort_keys=True), err=True)
    code = EXIT_NOT_FOUND if isinstance(exc, DocumentNotFound) else EXIT_DOMAIN_ERROR
    return typer.Exit(code=code)


def _run(store_url: str, action: Callable[[DocumentStoreGateway], Awaitable[T]]) -> T:
    async def _inner() -> T:
        async with open_store(store_url) as store:
            return await action(store)

    try:
        return asyncio.run(_inner())
    except DomainError as exc:
        raise _fail(exc) from exc


# -----------------------------------------------------------------------------
# Quotations
# -----------------------------------------------------------------------------


@quotations_app.command("list")
def quotations_list(
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
    search: str | None = typer.Option(None, help="Match quotation number or customer name."),
    include_invoiced: bool = typer.Option(False, help="Also list Invoiced quotations."),
) -> None:
    """List quotations, newest first."""
    query = QuotationListQueryDTO(search=search, include_invoiced=include_invoiced)
    rows = _run(store_url, lambda store: ListQuotations(store).execute(query))
    _emit([quotation_to_http(q).model_dump_http() for q in rows])


@quotations_app.command("show")
def quotations_show(
    quotation_id: str,
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
) -> None:
    """Print one quotation."""
    quotation = _run(store_url, lambda store: GetQuotation(store).execute(quotation_id))
    _emit(quotation_to_http(quotation).model_dump_http())


@quotations_app.command("status")
def quotations_status(
    quotation_id: str,
    status: QuotationStatus,
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
) -> None:
    """Move a quotation to STATUS (Invoiced is reachable only through convert)."""
    quotation = _run(
        store_url, lambda store: TransitionQuotationStatus(store).execute(quotation_id, status)
    )
    _emit(quotation_to_http(quotation).model_dump_http())


@quotations_app.command("delete")
def quotations_delete(
    quotation_id: str,
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
) -> None:
    """Delete a quotation."""
    _run(store_url, lambda store: DeleteQuotation(store).execute(quotation_id))
    _emit({"deleted": quotation_id})


@quotations_app.command("convert")
def quotations_convert(
    quotation_id: str,
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
    due_days: int = typer.Option(7, envvar="INVOICE_DUE_DAYS", min=0, max=365),
    number_retries: int = typer.Option(
        1,
        envvar="CONVERSION_NUMBER_RETRIES",
        min=0,
        max=5,
        help="Regenerations allowed after a duplicate invoice number.",
    ),
) -> None:
    """Convert an Accepted quotation into a Draft invoice."""
    result = _run(
        store_url,
        lambda store: ConvertQuotationToInvoice(
            store, due_days=due_days, number_retries=number_retries
        ).execute(quotation_id),
    )
    payload: dict[str, Any] = {"quotation_id": result.quotation_id, "outcome": result.outcome.value}
    if result.invoice is not None:
        payload["invoice"] = invoice_to_http(result.invoice).model_dump_http()
    if result.error is not None:
        payload["error"] = result.error.as_dict()
    _emit(payload)

    log.info(
        "cli.convert.done",
        extra={"quotation_id": quotation_id, "outcome": result.outcome.value},
    )
    exit_code = CONVERSION_EXIT_CODES[result.outcome]
    if exit_code:
        raise typer.Exit(code=exit_code)


# -----------------------------------------------------------------------------
# Invoices
# -----------------------------------------------------------------------------


@invoices_app.command("list")
def invoices_list(
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
    search: str | None = typer.Option(None, help="Match invoice number or customer name."),
) -> None:
    """List invoices, newest first."""
    query = InvoiceListQueryDTO(search=search)
    rows = _run(store_url, lambda store: ListInvoices(store).execute(query))
    _emit([invoice_to_http(i).model_dump_http() for i in rows])


@invoices_app.command("status")
def invoices_status(
    invoice_id: str,
    status: InvoiceStatus,
    store_url: str = typer.Option(..., envvar="DOCUMENT_STORE_BASE_URL", help="Store base URL."),
) -> None:
    """Move an invoice to STATUS."""
    invoice = _run(
        store_url, lambda store: TransitionInvoiceStatus(store).execute(invoice_id, status)
    )
    _emit(invoice_to_http(invoice).model_dump_http())


if __name__ == "__main__":
    app()
