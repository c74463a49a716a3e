from __future__ import annotations

import pytest
from builders import make_invoice

from backoffice_api.adapters.gateways.in_memory_document_store import InMemoryDocumentStore
from backoffice_api.application.schemas.dto.documents import InvoiceListQueryDTO
from backoffice_api.application.use_cases.invoices.get_invoice import GetInvoice
from backoffice_api.application.use_cases.invoices.list_invoices import ListInvoices
from backoffice_api.application.use_cases.invoices.transition_invoice_status import (
    TransitionInvoiceStatus,
)
from backoffice_api.domain.enums.document_status import InvoiceStatus
from backoffice_api.domain.exceptions.documents import DocumentNotFound
from backoffice_api.domain.exceptions.lifecycle import InvalidTransition


@pytest.mark.anyio
async def test_list_invoices_with_search(store: InMemoryDocumentStore) -> None:
    store.put_invoice(make_invoice(id="i1", number="INV-A", customer_name="Acme"))
    store.put_invoice(make_invoice(id="i2", number="INV-B", customer_name="Globex"))
    uc = ListInvoices(store)

    assert {i.id for i in await uc.execute()} == {"i1", "i2"}
    assert [i.id for i in await uc.execute(InvoiceListQueryDTO(search="globex"))] == ["i2"]


@pytest.mark.anyio
async def test_get_invoice(store: InMemoryDocumentStore) -> None:
    store.put_invoice(make_invoice(id="i1"))
    assert (await GetInvoice(store).execute("i1")).id == "i1"
    with pytest.raises(DocumentNotFound):
        await GetInvoice(store).execute("missing")


@pytest.mark.anyio
async def test_invoice_lifecycle_draft_sent_paid(store: InMemoryDocumentStore) -> None:
    store.put_invoice(make_invoice(id="i1"))
    uc = TransitionInvoiceStatus(store)

    assert (await uc.execute("i1", InvoiceStatus.SENT)).status is InvoiceStatus.SENT
    assert (await uc.execute("i1", InvoiceStatus.PAID)).status is InvoiceStatus.PAID
    with pytest.raises(InvalidTransition):
        await uc.execute("i1", InvoiceStatus.OVERDUE)
