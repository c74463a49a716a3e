from __future__ import annotations

import pytest
from httpx import AsyncClient

from backoffice_api.adapters.gateways.in_memory_document_store import InMemoryDocumentStore
from backoffice_api.domain.enums.document_status import InvoiceStatus
from builders import make_invoice


@pytest.mark.anyio
async def test_list_and_search_invoices(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_invoice(make_invoice(id="inv-1", number="INV-20250101-000000-001"))
    store.put_invoice(
        make_invoice(id="inv-2", number="INV-20250101-000000-002", customer_name="Globex")
    )

    r = await http_client.get("/v1/invoices")
    assert r.status_code == 200
    assert {i["id"] for i in r.json()["data"]} == {"inv-1", "inv-2"}

    r = await http_client.get("/v1/invoices", params={"search": "000-002"})
    assert [i["id"] for i in r.json()["data"]] == ["inv-2"]


@pytest.mark.anyio
async def test_get_invoice(http_client: AsyncClient, store: InMemoryDocumentStore) -> None:
    store.put_invoice(make_invoice())

    r = await http_client.get("/v1/invoices/inv-100")
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["due_date"] == "2025-01-08"
    assert data["allowed_transitions"] == ["Sent"]

    assert (await http_client.get("/v1/invoices/nope")).status_code == 404


@pytest.mark.anyio
async def test_invoice_status_transitions(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_invoice(make_invoice(status=InvoiceStatus.SENT))

    r = await http_client.post("/v1/invoices/inv-100/status", json={"status": "Overdue"})
    assert r.status_code == 200
    assert r.json()["data"]["allowed_transitions"] == ["Paid"]

    r = await http_client.post("/v1/invoices/inv-100/status", json={"status": "Draft"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "INVALID_TRANSITION"
