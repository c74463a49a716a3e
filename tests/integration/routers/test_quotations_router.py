from __future__ import annotations

import pytest
from httpx import AsyncClient

from backoffice_api.adapters.gateways.in_memory_document_store import InMemoryDocumentStore
from backoffice_api.domain.enums.document_status import QuotationStatus
from builders import make_quotation


@pytest.mark.anyio
async def test_list_hides_invoiced_unless_asked(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_quotation(make_quotation(id="q-1", number="Q-1"))
    store.put_quotation(make_quotation(id="q-2", number="Q-2", status=QuotationStatus.INVOICED))

    r = await http_client.get("/v1/quotations")
    assert r.status_code == 200
    assert [q["id"] for q in r.json()["data"]] == ["q-1"]

    r = await http_client.get("/v1/quotations", params={"include_invoiced": "true"})
    assert {q["id"] for q in r.json()["data"]} == {"q-1", "q-2"}


@pytest.mark.anyio
async def test_list_search_matches_number_or_customer(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_quotation(make_quotation(id="q-1", number="Q-1", customer_name="Acme Corp"))
    store.put_quotation(make_quotation(id="q-2", number="Q-2", customer_name="Globex"))

    r = await http_client.get("/v1/quotations", params={"search": "glob"})
    assert [q["id"] for q in r.json()["data"]] == ["q-2"]


@pytest.mark.anyio
async def test_get_quotation_and_not_found(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_quotation(make_quotation())

    r = await http_client.get("/v1/quotations/q-1", headers={"X-Request-ID": "req-1"})
    assert r.status_code == 200
    assert r.headers["X-Request-ID"] == "req-1"
    data = r.json()["data"]
    assert data["quotation_number"] == "Q-1"
    assert data["total_amount"] == "575.00"
    assert data["allowed_transitions"] == ["Invoiced"]

    r = await http_client.get("/v1/quotations/nope", headers={"X-Request-ID": "req-2"})
    assert r.status_code == 404
    err = r.json()["error"]
    assert err["code"] == "DOCUMENT_NOT_FOUND"
    assert err["trace_id"] == "req-2"


@pytest.mark.anyio
async def test_status_change_follows_state_machine(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_quotation(make_quotation(status=QuotationStatus.DRAFT))

    r = await http_client.post("/v1/quotations/q-1/status", json={"status": "Sent"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "Sent"

    r = await http_client.post("/v1/quotations/q-1/status", json={"status": "Draft"})
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "INVALID_TRANSITION"

    r = await http_client.post("/v1/quotations/q-1/status", json={"status": "Bogus"})
    assert r.status_code == 422
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.anyio
async def test_invoiced_is_only_reachable_by_conversion(
    http_client: AsyncClient, store: InMemoryDocumentStore
) -> None:
    store.put_quotation(make_quotation(status=QuotationStatus.ACCEPTED))

    r = await http_client.post("/v1/quotations/q-1/status", json={"status": "Invoiced"})

    assert r.status_code == 409
    assert r.json()["error"]["code"] == "INVALID_TRANSITION"
    assert (await store.get_quotation("q-1")).status is QuotationStatus.ACCEPTED


@pytest.mark.anyio
async def test_delete(http_client: AsyncClient, store: InMemoryDocumentStore) -> None:
    store.put_quotation(make_quotation(id="q-1", status=QuotationStatus.DRAFT))
    store.put_quotation(make_quotation(id="q-2", number="Q-2", status=QuotationStatus.INVOICED))

    r = await http_client.delete("/v1/quotations/q-1")
    assert r.status_code == 204
    assert r.content == b""
    assert r.headers.get("X-Request-ID")

    r = await http_client.delete("/v1/quotations/q-2")
    assert r.status_code == 409
    assert r.json()["error"]["code"] == "DOCUMENT_DELETION_REFUSED"
