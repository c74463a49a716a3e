from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator
from datetime import date, datetime
from decimal import Decimal

import pytest
from builders import FIXED_NOW, make_invoice, make_line_item, make_quotation
from prometheus_client import REGISTRY

from backoffice_api.adapters.gateways.in_memory_document_store import InMemoryDocumentStore
from backoffice_api.application.schemas.dto.conversion import ConversionOutcome
from backoffice_api.application.use_cases.quotations.convert_quotation_to_invoice import (
    ConvertQuotationToInvoice,
)
from backoffice_api.domain.entities.invoice import Invoice, InvoiceDraft
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.exceptions.conversion import (
    ConversionNotAllowed,
    InvoiceCreationFailed,
    NoLineItems,
    PartialConversionWarning,
)
from backoffice_api.domain.exceptions.documents import (
    DocumentConflict,
    DocumentNotFound,
    DocumentStoreUnavailable,
)
from backoffice_api.domain.services.conversion_guard import ConversionGuard
from backoffice_api.domain.services.invoice_numbering import InvoiceNumberGenerator


class SpyStore(InMemoryDocumentStore):
    """In-memory store that records calls and can inject failures."""

    def __init__(self, **kwargs: object) -> None:
        super().__init__(**kwargs)  # type: ignore[arg-type]
        self.calls: list[str] = []
        self.fail_get: Exception | None = None
        self.fail_create: Exception | None = None
        self.fail_update: Exception | None = None
        self.create_gate: asyncio.Event | None = None
        self.create_started = asyncio.Event()

    async def get_quotation(self, quotation_id: str) -> Quotation:
        self.calls.append("get_quotation")
        await asyncio.sleep(0)
        if self.fail_get is not None:
            raise self.fail_get
        return await super().get_quotation(quotation_id)

    async def create_invoice(self, draft: InvoiceDraft) -> Invoice:
        self.calls.append("create_invoice")
        self.create_started.set()
        if self.create_gate is not None:
            await self.create_gate.wait()
        if self.fail_create is not None:
            raise self.fail_create
        return await super().create_invoice(draft)

    async def update_quotation_status(
        self,
        quotation_id: str,
        new_status: QuotationStatus,
        *,
        expected_current_status: QuotationStatus | None = None,
    ) -> Quotation:
        self.calls.append("update_quotation_status")
        if self.fail_update is not None:
            raise self.fail_update
        return await super().update_quotation_status(
            quotation_id, new_status, expected_current_status=expected_current_status
        )

    @property
    def writes(self) -> list[str]:
        return [c for c in self.calls if c != "get_quotation"]


class SequenceRng:
    """Random source returning a fixed sequence of suffixes."""

    def __init__(self, values: list[int]) -> None:
        self._values: Iterator[int] = iter(values)

    def randint(self, a: int, b: int) -> int:
        return next(self._values)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


@pytest.fixture
def spy_store(fixed_clock: Callable[[], datetime]) -> SpyStore:
    return SpyStore(clock=fixed_clock)


def _use_case(
    store: SpyStore,
    *,
    rng_values: list[int] | None = None,
    guard: ConversionGuard | None = None,
    number_retries: int = 1,
) -> ConvertQuotationToInvoice:
    numbering = InvoiceNumberGenerator(
        clock=lambda: FIXED_NOW, rng=SequenceRng(rng_values or [1, 2, 3, 4])
    )
    return ConvertQuotationToInvoice(
        store,
        numbering=numbering,
        guard=guard,
        clock=lambda: FIXED_NOW,
        number_retries=number_retries,
    )


# --------------------------------------------------------------------------- #
# Happy path
# --------------------------------------------------------------------------- #


@pytest.mark.anyio
async def test_accepted_quotation_converts_to_draft_invoice(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation(id="q-1", number="Q-1", notes="Thanks"))
    before = _sample("backoffice_conversions_total", {"outcome": "converted"})

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.CONVERTED
    assert result.succeeded and result.error is None
    invoice = result.invoice
    assert invoice is not None
    assert invoice.status is InvoiceStatus.DRAFT
    assert invoice.total_amount == Decimal("575.00")
    assert invoice.issue_date == date(2025, 1, 2)
    assert invoice.due_date == date(2025, 1, 9)
    assert invoice.number == "INV-20250102-030405-001"
    assert invoice.notes == "Converted from Quotation Q-1. Thanks"
    assert invoice.customer_id == "c-1"

    quotation = await spy_store.get_quotation("q-1")
    assert quotation.status is QuotationStatus.INVOICED
    assert spy_store.invoice_count == 1
    assert spy_store.writes == ["create_invoice", "update_quotation_status"]
    assert _sample("backoffice_conversions_total", {"outcome": "converted"}) == before + 1


@pytest.mark.anyio
async def test_two_line_quotation_total_is_sum_of_line_totals(spy_store: SpyStore) -> None:
    items = (
        make_line_item(quantity=2, unit_price="100", tax_rate="0.15"),
        make_line_item(quantity=2, unit_price="100", tax_rate="0.15"),
    )
    spy_store.put_quotation(make_quotation(line_items=items))

    result = await _use_case(spy_store).execute("q-1")

    assert result.invoice is not None
    assert [i.line_total for i in result.invoice.line_items] == [
        Decimal("230.00"),
        Decimal("230.00"),
    ]
    assert result.invoice.total_amount == Decimal("460.00")


@pytest.mark.anyio
async def test_stale_line_totals_are_recomputed_and_counted(spy_store: SpyStore) -> None:
    stale = make_line_item(quantity=2, unit_price="100", tax_rate="0.15", line_total="200.00")
    spy_store.put_quotation(make_quotation(line_items=(stale,), total_amount="200.00"))
    before = _sample("backoffice_line_total_mismatches_total")

    result = await _use_case(spy_store).execute("q-1")

    assert result.invoice is not None
    assert result.invoice.total_amount == Decimal("230.00")
    assert _sample("backoffice_line_total_mismatches_total") == before + 1


# --------------------------------------------------------------------------- #
# Refusals (no writes)
# --------------------------------------------------------------------------- #


@pytest.mark.anyio
async def test_second_conversion_is_not_allowed(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    uc = _use_case(spy_store)

    first = await uc.execute("q-1")
    second = await uc.execute("q-1")

    assert first.outcome is ConversionOutcome.CONVERTED
    assert second.outcome is ConversionOutcome.NOT_ALLOWED
    assert isinstance(second.error, ConversionNotAllowed)
    assert second.invoice is None
    assert spy_store.invoice_count == 1


@pytest.mark.anyio
@pytest.mark.parametrize(
    "status",
    [
        QuotationStatus.DRAFT,
        QuotationStatus.SENT,
        QuotationStatus.DECLINED,
        QuotationStatus.EXPIRED,
    ],
)
async def test_non_accepted_quotation_is_refused_without_writes(
    spy_store: SpyStore, status: QuotationStatus
) -> None:
    spy_store.put_quotation(make_quotation(status=status))

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.NOT_ALLOWED
    assert result.error is not None and result.error.details["status"] == status.value
    assert spy_store.writes == []
    assert (await spy_store.get_quotation("q-1")).status is status


@pytest.mark.anyio
async def test_quotation_without_line_items_is_refused(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation(line_items=()))

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.NO_LINE_ITEMS
    assert isinstance(result.error, NoLineItems)
    assert spy_store.writes == []


@pytest.mark.anyio
async def test_unknown_quotation_is_not_found(spy_store: SpyStore) -> None:
    result = await _use_case(spy_store).execute("missing")

    assert result.outcome is ConversionOutcome.NOT_FOUND
    assert isinstance(result.error, DocumentNotFound)
    assert spy_store.writes == []


@pytest.mark.anyio
async def test_unreachable_store_on_read_is_source_unavailable(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.fail_get = DocumentStoreUnavailable("down")

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.SOURCE_UNAVAILABLE
    assert isinstance(result.error, DocumentStoreUnavailable)
    assert spy_store.writes == []


# --------------------------------------------------------------------------- #
# Write failures
# --------------------------------------------------------------------------- #


@pytest.mark.anyio
async def test_failed_invoice_creation_leaves_quotation_untouched(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.fail_create = DocumentStoreUnavailable("timeout")

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.CREATION_FAILED
    assert isinstance(result.error, InvoiceCreationFailed)
    assert result.error.details["cause"] == "DOCUMENT_STORE_UNAVAILABLE"
    assert result.invoice is None
    assert spy_store.writes == ["create_invoice"]
    assert (await spy_store.get_quotation("q-1")).status is QuotationStatus.ACCEPTED


@pytest.mark.anyio
async def test_unexpected_create_error_is_reported_as_creation_failure(
    spy_store: SpyStore,
) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.fail_create = RuntimeError("gateway bug")
    before = _sample("backoffice_conversions_total", {"outcome": "creation_failed"})

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.CREATION_FAILED
    assert isinstance(result.error, InvoiceCreationFailed)
    assert result.error.details["cause"] == "RuntimeError"
    assert isinstance(result.error.__cause__, RuntimeError)
    assert spy_store.writes == ["create_invoice"]
    assert (await spy_store.get_quotation("q-1")).status is QuotationStatus.ACCEPTED
    assert _sample("backoffice_conversions_total", {"outcome": "creation_failed"}) == before + 1


@pytest.mark.anyio
async def test_unexpected_read_error_is_reported_as_source_unavailable(
    spy_store: SpyStore,
) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.fail_get = RuntimeError("gateway bug")
    guard = ConversionGuard()

    result = await _use_case(spy_store, guard=guard).execute("q-1")

    assert result.outcome is ConversionOutcome.SOURCE_UNAVAILABLE
    assert isinstance(result.error, DocumentStoreUnavailable)
    assert result.error.details["cause"] == "RuntimeError"
    assert spy_store.writes == []
    assert not guard.in_flight("q-1")


@pytest.mark.anyio
async def test_failed_status_update_reports_partial_conversion(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.fail_update = DocumentStoreUnavailable("timeout")
    before = _sample("backoffice_conversions_total", {"outcome": "partial"})

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.PARTIAL
    assert not result.succeeded
    assert result.invoice_created
    assert isinstance(result.error, PartialConversionWarning)
    assert result.error.invoice == result.invoice
    assert result.invoice is not None
    assert result.error.details["invoice_number"] == result.invoice.number
    assert isinstance(result.error.__cause__, DocumentStoreUnavailable)
    assert spy_store.invoice_count == 1
    assert (await spy_store.get_quotation("q-1")).status is QuotationStatus.ACCEPTED
    assert _sample("backoffice_conversions_total", {"outcome": "partial"}) == before + 1


@pytest.mark.anyio
async def test_concurrent_status_change_before_update_is_partial(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.fail_update = DocumentConflict("status changed")

    result = await _use_case(spy_store).execute("q-1")

    assert result.outcome is ConversionOutcome.PARTIAL
    assert result.error is not None and result.error.details["cause"] == "DOCUMENT_CONFLICT"


@pytest.mark.anyio
async def test_status_write_is_conditional_on_accepted(spy_store: SpyStore) -> None:
    """A quotation moved away from Accepted mid-flight is not overwritten."""
    spy_store.put_quotation(make_quotation())
    spy_store.create_gate = asyncio.Event()
    uc = _use_case(spy_store)

    task = asyncio.create_task(uc.execute("q-1"))
    await spy_store.create_started.wait()
    await spy_store.update_quotation_status("q-1", QuotationStatus.DECLINED)
    spy_store.create_gate.set()
    result = await task

    assert result.outcome is ConversionOutcome.PARTIAL
    assert result.error is not None and result.error.details["cause"] == "DOCUMENT_CONFLICT"
    assert (await spy_store.get_quotation("q-1")).status is QuotationStatus.DECLINED


# --------------------------------------------------------------------------- #
# Invoice numbering collisions
# --------------------------------------------------------------------------- #


@pytest.mark.anyio
async def test_duplicate_invoice_number_is_regenerated_once(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.put_invoice(make_invoice(number="INV-20250102-030405-001"))
    before = _sample("backoffice_invoice_number_collisions_total")

    result = await _use_case(spy_store, rng_values=[1, 2]).execute("q-1")

    assert result.outcome is ConversionOutcome.CONVERTED
    assert result.invoice is not None
    assert result.invoice.number == "INV-20250102-030405-002"
    assert spy_store.writes == ["create_invoice", "create_invoice", "update_quotation_status"]
    assert _sample("backoffice_invoice_number_collisions_total") == before + 1


@pytest.mark.anyio
async def test_repeated_duplicate_numbers_fail_creation(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.put_invoice(make_invoice(number="INV-20250102-030405-001"))

    result = await _use_case(spy_store, rng_values=[1, 1, 1]).execute("q-1")

    assert result.outcome is ConversionOutcome.CREATION_FAILED
    assert result.error is not None and result.error.details["cause"] == "DUPLICATE_NUMBER"
    assert spy_store.writes == ["create_invoice", "create_invoice"]
    assert (await spy_store.get_quotation("q-1")).status is QuotationStatus.ACCEPTED


# --------------------------------------------------------------------------- #
# Concurrency
# --------------------------------------------------------------------------- #


@pytest.mark.anyio
async def test_in_flight_claim_rejects_second_conversion(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    guard = ConversionGuard()

    async with guard.claim("q-1"):
        result = await _use_case(spy_store, guard=guard).execute("q-1")

    assert result.outcome is ConversionOutcome.NOT_ALLOWED
    assert spy_store.calls == []


@pytest.mark.anyio
async def test_concurrent_conversions_create_one_invoice(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    uc = _use_case(spy_store, guard=ConversionGuard())

    results = await asyncio.gather(uc.execute("q-1"), uc.execute("q-1"))

    outcomes = sorted(r.outcome.value for r in results)
    assert outcomes == ["converted", "not_allowed"]
    assert spy_store.invoice_count == 1


@pytest.mark.anyio
async def test_write_phase_completes_after_caller_cancellation(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    spy_store.create_gate = asyncio.Event()
    guard = ConversionGuard()
    uc = _use_case(spy_store, guard=guard)

    task = asyncio.create_task(uc.execute("q-1"))
    await spy_store.create_started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    # The claim outlives the cancelled caller while the write is still running.
    assert guard.in_flight("q-1")
    retry = await uc.execute("q-1")
    assert retry.outcome is ConversionOutcome.NOT_ALLOWED
    assert retry.error is not None
    assert retry.error.details["reason"] == "conversion_in_progress"

    spy_store.create_gate.set()

    async def _settled() -> None:
        while guard.in_flight("q-1"):
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_settled(), timeout=2)
    assert (await spy_store.get_quotation("q-1")).status is QuotationStatus.INVOICED
    assert spy_store.invoice_count == 1
    assert spy_store.writes.count("create_invoice") == 1


@pytest.mark.anyio
async def test_claim_is_released_when_caller_cancels_during_read(spy_store: SpyStore) -> None:
    spy_store.put_quotation(make_quotation())
    guard = ConversionGuard()
    uc = _use_case(spy_store, guard=guard)

    task = asyncio.create_task(uc.execute("q-1"))
    await asyncio.sleep(0)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert not guard.in_flight("q-1")
    assert spy_store.writes == []


def test_constructor_rejects_negative_configuration(spy_store: SpyStore) -> None:
    with pytest.raises(ValueError):
        ConvertQuotationToInvoice(spy_store, due_days=-1)
    with pytest.raises(ValueError):
        ConvertQuotationToInvoice(spy_store, number_retries=-1)
