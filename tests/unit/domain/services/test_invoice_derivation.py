from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from builders import make_line_item, make_quotation

from backoffice_api.domain.enums.document_status import InvoiceStatus
from backoffice_api.domain.services.invoice_derivation import (
    derive_invoice_draft,
    provenance_note,
)

ISSUE = date(2025, 1, 2)


def test_single_line_quotation_becomes_draft_invoice() -> None:
    q = make_quotation(number="Q-1")
    result = derive_invoice_draft(q, number="INV-1", issue_date=ISSUE)
    draft = result.draft

    assert draft.status is InvoiceStatus.DRAFT
    assert draft.total_amount == Decimal("575.00")
    assert draft.due_date == date(2025, 1, 9)
    assert draft.customer_id == q.customer_id
    assert draft.currency == q.currency
    assert draft.source_quotation_id == q.id
    assert draft.notes is not None and draft.notes.startswith("Converted from Quotation Q-1")
    assert result.line_mismatches == ()
    assert not result.total_mismatch


def test_line_items_are_independent_copies() -> None:
    q = make_quotation()
    draft = derive_invoice_draft(q, number="INV-1", issue_date=ISSUE).draft
    assert len(draft.line_items) == len(q.line_items)
    for original, copy in zip(q.line_items, draft.line_items, strict=True):
        assert copy is not original
        assert copy == original


def test_stored_line_totals_are_recomputed_and_reported() -> None:
    stale = make_line_item(quantity=2, unit_price="100", tax_rate="0.15", line_total="200.00")
    q = make_quotation(line_items=(stale,), total_amount="200.00")
    result = derive_invoice_draft(q, number="INV-1", issue_date=ISSUE)

    assert result.draft.line_items[0].line_total == Decimal("230.00")
    assert result.draft.total_amount == Decimal("230.00")
    assert len(result.line_mismatches) == 1
    mismatch = result.line_mismatches[0]
    assert (mismatch.stored, mismatch.recomputed) == (Decimal("200.00"), Decimal("230.00"))
    assert result.total_mismatch


def test_two_lines_sum_to_document_total() -> None:
    items = (
        make_line_item(quantity=2, unit_price="100"),
        make_line_item(quantity=2, unit_price="100"),
    )
    q = make_quotation(line_items=items)
    result = derive_invoice_draft(q, number="INV-1", issue_date=ISSUE)
    assert result.draft.total_amount == Decimal("460.00")


def test_custom_due_days_and_negative_rejected() -> None:
    q = make_quotation()
    assert derive_invoice_draft(q, number="N", issue_date=ISSUE, due_days=0).draft.due_date == ISSUE
    with pytest.raises(ValueError):
        derive_invoice_draft(q, number="N", issue_date=ISSUE, due_days=-1)


def test_provenance_note_appends_original_notes() -> None:
    assert provenance_note("Q-9", "Net 30") == "Converted from Quotation Q-9. Net 30"
    assert provenance_note("Q-9", None) == "Converted from Quotation Q-9."
