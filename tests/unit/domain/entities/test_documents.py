from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

import pytest
from builders import make_invoice, make_line_item, make_quotation

from backoffice_api.domain.entities.line_item import LineItem
from backoffice_api.domain.enums.document_status import QuotationStatus
from backoffice_api.domain.exceptions.lifecycle import InvalidMonetaryValue


def test_line_item_create_computes_tax_inclusive_total() -> None:
    item = LineItem.create(description="Widget", quantity=2, unit_price="100", tax_rate="0.15")
    assert item.line_total == Decimal("230.00")
    assert item.is_consistent


def test_line_item_from_stored_keeps_stored_total() -> None:
    item = make_line_item(quantity=2, unit_price="100", tax_rate="0.15", line_total="200.00")
    assert item.line_total == Decimal("200.00")
    assert item.computed_total == Decimal("230.00")
    assert not item.is_consistent


def test_line_item_recomputed_is_a_new_instance() -> None:
    item = make_line_item(line_total="1.00")
    copy = item.recomputed()
    assert copy is not item
    assert copy.line_total == Decimal("575.00")
    assert item.line_total == Decimal("1.00")


def test_line_item_missing_tax_rate_defaults_to_zero() -> None:
    item = LineItem.from_stored(
        description="x", quantity=1, unit_price="10", tax_rate=None, line_total="10"
    )
    assert item.tax_rate == Decimal("0")


def test_line_item_rejects_negative_quantity() -> None:
    with pytest.raises(InvalidMonetaryValue):
        LineItem.create(description="x", quantity=-1, unit_price="10")


def test_quotation_normalizes_naive_timestamps_and_currency() -> None:
    q = make_quotation(created_at=datetime(2025, 1, 1, 12, 0))
    q2 = replace(q, currency="eur")
    assert q.created_at.tzinfo is not None
    assert q2.currency == "EUR"


def test_quotation_rejects_expiry_before_issue() -> None:
    q = make_quotation()
    with pytest.raises(ValueError):
        replace(q, expiry_date=date(2024, 12, 31))


def test_quotation_computed_total_and_invoiced_flag() -> None:
    items = (
        make_line_item(quantity=2, unit_price="100"),
        make_line_item(quantity=2, unit_price="100"),
    )
    q = make_quotation(line_items=items)
    assert q.computed_total == Decimal("460.00")
    assert not q.is_invoiced
    assert replace(q, status=QuotationStatus.INVOICED).is_invoiced


def test_invoice_rejects_due_before_issue() -> None:
    inv = make_invoice()
    with pytest.raises(ValueError):
        replace(inv, due_date=date(2024, 12, 1))
