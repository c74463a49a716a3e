# tests/builders.py
"""Entity builders shared by unit and integration tests."""
from __future__ import annotations

from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from backoffice_api.domain.entities.invoice import Invoice
from backoffice_api.domain.entities.line_item import LineItem
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus

FIXED_NOW = datetime(2025, 1, 2, 3, 4, 5, tzinfo=UTC)


def make_line_item(
    *,
    description: str = "Consulting",
    quantity: Any = 1,
    unit_price: Any = "500",
    tax_rate: Any = "0.15",
    line_total: Any = None,
) -> LineItem:
    """Build a line item; ``line_total`` overrides the computed total when given."""
    item = LineItem.create(
        description=description,
        quantity=quantity,
        unit_price=unit_price,
        tax_rate=tax_rate,
    )
    if line_total is None:
        return item
    return LineItem.from_stored(
        description=description,
        quantity=quantity,
        unit_price=unit_price,
        tax_rate=tax_rate,
        line_total=line_total,
    )


def make_quotation(
    *,
    id: str = "q-1",
    number: str = "Q-1",
    status: QuotationStatus = QuotationStatus.ACCEPTED,
    line_items: tuple[LineItem, ...] | None = None,
    total_amount: Any = None,
    customer_id: str = "c-1",
    customer_name: str | None = "Acme Corp",
    notes: str | None = None,
    created_at: datetime = FIXED_NOW,
) -> Quotation:
    items = (make_line_item(),) if line_items is None else line_items
    total = (
        Decimal(str(total_amount))
        if total_amount is not None
        else sum((i.line_total for i in items), Decimal("0.00"))
    )
    return Quotation(
        id=id,
        number=number,
        customer_id=customer_id,
        customer_name=customer_name,
        issue_date=date(2025, 1, 1),
        expiry_date=date(2025, 1, 31),
        currency="USD",
        status=status,
        line_items=items,
        total_amount=total,
        notes=notes,
        created_at=created_at,
        updated_at=created_at,
    )


def make_invoice(
    *,
    id: str = "inv-100",
    number: str = "INV-20250101-000000-001",
    status: InvoiceStatus = InvoiceStatus.DRAFT,
    customer_name: str | None = "Acme Corp",
    created_at: datetime = FIXED_NOW,
) -> Invoice:
    item = make_line_item()
    return Invoice(
        id=id,
        number=number,
        customer_id="c-1",
        customer_name=customer_name,
        issue_date=date(2025, 1, 1),
        due_date=date(2025, 1, 8),
        currency="USD",
        status=status,
        line_items=(item,),
        total_amount=item.line_total,
        created_at=created_at,
        updated_at=created_at,
    )

