# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Line Item Entity

Purpose:
    One priced entry of a quotation or invoice. Each document owns its own
    tuple of line items; conversion builds fresh instances rather than sharing
    them.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from backoffice_api.domain.exceptions.lifecycle import InvalidMonetaryValue
from backoffice_api.domain.value_objects.money import (
    line_total as compute_line_total,
    parse_amount,
    parse_non_negative,
)

from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class LineItem(BaseEntity):
    """Priced line of a commercial document.

    Args:
        description: Free-text description shown on the document.
        quantity: Quantity sold (>= 0, fractional allowed).
        unit_price: Price per unit before tax (>= 0).
        tax_rate: Tax as a fraction, e.g. ``Decimal("0.15")`` (>= 0).
        line_total: Tax-inclusive total as stored on the document.
        product_service_id: Optional catalog product/service reference.

    Raises:
        InvalidMonetaryValue: If quantity, unit price or tax rate is negative.
    """

    description: str
    quantity: Decimal
    unit_price: Decimal
    tax_rate: Decimal
    line_total: Decimal
    product_service_id: str | None = None

    def __post_init__(self) -> None:
        for name in ("quantity", "unit_price", "tax_rate"):
            if getattr(self, name) < 0:
                raise InvalidMonetaryValue(f"{name} must be >= 0", details={"field": name})

    @classmethod
    def create(
        cls,
        *,
        description: str,
        quantity: Any,
        unit_price: Any,
        tax_rate: Any = 0,
        product_service_id: str | None = None,
    ) -> LineItem:
        """Parse raw inputs and compute the line total.

        Returns:
            A new line item whose ``line_total`` follows the tax-included policy.
        """
        qty = parse_non_negative(quantity, field="quantity")
        price = parse_non_negative(unit_price, field="unit_price")
        rate = parse_non_negative(tax_rate, field="tax_rate")
        return cls(
            description=description,
            quantity=qty,
            unit_price=price,
            tax_rate=rate,
            line_total=compute_line_total(qty, price, rate),
            product_service_id=product_service_id,
        )

    @classmethod
    def from_stored(
        cls,
        *,
        description: str,
        quantity: Any,
        unit_price: Any,
        tax_rate: Any,
        line_total: Any,
        product_service_id: str | None = None,
    ) -> LineItem:
        """Rebuild a line item exactly as persisted, keeping its stored total."""
        return cls(
            description=description,
            quantity=parse_non_negative(quantity, field="quantity"),
            unit_price=parse_non_negative(unit_price, field="unit_price"),
            tax_rate=parse_non_negative(tax_rate or 0, field="tax_rate"),
            line_total=parse_amount(line_total, field="line_total"),
            product_service_id=product_service_id,
        )

    @property
    def computed_total(self) -> Decimal:
        """Line total recomputed from quantity, unit price and tax rate."""
        return compute_line_total(self.quantity, self.unit_price, self.tax_rate)

    @property
    def is_consistent(self) -> bool:
        """True when the stored total equals the recomputed total."""
        return self.line_total == self.computed_total

    def recomputed(self) -> LineItem:
        """Return an independent copy whose ``line_total`` is recomputed."""
        return LineItem(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            tax_rate=self.tax_rate,
            line_total=self.computed_total,
            product_service_id=self.product_service_id,
        )
