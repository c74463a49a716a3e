# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Money arithmetic (Domain Layer).

Purpose:
    Deterministic fixed-point arithmetic for quotation and invoice amounts so
    that copying a document never introduces binary floating point drift.

Design:
    - Every amount is a :class:`decimal.Decimal`. Floats are accepted at the
      edge but are converted through ``str()`` so ``0.1`` stays ``0.1``.
    - ``round2`` is ROUND_HALF_UP to two decimal places.
    - Tax is included in the line total; ``tax_rate`` is kept for display:
      ``line_total = round2(quantity * unit_price * (1 + tax_rate))``.
    - Document totals are the sum of *rounded* line totals, accumulated in
      ``Decimal``.

Layer:
    domain/value_objects
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Final

from backoffice_api.domain.exceptions.lifecycle import InvalidMonetaryValue

__all__ = [
    "CENT",
    "ZERO",
    "document_total",
    "line_total",
    "parse_amount",
    "parse_decimal",
    "parse_non_negative",
    "round2",
]

CENT: Final[Decimal] = Decimal("0.01")
ZERO: Final[Decimal] = Decimal("0.00")


def parse_decimal(value: Any, *, field: str = "amount") -> Decimal:
    """Parse a JSON-ish scalar into a finite Decimal.

    Args:
        value: ``Decimal``, ``int``, ``float``, or numeric ``str``.
        field: Field name reported in error details.

    Returns:
        The parsed value (not rounded).

    Raises:
        InvalidMonetaryValue: For ``None``, booleans, non-numeric text, NaN or infinity.
    """
    if value is None or isinstance(value, bool):
        raise InvalidMonetaryValue(f"{field} is required", details={"field": field})

    if isinstance(value, Decimal):
        parsed = value
    elif isinstance(value, int):
        parsed = Decimal(value)
    elif isinstance(value, float | str):
        text = str(value).strip()
        try:
            parsed = Decimal(text)
        except InvalidOperation as exc:
            raise InvalidMonetaryValue(
                f"{field} is not numeric", details={"field": field, "value": text}
            ) from exc
    else:
        raise InvalidMonetaryValue(
            f"{field} has unsupported type", details={"field": field, "type": type(value).__name__}
        )

    if not parsed.is_finite():
        raise InvalidMonetaryValue(
            f"{field} must be finite", details={"field": field, "value": str(parsed)}
        )
    return parsed


def parse_non_negative(value: Any, *, field: str) -> Decimal:
    """Parse a quantity, unit price, or tax rate and reject negatives."""
    parsed = parse_decimal(value, field=field)
    if parsed < 0:
        raise InvalidMonetaryValue(
            f"{field} must be >= 0", details={"field": field, "value": str(parsed)}
        )
    return parsed


def round2(value: Decimal) -> Decimal:
    """Round half-up to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_amount(value: Any, *, field: str = "amount") -> Decimal:
    """Parse a monetary amount and normalise it to cents (ROUND_HALF_UP)."""
    return round2(parse_decimal(value, field=field))


def line_total(quantity: Decimal, unit_price: Decimal, tax_rate: Decimal) -> Decimal:
    """Return the tax-inclusive, cent-rounded total of one line."""
    return round2(quantity * unit_price * (Decimal(1) + tax_rate))


def document_total(line_totals: Iterable[Decimal]) -> Decimal:
    """Sum already-rounded line totals in fixed point.

    Args:
        line_totals: Per-line totals, each produced by :func:`line_total`.

    Returns:
        The document total, quantized to cents (``0.00`` for no lines).
    """
    total = ZERO
    for amount in line_totals:
        total += amount
    return round2(total)
