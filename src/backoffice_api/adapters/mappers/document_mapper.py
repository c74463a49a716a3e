# src/backoffice_api/adapters/mappers/document_mapper.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Document Store wire format ↔ domain entities.

The store speaks snake_case JSON:

* quotations: ``id``, ``quotation_number``, ``customer_id``, ``customer_name``,
  ``quotation_date``, ``expiry_date``, ``currency``, ``total_amount``,
  ``status``, ``notes``, ``created_at``, ``updated_at``, ``line_items[]``;
* invoices: ``invoice_number``, ``invoice_date``, ``due_date`` plus the same
  remaining fields;
* line items: ``product_service_id``, ``description``, ``quantity``,
  ``unit_price``, ``tax_rate``, ``line_total``.

Monetary values may arrive as JSON numbers or strings. They are parsed to
``Decimal`` (never through binary float arithmetic) and written back as
fixed-point decimal strings.

Malformed payloads raise :class:`DocumentValidationError` (``bad_shape``).
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from backoffice_api.domain.entities.invoice import Invoice, InvoiceDraft
from backoffice_api.domain.entities.line_item import LineItem
from backoffice_api.domain.entities.quotation import Quotation
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.exceptions.base import DomainError
from backoffice_api.domain.exceptions.documents import DocumentValidationError
from backoffice_api.domain.value_objects.money import parse_amount

__all__ = [
    "decimal_to_wire",
    "invoice_draft_to_wire",
    "invoice_from_wire",
    "invoice_to_wire",
    "line_item_to_wire",
    "quotation_from_wire",
    "quotation_to_wire",
    "unwrap_list",
    "unwrap_object",
]


def _bad_shape(document: str, field: str, value: Any = None) -> DocumentValidationError:
    shown = None if value is None else str(value)
    return DocumentValidationError(
        "bad_shape",
        details={"document": document, "field": field, "value": shown},
    )


def _require(raw: Mapping[str, Any], key: str, document: str) -> Any:
    value = raw.get(key)
    if value is None or value == "":
        raise _bad_shape(document, key)
    return value


def _parse_date(value: Any, *, document: str, field: str) -> date:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp (date part only)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise _bad_shape(document, field, value)


def _date_field(raw: Mapping[str, Any], key: str, document: str) -> date:
    return _parse_date(_require(raw, key, document), document=document, field=key)


def _optional_date_field(raw: Mapping[str, Any], key: str, document: str) -> date | None:
    value = raw.get(key)
    if value is None or value == "":
        return None
    return _parse_date(value, document=document, field=key)


def _timestamp_field(raw: Mapping[str, Any], key: str, document: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing ``Z`` means UTC."""
    value = _require(raw, key, document)
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    raise _bad_shape(document, key, value)


def _optional_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def decimal_to_wire(value: Decimal) -> str:
    """Render a Decimal in fixed-point notation (no exponent)."""
    return format(value, "f")


# --------------------------------------------------------------------------- #
# Envelopes
# --------------------------------------------------------------------------- #


def unwrap_object(payload: Any, *, document: str) -> Mapping[str, Any]:
    """Return the document object from a bare or ``{"data": {...}}`` body."""
    if isinstance(payload, Mapping):
        inner = payload.get("data")
        if isinstance(inner, Mapping):
            return inner
        return payload
    raise _bad_shape(document, "body", type(payload).__name__)


def unwrap_list(payload: Any, *, document: str) -> list[Mapping[str, Any]]:
    """Return the document list from a bare list or ``{"data": [...]}`` body."""
    rows = payload.get("data") if isinstance(payload, Mapping) else payload
    if not isinstance(rows, list):
        raise _bad_shape(document, "body", type(payload).__name__)
    for row in rows:
        if not isinstance(row, Mapping):
            raise _bad_shape(document, "body[]", type(row).__name__)
    return rows


# --------------------------------------------------------------------------- #
# Line items
# --------------------------------------------------------------------------- #


def _line_items_from_wire(raw: Any, *, document: str) -> tuple[LineItem, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise _bad_shape(document, "line_items", type(raw).__name__)

    items: list[LineItem] = []
    for row in raw:
        if not isinstance(row, Mapping):
            raise _bad_shape(document, "line_items[]", type(row).__name__)
        try:
            items.append(
                LineItem.from_stored(
                    description=str(row.get("description") or ""),
                    quantity=row.get("quantity"),
                    unit_price=row.get("unit_price"),
                    tax_rate=row.get("tax_rate"),
                    line_total=row.get("line_total"),
                    product_service_id=_optional_str(row.get("product_service_id")),
                )
            )
        except DomainError as exc:
            raise DocumentValidationError(
                "bad_shape", details={"document": document, "field": "line_items", **exc.details}
            ) from exc
    return tuple(items)


def line_item_to_wire(item: LineItem) -> dict[str, Any]:
    """Serialize a line item for the store."""
    return {
        "product_service_id": item.product_service_id,
        "description": item.description,
        "quantity": decimal_to_wire(item.quantity),
        "unit_price": decimal_to_wire(item.unit_price),
        "tax_rate": decimal_to_wire(item.tax_rate),
        "line_total": decimal_to_wire(item.line_total),
    }


# --------------------------------------------------------------------------- #
# Quotations
# --------------------------------------------------------------------------- #


def quotation_from_wire(raw: Mapping[str, Any]) -> Quotation:
    """Map a store quotation object to :class:`Quotation`.

    Raises:
        DocumentValidationError: If a required field is missing or malformed.
    """
    doc = "quotation"
    status_raw = _require(raw, "status", doc)
    try:
        status = QuotationStatus(status_raw)
    except ValueError as exc:
        raise _bad_shape(doc, "status", status_raw) from exc

    try:
        return Quotation(
            id=str(_require(raw, "id", doc)),
            number=str(_require(raw, "quotation_number", doc)),
            customer_id=str(_require(raw, "customer_id", doc)),
            issue_date=_date_field(raw, "quotation_date", doc),
            expiry_date=_optional_date_field(raw, "expiry_date", doc),
            currency=str(_require(raw, "currency", doc)),
            status=status,
            line_items=_line_items_from_wire(raw.get("line_items"), document=doc),
            total_amount=parse_amount(_require(raw, "total_amount", doc), field="total_amount"),
            created_at=_timestamp_field(raw, "created_at", doc),
            updated_at=_timestamp_field(raw, "updated_at", doc),
            notes=_optional_str(raw.get("notes")),
            customer_name=_optional_str(raw.get("customer_name")),
        )
    except DocumentValidationError:
        raise
    except (DomainError, ValueError) as exc:
        raise DocumentValidationError(
            "bad_shape", details={"document": doc, "error": str(exc)}
        ) from exc


def quotation_to_wire(quotation: Quotation) -> dict[str, Any]:
    """Serialize a quotation as the full PUT body the store expects."""
    return {
        "id": quotation.id,
        "quotation_number": quotation.number,
        "customer_id": quotation.customer_id,
        "quotation_date": quotation.issue_date.isoformat(),
        "expiry_date": quotation.expiry_date.isoformat() if quotation.expiry_date else None,
        "currency": quotation.currency,
        "total_amount": decimal_to_wire(quotation.total_amount),
        "status": quotation.status.value,
        "notes": quotation.notes,
        "line_items": [line_item_to_wire(item) for item in quotation.line_items],
    }


# --------------------------------------------------------------------------- #
# Invoices
# --------------------------------------------------------------------------- #


def invoice_from_wire(raw: Mapping[str, Any]) -> Invoice:
    """Map a store invoice object to :class:`Invoice`.

    Raises:
        DocumentValidationError: If a required field is missing or malformed.
    """
    doc = "invoice"
    status_raw = _require(raw, "status", doc)
    try:
        status = InvoiceStatus(status_raw)
    except ValueError as exc:
        raise _bad_shape(doc, "status", status_raw) from exc

    try:
        return Invoice(
            id=str(_require(raw, "id", doc)),
            number=str(_require(raw, "invoice_number", doc)),
            customer_id=str(_require(raw, "customer_id", doc)),
            issue_date=_date_field(raw, "invoice_date", doc),
            due_date=_date_field(raw, "due_date", doc),
            currency=str(_require(raw, "currency", doc)),
            status=status,
            line_items=_line_items_from_wire(raw.get("line_items"), document=doc),
            total_amount=parse_amount(_require(raw, "total_amount", doc), field="total_amount"),
            created_at=_timestamp_field(raw, "created_at", doc),
            updated_at=_timestamp_field(raw, "updated_at", doc),
            notes=_optional_str(raw.get("notes")),
            customer_name=_optional_str(raw.get("customer_name")),
        )
    except DocumentValidationError:
        raise
    except (DomainError, ValueError) as exc:
        raise DocumentValidationError(
            "bad_shape", details={"document": doc, "error": str(exc)}
        ) from exc


def invoice_draft_to_wire(draft: InvoiceDraft) -> dict[str, Any]:
    """Serialize an invoice draft as the POST body for ``/invoices``."""
    body: dict[str, Any] = {
        "invoice_number": draft.number,
        "customer_id": draft.customer_id,
        "invoice_date": draft.issue_date.isoformat(),
        "due_date": draft.due_date.isoformat(),
        "currency": draft.currency,
        "total_amount": decimal_to_wire(draft.total_amount),
        "status": draft.status.value,
        "notes": draft.notes,
        "line_items": [line_item_to_wire(item) for item in draft.line_items],
    }
    if draft.source_quotation_id is not None:
        body["source_quotation_id"] = draft.source_quotation_id
    return body


def invoice_to_wire(invoice: Invoice) -> dict[str, Any]:
    """Serialize an invoice as the full PUT body the store expects."""
    return {
        "id": invoice.id,
        "invoice_number": invoice.number,
        "customer_id": invoice.customer_id,
        "invoice_date": invoice.issue_date.isoformat(),
        "due_date": invoice.due_date.isoformat(),
        "currency": invoice.currency,
        "total_amount": decimal_to_wire(invoice.total_amount),
        "status": invoice.status.value,
        "notes": invoice.notes,
        "line_items": [line_item_to_wire(item) for item in invoice.line_items],
    }
