# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Document status enumerations.

Values match the labels persisted by the Document Store, so enum members can be
round-tripped through JSON without a mapping table.

Layer: domain/enums
"""
from __future__ import annotations

from enum import Enum


class QuotationStatus(str, Enum):
    """Lifecycle states of a quotation."""

    DRAFT = "Draft"
    SENT = "Sent"
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    EXPIRED = "Expired"
    INVOICED = "Invoiced"


class InvoiceStatus(str, Enum):
    """Lifecycle states of an invoice."""

    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"
