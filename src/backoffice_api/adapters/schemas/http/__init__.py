# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""HTTP Schemas package (Adapters Layer).

Purpose:
    Public, adapter-facing HTTP schema surface. Re-exports the canonical
    envelopes and resource schemas used by routers and presenters. It does
    not expose BaseHTTPSchema, which stays internal to this package.

Layer:
    adapters/schemas/http
"""

from __future__ import annotations

from backoffice_api.adapters.schemas.http.documents import (
    ConversionHTTP,
    InvoiceHTTP,
    InvoiceStatusChangeHTTP,
    LineItemHTTP,
    QuotationHTTP,
    QuotationStatusChangeHTTP,
)
from backoffice_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    SuccessEnvelope,
    WarningEnvelope,
)

__all__ = [
    "ConversionHTTP",
    "ErrorEnvelope",
    "ErrorObject",
    "InvoiceHTTP",
    "InvoiceStatusChangeHTTP",
    "LineItemHTTP",
    "QuotationHTTP",
    "QuotationStatusChangeHTTP",
    "SuccessEnvelope",
    "WarningEnvelope",
]
