# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Application DTOs for document listing.

Layer:
    application/schemas/dto
"""

from __future__ import annotations

from pydantic import Field

from backoffice_api.application.schemas.dto.base import BaseDTO


class QuotationListQueryDTO(BaseDTO):
    """Filters for the quotation list.

    Attributes:
        search: Case-insensitive substring matched against the quotation
            number and the customer name. Blank means no filter.
        include_invoiced: Include quotations that were already converted.
    """

    search: str | None = Field(default=None, max_length=200)
    include_invoiced: bool = False


class InvoiceListQueryDTO(BaseDTO):
    """Filters for the invoice list.

    Attributes:
        search: Case-insensitive substring matched against the invoice number
            and the customer name.
    """

    search: str | None = Field(default=None, max_length=200)
