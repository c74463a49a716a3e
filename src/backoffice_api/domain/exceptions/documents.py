# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Document Store Domain Exceptions

Purpose:
    Error conditions raised by Document Store gateways (quotations, invoices).
    Transport details (status codes, httpx errors) never leak past these types.

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class DocumentNotFound(DomainError):
    """The requested quotation or invoice does not exist."""

    code = "DOCUMENT_NOT_FOUND"


class DocumentConflict(DomainError):
    """A conditional write lost against a concurrent change."""

    code = "DOCUMENT_CONFLICT"


class DocumentValidationError(DomainError):
    """The store rejected a payload as invalid."""

    code = "DOCUMENT_VALIDATION_ERROR"


class DuplicateDocumentNumber(DocumentValidationError):
    """The store rejected a create because the document number already exists."""

    code = "DUPLICATE_NUMBER"


class DocumentStoreUnavailable(DomainError):
    """The store is unreachable, timed out, or answered with a 5xx."""

    code = "DOCUMENT_STORE_UNAVAILABLE"


class DocumentDeletionRefused(DomainError):
    """Deleting the document would break an integrity rule (e.g. Invoiced quotation)."""

    code = "DOCUMENT_DELETION_REFUSED"
