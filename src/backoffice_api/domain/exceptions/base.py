# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Base Domain Exceptions.

Summary:
    Canonical base class for domain/application exceptions. Every subclass
    carries a stable ``code`` so adapters can map it deterministically to an
    HTTP status or CLI exit code.

Layer:
    domain/exceptions
"""
from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for all domain/application exceptions."""

    code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message or self.code)
        self.message: str = message or self.code
        self.details: dict[str, Any] = details or {}

    def as_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly view of the error (code, message, details)."""
        return {"code": self.code, "message": self.message, "details": dict(self.details)}
