# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""
Lifecycle and Money Domain Exceptions

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class InvalidTransition(DomainError):
    """A status change is not permitted by the document state machine."""

    code = "INVALID_TRANSITION"


class InvalidMonetaryValue(DomainError, ValueError):
    """A monetary amount, quantity, or tax rate could not be parsed or is negative."""

    code = "INVALID_MONETARY_VALUE"
