# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Document status state machines (Domain Layer).

Purpose:
    Declare the legal status transitions for quotations and invoices and apply
    them to immutable entities.

Transitions:
    Quotation:
        Draft    → Sent
        Sent     → Accepted | Declined | Expired
        Accepted → Invoiced
        Declined, Expired, Invoiced are terminal.
    Invoice:
        Draft    → Sent
        Sent     → Paid | Overdue
        Overdue  → Paid
        Paid is terminal.

Design:
    * Pure and deterministic: the caller supplies the timestamp.
    * ``transition`` changes only ``status`` and ``updated_at``.
    * Business preconditions (e.g. "only Accepted quotations convert") are not
      expressed here; they live in the conversion guard so that callers can
      tell a precondition failure from a state machine violation.

Layer:
    domain/services
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Generic, Protocol, TypeVar

from backoffice_api.domain.entities.base import ensure_utc
from backoffice_api.domain.enums.document_status import InvoiceStatus, QuotationStatus
from backoffice_api.domain.exceptions.lifecycle import InvalidTransition

S = TypeVar("S", bound=Enum)


class _HasStatus(Protocol[S]):
    status: S
    updated_at: datetime


D = TypeVar("D", bound=_HasStatus)  # type: ignore[type-arg]


class StatusMachine(Generic[S]):
    """Transition table for one document type.

    Args:
        name: Document type label used in error details (e.g. ``"quotation"``).
        transitions: Mapping of each state to the set of legal targets. States
            missing from the mapping are treated as terminal.
    """

    def __init__(self, name: str, transitions: Mapping[S, frozenset[S]]) -> None:
        self._name = name
        self._transitions: dict[S, frozenset[S]] = dict(transitions)

    @property
    def name(self) -> str:
        """Document type label."""
        return self._name

    def allowed_targets(self, current: S) -> frozenset[S]:
        """Return the states reachable in one step from ``current``."""
        return self._transitions.get(current, frozenset())

    def is_terminal(self, current: S) -> bool:
        """True when ``current`` has no outgoing transitions."""
        return not self.allowed_targets(current)

    def can_transition(self, current: S, target: S) -> bool:
        """Return True if ``current → target`` is a legal transition."""
        return target in self.allowed_targets(current)

    def ensure_transition(self, current: S, target: S) -> None:
        """Raise :class:`InvalidTransition` unless ``current → target`` is legal."""
        if not self.can_transition(current, target):
            raise InvalidTransition(
                f"{self._name} cannot move from {current.value} to {target.value}",
                details={
                    "document": self._name,
                    "current": current.value,
                    "target": target.value,
                    "allowed": sorted(s.value for s in self.allowed_targets(current)),
                },
            )

    def transition(self, doc: D, target: S, *, at: datetime) -> D:
        """Return a copy of ``doc`` moved to ``target``.

        Args:
            doc: Immutable entity with ``status`` and ``updated_at`` fields.
            target: Desired status.
            at: Timestamp recorded as the new ``updated_at``.

        Returns:
            A new entity; the input is left untouched.

        Raises:
            InvalidTransition: If the transition is not legal.
        """
        self.ensure_transition(doc.status, target)
        return replace(doc, status=target, updated_at=ensure_utc(at))  # type: ignore[type-var]


QUOTATION_STATUS_MACHINE: StatusMachine[QuotationStatus] = StatusMachine(
    "quotation",
    {
        QuotationStatus.DRAFT: frozenset({QuotationStatus.SENT}),
        QuotationStatus.SENT: frozenset(
            {QuotationStatus.ACCEPTED, QuotationStatus.DECLINED, QuotationStatus.EXPIRED}
        ),
        QuotationStatus.ACCEPTED: frozenset({QuotationStatus.INVOICED}),
    },
)

INVOICE_STATUS_MACHINE: StatusMachine[InvoiceStatus] = StatusMachine(
    "invoice",
    {
        InvoiceStatus.DRAFT: frozenset({InvoiceStatus.SENT}),
        InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID, InvoiceStatus.OVERDUE}),
        InvoiceStatus.OVERDUE: frozenset({InvoiceStatus.PAID}),
    },
)
