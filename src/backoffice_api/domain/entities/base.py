# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Base Entity (Domain Layer).

Purpose:
    Mixin for immutable domain entities. Provides frozen dataclass semantics,
    an invariant hook, and a helper for coercing naive timestamps to UTC.

Layer:
    domain/entities
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as a timezone-aware UTC timestamp.

    Naive timestamps from the Document Store are interpreted as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass(frozen=True, slots=True)
class BaseEntity:
    """Base mixin for domain entities.

    Concrete entities subclass this mixin, declare their own fields and
    override :meth:`__post_init__` to enforce invariants. Mutation happens only
    through :func:`dataclasses.replace`, which re-runs the invariant hook.
    """

    def __post_init__(self) -> None:  # noqa: D401
        """Hook for subclasses to extend with invariant checks."""
        return
