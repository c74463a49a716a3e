# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Invoice numbering (Domain Layer).

Purpose:
    Produce sortable, collision-resistant invoice numbers without a store-side
    sequence counter.

Format:
    ``INV-{YYYYMMDD}-{HHMMSS}-{NNN}`` where ``NNN`` is a zero-padded random
    integer in ``[0, 999]``.

Design:
    * :func:`format_invoice_number` is a pure function of (time, random source).
    * :class:`InvoiceNumberGenerator` binds an injectable clock and RNG so tests
      can force collisions deterministically.
    * Collisions are possible within the same second (1 in 1000); callers treat
      a duplicate-number rejection from the store as retryable.

Layer:
    domain/services
"""

from __future__ import annotations

import random
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Final, Protocol

INVOICE_NUMBER_PREFIX: Final[str] = "INV"
_SUFFIX_UPPER_BOUND: Final[int] = 999


class RandomSource(Protocol):
    """Subset of :class:`random.Random` used for the numeric suffix."""

    def randint(self, a: int, b: int) -> int:  # pragma: no cover - protocol
        """Return a random integer N such that ``a <= N <= b``."""
        ...


def format_invoice_number(
    now: datetime,
    rng: RandomSource,
    *,
    prefix: str = INVOICE_NUMBER_PREFIX,
) -> str:
    """Format an invoice number from a timestamp and a random source.

    Args:
        now: Timestamp to encode (used as-is; callers choose the timezone).
        rng: Random source providing ``randint``.
        prefix: Number prefix.

    Returns:
        For example ``"INV-20250102-030405-007"``.
    """
    suffix = rng.randint(0, _SUFFIX_UPPER_BOUND)
    return f"{prefix}-{now:%Y%m%d}-{now:%H%M%S}-{suffix:03d}"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class InvoiceNumberGenerator:
    """Invoice number factory with injectable clock and randomness.

    Args:
        clock: Zero-arg callable returning the current time.
        rng: Random source; defaults to a fresh :class:`random.Random`.
        prefix: Number prefix.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utc_now,
        rng: RandomSource | None = None,
        *,
        prefix: str = INVOICE_NUMBER_PREFIX,
    ) -> None:
        self._clock = clock
        self._rng: RandomSource = rng or random.Random()  # noqa: S311
        self._prefix = prefix

    def next_number(self) -> str:
        """Return a freshly minted invoice number."""
        return format_invoice_number(self._clock(), self._rng, prefix=self._prefix)
