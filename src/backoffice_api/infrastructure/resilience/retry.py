# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Async retry with jittered exponential backoff.

Used by the Document Store transport for idempotent reads only. Writes are
never retried at this layer: a repeated POST could mint a second invoice.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from backoffice_api.infrastructure.logging.logger import get_json_logger

T = TypeVar("T")

logger = get_json_logger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Configuration for retry attempts."""

    total: int  # retries after the first attempt
    base: float  # base backoff seconds
    cap: float  # max backoff seconds
    jitter: bool = True  # full jitter

    def backoff(self, attempt: int) -> float:
        """Return the sleep before retry number ``attempt`` (0-based)."""
        delay = min(self.cap, self.base * (2**attempt))
        if self.jitter:
            delay = random.uniform(0, delay)  # noqa: S311
        return delay


NO_RETRY = RetryPolicy(total=0, base=0.0, cap=0.0, jitter=False)


async def retry_async(
    fn: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    retry_on: Callable[[Exception], bool],
    op: str = "call",
) -> T:
    """Await ``fn`` until it succeeds or the retry budget is spent.

    Args:
        fn: Zero-arg coroutine factory.
        policy: Retry budget and backoff.
        retry_on: Predicate selecting retryable exceptions.
        op: Operation label for logs.

    Returns:
        The first successful result of ``fn``.

    Raises:
        Exception: The last exception once retries are exhausted, or the first
            non-retryable one.
    """
    attempt = 0
    while True:
        try:
            return await fn()
        except Exception as exc:  # noqa: BLE001
            if attempt >= policy.total or not retry_on(exc):
                raise
            delay = policy.backoff(attempt)
            logger.warning(
                "retry.scheduled",
                extra={
                    "op": op,
                    "attempt": attempt + 1,
                    "max_retries": policy.total,
                    "delay_s": round(delay, 3),
                    "error": type(exc).__name__,
                },
            )
        await asyncio.sleep(delay)
        attempt += 1
