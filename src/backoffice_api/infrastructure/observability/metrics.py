# src/backoffice_api/infrastructure/observability/metrics.py
# Copyright (c) Backoffice.
# SPDX-License-Identifier: MIT
"""Prometheus metrics for the backoffice service (registry-aware).

Exports
-------
Collectors (names are part of the public contract):

* ``backoffice_conversions_total`` (Counter, label ``outcome``)
* ``backoffice_document_store_latency_seconds`` (Histogram, labels ``operation``, ``outcome``)
* ``backoffice_line_total_mismatches_total`` (Counter)
* ``backoffice_invoice_number_collisions_total`` (Counter)

Helpers:

* :func:`observe_document_store_request` – context manager for one store call.
* ``get_*`` accessors returning the underlying collector.

All collectors are looked up or registered against the *current*
:data:`prometheus_client.REGISTRY` on every access, so tests that swap the
default registry and module reloads never hit duplicate registration errors.
"""

from __future__ import annotations

import threading
from collections.abc import Generator, Sequence
from contextlib import contextmanager, suppress
from dataclasses import dataclass, field
from time import perf_counter
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry

from backoffice_api.infrastructure.logging.logger import get_json_logger

_log = get_json_logger(__name__)

_BUCKETS: Final[tuple[float, ...]] = (
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
    0.250,
    0.500,
    1.000,
    2.500,
    5.000,
    10.000,
)

_lock = threading.RLock()


def _lookup(registry: CollectorRegistry, name: str) -> object | None:
    """Return the collector registered under ``name``, if any."""
    mapping = getattr(registry, "_names_to_collectors", {})  # internal but stable
    return mapping.get(name)


def _get_or_create_histogram(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
    *,
    buckets: tuple[float, ...] = _BUCKETS,
) -> Histogram:
    """Return a histogram bound to the current default registry.

    Args:
        name: Metric name.
        doc: Human-readable metric description.
        labelnames: Optional label names.
        buckets: Histogram buckets in seconds.

    Returns:
        A :class:`Histogram` bound to :data:`prom.REGISTRY`.
    """
    registry: CollectorRegistry = prom.REGISTRY
    with _lock:
        existing = _lookup(registry, name)
        if isinstance(existing, Histogram):
            return existing

        labels = tuple(labelnames) if labelnames is not None else ()
        try:
            return Histogram(name, doc, labels, buckets=buckets, registry=registry)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup(registry, name)
                if isinstance(again, Histogram):
                    return again
            _log.exception("metrics.register_failed", extra={"metric": name})
            raise


def _get_or_create_counter(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Counter:
    """Return a counter bound to the current default registry.

    Mirrors :func:`_get_or_create_histogram`. ``name`` includes the ``_total``
    suffix, which is also a key in the registry's name mapping.
    """
    registry: CollectorRegistry = prom.REGISTRY
    with _lock:
        existing = _lookup(registry, name)
        if isinstance(existing, Counter):
            return existing

        labels = tuple(labelnames) if labelnames is not None else ()
        try:
            return Counter(name, doc, labels, registry=registry)
        except ValueError as exc:
            if "Duplicated timeseries" in str(exc):
                again = _lookup(registry, name)
                if isinstance(again, Counter):
                    return again
            _log.exception("metrics.register_failed", extra={"metric": name})
            raise


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


def get_conversions_total() -> Counter:
    """Return the conversion attempts counter.

    Labels:
        outcome: Lower-case :class:`ConversionOutcome` value
            (``converted``, ``not_allowed``, ``partial``, ...).
    """
    return _get_or_create_counter(
        "backoffice_conversions_total",
        "Quotation to invoice conversion attempts by outcome.",
        labelnames=("outcome",),
    )


def get_document_store_latency_seconds() -> Histogram:
    """Return the Document Store call latency histogram.

    Labels:
        operation: Logical operation (``get_quotation``, ``create_invoice``, ...).
        outcome: ``success`` or ``error``.
    """
    return _get_or_create_histogram(
        "backoffice_document_store_latency_seconds",
        "Latency of Document Store calls (seconds).",
        labelnames=("operation", "outcome"),
    )


def get_line_total_mismatches_total() -> Counter:
    """Return the counter of line totals corrected during conversion."""
    return _get_or_create_counter(
        "backoffice_line_total_mismatches_total",
        "Quotation line items whose stored total disagreed with the recomputed one.",
    )


def get_invoice_number_collisions_total() -> Counter:
    """Return the counter of duplicate invoice numbers rejected by the store."""
    return _get_or_create_counter(
        "backoffice_invoice_number_collisions_total",
        "Invoice creation attempts rejected because the number already existed.",
    )


def inc_conversion(outcome: str) -> None:
    """Increment ``backoffice_conversions_total`` for ``outcome``."""
    with suppress(Exception):
        get_conversions_total().labels(outcome=outcome).inc()


# ---------------------------------------------------------------------------
# Observation context manager
# ---------------------------------------------------------------------------


@dataclass
class StoreObservation:
    """State captured while observing a Document Store call.

    Attributes:
        operation: Logical operation name (for labelling).
        start: Monotonic start time in seconds.
        outcome: ``"success"`` or ``"error"``.
    """

    operation: str
    start: float = field(default_factory=perf_counter)
    outcome: str = "success"

    def mark_error(self) -> None:
        """Mark the call as failed."""
        self.outcome = "error"


@contextmanager
def observe_document_store_request(*, operation: str) -> Generator[StoreObservation, None, None]:
    """Record one latency sample for a Document Store call.

    Exceptions escaping the block mark the sample as ``error`` and are re-raised.

    Args:
        operation: Logical operation name.

    Yields:
        A mutable :class:`StoreObservation`.
    """
    obs = StoreObservation(operation=operation)
    try:
        yield obs
    except BaseException:
        obs.mark_error()
        raise
    finally:
        elapsed = perf_counter() - obs.start
        with suppress(Exception):
            get_document_store_latency_seconds().labels(
                operation=obs.operation,
                outcome=obs.outcome,
            ).observe(elapsed)
