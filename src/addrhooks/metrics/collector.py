"""Metrics collector — Prometheus counters, gauges, histograms.

- ``addrhooks_transactions_total`` counter-vec (processed, duplicate, failed, dropped)
- ``addrhooks_dispatch_total`` counter-vec (delivered, failed, dropped)
- ``addrhooks_tx_queue_depth`` gauge
- ``addrhooks_seen_purged_total`` counter
- ``addrhooks_cron_histogram``
- ``addrhooks_cron_last_execution_gauge``
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import TYPE_CHECKING

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

if TYPE_CHECKING:
    from collections.abc import Iterator


_PREFIX = "addrhooks"


class MetricsCollector:
    """Low-level Prometheus collector that owns the registry.

    Use :class:`EngineMetrics` for the high-level tracking interface.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._registry

    def gauge(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Gauge:
        """Register and return a Gauge."""
        return Gauge(name, doc, labels, registry=self._registry)

    def histogram(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Histogram:
        """Register and return a Histogram."""
        return Histogram(name, doc, labels, registry=self._registry)

    def counter(self, name: str, doc: str, labels: tuple[str, ...] = ()) -> Counter:
        """Register and return a Counter."""
        return Counter(name, doc, labels, registry=self._registry)


class EngineMetrics:
    """High-level listener and dispatcher metrics."""

    def __init__(self, collector: MetricsCollector | None = None) -> None:
        self._collector = collector or MetricsCollector()

        self._transactions = self._collector.counter(
            f"{_PREFIX}_transactions",
            "Transactions taken off the listener queue, by result",
            ("result",),
        )
        self._dispatch = self._collector.counter(
            f"{_PREFIX}_dispatch",
            "Callback deliveries by terminal outcome",
            ("outcome",),
        )
        self._queue_depth = self._collector.gauge(
            f"{_PREFIX}_tx_queue_depth",
            "Transactions waiting in the listener queue",
        )
        self._purged = self._collector.counter(
            f"{_PREFIX}_seen_purged",
            "Seen-transaction records removed by the reaper",
        )

        # Cron metrics
        self._cron_histogram = self._collector.histogram(
            f"{_PREFIX}_cron_histogram",
            "Duration of cron job executions",
            ("job_name",),
        )
        self._cron_last = self._collector.gauge(
            f"{_PREFIX}_cron_last_execution_gauge",
            "Timestamp of last cron execution",
            ("job_name",),
        )

    @property
    def registry(self) -> CollectorRegistry:
        """Return the underlying Prometheus registry."""
        return self._collector.registry

    def record_transaction(self, result: str) -> None:
        """Count a transaction leaving the listener queue."""
        self._transactions.labels(result=result).inc()

    def record_dispatch(self, outcome: str) -> None:
        """Count a delivery reaching its terminal outcome."""
        self._dispatch.labels(outcome=outcome).inc()

    def set_queue_depth(self, depth: int) -> None:
        """Set the current listener queue depth."""
        self._queue_depth.set(depth)

    def record_purged(self, count: int) -> None:
        """Add to the number of purged seen-transaction records."""
        self._purged.inc(count)

    @contextmanager
    def track_cron(self, job_name: str) -> Iterator[None]:
        """Track the duration of a cron job and record last execution time."""
        start = time.monotonic()
        try:
            yield
        finally:
            self._cron_histogram.labels(job_name=job_name).observe(time.monotonic() - start)
            self._cron_last.labels(job_name=job_name).set(time.time())
