"""Tests for the Prometheus metrics collectors."""

from __future__ import annotations

from prometheus_client import CollectorRegistry

from addrhooks.metrics.collector import EngineMetrics, MetricsCollector


def _value(metrics: EngineMetrics, name: str, labels: dict[str, str] | None = None) -> float:
    value = metrics.registry.get_sample_value(name, labels or {})
    return 0.0 if value is None else value


class TestMetricsCollector:
    def test_uses_given_registry(self) -> None:
        registry = CollectorRegistry()
        assert MetricsCollector(registry).registry is registry

    def test_separate_instances_do_not_clash(self) -> None:
        # Each EngineMetrics owns its registry, so names can repeat.
        EngineMetrics()
        EngineMetrics()


class TestEngineMetrics:
    def test_record_transaction(self) -> None:
        m = EngineMetrics()
        m.record_transaction("processed")
        m.record_transaction("processed")
        m.record_transaction("duplicate")
        assert _value(m, "addrhooks_transactions_total", {"result": "processed"}) == 2
        assert _value(m, "addrhooks_transactions_total", {"result": "duplicate"}) == 1

    def test_record_dispatch(self) -> None:
        m = EngineMetrics()
        m.record_dispatch("delivered")
        assert _value(m, "addrhooks_dispatch_total", {"outcome": "delivered"}) == 1

    def test_queue_depth(self) -> None:
        m = EngineMetrics()
        m.set_queue_depth(7)
        assert _value(m, "addrhooks_tx_queue_depth") == 7

    def test_record_purged(self) -> None:
        m = EngineMetrics()
        m.record_purged(3)
        m.record_purged(0)
        assert _value(m, "addrhooks_seen_purged_total") == 3

    def test_track_cron(self) -> None:
        m = EngineMetrics()
        with m.track_cron("seen_tx_reaper"):
            pass
        labels = {"job_name": "seen_tx_reaper"}
        assert _value(m, "addrhooks_cron_histogram_count", labels) == 1
        assert _value(m, "addrhooks_cron_last_execution_gauge", labels) > 0
