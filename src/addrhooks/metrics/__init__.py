"""Metrics — Prometheus metrics collection and exposure."""

from __future__ import annotations

from addrhooks.metrics.collector import EngineMetrics, MetricsCollector
from addrhooks.metrics.middleware import PrometheusMiddleware

__all__ = ["EngineMetrics", "MetricsCollector", "PrometheusMiddleware"]
