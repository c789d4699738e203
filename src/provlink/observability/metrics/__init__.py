"""Prometheus metrics for provisioning calls."""

from provlink.observability.metrics.collector import MetricsCollector
from provlink.observability.metrics.registry import MetricsRegistry

__all__ = ["MetricsCollector", "MetricsRegistry"]
