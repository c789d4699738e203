"""Metrics registry for Prometheus metrics definitions.

This module defines the Prometheus metrics recorded for calls to the
Provisioning Appliance.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram


class MetricsRegistry:
    """Registry of Prometheus metrics for provisioning calls.

    Example:
        >>> registry = MetricsRegistry()
        >>> registry.pa_calls_total.labels(
        ...     method="CreateKeyAndCert",
        ...     code="OK",
        ... ).inc()
        >>> registry.pa_call_duration_seconds.labels(
        ...     method="CreateKeyAndCert"
        ... ).observe(0.15)
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        """Initialize all Prometheus metrics.

        Args:
            registry: Prometheus collector registry. A private registry is
                created if None, so several clients never collide.
        """
        self.registry = registry or CollectorRegistry()

        self.pa_calls_total = Counter(
            name="provlink_pa_calls_total",
            documentation="Total number of calls sent to the Provisioning Appliance",
            labelnames=["method", "code"],
            registry=self.registry,
        )

        self.pa_call_duration_seconds = Histogram(
            name="provlink_pa_call_duration_seconds",
            documentation="Provisioning Appliance call duration in seconds",
            labelnames=["method"],
            buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
            registry=self.registry,
        )

        self.pa_local_rejections_total = Counter(
            name="provlink_pa_local_rejections_total",
            documentation="Total number of calls rejected by the client before sending",
            labelnames=["method"],
            registry=self.registry,
        )
