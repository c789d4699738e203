"""Observability package for provlink.

This package provides:
- Structured JSON or text logging with trace correlation
- Prometheus metrics for Provisioning Appliance calls
- OpenTelemetry CLIENT spans around each call

Example:
    >>> from provlink.observability import get_observability
    >>>
    >>> obs = get_observability()
    >>> obs.initialize()
    >>> client = AteClient.from_config(config, metrics=obs.metrics, tracer=obs.tracer)
"""

from provlink.observability.config import (
    LoggingConfig,
    MetricsConfig,
    ObservabilityConfig,
    TracingConfig,
)
from provlink.observability.manager import (
    ObservabilityManager,
    get_observability,
    reset_observability,
)
from provlink.observability.metrics import MetricsCollector
from provlink.observability.tracing import CallTracer

__all__ = [
    "ObservabilityConfig",
    "LoggingConfig",
    "MetricsConfig",
    "TracingConfig",
    "ObservabilityManager",
    "get_observability",
    "reset_observability",
    "MetricsCollector",
    "CallTracer",
]
