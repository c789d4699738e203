"""Metrics collector for recording provisioning call metrics.

This module wraps the Prometheus metrics registry with recording helpers
and optional HTTP exposure for a station's scraper.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from prometheus_client import start_http_server

from provlink.observability.config import MetricsConfig
from provlink.observability.metrics.registry import MetricsRegistry

logger = logging.getLogger(__name__)


class MetricsCollector:
    """High-level metrics collector for provisioning calls.

    Example:
        >>> collector = MetricsCollector(MetricsConfig(enabled=True, port=9464))
        >>> collector.start()
        >>> collector.record_call("EndorseCerts", "OK", 0.12)
        >>> collector.shutdown()
    """

    def __init__(self, config: Optional[MetricsConfig] = None):
        self.config = config or MetricsConfig()
        self.registry = MetricsRegistry()
        self._server = None
        self._thread = None

    @property
    def is_running(self) -> bool:
        """Check if the HTTP endpoint is being served."""
        return self._server is not None

    def start(self) -> None:
        """Expose metrics over HTTP if enabled in the configuration."""
        if not self.config.enabled:
            logger.debug("Metrics endpoint disabled")
            return
        if self._server is not None:
            logger.warning("MetricsCollector already running")
            return

        logger.info(f"Starting metrics server on {self.config.addr}:{self.config.port}")
        self._server, self._thread = start_http_server(
            self.config.port, addr=self.config.addr, registry=self.registry.registry
        )

    def shutdown(self) -> None:
        """Stop the HTTP endpoint."""
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        self._server = None
        self._thread = None
        logger.info("Metrics server stopped")

    def record_call(self, method: str, code: str, duration: float) -> None:
        """Record one completed remote call.

        Args:
            method: Remote procedure name.
            code: gRPC status code name.
            duration: Call duration in seconds.
        """
        self.registry.pa_calls_total.labels(method=method, code=code).inc()
        self.registry.pa_call_duration_seconds.labels(method=method).observe(duration)

    def record_local_rejection(self, method: str) -> None:
        """Record a call rejected before it was sent."""
        self.registry.pa_local_rejections_total.labels(method=method).inc()

    @contextmanager
    def time_call(self, method: str) -> Iterator[None]:
        """Time a block into the call duration histogram."""
        start = time.monotonic()
        try:
            yield
        finally:
            self.registry.pa_call_duration_seconds.labels(method=method).observe(
                time.monotonic() - start
            )

    def get_call_count(self, method: str, code: str) -> float:
        """Get the current call count for a method and status code."""
        value = self.registry.registry.get_sample_value(
            "provlink_pa_calls_total", {"method": method, "code": code}
        )
        return value or 0.0
