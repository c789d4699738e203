"""Observability manager for centralized observability control.

This module provides a singleton manager that wires logging, metrics and
tracing for provisioning clients in one process.
"""

import logging
import threading
from typing import Optional

from provlink.observability.config import ObservabilityConfig
from provlink.observability.logging.manager import LoggerManager
from provlink.observability.metrics.collector import MetricsCollector
from provlink.observability.tracing import CallTracer
from provlink.pa.service import SERVICE_NAME

# Singleton instance
_observability_manager: Optional["ObservabilityManager"] = None
_lock = threading.Lock()

logger = logging.getLogger(__name__)


class ObservabilityManager:
    """Singleton manager for logging, metrics and tracing.

    Example:
        >>> obs = get_observability()
        >>> obs.initialize(ObservabilityConfig.from_env())
        >>> client = AteClient(stub, metrics=obs.metrics, tracer=obs.tracer)
        >>> ...
        >>> obs.shutdown()
    """

    def __init__(self) -> None:
        self._config: Optional[ObservabilityConfig] = None
        self._initialized = False
        self._metrics: Optional[MetricsCollector] = None
        self._tracer: Optional[CallTracer] = None
        self._logger_manager: Optional[LoggerManager] = None

    def initialize(self, config: Optional[ObservabilityConfig] = None) -> None:
        """Initialize all observability components.

        Args:
            config: Observability configuration. If None, loads from environment.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        if self._initialized:
            logger.warning("ObservabilityManager already initialized")
            return

        self._config = config or ObservabilityConfig.from_env()
        self._config.validate()

        self._logger_manager = LoggerManager(self._config.logging)
        self._logger_manager.configure()

        self._metrics = MetricsCollector(self._config.metrics)
        self._metrics.start()

        self._tracer = CallTracer(self._config.tracing, service=SERVICE_NAME)

        self._initialized = True
        logger.info("Observability initialized")

    def shutdown(self) -> None:
        """Shut down all components. Safe to call when not initialized."""
        if not self._initialized:
            return

        logger.info("Shutting down observability")
        if self._metrics:
            self._metrics.shutdown()
        if self._logger_manager:
            self._logger_manager.shutdown()

        self._metrics = None
        self._tracer = None
        self._logger_manager = None
        self._initialized = False

    def _require(self, component):
        if not self._initialized:
            raise RuntimeError("ObservabilityManager not initialized")
        return component

    @property
    def config(self) -> ObservabilityConfig:
        """Get the active configuration."""
        return self._require(self._config)

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector.

        Raises:
            RuntimeError: If not initialized.
        """
        return self._require(self._metrics)

    @property
    def tracer(self) -> CallTracer:
        """Get call tracer.

        Raises:
            RuntimeError: If not initialized.
        """
        return self._require(self._tracer)

    @property
    def logger(self) -> LoggerManager:
        """Get logger manager.

        Raises:
            RuntimeError: If not initialized.
        """
        return self._require(self._logger_manager)

    @property
    def is_initialized(self) -> bool:
        """Check if manager is initialized."""
        return self._initialized


def get_observability() -> ObservabilityManager:
    """Get the singleton ObservabilityManager instance."""
    global _observability_manager

    if _observability_manager is None:
        with _lock:
            if _observability_manager is None:
                _observability_manager = ObservabilityManager()

    return _observability_manager


def reset_observability() -> None:
    """Shut down and drop the singleton instance (mainly for testing)."""
    global _observability_manager

    with _lock:
        if _observability_manager is not None:
            _observability_manager.shutdown()
        _observability_manager = None
