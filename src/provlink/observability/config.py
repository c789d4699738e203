"""Observability configuration module.

This module provides configuration for logging, metrics and tracing
of provisioning calls.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from provlink.exceptions import ConfigurationError


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class MetricsConfig:
    """Configuration for Prometheus metrics."""

    enabled: bool = False
    port: int = 9464
    addr: str = "0.0.0.0"

    @classmethod
    def from_env(cls) -> "MetricsConfig":
        """Create configuration from environment variables."""
        return cls(
            enabled=_env_bool("PROVLINK_METRICS_ENABLED", "false"),
            port=int(os.getenv("PROVLINK_METRICS_PORT", "9464")),
            addr=os.getenv("PROVLINK_METRICS_ADDR", "0.0.0.0"),
        )


@dataclass
class TracingConfig:
    """Configuration for OpenTelemetry spans around provisioning calls.

    Only span creation is configured here. The host application owns the
    OpenTelemetry SDK and exporter setup.
    """

    enabled: bool = True
    tracer_name: str = "provlink"

    @classmethod
    def from_env(cls) -> "TracingConfig":
        """Create configuration from environment variables."""
        return cls(
            enabled=_env_bool("PROVLINK_TRACING_ENABLED", "true"),
            tracer_name=os.getenv("PROVLINK_TRACER_NAME", "provlink"),
        )


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    level: str = "INFO"
    format: str = "text"  # or "json"
    trace_correlation: bool = True
    output_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create configuration from environment variables."""
        return cls(
            level=os.getenv("PROVLINK_LOG_LEVEL", "INFO").upper(),
            format=os.getenv("PROVLINK_LOG_FORMAT", "text").lower(),
            trace_correlation=_env_bool("PROVLINK_LOG_TRACE_CORRELATION", "true"),
            output_file=os.getenv("PROVLINK_LOG_FILE"),
        )


@dataclass
class ObservabilityConfig:
    """Observability configuration for logging, metrics and tracing.

    Example:
        >>> config = ObservabilityConfig.from_env()
        >>> config = ObservabilityConfig(
        ...     metrics=MetricsConfig(enabled=True, port=9464),
        ...     logging=LoggingConfig(level="DEBUG", format="json"),
        ... )
        >>> config.validate()
    """

    metrics: MetricsConfig = field(default_factory=MetricsConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> "ObservabilityConfig":
        """Create complete configuration from environment variables.

        Environment Variables:
            Metrics:
                PROVLINK_METRICS_ENABLED: Expose metrics over HTTP (default: false)
                PROVLINK_METRICS_PORT: Metrics HTTP port (default: 9464)
                PROVLINK_METRICS_ADDR: Metrics bind address (default: 0.0.0.0)

            Tracing:
                PROVLINK_TRACING_ENABLED: Create spans per call (default: true)
                PROVLINK_TRACER_NAME: Instrumentation name (default: provlink)

            Logging:
                PROVLINK_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
                PROVLINK_LOG_FORMAT: json or text (default: text)
                PROVLINK_LOG_TRACE_CORRELATION: Include trace IDs (default: true)
                PROVLINK_LOG_FILE: Log file path (optional, defaults to stderr)

        Returns:
            Complete ObservabilityConfig with all sub-configurations.
        """
        return cls(
            metrics=MetricsConfig.from_env(),
            tracing=TracingConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ObservabilityConfig":
        """Create configuration from a dictionary (e.g. a YAML section).

        Missing sections and keys keep their defaults.
        """
        try:
            return cls(
                metrics=MetricsConfig(**data.get("metrics", {})),
                tracing=TracingConfig(**data.get("tracing", {})),
                logging=LoggingConfig(**data.get("logging", {})),
            )
        except TypeError as e:
            raise ConfigurationError(str(e), "observability") from e

    def validate(self) -> None:
        """Validate configuration values.

        Raises:
            ConfigurationError: If configuration is invalid.
        """
        if self.metrics.enabled and not (1 <= self.metrics.port <= 65535):
            raise ConfigurationError(
                f"Invalid metrics port: {self.metrics.port}", "metrics.port"
            )

        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if self.logging.level.upper() not in valid_levels:
            raise ConfigurationError(
                f"Invalid log level: {self.logging.level}. Must be one of {valid_levels}",
                "logging.level",
            )
        if self.logging.format not in ("json", "text"):
            raise ConfigurationError(
                f"Invalid log format: {self.logging.format}. Must be 'json' or 'text'",
                "logging.format",
            )
