"""Logger manager for structured logging.

This module provides a LoggerManager class that attaches a JSON or
text handler to the ``provlink`` logger hierarchy.
"""

import logging
import sys
from typing import Optional

from provlink.observability.config import LoggingConfig
from provlink.observability.logging.structured import StructuredFormatter, TextFormatter

ROOT_LOGGER_NAME = "provlink"


class LoggerManager:
    """Manager for provlink loggers with structured output.

    Example:
        >>> config = LoggingConfig(level="DEBUG", format="json")
        >>> manager = LoggerManager(config)
        >>> manager.configure()
        >>> logger = manager.get_logger("ate")
        >>> logger.info("Station ready", extra={"station": "ate-07"})
    """

    def __init__(self, config: LoggingConfig) -> None:
        self.config = config
        self._handler: Optional[logging.Handler] = None
        self._formatter: Optional[logging.Formatter] = None
        self._configured = False

    def configure(self) -> None:
        """Configure the provlink root logger and its handler.

        Should be called once during application initialization.
        Calling it again is a no-op.
        """
        if self._configured:
            return

        if self.config.format == "json":
            self._formatter = StructuredFormatter(
                include_trace_context=self.config.trace_correlation,
            )
        else:
            self._formatter = TextFormatter(
                include_trace_context=self.config.trace_correlation,
            )

        if self.config.output_file:
            self._handler = logging.FileHandler(self.config.output_file)
        else:
            self._handler = logging.StreamHandler(sys.stderr)
        self._handler.setFormatter(self._formatter)

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(self._parse_level(self.config.level))
        root_logger.addHandler(self._handler)
        # Don't duplicate records through the host application's root logger
        root_logger.propagate = False

        self._configured = True

    def shutdown(self) -> None:
        """Remove the handler and restore propagation."""
        if not self._configured:
            return

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if self._handler:
            root_logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
        root_logger.propagate = True

        self._configured = False

    def get_logger(self, name: str) -> logging.Logger:
        """Get a logger for a component, prefixed with 'provlink.'."""
        return get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set log level for a specific component."""
        self.get_logger(name).setLevel(self._parse_level(level))

    def add_extra_field(self, key: str, value: str) -> None:
        """Add a static field to all JSON log entries (e.g. station id)."""
        if isinstance(self._formatter, StructuredFormatter):
            self._formatter.extra_fields[key] = value

    @property
    def is_configured(self) -> bool:
        """Check if the logger manager has been configured."""
        return self._configured

    def _parse_level(self, level: str) -> int:
        return getattr(logging, level.upper(), logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """Get a logger inside the provlink hierarchy.

    Example:
        >>> logger = get_logger("ate")
        >>> logger.name
        'provlink.ate'
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
