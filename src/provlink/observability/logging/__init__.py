"""Structured logging module for observability.

This module provides structured JSON logging with trace context correlation.
"""

from provlink.observability.logging.manager import LoggerManager, get_logger
from provlink.observability.logging.structured import StructuredFormatter, TextFormatter

__all__ = ["LoggerManager", "StructuredFormatter", "TextFormatter", "get_logger"]
