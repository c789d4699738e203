"""Log formatters with trace context.

This module provides a JSON formatter and a text formatter for provlink
log records. Both add the OpenTelemetry trace context of the current
span, so log lines of a provisioning call can be joined with its span.

Extra fields carrying device secrets are redacted before output.
"""

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.trace import INVALID_SPAN_ID, INVALID_TRACE_ID

# Extra fields that must never reach a log sink.
REDACTED_FIELDS = frozenset(
    {"serial", "serial_number", "wrapped_key", "iv", "keys", "signature", "blob", "tbs"}
)
REDACTED = "<redacted>"


def _trace_context() -> Optional[Dict[str, str]]:
    ctx = trace.get_current_span().get_span_context()
    if ctx.trace_id == INVALID_TRACE_ID or ctx.span_id == INVALID_SPAN_ID:
        return None
    return {
        "trace_id": format(ctx.trace_id, "032x"),
        "span_id": format(ctx.span_id, "016x"),
    }


class StructuredFormatter(logging.Formatter):
    """JSON log formatter with structured output and trace context.

    Example output:
        {
            "timestamp": "2024-01-15T10:30:45.123456+00:00",
            "level": "WARNING",
            "logger": "provlink.ate.client",
            "message": "CreateKeyAndCert failed: UNAVAILABLE",
            "trace_id": "abc123...",
            "span_id": "def456...",
            "method": "CreateKeyAndCert",
            "sku": "abc123"
        }
    """

    # LogRecord attributes that are not user extras
    STANDARD_FIELDS = {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }

    def __init__(
        self,
        include_trace_context: bool = True,
        include_source_location: bool = False,
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize the structured formatter.

        Args:
            include_trace_context: Include trace_id and span_id from OpenTelemetry.
            include_source_location: Include file, function, and line number.
            extra_fields: Static fields to include in every log entry.
        """
        super().__init__()
        self.include_trace_context = include_trace_context
        self.include_source_location = include_source_location
        self.extra_fields = extra_fields or {}

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON."""
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(
                timespec="microseconds"
            ),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if self.include_trace_context:
            context = _trace_context()
            if context:
                entry.update(context)

        if self.include_source_location:
            entry["source"] = {
                "file": record.filename,
                "function": record.funcName,
                "line": record.lineno,
            }

        if record.exc_info:
            exc_type, exc_value, exc_tb = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(exc_type, exc_value, exc_tb)
                if exc_tb
                else None,
            }

        entry.update(self.extra_fields)

        for key, value in record.__dict__.items():
            if key in self.STANDARD_FIELDS or key.startswith("_"):
                continue
            entry[key] = REDACTED if key in REDACTED_FIELDS else value

        return json.dumps(entry, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter with optional trace context.

    Produces log entries like:
        2024-01-15T10:30:45.123Z WARNING  [provlink.ate.client] [trace=abc123] CreateKeyAndCert failed
    """

    def __init__(
        self,
        include_trace_context: bool = True,
        include_source_location: bool = False,
    ) -> None:
        super().__init__()
        self.include_trace_context = include_trace_context
        self.include_source_location = include_source_location

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as text."""
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"

        parts = [timestamp, record.levelname.ljust(8), f"[{record.name}]"]

        if self.include_trace_context:
            context = _trace_context()
            if context:
                parts.append(f"[trace={context['trace_id'][:16]}]")

        if self.include_source_location:
            parts.append(f"[{record.filename}:{record.lineno}]")

        parts.append(record.getMessage())
        result = " ".join(parts)

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result
