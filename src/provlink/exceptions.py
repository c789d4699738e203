"""Exception hierarchy for provlink.

This module defines the exceptions used throughout provlink with
helpful error messages and troubleshooting hints.

Note that remote and validation failures of AteClient operations are
reported as Outcome values, never raised.
"""

from typing import Optional


class ProvlinkError(Exception):
    """Base exception for all provlink errors.

    Attributes:
        message: Human-readable error description.
        hint: Optional troubleshooting hint.
    """

    def __init__(self, message: str, hint: Optional[str] = None):
        self.message = message
        self.hint = hint
        super().__init__(message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message}\nHint: {self.hint}"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(ProvlinkError):
    """Raised when client or observability configuration is invalid."""

    def __init__(self, reason: str, field: Optional[str] = None):
        self.reason = reason
        self.field = field
        message = f"Configuration error: {reason}"
        if field:
            message = f"Configuration error in '{field}': {reason}"
        super().__init__(message, "Check the YAML file and PROVLINK_* environment variables.")


# =============================================================================
# Wire Errors
# =============================================================================


class CodecError(ProvlinkError):
    """Raised when a message cannot be encoded or decoded."""

    def __init__(self, reason: str, message_type: Optional[str] = None):
        self.reason = reason
        self.message_type = message_type
        message = f"Codec error: {reason}"
        if message_type:
            message = f"Codec error for {message_type}: {reason}"
        super().__init__(message)


# =============================================================================
# Client Errors
# =============================================================================


class ClientClosedError(ProvlinkError):
    """Raised when a stub is used after its channel was closed."""

    def __init__(self, operation: str = "this operation"):
        self.operation = operation
        super().__init__(
            f"Stub is closed - cannot perform {operation}",
            "Create a new client; a closed stub cannot be reopened.",
        )


class OutcomeError(ProvlinkError):
    """Raised when the response of a failed Outcome is read.

    Attributes:
        code: gRPC status code of the failed call.
        details: Status message of the failed call.
    """

    def __init__(self, code, details: str = "", local: bool = False):
        self.code = code
        self.details = details
        self.local = local
        origin = "rejected locally" if local else "failed"
        name = getattr(code, "name", str(code))
        message = f"Provisioning call {origin}: {name}"
        if details:
            message = f"{message} ({details})"
        super().__init__(message, "Check Outcome.ok before reading Outcome.response.")
