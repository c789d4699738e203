"""Call outcomes for the ATE client.

An Outcome pairs the status of one provisioning call with, on success,
the response returned by the Provisioning Appliance. A failed Outcome
never exposes a response: reading ``Outcome.response`` raises
OutcomeError, so a failed provisioning step cannot be mistaken for a
successful one.

Status codes are gRPC's own; the client does not invent categories.
``Status.origin`` tells a call that was never sent (LOCAL) from one the
transport or appliance rejected (REMOTE).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

import grpc

from provlink.exceptions import OutcomeError

R = TypeVar("R")


class StatusOrigin(Enum):
    """Where a status was produced."""

    LOCAL = "local"  # Rejected by the client, never sent
    REMOTE = "remote"  # Reported by the transport or the appliance


@dataclass(frozen=True)
class Status:
    """Status of a provisioning call.

    Attributes:
        code: gRPC status code.
        message: Human-readable detail, verbatim from the reporter.
        origin: Whether the client or the remote side produced the status.
    """

    code: grpc.StatusCode = grpc.StatusCode.OK
    message: str = ""
    origin: StatusOrigin = StatusOrigin.REMOTE

    @property
    def ok(self) -> bool:
        """Check if the status is OK."""
        return self.code == grpc.StatusCode.OK

    @property
    def is_local(self) -> bool:
        """Check if the client rejected the call before sending it."""
        return self.origin == StatusOrigin.LOCAL

    @classmethod
    def from_rpc_error(cls, error: grpc.RpcError) -> "Status":
        """Build a status from an error raised by a stub.

        Args:
            error: Error raised by a gRPC call (a grpc.Call in practice).

        Returns:
            REMOTE status carrying the error's code and details verbatim.
        """
        code_fn = getattr(error, "code", None)
        details_fn = getattr(error, "details", None)
        code = code_fn() if callable(code_fn) else None
        details = details_fn() if callable(details_fn) else None

        if not isinstance(code, grpc.StatusCode):
            code = grpc.StatusCode.UNKNOWN
        if details is None:
            details = str(error)
        return cls(code=code, message=details, origin=StatusOrigin.REMOTE)

    @classmethod
    def local(cls, code: grpc.StatusCode, message: str) -> "Status":
        """Build a status for a call the client refused to send."""
        return cls(code=code, message=message, origin=StatusOrigin.LOCAL)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "code": self.code.name,
            "message": self.message,
            "origin": self.origin.value,
        }

    def __str__(self) -> str:
        if self.message:
            return f"{self.code.name}: {self.message}"
        return self.code.name


OK_STATUS = Status()


class Outcome(Generic[R]):
    """Result of one provisioning call.

    Either OK with a populated response, or a failure status with no
    response. Callers branch on ``ok`` (or ``status.code``) before
    reading ``response``.

    Example:
        ```python
        outcome = client.create_key_and_cert("abc123", serial)
        if outcome.ok:
            store(outcome.response.keys)
        elif outcome.status.code == grpc.StatusCode.UNAVAILABLE:
            retry_later()
        else:
            fail_station(outcome.status)
        ```
    """

    __slots__ = ("_status", "_response")

    def __init__(self, status: Status, response: Optional[R] = None):
        """Initialize outcome.

        Args:
            status: Call status.
            response: Response entity; required when status is OK and
                discarded otherwise.

        Raises:
            ValueError: If status is OK but no response is given.
        """
        if status.ok and response is None:
            raise ValueError("OK outcome requires a response")
        self._status = status
        self._response = response if status.ok else None

    @classmethod
    def success(cls, response: R) -> "Outcome[R]":
        """Create an OK outcome."""
        return cls(OK_STATUS, response)

    @classmethod
    def failure(cls, status: Status) -> "Outcome[R]":
        """Create a failed outcome.

        Raises:
            ValueError: If status is OK.
        """
        if status.ok:
            raise ValueError("failure outcome requires a non-OK status")
        return cls(status)

    @property
    def ok(self) -> bool:
        """Check if the call succeeded."""
        return self._status.ok

    @property
    def status(self) -> Status:
        """Get call status."""
        return self._status

    @property
    def response(self) -> R:
        """Get the response of a successful call.

        Raises:
            OutcomeError: If the call failed.
        """
        if not self._status.ok:
            raise OutcomeError(
                self._status.code, self._status.message, self._status.is_local
            )
        return self._response

    def response_or(self, default: Optional[R] = None) -> Optional[R]:
        """Get the response, or ``default`` if the call failed."""
        return self._response if self._status.ok else default

    def raise_for_status(self) -> "Outcome[R]":
        """Raise OutcomeError if the call failed, else return self."""
        if not self._status.ok:
            raise OutcomeError(
                self._status.code, self._status.message, self._status.is_local
            )
        return self

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Outcome):
            return NotImplemented
        return self._status == other._status and self._response == other._response

    def __repr__(self) -> str:
        if self.ok:
            return f"Outcome(OK, {type(self._response).__name__})"
        return f"Outcome({self._status})"
