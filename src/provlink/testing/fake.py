"""In-memory test double for the Provisioning Appliance stub.

FakeProvisioningApplianceStub records every request it receives and
answers with responses or errors programmed per procedure, so station
software can be exercised without a Provisioning Appliance.

Example:
    ```python
    fake = FakeProvisioningApplianceStub()
    fake.program(CREATE_KEY_AND_CERT, CreateKeyAndCertResponse(keys=[...]))
    fake.program_error(ENDORSE_CERTS, grpc.StatusCode.UNAVAILABLE, "PA down")

    client = AteClient(fake)
    client.create_key_and_cert("abc123", b"")
    assert fake.requests(CREATE_KEY_AND_CERT)[0].sku == "abc123"
    ```
"""

import threading
from collections import defaultdict, deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List

import grpc

from provlink.pa.service import (
    CREATE_KEY_AND_CERT,
    DERIVE_SYMMETRIC_KEYS,
    ENDORSE_CERTS,
    METHODS,
    ProvisioningApplianceStub,
)


class FakeRpcError(grpc.RpcError):
    """RpcError carrying a status code, as raised by a real gRPC call."""

    def __init__(self, code: grpc.StatusCode, details: str = ""):
        super().__init__(f"{code.name}: {details}")
        self._code = code
        self._details = details

    def code(self) -> grpc.StatusCode:
        return self._code

    def details(self) -> str:
        return self._details


@dataclass
class RecordedCall:
    """A request received by the fake stub."""

    method: str
    request: Any


class FakeProvisioningApplianceStub(ProvisioningApplianceStub):
    """Stub that records calls and replays programmed results.

    Programmed results are consumed in order. The last result programmed
    for a procedure is repeated once the queue holds only it, so a single
    ``program()`` answers every call. Calls to a procedure with nothing
    programmed fail with UNIMPLEMENTED.

    Attributes:
        calls: Every call received, in order.
        closed: Whether close() has been called.
    """

    def __init__(self) -> None:
        self.calls: List[RecordedCall] = []
        self.closed = False
        self._results: Dict[str, Deque[Any]] = defaultdict(deque)
        self._lock = threading.Lock()

    def program(self, method: str, response: Any) -> "FakeProvisioningApplianceStub":
        """Queue a successful response for a procedure.

        Raises:
            ValueError: If the method is unknown or the response has the wrong type.
        """
        self._check_method(method)
        response_type = METHODS[method][1]
        if not isinstance(response, response_type):
            raise ValueError(
                f"{method} responds with {response_type.__name__}, "
                f"got {type(response).__name__}"
            )
        self._results[method].append(response)
        return self

    def program_error(
        self, method: str, code: grpc.StatusCode, details: str = ""
    ) -> "FakeProvisioningApplianceStub":
        """Queue a failure for a procedure."""
        self._check_method(method)
        self._results[method].append(FakeRpcError(code, details))
        return self

    def requests(self, method: str) -> List[Any]:
        """Get the requests received for one procedure."""
        return [call.request for call in self.calls if call.method == method]

    def reset(self) -> None:
        """Forget recorded calls and programmed results."""
        with self._lock:
            self.calls.clear()
            self._results.clear()

    def CreateKeyAndCert(self, request):
        return self._answer(CREATE_KEY_AND_CERT, request)

    def EndorseCerts(self, request):
        return self._answer(ENDORSE_CERTS, request)

    def DeriveSymmetricKeys(self, request):
        return self._answer(DERIVE_SYMMETRIC_KEYS, request)

    def close(self) -> None:
        self.closed = True

    def _answer(self, method: str, request):
        with self._lock:
            self.calls.append(RecordedCall(method, request))
            queue = self._results.get(method)
            if not queue:
                result = FakeRpcError(
                    grpc.StatusCode.UNIMPLEMENTED, f"{method} not programmed"
                )
            elif len(queue) == 1:
                result = queue[0]
            else:
                result = queue.popleft()

        if isinstance(result, FakeRpcError):
            raise result
        return result

    @staticmethod
    def _check_method(method: str) -> None:
        if method not in METHODS:
            raise ValueError(f"Unknown procedure: {method}")
