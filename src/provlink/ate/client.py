"""ATE client for the Provisioning Appliance.

This module provides AteClient, the facade test-equipment software uses
to request key/certificate issuance, certificate endorsement and
symmetric key derivation from a remote Provisioning Appliance (PA).

The client holds no key material and performs no cryptography. Each
operation builds or forwards a request, makes exactly one blocking call
on the caller's thread, and returns an Outcome. Failures, whether
reported by the transport or the PA, come back as failed Outcomes with
the status code and details verbatim; they are never raised.

Thread safety:
    The client does not serialize calls by default. The gRPC stub built
    by ``from_config`` is safe to share between threads. When another
    stub is injected that is not, either use one client per thread or
    construct the client with ``serialize_calls=True``. Calls issued
    concurrently have no ordering guarantee either way.

    close() takes the same lock when ``serialize_calls=True``. Without it,
    close() must not be called while another thread is inside a call.

Example:
    ```python
    from provlink.ate import AteClient, AteClientConfig

    config = AteClientConfig(target="pa.line3.local:5001", timeout=30)
    with AteClient.from_config(config) as client:
        outcome = client.create_key_and_cert("abc123", serial)
        if not outcome.ok:
            fail_station(outcome.status)
        for key in outcome.response.keys:
            write_to_device(key)
    ```
"""

import logging
import threading
import time
from contextlib import nullcontext
from typing import Optional, Union

import grpc

from provlink.ate.config import AteClientConfig
from provlink.ate.outcome import Outcome, Status
from provlink.exceptions import ClientClosedError
from provlink.observability.metrics.collector import MetricsCollector
from provlink.observability.tracing import CallTracer
from provlink.pa.models import (
    CreateKeyAndCertRequest,
    CreateKeyAndCertResponse,
    DeriveSymmetricKeysRequest,
    DeriveSymmetricKeysResponse,
    EndorseCertsRequest,
    EndorseCertsResponse,
)
from provlink.pa.service import (
    CREATE_KEY_AND_CERT,
    DERIVE_SYMMETRIC_KEYS,
    ENDORSE_CERTS,
    SERVICE_NAME,
    ProvisioningApplianceServiceStub,
    ProvisioningApplianceStub,
)

logger = logging.getLogger(__name__)

SerialBuffer = Union[bytes, bytearray, memoryview]


class AteClient:
    """Provisioning client for automated test equipment.

    The client exclusively owns the stub it is given: the stub must not
    be used elsewhere, and close() releases it.

    Attributes:
        is_closed: Whether close() has been called.
    """

    def __init__(
        self,
        stub: ProvisioningApplianceStub,
        serialize_calls: bool = False,
        metrics: Optional[MetricsCollector] = None,
        tracer: Optional[CallTracer] = None,
    ):
        """Initialize the client and take ownership of the stub.

        Args:
            stub: Stub for the PA procedures (gRPC-backed or a test double).
            serialize_calls: Hold an internal lock around each remote call.
            metrics: Optional collector for call counts and durations.
            tracer: Optional tracer for per-call spans.

        Raises:
            ValueError: If stub is None.
        """
        if stub is None:
            raise ValueError("stub cannot be None")

        self._stub = stub
        self._lock = threading.Lock() if serialize_calls else None
        self._closed = False
        self._metrics = metrics
        self._tracer = tracer or CallTracer(service=SERVICE_NAME)

    @classmethod
    def from_config(
        cls,
        config: Optional[AteClientConfig] = None,
        credentials: Optional[grpc.ChannelCredentials] = None,
        metrics: Optional[MetricsCollector] = None,
        tracer: Optional[CallTracer] = None,
    ) -> "AteClient":
        """Open a channel to the PA and build a client that owns it.

        Args:
            config: Client configuration. If None, loads from environment.
            credentials: Channel credentials; an insecure channel is used if None.
            metrics: Optional metrics collector.
            tracer: Optional tracer.

        Returns:
            Client owning a gRPC stub over a new channel.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        config = config or AteClientConfig.from_env()
        config.validate()

        if credentials is not None:
            channel = grpc.secure_channel(
                config.target, credentials, options=config.channel_options
            )
        else:
            channel = grpc.insecure_channel(config.target, options=config.channel_options)

        stub = ProvisioningApplianceServiceStub(
            channel,
            timeout=config.timeout,
            wait_for_ready=config.wait_for_ready or None,
        )
        logger.info(f"Provisioning Appliance client created for {config.target}")
        return cls(
            stub,
            serialize_calls=config.serialize_calls,
            metrics=metrics,
            tracer=tracer,
        )

    @property
    def is_closed(self) -> bool:
        """Check if the client has been closed."""
        return self._closed

    # =========================================================================
    # Operations
    # =========================================================================

    def create_key_and_cert(
        self,
        sku: str,
        serial: Optional[SerialBuffer] = b"",
        serial_length: Optional[int] = None,
    ) -> Outcome[CreateKeyAndCertResponse]:
        """Ask the PA to issue keys and certificates for a device.

        The serial bytes are copied into the request; no reference to the
        caller's buffer is kept. An empty serial is forwarded as-is.

        Args:
            sku: Product configuration identifier, forwarded unchanged.
            serial: Device serial number buffer.
            serial_length: Number of bytes of ``serial`` to send; the
                whole buffer if None.

        Returns:
            Outcome carrying the PA's response on success.
        """
        rejection = self._check_sku(sku)
        serial_number = b""
        if rejection is None:
            serial_number, rejection = self._copy_serial(serial, serial_length)
        if rejection is not None:
            return self._reject(CREATE_KEY_AND_CERT, rejection)

        request = CreateKeyAndCertRequest(sku=sku, serial_number=serial_number)
        return self._call(CREATE_KEY_AND_CERT, request)

    def endorse_certs(self, request: EndorseCertsRequest) -> Outcome[EndorseCertsResponse]:
        """Ask the PA to endorse (sign) TBS certificates.

        The request is forwarded without inspection.

        Args:
            request: Fully populated request.

        Returns:
            Outcome carrying the endorsed certificates on success.
        """
        if not isinstance(request, EndorseCertsRequest):
            return self._reject(
                ENDORSE_CERTS,
                f"request must be EndorseCertsRequest, got {type(request).__name__}",
            )
        return self._call(ENDORSE_CERTS, request)

    def derive_symmetric_keys(
        self, request: DeriveSymmetricKeysRequest
    ) -> Outcome[DeriveSymmetricKeysResponse]:
        """Ask the PA to derive symmetric keys.

        The request is forwarded without inspection.

        Args:
            request: Fully populated request.

        Returns:
            Outcome carrying the derived key material on success.
        """
        if not isinstance(request, DeriveSymmetricKeysRequest):
            return self._reject(
                DERIVE_SYMMETRIC_KEYS,
                f"request must be DeriveSymmetricKeysRequest, got {type(request).__name__}",
            )
        return self._call(DERIVE_SYMMETRIC_KEYS, request)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Release the stub. Safe to call multiple times.

        Operations on a closed client return a FAILED_PRECONDITION outcome
        without contacting the PA. With ``serialize_calls=True`` this waits
        for an in-flight call to finish; otherwise it must not race with
        calls on other threads.
        """
        with self._lock or nullcontext():
            if self._closed:
                return
            self._closed = True
            self._stub.close()
        logger.debug("ATE client closed")

    def __enter__(self) -> "AteClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"AteClient({type(self._stub).__name__}, {state})"

    # =========================================================================
    # Internals
    # =========================================================================

    def _call(self, method: str, request) -> Outcome:
        """Make one remote call and translate its result into an Outcome."""
        with self._lock or nullcontext():
            if self._closed:
                return self._reject(
                    method, "client is closed", grpc.StatusCode.FAILED_PRECONDITION
                )
            return self._send(method, request)

    def _send(self, method: str, request) -> Outcome:
        sku = request.sku
        logger.debug(f"Calling {method}", extra={"method": method, "sku": sku})

        with self._tracer.span(method, sku) as span:
            start = time.monotonic()
            outcome = self._invoke(method, request)
            duration = time.monotonic() - start
            self._tracer.finish(span, outcome.status)

        if self._metrics is not None:
            self._metrics.record_call(method, outcome.status.code.name, duration)

        if outcome.ok:
            logger.debug(
                f"{method} succeeded in {duration:.3f}s",
                extra={"method": method, "sku": sku},
            )
        else:
            logger.warning(
                f"{method} failed: {outcome.status}",
                extra={
                    "method": method,
                    "sku": sku,
                    "code": outcome.status.code.name,
                },
            )
        return outcome

    def _invoke(self, method: str, request) -> Outcome:
        try:
            response = getattr(self._stub, method)(request)
        except grpc.RpcError as e:
            return Outcome.failure(Status.from_rpc_error(e))
        except ClientClosedError as e:
            return Outcome.failure(
                Status.local(grpc.StatusCode.FAILED_PRECONDITION, e.message)
            )
        except Exception as e:
            # Transport faults outside gRPC's own error type
            logger.debug(f"{method} raised {type(e).__name__}", exc_info=True)
            return Outcome.failure(
                Status(grpc.StatusCode.UNKNOWN, str(e) or type(e).__name__)
            )

        if response is None:
            return Outcome.failure(
                Status(grpc.StatusCode.INTERNAL, "stub returned no response")
            )
        return Outcome.success(response)

    def _reject(
        self,
        method: str,
        reason: str,
        code: grpc.StatusCode = grpc.StatusCode.INVALID_ARGUMENT,
    ) -> Outcome:
        """Build a failed outcome for a call that is never sent."""
        logger.warning(f"{method} rejected locally: {reason}", extra={"method": method})
        if self._metrics is not None:
            self._metrics.record_local_rejection(method)
        return Outcome.failure(Status.local(code, reason))

    @staticmethod
    def _check_sku(sku) -> Optional[str]:
        # Content (including emptiness) is the PA's to judge
        if not isinstance(sku, str):
            return f"sku must be a string, got {type(sku).__name__}"
        return None

    @staticmethod
    def _copy_serial(serial, serial_length):
        """Copy the serial into bytes.

        Returns:
            Tuple of (serial bytes, rejection reason or None).
        """
        if serial_length is not None and (
            isinstance(serial_length, bool) or not isinstance(serial_length, int)
        ):
            return b"", f"serial_length must be an int, got {type(serial_length).__name__}"

        if serial is None:
            if serial_length:
                return b"", f"serial is None but serial_length is {serial_length}"
            return b"", None

        if isinstance(serial, memoryview):
            data = serial.tobytes()
        elif isinstance(serial, (bytes, bytearray)):
            data = bytes(serial)
        else:
            return b"", f"serial must be bytes-like, got {type(serial).__name__}"

        if serial_length is None:
            return data, None
        if serial_length < 0 or serial_length > len(data):
            return b"", (
                f"serial_length {serial_length} out of range for a "
                f"{len(data)}-byte serial"
            )
        return data[:serial_length], None


# Name used by callers that think in terms of the provisioning facade.
ProvisioningClient = AteClient
