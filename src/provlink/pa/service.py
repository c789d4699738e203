"""gRPC bindings for the Provisioning Appliance service.

Provides the stub interface the ATE client depends on, the gRPC-backed
stub implementation, and the servicer base class used to serve a
Provisioning Appliance (or a fake of one) in-process.

Example:
    ```python
    import grpc
    from provlink.pa.service import ProvisioningApplianceServiceStub

    channel = grpc.insecure_channel("localhost:5001")
    stub = ProvisioningApplianceServiceStub(channel, timeout=10.0)
    response = stub.CreateKeyAndCert(request)
    stub.close()
    ```
"""

import abc
import logging
import threading
from typing import Optional

import grpc

from provlink.exceptions import ClientClosedError
from provlink.pa import schema
from provlink.pa.codec import deserializer, serialize
from provlink.pa.models import (
    CreateKeyAndCertRequest,
    CreateKeyAndCertResponse,
    DeriveSymmetricKeysRequest,
    DeriveSymmetricKeysResponse,
    EndorseCertsRequest,
    EndorseCertsResponse,
)

logger = logging.getLogger(__name__)


SERVICE_NAME = schema.SERVICE_DESCRIPTOR.full_name

CREATE_KEY_AND_CERT = "CreateKeyAndCert"
ENDORSE_CERTS = "EndorseCerts"
DERIVE_SYMMETRIC_KEYS = "DeriveSymmetricKeys"

# method name -> (request type, response type)
METHODS = {
    CREATE_KEY_AND_CERT: (CreateKeyAndCertRequest, CreateKeyAndCertResponse),
    ENDORSE_CERTS: (EndorseCertsRequest, EndorseCertsResponse),
    DERIVE_SYMMETRIC_KEYS: (DeriveSymmetricKeysRequest, DeriveSymmetricKeysResponse),
}


def method_path(method: str) -> str:
    """Get the full gRPC path of a service method."""
    return f"/{SERVICE_NAME}/{method}"


# =============================================================================
# Stub Interface
# =============================================================================


class ProvisioningApplianceStub(abc.ABC):
    """Interface to the three Provisioning Appliance procedures.

    Each method performs exactly one blocking call. It returns the
    response on success and raises ``grpc.RpcError`` on failure; the
    error's ``code()`` and ``details()`` describe the failure.
    """

    @abc.abstractmethod
    def CreateKeyAndCert(
        self, request: CreateKeyAndCertRequest
    ) -> CreateKeyAndCertResponse:
        """Issue keys and certificates for a device."""

    @abc.abstractmethod
    def EndorseCerts(self, request: EndorseCertsRequest) -> EndorseCertsResponse:
        """Sign TBS certificates."""

    @abc.abstractmethod
    def DeriveSymmetricKeys(
        self, request: DeriveSymmetricKeysRequest
    ) -> DeriveSymmetricKeysResponse:
        """Derive symmetric keys."""

    def close(self) -> None:
        """Release the transport behind the stub."""


class ProvisioningApplianceServiceStub(ProvisioningApplianceStub):
    """gRPC-backed stub for the Provisioning Appliance service.

    gRPC multi-callables are safe to invoke from several threads, so a
    single instance may be shared.

    Attributes:
        timeout: Deadline applied to every call, in seconds (None = no deadline).
        wait_for_ready: Queue calls until the channel is ready instead of failing fast.
    """

    def __init__(
        self,
        channel: grpc.Channel,
        timeout: Optional[float] = None,
        wait_for_ready: Optional[bool] = None,
    ):
        """Initialize the stub with a gRPC channel.

        The stub takes ownership of the channel and closes it in close().

        Args:
            channel: An open gRPC channel to the Provisioning Appliance.
            timeout: Per-call deadline in seconds.
            wait_for_ready: Passed through to every call.
        """
        self._channel = channel
        self._closed = False
        self._close_lock = threading.Lock()
        self.timeout = timeout
        self.wait_for_ready = wait_for_ready

        self._callables = {}
        for method, (_, response_type) in METHODS.items():
            self._callables[method] = channel.unary_unary(
                method_path(method),
                request_serializer=serialize,
                response_deserializer=deserializer(response_type),
            )

    @property
    def is_closed(self) -> bool:
        """Check if the channel has been closed."""
        return self._closed

    def _invoke(self, method: str, request):
        if self._closed:
            raise ClientClosedError(method)
        return self._callables[method](
            request,
            timeout=self.timeout,
            wait_for_ready=self.wait_for_ready,
        )

    def CreateKeyAndCert(
        self, request: CreateKeyAndCertRequest
    ) -> CreateKeyAndCertResponse:
        return self._invoke(CREATE_KEY_AND_CERT, request)

    def EndorseCerts(self, request: EndorseCertsRequest) -> EndorseCertsResponse:
        return self._invoke(ENDORSE_CERTS, request)

    def DeriveSymmetricKeys(
        self, request: DeriveSymmetricKeysRequest
    ) -> DeriveSymmetricKeysResponse:
        return self._invoke(DERIVE_SYMMETRIC_KEYS, request)

    def close(self) -> None:
        """Close the underlying channel. Safe to call multiple times."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        self._channel.close()
        logger.debug("Provisioning Appliance channel closed")


# =============================================================================
# Server Side
# =============================================================================


class ProvisioningApplianceServicer:
    """Base class for Provisioning Appliance service implementations.

    Subclasses override the procedures they support; the rest answer
    UNIMPLEMENTED.
    """

    def CreateKeyAndCert(self, request, context):
        context.set_code(grpc.StatusCode.UNIMPLEMENTED)
        context.set_details("Method not implemented!")
        raise NotImplementedError("Method not implemented!")

    def EndorseCerts(self, request, context):
        context.set_code(grpc.StatusCode.UNIMPLEMENTED)
        context.set_details("Method not implemented!")
        raise NotImplementedError("Method not implemented!")

    def DeriveSymmetricKeys(self, request, context):
        context.set_code(grpc.StatusCode.UNIMPLEMENTED)
        context.set_details("Method not implemented!")
        raise NotImplementedError("Method not implemented!")


def add_ProvisioningApplianceServicer_to_server(
    servicer: ProvisioningApplianceServicer, server: grpc.Server
) -> None:
    """Register a servicer's procedures with a gRPC server.

    Args:
        servicer: Service implementation.
        server: Server that has not been started yet.
    """
    handlers = {}
    for method, (request_type, _) in METHODS.items():
        handlers[method] = grpc.unary_unary_rpc_method_handler(
            getattr(servicer, method),
            request_deserializer=deserializer(request_type),
            response_serializer=serialize,
        )
    generic_handler = grpc.method_handlers_generic_handler(SERVICE_NAME, handlers)
    server.add_generic_rpc_handlers((generic_handler,))
