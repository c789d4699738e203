"""
Unit tests for the gRPC-backed Provisioning Appliance stub.
"""

from unittest.mock import MagicMock

import grpc
import pytest

from provlink.exceptions import ClientClosedError
from provlink.pa.codec import serialize
from provlink.pa.models import (
    CreateKeyAndCertRequest,
    DeriveSymmetricKeysRequest,
    DeriveSymmetricKeysResponse,
    EndorseCertsRequest,
)
from provlink.pa.service import (
    CREATE_KEY_AND_CERT,
    DERIVE_SYMMETRIC_KEYS,
    ENDORSE_CERTS,
    ProvisioningApplianceServicer,
    ProvisioningApplianceServiceStub,
    ProvisioningApplianceStub,
    method_path,
)


@pytest.fixture
def channel():
    """Mock gRPC channel returning one mock multi-callable per method."""
    mock_channel = MagicMock()
    callables = {}

    def unary_unary(path, request_serializer, response_deserializer):
        callables[path] = MagicMock(name=path)
        return callables[path]

    mock_channel.unary_unary.side_effect = unary_unary
    mock_channel.callables = callables
    return mock_channel


class TestMethodPath:
    """Tests for method paths."""

    def test_method_path(self):
        """Test full method paths include the service name."""
        assert method_path(CREATE_KEY_AND_CERT) == (
            "/pa.ProvisioningApplianceService/CreateKeyAndCert"
        )


class TestServiceStub:
    """Tests for ProvisioningApplianceServiceStub."""

    def test_registers_all_methods(self, channel):
        """Test one multi-callable is built per procedure."""
        ProvisioningApplianceServiceStub(channel)

        assert set(channel.callables) == {
            method_path(CREATE_KEY_AND_CERT),
            method_path(ENDORSE_CERTS),
            method_path(DERIVE_SYMMETRIC_KEYS),
        }
        kwargs = channel.unary_unary.call_args_list[0].kwargs
        assert kwargs["request_serializer"] is serialize

    def test_call_passes_timeout(self, channel):
        """Test each call forwards the request, timeout and readiness flag."""
        stub = ProvisioningApplianceServiceStub(channel, timeout=5.0, wait_for_ready=True)
        request = CreateKeyAndCertRequest(sku="abc123")

        stub.CreateKeyAndCert(request)

        channel.callables[method_path(CREATE_KEY_AND_CERT)].assert_called_once_with(
            request, timeout=5.0, wait_for_ready=True
        )

    def test_routes_each_procedure(self, channel):
        """Test each method reaches its own multi-callable."""
        stub = ProvisioningApplianceServiceStub(channel)
        channel.callables[method_path(DERIVE_SYMMETRIC_KEYS)].return_value = (
            DeriveSymmetricKeysResponse(keys=[b"k"])
        )

        response = stub.DeriveSymmetricKeys(DeriveSymmetricKeysRequest(sku="abc123"))
        stub.EndorseCerts(EndorseCertsRequest(sku="abc123"))

        assert response.keys == [b"k"]
        assert channel.callables[method_path(ENDORSE_CERTS)].call_count == 1
        assert channel.callables[method_path(CREATE_KEY_AND_CERT)].call_count == 0

    def test_close_closes_channel_once(self, channel):
        """Test close() closes the channel once."""
        stub = ProvisioningApplianceServiceStub(channel)

        stub.close()
        stub.close()

        channel.close.assert_called_once()
        assert stub.is_closed

    def test_call_after_close(self, channel):
        """Test calls on a closed stub raise ClientClosedError."""
        stub = ProvisioningApplianceServiceStub(channel)
        stub.close()

        with pytest.raises(ClientClosedError, match="CreateKeyAndCert"):
            stub.CreateKeyAndCert(CreateKeyAndCertRequest())

    def test_is_stub_interface(self, channel):
        """Test the gRPC stub implements the stub interface."""
        assert isinstance(ProvisioningApplianceServiceStub(channel), ProvisioningApplianceStub)


class TestServicerBase:
    """Tests for the servicer base class."""

    @pytest.mark.parametrize("method", [CREATE_KEY_AND_CERT, ENDORSE_CERTS, DERIVE_SYMMETRIC_KEYS])
    def test_unimplemented(self, method):
        """Test base procedures answer UNIMPLEMENTED."""
        context = MagicMock()

        with pytest.raises(NotImplementedError):
            getattr(ProvisioningApplianceServicer(), method)(None, context)

        context.set_code.assert_called_once_with(grpc.StatusCode.UNIMPLEMENTED)
