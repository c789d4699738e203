"""
Pytest configuration and fixtures for provlink tests.

This module provides shared fixtures for testing the ATE client against
an in-memory Provisioning Appliance stub, plus canned responses matching
what a Provisioning Appliance returns for SKU "abc123".
"""

import logging

import pytest

from provlink.ate import AteClient
from provlink.observability.logging.manager import ROOT_LOGGER_NAME
from provlink.pa.models import (
    Certificate,
    CreateKeyAndCertResponse,
    DeriveSymmetricKeysRequest,
    DeriveSymmetricKeysResponse,
    EndorseCertsRequest,
    EndorseCertsResponse,
    EndorsedKey,
)
from provlink.testing import FakeProvisioningApplianceStub


# ============================================================================
# Stub and Client
# ============================================================================

@pytest.fixture
def fake_stub():
    """
    In-memory Provisioning Appliance stub with nothing programmed.

    Returns:
        FakeProvisioningApplianceStub: Records calls; unprogrammed calls fail.
    """
    return FakeProvisioningApplianceStub()


@pytest.fixture
def client(fake_stub):
    """
    AteClient owning the fake stub.

    Args:
        fake_stub: Injected fake stub
    """
    ate = AteClient(fake_stub)
    yield ate
    ate.close()


# ============================================================================
# Canned Messages
# ============================================================================

@pytest.fixture
def sku():
    """SKU used by the end-to-end scenarios."""
    return "abc123"


@pytest.fixture
def key_and_cert_response():
    """
    CreateKeyAndCert response with one key whose certificate is "fake-cert-blob".
    """
    return CreateKeyAndCertResponse(
        keys=[EndorsedKey(cert=Certificate(blob=b"fake-cert-blob"))]
    )


@pytest.fixture
def endorse_certs_response():
    """EndorseCerts response with one endorsed certificate."""
    return EndorseCertsResponse(certs=[Certificate(blob=b"fake-cert-blob")])


@pytest.fixture
def derive_symmetric_keys_response():
    """DeriveSymmetricKeys response with one key blob."""
    return DeriveSymmetricKeysResponse(keys=[b"fake-key-blob"])


@pytest.fixture
def endorse_certs_request(sku):
    """EndorseCerts request carrying only the SKU."""
    return EndorseCertsRequest(sku=sku)


@pytest.fixture
def derive_symmetric_keys_request(sku):
    """DeriveSymmetricKeys request carrying only the SKU."""
    return DeriveSymmetricKeysRequest(sku=sku)


# ============================================================================
# Logging Isolation
# ============================================================================

@pytest.fixture(autouse=True)
def restore_provlink_logger():
    """
    Restore the provlink root logger after each test.

    LoggerManager and the CLI attach handlers; this keeps tests independent.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    handlers = list(root.handlers)
    level = root.level
    propagate = root.propagate
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
    root.setLevel(level)
    root.propagate = propagate
