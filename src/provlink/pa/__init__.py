"""Provisioning Appliance service bindings.

This package describes the remote Provisioning Appliance (PA) as the ATE
client sees it: the request/response messages, their wire codec, and the
gRPC stub and servicer for the three provisioning procedures.

Core Components:
    - models: Request/response dataclasses
    - schema: Protocol Buffers descriptors and message classes (pa.proto)
    - codec: Protobuf wire serializers for gRPC
    - service: Stub interface, gRPC stub, servicer base class
"""

from provlink.pa.models import (
    Certificate,
    CreateKeyAndCertRequest,
    CreateKeyAndCertResponse,
    DeriveSymmetricKeysRequest,
    DeriveSymmetricKeysResponse,
    EndorseCertBundle,
    EndorseCertsRequest,
    EndorseCertsResponse,
    EndorsedKey,
    SignatureAlgorithm,
    SigningKeyParams,
    SymmetricKeygenParams,
    SymmetricKeySeed,
    SymmetricKeyType,
)

from provlink.pa.service import (
    CREATE_KEY_AND_CERT,
    DERIVE_SYMMETRIC_KEYS,
    ENDORSE_CERTS,
    SERVICE_NAME,
    ProvisioningApplianceServicer,
    ProvisioningApplianceServiceStub,
    ProvisioningApplianceStub,
    add_ProvisioningApplianceServicer_to_server,
    method_path,
)


__all__ = [
    # Models
    "Certificate",
    "EndorsedKey",
    "SigningKeyParams",
    "EndorseCertBundle",
    "SymmetricKeygenParams",
    "SignatureAlgorithm",
    "SymmetricKeySeed",
    "SymmetricKeyType",
    "CreateKeyAndCertRequest",
    "CreateKeyAndCertResponse",
    "EndorseCertsRequest",
    "EndorseCertsResponse",
    "DeriveSymmetricKeysRequest",
    "DeriveSymmetricKeysResponse",
    # Service
    "SERVICE_NAME",
    "CREATE_KEY_AND_CERT",
    "ENDORSE_CERTS",
    "DERIVE_SYMMETRIC_KEYS",
    "method_path",
    "ProvisioningApplianceStub",
    "ProvisioningApplianceServiceStub",
    "ProvisioningApplianceServicer",
    "add_ProvisioningApplianceServicer_to_server",
]
