"""Protocol Buffers schema for the Provisioning Appliance service.

This module registers the ``pa`` package described by ``proto/pa.proto``
with the default descriptor pool and exposes its message classes, the
same way protoc-generated ``*_pb2`` modules do, without a protoc step at
build time. Keep the tables below in sync with ``proto/pa.proto``.

Example:
    ```python
    from provlink.pa import schema

    request = schema.CreateKeyAndCertRequest(sku="abc123")
    payload = request.SerializeToString()
    ```
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

PROTO_FILE = "provlink/pa/proto/pa.proto"
PACKAGE = "pa"

# enum name -> (value prefix, member names in number order)
_ENUMS = {
    "SignatureAlgorithm": (
        "SIGNATURE_ALGORITHM",
        ["UNSPECIFIED", "ECDSA_SHA256", "ECDSA_SHA384", "ECDSA_SHA512"],
    ),
    "SymmetricKeySeed": ("SYMMETRIC_KEY_SEED", ["LOW_SECURITY", "HIGH_SECURITY"]),
    "SymmetricKeyType": ("SYMMETRIC_KEY_TYPE", ["RAW", "HASHED_OT_LC_TOKEN"]),
}

_SCALARS = {
    "string": _F.TYPE_STRING,
    "bytes": _F.TYPE_BYTES,
    "bool": _F.TYPE_BOOL,
    "uint32": _F.TYPE_UINT32,
}

# (message name, [(field name, number, type)]); "repeated T" marks lists
_MESSAGES = [
    ("Certificate", [("blob", 1, "bytes")]),
    (
        "EndorsedKey",
        [("cert", 1, "Certificate"), ("wrapped_key", 2, "bytes"), ("iv", 3, "bytes")],
    ),
    (
        "SigningKeyParams",
        [("key_label", 1, "string"), ("signature_algorithm", 2, "SignatureAlgorithm")],
    ),
    ("EndorseCertBundle", [("key_params", 1, "SigningKeyParams"), ("tbs", 2, "bytes")]),
    (
        "SymmetricKeygenParams",
        [
            ("seed", 1, "SymmetricKeySeed"),
            ("key_type", 2, "SymmetricKeyType"),
            ("size_in_bits", 3, "uint32"),
            ("diversifier", 4, "string"),
            ("wrap_seed", 5, "bool"),
        ],
    ),
    ("CreateKeyAndCertRequest", [("sku", 1, "string"), ("serial_number", 2, "bytes")]),
    ("CreateKeyAndCertResponse", [("keys", 1, "repeated EndorsedKey")]),
    (
        "EndorseCertsRequest",
        [
            ("sku", 1, "string"),
            ("diversifier", 2, "bytes"),
            ("signature", 3, "bytes"),
            ("bundles", 4, "repeated EndorseCertBundle"),
        ],
    ),
    ("EndorseCertsResponse", [("certs", 1, "repeated Certificate")]),
    (
        "DeriveSymmetricKeysRequest",
        [("sku", 1, "string"), ("params", 2, "repeated SymmetricKeygenParams")],
    ),
    ("DeriveSymmetricKeysResponse", [("keys", 1, "repeated bytes")]),
]

SERVICE = "ProvisioningApplianceService"

_RPCS = [
    ("CreateKeyAndCert", "CreateKeyAndCertRequest", "CreateKeyAndCertResponse"),
    ("EndorseCerts", "EndorseCertsRequest", "EndorseCertsResponse"),
    ("DeriveSymmetricKeys", "DeriveSymmetricKeysRequest", "DeriveSymmetricKeysResponse"),
]


def _type_name(name: str) -> str:
    return f".{PACKAGE}.{name}"


def build_file_descriptor_proto() -> descriptor_pb2.FileDescriptorProto:
    """Build the FileDescriptorProto for ``pa.proto``."""
    file_proto = descriptor_pb2.FileDescriptorProto(
        name=PROTO_FILE, package=PACKAGE, syntax="proto3"
    )

    for enum_name, (prefix, members) in _ENUMS.items():
        enum_proto = file_proto.enum_type.add(name=enum_name)
        for number, member in enumerate(members):
            enum_proto.value.add(name=f"{prefix}_{member}", number=number)

    for message_name, fields in _MESSAGES:
        message_proto = file_proto.message_type.add(name=message_name)
        for field_name, number, field_type in fields:
            label = _F.LABEL_OPTIONAL
            if field_type.startswith("repeated "):
                label = _F.LABEL_REPEATED
                field_type = field_type[len("repeated "):]

            field_proto = message_proto.field.add(name=field_name, number=number, label=label)
            if field_type in _SCALARS:
                field_proto.type = _SCALARS[field_type]
            elif field_type in _ENUMS:
                field_proto.type = _F.TYPE_ENUM
                field_proto.type_name = _type_name(field_type)
            else:
                field_proto.type = _F.TYPE_MESSAGE
                field_proto.type_name = _type_name(field_type)

    service_proto = file_proto.service.add(name=SERVICE)
    for method, request, response in _RPCS:
        service_proto.method.add(
            name=method,
            input_type=_type_name(request),
            output_type=_type_name(response),
        )
    return file_proto


DESCRIPTOR = descriptor_pool.Default().AddSerializedFile(
    build_file_descriptor_proto().SerializeToString()
)
SERVICE_DESCRIPTOR = DESCRIPTOR.services_by_name[SERVICE]


def _message_class(name: str):
    return message_factory.GetMessageClass(DESCRIPTOR.message_types_by_name[name])


Certificate = _message_class("Certificate")
EndorsedKey = _message_class("EndorsedKey")
SigningKeyParams = _message_class("SigningKeyParams")
EndorseCertBundle = _message_class("EndorseCertBundle")
SymmetricKeygenParams = _message_class("SymmetricKeygenParams")
CreateKeyAndCertRequest = _message_class("CreateKeyAndCertRequest")
CreateKeyAndCertResponse = _message_class("CreateKeyAndCertResponse")
EndorseCertsRequest = _message_class("EndorseCertsRequest")
EndorseCertsResponse = _message_class("EndorseCertsResponse")
DeriveSymmetricKeysRequest = _message_class("DeriveSymmetricKeysRequest")
DeriveSymmetricKeysResponse = _message_class("DeriveSymmetricKeysResponse")


def enum_number(enum_name: str, member: str) -> int:
    """Get the wire number of an enum member.

    Args:
        enum_name: Enum name in the schema, e.g. "SignatureAlgorithm".
        member: Member name without prefix, e.g. "ECDSA_SHA256".

    Raises:
        KeyError: If the enum or member is unknown.
    """
    prefix, _ = _ENUMS[enum_name]
    enum_descriptor = DESCRIPTOR.enum_types_by_name[enum_name]
    return enum_descriptor.values_by_name[f"{prefix}_{member}"].number


def enum_member(enum_name: str, number: int) -> str:
    """Get the member name (without prefix) for a wire number.

    Raises:
        ValueError: If the number is not defined for the enum.
    """
    prefix, _ = _ENUMS[enum_name]
    value = DESCRIPTOR.enum_types_by_name[enum_name].values_by_number.get(number)
    if value is None:
        raise ValueError(f"unknown {enum_name} value {number}")
    return value.name[len(prefix) + 1:]
