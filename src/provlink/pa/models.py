"""Message models for the Provisioning Appliance service.

This module defines the request and response messages exchanged with the
Provisioning Appliance (PA), plus the parameter records they carry. The
client never inspects key or certificate material; it only shapes requests
and forwards responses.

Every message is a dataclass whose defaults form the empty message, so
``CreateKeyAndCertResponse()`` is the empty response. ``to_proto()`` and
``from_proto()`` convert to and from the ``pa`` Protocol Buffers messages
sent on the wire (see provlink.pa.schema). ``to_dict()`` and
``from_dict()`` serve YAML request files and JSON output, with binary
fields as hex strings.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Type, TypeVar

from provlink.pa import schema

E = TypeVar("E", bound=Enum)


# =============================================================================
# Enumerations
# =============================================================================


class SignatureAlgorithm(Enum):
    """Signature algorithms the PA can use to endorse a certificate."""

    UNSPECIFIED = "unspecified"
    ECDSA_SHA256 = "ecdsa_sha256"
    ECDSA_SHA384 = "ecdsa_sha384"
    ECDSA_SHA512 = "ecdsa_sha512"


class SymmetricKeySeed(Enum):
    """Seed asset used by the PA for symmetric key derivation."""

    LOW_SECURITY = "low_security"
    HIGH_SECURITY = "high_security"


class SymmetricKeyType(Enum):
    """Output format of a derived symmetric key."""

    RAW = "raw"
    HASHED_OT_LC_TOKEN = "hashed_ot_lc_token"  # cSHAKE128 "LC_CTRL" hashed


def _hex(value: bytes) -> str:
    return bytes(value).hex()


def _unhex(value: Optional[str]) -> bytes:
    return bytes.fromhex(value) if value else b""


def _enum_number(member: Enum) -> int:
    return schema.enum_number(type(member).__name__, member.name)


def _enum_member(enum_type: Type[E], number: int) -> E:
    return enum_type[schema.enum_member(enum_type.__name__, number)]


# =============================================================================
# Parameter Records
# =============================================================================


@dataclass
class Certificate:
    """An opaque certificate blob (typically DER)."""

    PROTO = schema.Certificate

    blob: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"blob": _hex(self.blob)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Certificate":
        """Create from dictionary."""
        return cls(blob=_unhex(data.get("blob")))

    def to_proto(self):
        """Convert to the wire message."""
        return schema.Certificate(blob=self.blob)

    @classmethod
    def from_proto(cls, proto) -> "Certificate":
        """Create from the wire message."""
        return cls(blob=proto.blob)


@dataclass
class EndorsedKey:
    """A key issued by the PA, wrapped for the device, with its certificate.

    Attributes:
        cert: Certificate for the key, if the PA issued one.
        wrapped_key: Private key wrapped with the device transport secret.
        iv: Initialization vector used for wrapping.
    """

    PROTO = schema.EndorsedKey

    cert: Optional[Certificate] = None
    wrapped_key: bytes = b""
    iv: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {
            "wrapped_key": _hex(self.wrapped_key),
            "iv": _hex(self.iv),
        }
        if self.cert is not None:
            data["cert"] = self.cert.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndorsedKey":
        """Create from dictionary."""
        cert = data.get("cert")
        return cls(
            cert=Certificate.from_dict(cert) if cert is not None else None,
            wrapped_key=_unhex(data.get("wrapped_key")),
            iv=_unhex(data.get("iv")),
        )

    def to_proto(self):
        """Convert to the wire message."""
        proto = schema.EndorsedKey(wrapped_key=self.wrapped_key, iv=self.iv)
        if self.cert is not None:
            proto.cert.CopyFrom(self.cert.to_proto())
        return proto

    @classmethod
    def from_proto(cls, proto) -> "EndorsedKey":
        """Create from the wire message."""
        return cls(
            cert=Certificate.from_proto(proto.cert) if proto.HasField("cert") else None,
            wrapped_key=proto.wrapped_key,
            iv=proto.iv,
        )


@dataclass
class SigningKeyParams:
    """Selects the PA key used to sign a TBS certificate.

    Attributes:
        key_label: Label of the signing key inside the PA's HSM.
        signature_algorithm: Algorithm used to produce the signature.
    """

    PROTO = schema.SigningKeyParams

    key_label: str = ""
    signature_algorithm: SignatureAlgorithm = SignatureAlgorithm.UNSPECIFIED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "key_label": self.key_label,
            "signature_algorithm": self.signature_algorithm.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SigningKeyParams":
        """Create from dictionary."""
        return cls(
            key_label=data.get("key_label", ""),
            signature_algorithm=SignatureAlgorithm(
                data.get("signature_algorithm", SignatureAlgorithm.UNSPECIFIED.value)
            ),
        )

    def to_proto(self):
        """Convert to the wire message."""
        return schema.SigningKeyParams(
            key_label=self.key_label,
            signature_algorithm=_enum_number(self.signature_algorithm),
        )

    @classmethod
    def from_proto(cls, proto) -> "SigningKeyParams":
        """Create from the wire message."""
        return cls(
            key_label=proto.key_label,
            signature_algorithm=_enum_member(SignatureAlgorithm, proto.signature_algorithm),
        )


@dataclass
class EndorseCertBundle:
    """A to-be-signed certificate and the key that should sign it."""

    PROTO = schema.EndorseCertBundle

    key_params: SigningKeyParams = field(default_factory=SigningKeyParams)
    tbs: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"key_params": self.key_params.to_dict(), "tbs": _hex(self.tbs)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndorseCertBundle":
        """Create from dictionary."""
        return cls(
            key_params=SigningKeyParams.from_dict(data.get("key_params", {})),
            tbs=_unhex(data.get("tbs")),
        )

    def to_proto(self):
        """Convert to the wire message."""
        return schema.EndorseCertBundle(key_params=self.key_params.to_proto(), tbs=self.tbs)

    @classmethod
    def from_proto(cls, proto) -> "EndorseCertBundle":
        """Create from the wire message."""
        return cls(key_params=SigningKeyParams.from_proto(proto.key_params), tbs=proto.tbs)


@dataclass
class SymmetricKeygenParams:
    """Parameters for deriving one symmetric key.

    Attributes:
        seed: Which seed asset the PA derives from.
        key_type: Output format of the derived key.
        size_in_bits: Size of the derived key.
        diversifier: Diversification string mixed into the derivation.
        wrap_seed: Ask the PA to also return the seed wrapped.
    """

    PROTO = schema.SymmetricKeygenParams

    seed: SymmetricKeySeed = SymmetricKeySeed.LOW_SECURITY
    key_type: SymmetricKeyType = SymmetricKeyType.RAW
    size_in_bits: int = 128
    diversifier: str = ""
    wrap_seed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "seed": self.seed.value,
            "key_type": self.key_type.value,
            "size_in_bits": self.size_in_bits,
            "diversifier": self.diversifier,
            "wrap_seed": self.wrap_seed,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SymmetricKeygenParams":
        """Create from dictionary."""
        return cls(
            seed=SymmetricKeySeed(data.get("seed", SymmetricKeySeed.LOW_SECURITY.value)),
            key_type=SymmetricKeyType(data.get("key_type", SymmetricKeyType.RAW.value)),
            size_in_bits=int(data.get("size_in_bits", 128)),
            diversifier=data.get("diversifier", ""),
            wrap_seed=bool(data.get("wrap_seed", False)),
        )

    def to_proto(self):
        """Convert to the wire message."""
        return schema.SymmetricKeygenParams(
            seed=_enum_number(self.seed),
            key_type=_enum_number(self.key_type),
            size_in_bits=self.size_in_bits,
            diversifier=self.diversifier,
            wrap_seed=self.wrap_seed,
        )

    @classmethod
    def from_proto(cls, proto) -> "SymmetricKeygenParams":
        """Create from the wire message."""
        return cls(
            seed=_enum_member(SymmetricKeySeed, proto.seed),
            key_type=_enum_member(SymmetricKeyType, proto.key_type),
            size_in_bits=proto.size_in_bits,
            diversifier=proto.diversifier,
            wrap_seed=proto.wrap_seed,
        )


# =============================================================================
# CreateKeyAndCert
# =============================================================================


@dataclass
class CreateKeyAndCertRequest:
    """Request for the PA to issue keys and certificates for one device.

    Attributes:
        sku: Product configuration identifier.
        serial_number: Raw device serial number bytes.
    """

    PROTO = schema.CreateKeyAndCertRequest

    sku: str = ""
    serial_number: bytes = b""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"sku": self.sku, "serial_number": _hex(self.serial_number)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreateKeyAndCertRequest":
        """Create from dictionary."""
        return cls(
            sku=data.get("sku", ""),
            serial_number=_unhex(data.get("serial_number")),
        )

    def to_proto(self):
        """Convert to the wire message."""
        return schema.CreateKeyAndCertRequest(sku=self.sku, serial_number=self.serial_number)

    @classmethod
    def from_proto(cls, proto) -> "CreateKeyAndCertRequest":
        """Create from the wire message."""
        return cls(sku=proto.sku, serial_number=proto.serial_number)


@dataclass
class CreateKeyAndCertResponse:
    """Keys issued by the PA, in the order the SKU defines them."""

    PROTO = schema.CreateKeyAndCertResponse

    keys: List[EndorsedKey] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"keys": [key.to_dict() for key in self.keys]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CreateKeyAndCertResponse":
        """Create from dictionary."""
        return cls(keys=[EndorsedKey.from_dict(k) for k in data.get("keys", [])])

    def to_proto(self):
        """Convert to the wire message."""
        return schema.CreateKeyAndCertResponse(keys=[key.to_proto() for key in self.keys])

    @classmethod
    def from_proto(cls, proto) -> "CreateKeyAndCertResponse":
        """Create from the wire message."""
        return cls(keys=[EndorsedKey.from_proto(k) for k in proto.keys])


# =============================================================================
# EndorseCerts
# =============================================================================


@dataclass
class EndorseCertsRequest:
    """Request for the PA to sign TBS certificates produced by a device.

    Attributes:
        sku: Product configuration identifier.
        diversifier: Diversifier used to authenticate the request.
        signature: MAC or signature over the request issued by the device.
        bundles: TBS certificates with their signing key parameters.
    """

    PROTO = schema.EndorseCertsRequest

    sku: str = ""
    diversifier: bytes = b""
    signature: bytes = b""
    bundles: List[EndorseCertBundle] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sku": self.sku,
            "diversifier": _hex(self.diversifier),
            "signature": _hex(self.signature),
            "bundles": [bundle.to_dict() for bundle in self.bundles],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndorseCertsRequest":
        """Create from dictionary."""
        return cls(
            sku=data.get("sku", ""),
            diversifier=_unhex(data.get("diversifier")),
            signature=_unhex(data.get("signature")),
            bundles=[EndorseCertBundle.from_dict(b) for b in data.get("bundles", [])],
        )

    def to_proto(self):
        """Convert to the wire message."""
        return schema.EndorseCertsRequest(
            sku=self.sku,
            diversifier=self.diversifier,
            signature=self.signature,
            bundles=[bundle.to_proto() for bundle in self.bundles],
        )

    @classmethod
    def from_proto(cls, proto) -> "EndorseCertsRequest":
        """Create from the wire message."""
        return cls(
            sku=proto.sku,
            diversifier=proto.diversifier,
            signature=proto.signature,
            bundles=[EndorseCertBundle.from_proto(b) for b in proto.bundles],
        )


@dataclass
class EndorseCertsResponse:
    """Certificates endorsed by the PA, one per request bundle."""

    PROTO = schema.EndorseCertsResponse

    certs: List[Certificate] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"certs": [cert.to_dict() for cert in self.certs]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EndorseCertsResponse":
        """Create from dictionary."""
        return cls(certs=[Certificate.from_dict(c) for c in data.get("certs", [])])

    def to_proto(self):
        """Convert to the wire message."""
        return schema.EndorseCertsResponse(certs=[cert.to_proto() for cert in self.certs])

    @classmethod
    def from_proto(cls, proto) -> "EndorseCertsResponse":
        """Create from the wire message."""
        return cls(certs=[Certificate.from_proto(c) for c in proto.certs])


# =============================================================================
# DeriveSymmetricKeys
# =============================================================================


@dataclass
class DeriveSymmetricKeysRequest:
    """Request for the PA to derive symmetric keys for a SKU."""

    PROTO = schema.DeriveSymmetricKeysRequest

    sku: str = ""
    params: List[SymmetricKeygenParams] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"sku": self.sku, "params": [p.to_dict() for p in self.params]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeriveSymmetricKeysRequest":
        """Create from dictionary."""
        return cls(
            sku=data.get("sku", ""),
            params=[SymmetricKeygenParams.from_dict(p) for p in data.get("params", [])],
        )

    def to_proto(self):
        """Convert to the wire message."""
        return schema.DeriveSymmetricKeysRequest(
            sku=self.sku, params=[p.to_proto() for p in self.params]
        )

    @classmethod
    def from_proto(cls, proto) -> "DeriveSymmetricKeysRequest":
        """Create from the wire message."""
        return cls(
            sku=proto.sku,
            params=[SymmetricKeygenParams.from_proto(p) for p in proto.params],
        )


@dataclass
class DeriveSymmetricKeysResponse:
    """Derived key material, one blob per requested parameter set."""

    PROTO = schema.DeriveSymmetricKeysResponse

    keys: List[bytes] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {"keys": [_hex(key) for key in self.keys]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeriveSymmetricKeysResponse":
        """Create from dictionary."""
        return cls(keys=[_unhex(k) for k in data.get("keys", [])])

    def to_proto(self):
        """Convert to the wire message."""
        return schema.DeriveSymmetricKeysResponse(keys=list(self.keys))

    @classmethod
    def from_proto(cls, proto) -> "DeriveSymmetricKeysResponse":
        """Create from the wire message."""
        return cls(keys=list(proto.keys))
