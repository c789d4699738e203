"""
Unit tests for the protobuf wire codec.
"""

import pytest

from provlink.exceptions import CodecError
from provlink.pa import schema
from provlink.pa.codec import deserializer, serialize
from provlink.pa.models import (
    Certificate,
    CreateKeyAndCertRequest,
    CreateKeyAndCertResponse,
    EndorsedKey,
    SigningKeyParams,
)


class TestSerialize:
    """Tests for serialize()."""

    def test_protobuf_binary(self):
        """Test messages encode as protobuf binary with proto3 field numbers."""
        payload = serialize(CreateKeyAndCertRequest(sku="abc123"))

        # field 1, wire type 2, length 6
        assert payload == b"\n\x06abc123"

    def test_matches_schema_message(self):
        """Test the payload equals the schema message's own encoding."""
        request = CreateKeyAndCertRequest(sku="abc123", serial_number=b"\x01\x02")

        expected = schema.CreateKeyAndCertRequest(
            sku="abc123", serial_number=b"\x01\x02"
        ).SerializeToString()
        assert serialize(request) == expected

    def test_empty_message(self):
        """Test the empty message encodes to no bytes."""
        assert serialize(CreateKeyAndCertResponse()) == b""

    def test_unicode_sku(self):
        """Test non-ASCII SKUs are sent as UTF-8."""
        payload = serialize(CreateKeyAndCertRequest(sku="sku-ü"))

        assert schema.CreateKeyAndCertRequest.FromString(payload).sku == "sku-ü"

    def test_non_message(self):
        """Test objects without to_proto() raise CodecError."""
        with pytest.raises(CodecError) as exc_info:
            serialize(object())

        assert exc_info.value.message_type == "object"

    def test_wrong_field_type(self):
        """Test a field of the wrong type raises CodecError."""
        with pytest.raises(CodecError) as exc_info:
            serialize(CreateKeyAndCertRequest(sku=5))

        assert exc_info.value.message_type == "CreateKeyAndCertRequest"


class ListElementMessage:
    """Message whose conversion trips over a non-message list element."""

    PROTO = schema.CreateKeyAndCertResponse

    @classmethod
    def from_proto(cls, proto):
        return [key.missing_field for key in [5]]


class TestDeserializer:
    """Tests for deserializer()."""

    def test_decode(self):
        """Test a payload decodes to the requested type."""
        decode = deserializer(CreateKeyAndCertResponse)
        payload = serialize(
            CreateKeyAndCertResponse(keys=[EndorsedKey(cert=Certificate(b"cert"))])
        )

        response = decode(payload)

        assert isinstance(response, CreateKeyAndCertResponse)
        assert response.keys[0].cert.blob == b"cert"

    def test_decode_raw_bytes(self):
        """Test a hand-built payload decodes to the dataclass."""
        request = deserializer(CreateKeyAndCertRequest)(b"\n\x06abc123")

        assert request == CreateKeyAndCertRequest(sku="abc123")

    def test_empty_payload(self):
        """Test an empty payload is the empty message."""
        assert deserializer(CreateKeyAndCertResponse)(b"") == CreateKeyAndCertResponse()

    @pytest.mark.parametrize("payload", [b"\n\x05ab", b"\xff\xff"])
    def test_bad_payload(self, payload):
        """Test malformed payloads raise CodecError."""
        with pytest.raises(CodecError) as exc_info:
            deserializer(CreateKeyAndCertRequest)(payload)

        assert exc_info.value.message_type == "CreateKeyAndCertRequest"

    def test_unknown_enum_number(self):
        """Test an enum number outside the schema raises CodecError."""
        # field 2 (signature_algorithm), varint 7
        with pytest.raises(CodecError) as exc_info:
            deserializer(SigningKeyParams)(b"\x10\x07")

        assert "SignatureAlgorithm" in str(exc_info.value)

    def test_attribute_error_becomes_codec_error(self):
        """Test AttributeError during conversion raises CodecError."""
        with pytest.raises(CodecError) as exc_info:
            deserializer(ListElementMessage)(b"")

        assert exc_info.value.message_type == "ListElementMessage"

    def test_decoder_name(self):
        """Test decoders are named after their message type."""
        assert deserializer(CreateKeyAndCertRequest).__name__ == "decode_CreateKeyAndCertRequest"
