"""Wire codec for Provisioning Appliance messages.

Messages travel over gRPC in Protocol Buffers binary encoding, using the
``pa`` schema registered by provlink.pa.schema. Each model converts itself
with ``to_proto()``/``from_proto()``; this module provides the serializer
and deserializer callables that gRPC expects for a unary-unary method.

Example:
    ```python
    from provlink.pa.codec import deserializer, serialize
    from provlink.pa.models import CreateKeyAndCertRequest

    payload = serialize(CreateKeyAndCertRequest(sku="abc123"))
    request = deserializer(CreateKeyAndCertRequest)(payload)
    ```
"""

from typing import Any, Callable, Type, TypeVar

from google.protobuf.message import DecodeError

from provlink.exceptions import CodecError

M = TypeVar("M")


def serialize(message: Any) -> bytes:
    """Encode a message in protobuf binary format.

    Args:
        message: Any model from provlink.pa.models.

    Returns:
        Serialized protobuf message.

    Raises:
        CodecError: If the message cannot be encoded.
    """
    to_proto = getattr(message, "to_proto", None)
    if to_proto is None:
        raise CodecError("object has no to_proto()", type(message).__name__)

    try:
        proto = to_proto()
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise CodecError(str(e), type(message).__name__) from e
    return proto.SerializeToString()


def deserializer(message_type: Type[M]) -> Callable[[bytes], M]:
    """Build a decoder for one message type.

    Args:
        message_type: Model class with a ``PROTO`` wire class and a
            ``from_proto`` classmethod.

    Returns:
        Callable turning protobuf bytes into a ``message_type`` instance.
    """
    proto_type = message_type.PROTO

    def decode(payload: bytes) -> M:
        try:
            proto = proto_type.FromString(payload)
        except DecodeError as e:
            raise CodecError(f"invalid protobuf payload: {e}", message_type.__name__) from e

        try:
            return message_type.from_proto(proto)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise CodecError(str(e), message_type.__name__) from e

    decode.__name__ = f"decode_{message_type.__name__}"
    return decode
