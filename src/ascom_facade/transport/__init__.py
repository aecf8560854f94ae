"""Remote back end: Alpaca HTTP transport, client identity and image codecs."""

from ascom_facade.transport.adapter import (
    RequestEnvelope,
    ResponseEnvelope,
    TransportAdapter,
)
from ascom_facade.transport.endpoint import (
    BackendKind,
    DeviceEndpoint,
    TimeoutPolicy,
    TimeoutTier,
)
from ascom_facade.transport.imagebytes import (
    ImageArrayCompression,
    ImageArrayElementType,
    ImageArrayTransferType,
    ImageMetadata,
    decode_image_bytes,
    decode_json_image,
)
from ascom_facade.transport.session import ClientSession, next_client_number

__all__ = [
    "BackendKind",
    "ClientSession",
    "DeviceEndpoint",
    "ImageArrayCompression",
    "ImageArrayElementType",
    "ImageArrayTransferType",
    "ImageMetadata",
    "RequestEnvelope",
    "ResponseEnvelope",
    "TimeoutPolicy",
    "TimeoutTier",
    "TransportAdapter",
    "decode_image_bytes",
    "decode_json_image",
    "next_client_number",
]
