"""Image array decoding for the Alpaca camera ImageArray member.

Two transfer modes are supported:

- JSON: the standard envelope whose ``Value`` is a nested list, with
  ``Type`` (element type) and ``Rank`` fields.
- ImageBytes (``application/imagebytes``): a 44-byte little-endian
  metadata header followed by the raw element buffer.

ImageBytes metadata, version 1 (all fields int32, little-endian):

    offset  field
    0       MetadataVersion          (1)
    4       ErrorNumber
    8       ClientTransactionID
    12      ServerTransactionID
    16      DataStart                (44 for version 1)
    20      ImageElementType
    24      TransmissionElementType
    28      Rank                     (2 or 3)
    32      Dimension1
    36      Dimension2
    40      Dimension3               (0 for rank 2)

When ErrorNumber is non-zero the bytes after DataStart are a UTF-8 error
message instead of pixels. A transmission type narrower than the image
type (e.g. Byte for Int32) is widened after decoding. The element count
implied by the dimensions must match the buffer exactly.

Example:
    metadata, pixels = decode_image_bytes(response_body)
    print(metadata.rank, pixels.shape, pixels.dtype)
"""

from __future__ import annotations

import gzip
import struct
import zlib
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import numpy as np
import numpy.typing as npt

from ascom_facade.errors import ErrorTranslator, ImageDecodeError

IMAGE_BYTES_MIME_TYPE = "application/imagebytes"
JSON_MIME_TYPE = "application/json"

_HEADER = struct.Struct("<11i")
METADATA_V1_LENGTH = _HEADER.size


class ImageArrayElementType(IntEnum):
    """Element type tags used by ImageBytes and the JSON ``Type`` field."""

    UNKNOWN = 0
    INT16 = 1
    INT32 = 2
    DOUBLE = 3
    SINGLE = 4
    UINT64 = 5
    BYTE = 6
    INT64 = 7
    UINT16 = 8
    UINT32 = 9


class ImageArrayTransferType(IntEnum):
    """How the client asks for image data."""

    JSON = 0
    BASE64_HANDOFF = 1
    GET_IMAGE_BYTES = 2
    BEST_AVAILABLE = 3


class ImageArrayCompression(IntEnum):
    """Compression the client accepts on image responses."""

    NONE = 0
    DEFLATE = 1
    GZIP = 2
    GZIP_OR_DEFLATE = 3


_DTYPES: dict[ImageArrayElementType, np.dtype[Any]] = {
    ImageArrayElementType.INT16: np.dtype("<i2"),
    ImageArrayElementType.INT32: np.dtype("<i4"),
    ImageArrayElementType.DOUBLE: np.dtype("<f8"),
    ImageArrayElementType.SINGLE: np.dtype("<f4"),
    ImageArrayElementType.UINT64: np.dtype("<u8"),
    ImageArrayElementType.BYTE: np.dtype("u1"),
    ImageArrayElementType.INT64: np.dtype("<i8"),
    ImageArrayElementType.UINT16: np.dtype("<u2"),
    ImageArrayElementType.UINT32: np.dtype("<u4"),
}

#: (image type, transmission type) pairs a server may use to shrink payloads.
_WIDENINGS = frozenset(
    {
        (ImageArrayElementType.INT16, ImageArrayElementType.BYTE),
        (ImageArrayElementType.UINT16, ImageArrayElementType.BYTE),
        (ImageArrayElementType.INT32, ImageArrayElementType.BYTE),
        (ImageArrayElementType.INT32, ImageArrayElementType.INT16),
        (ImageArrayElementType.INT32, ImageArrayElementType.UINT16),
    }
)


@dataclass(frozen=True)
class ImageMetadata:
    """Decoded ImageBytes header (the BulkArrayDescriptor of a payload)."""

    metadata_version: int
    error_number: int
    client_transaction_id: int
    server_transaction_id: int
    data_start: int
    image_element_type: ImageArrayElementType
    transmission_element_type: ImageArrayElementType
    rank: int
    dimension1: int
    dimension2: int
    dimension3: int

    @property
    def shape(self) -> tuple[int, ...]:
        """Array shape implied by rank and dimensions."""
        if self.rank == 2:
            return (self.dimension1, self.dimension2)
        return (self.dimension1, self.dimension2, self.dimension3)

    @property
    def element_count(self) -> int:
        """Number of elements implied by the dimensions."""
        return int(np.prod(self.shape, dtype=np.int64))

    def pack(self) -> bytes:
        """Serialise the header back to its 44-byte form."""
        return _HEADER.pack(
            self.metadata_version,
            self.error_number,
            _as_int32(self.client_transaction_id),
            _as_int32(self.server_transaction_id),
            self.data_start,
            self.image_element_type,
            self.transmission_element_type,
            self.rank,
            self.dimension1,
            self.dimension2,
            self.dimension3,
        )


def _as_int32(value: int) -> int:
    return value - 0x100000000 if value > 0x7FFFFFFF else value


def _element_type(value: int, field_name: str) -> ImageArrayElementType:
    try:
        element_type = ImageArrayElementType(value)
    except ValueError as exc:
        raise ImageDecodeError(f"{field_name} {value} is not a known type") from exc
    if element_type is ImageArrayElementType.UNKNOWN:
        raise ImageDecodeError(f"{field_name} is 0 (Unknown)")
    return element_type


# =============================================================================
# ImageBytes
# =============================================================================


def parse_metadata(payload: bytes) -> ImageMetadata:
    """Decode and validate the ImageBytes header.

    Args:
        payload: Complete response body.

    Returns:
        Header fields. Element types are validated only when the header
        does not report an error.

    Raises:
        ImageDecodeError: If the payload is shorter than the header, the
            metadata version is unsupported, or a field is invalid.
    """
    if len(payload) < METADATA_V1_LENGTH:
        raise ImageDecodeError(
            f"ImageBytes payload of {len(payload)} bytes is shorter than the "
            f"{METADATA_V1_LENGTH}-byte metadata header"
        )
    fields = _HEADER.unpack_from(payload)
    version, error_number = fields[0], fields[1]
    if version != 1:
        raise ImageDecodeError(f"Unsupported ImageBytes metadata version {version}")
    data_start = fields[4]
    if not METADATA_V1_LENGTH <= data_start <= len(payload):
        raise ImageDecodeError(f"DataStart {data_start} is outside the payload")

    if error_number != 0:
        image_type = transmission_type = ImageArrayElementType.UNKNOWN
        rank = fields[7]
    else:
        image_type = _element_type(fields[5], "ImageElementType")
        transmission_type = _element_type(fields[6], "TransmissionElementType")
        rank = fields[7]
        if rank not in (2, 3):
            raise ImageDecodeError(f"Image rank must be 2 or 3, got {rank}")
        dims = fields[8:10] if rank == 2 else fields[8:11]
        if any(d <= 0 for d in dims):
            raise ImageDecodeError(f"Image dimensions must be positive, got {dims}")

    return ImageMetadata(
        metadata_version=version,
        error_number=error_number,
        client_transaction_id=fields[2] & 0xFFFFFFFF,
        server_transaction_id=fields[3] & 0xFFFFFFFF,
        data_start=data_start,
        image_element_type=image_type,
        transmission_element_type=transmission_type,
        rank=rank,
        dimension1=fields[8],
        dimension2=fields[9],
        dimension3=fields[10],
    )


def decode_image_bytes(
    payload: bytes,
    content_encoding: str | None = None,
) -> tuple[ImageMetadata, npt.NDArray[Any]]:
    """Decode an ``application/imagebytes`` response body.

    Business context: Full-frame images from large sensors are tens of
    megabytes; the binary form avoids JSON parsing entirely. Because the
    server may narrow the element type, the decoder is responsible for
    handing back the type the camera actually produces.

    Args:
        payload: Response body, possibly still compressed.
        content_encoding: ``Content-Encoding`` header value, if any.

    Returns:
        Tuple of (metadata, array) where the array has shape
        (Dimension1, Dimension2[, Dimension3]) and the image dtype.

    Raises:
        AscomError: Translated device error when ErrorNumber is non-zero.
        ImageDecodeError: For malformed headers, unsupported type
            combinations, or a buffer whose length does not equal
            element count times element size.

    Example:
        >>> header = ImageMetadata(1, 0, 1, 1, 44, ImageArrayElementType.INT32,
        ...                        ImageArrayElementType.INT32, 2, 2, 3, 0)
        >>> body = header.pack() + bytes(24)
        >>> decode_image_bytes(body)[1].shape
        (2, 3)
    """
    payload = decompress(payload, content_encoding)
    metadata = parse_metadata(payload)
    data = memoryview(payload)[metadata.data_start :]

    if metadata.error_number != 0:
        message = bytes(data).decode("utf-8", errors="replace")
        raise ErrorTranslator.translate(metadata.error_number, message, "remote")

    image_type = metadata.image_element_type
    transmission_type = metadata.transmission_element_type
    if image_type != transmission_type and (
        (image_type, transmission_type) not in _WIDENINGS
    ):
        raise ImageDecodeError(
            f"Cannot convert transmission type {transmission_type.name} "
            f"to image type {image_type.name}"
        )

    wire_dtype = _DTYPES[transmission_type]
    expected = metadata.element_count * wire_dtype.itemsize
    if len(data) != expected:
        raise ImageDecodeError(
            f"Image buffer holds {len(data)} bytes but {metadata.shape} "
            f"{transmission_type.name} elements need {expected}"
        )

    array = np.frombuffer(data, dtype=wire_dtype).reshape(metadata.shape)
    return metadata, array.astype(_DTYPES[image_type].newbyteorder("="))


def decompress(payload: bytes, content_encoding: str | None) -> bytes:
    """Undo HTTP content encoding on a raw response body.

    Args:
        payload: Body bytes as received.
        content_encoding: ``gzip``, ``deflate``, ``identity`` or None.

    Raises:
        ImageDecodeError: If the body cannot be decompressed or the
            encoding is unknown.
    """
    encoding = (content_encoding or "identity").strip().lower()
    try:
        if encoding == "identity":
            return payload
        if encoding == "gzip":
            return gzip.decompress(payload)
        if encoding == "deflate":
            try:
                return zlib.decompress(payload)
            except zlib.error:
                # raw deflate stream without the zlib wrapper
                return zlib.decompress(payload, -zlib.MAX_WBITS)
    except (OSError, EOFError, zlib.error) as exc:
        raise ImageDecodeError(f"Cannot decompress {encoding} payload: {exc}") from exc
    raise ImageDecodeError(f"Unsupported Content-Encoding {content_encoding!r}")


# =============================================================================
# JSON
# =============================================================================


def decode_json_image(envelope: dict[str, Any]) -> npt.NDArray[Any]:
    """Decode the ``Value`` of a JSON ImageArray envelope.

    Args:
        envelope: Parsed JSON response with ``Type``, ``Rank`` and
            ``Value`` keys.

    Returns:
        Array with the declared rank; Int32 (Type 2) by default,
        float64 for Type 3, int16 for Type 1.

    Raises:
        ImageDecodeError: If the value is ragged, its rank differs from
            ``Rank``, or ``Type`` is not a valid element type.
    """
    value = envelope.get("Value")
    rank = envelope.get("Rank", 2)
    type_code = envelope.get("Type", ImageArrayElementType.INT32)
    element_type = _element_type(int(type_code), "Type")
    try:
        array = np.asarray(value, dtype=_DTYPES[element_type])
    except (TypeError, ValueError) as exc:
        raise ImageDecodeError(f"Image value is not a regular array: {exc}") from exc
    if array.ndim != rank or rank not in (2, 3):
        raise ImageDecodeError(
            f"Image value has rank {array.ndim} but the envelope declares {rank}"
        )
    return array.astype(array.dtype.newbyteorder("="))


def accept_header(transfer: ImageArrayTransferType) -> str:
    """``Accept`` header value for an image request."""
    if transfer in (
        ImageArrayTransferType.GET_IMAGE_BYTES,
        ImageArrayTransferType.BEST_AVAILABLE,
    ):
        return f"{IMAGE_BYTES_MIME_TYPE}, {JSON_MIME_TYPE}, text/json"
    return JSON_MIME_TYPE


def accept_encoding_header(compression: ImageArrayCompression) -> str:
    """``Accept-Encoding`` header value for an image request."""
    return {
        ImageArrayCompression.NONE: "identity",
        ImageArrayCompression.DEFLATE: "deflate",
        ImageArrayCompression.GZIP: "gzip",
        ImageArrayCompression.GZIP_OR_DEFLATE: "gzip, deflate",
    }[compression]
