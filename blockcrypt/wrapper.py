"""
Generic (metadata, payload) container used at every pipeline boundary.

Container layout (big-endian):
- Magic: 4 bytes (b'BCW1')
- Tag: 1 byte (1 = Salt, 2 = PaddingCount, 3 = OriginalLength)
- Metadata length: 4 bytes
- Metadata: Salt as raw bytes, counts as unsigned 64-bit integers
- Payload length: 8 bytes
- Payload: ciphertext or compressed bytes
- CRC-32: 4 bytes over every preceding byte

The same record carries (salt, ciphertext) at the top level,
(padding count, ciphertext blocks) inside the cipher adapter and
(original length, compressed bytes) at the compression boundary.
"""
import logging
import struct
import zlib
from dataclasses import dataclass
from typing import Dict, Tuple, Type, Union

from .config import DEFAULT_CONFIG
from .errors import DeserializationError, SerializationError

logger = logging.getLogger(__name__)

MAGIC = DEFAULT_CONFIG.CONTAINER_MAGIC
_PREFIX = struct.Struct('>4sBI')  # magic, tag, metadata length
_PAYLOAD_LEN = struct.Struct('>Q')
_COUNT = struct.Struct('>Q')
_CRC = struct.Struct('>I')
MIN_CONTAINER_LENGTH = _PREFIX.size + _PAYLOAD_LEN.size + _CRC.size


@dataclass(frozen=True)
class Salt:
    """Key-derivation salt stored next to the ciphertext."""
    value: bytes
    TAG = 1

    def to_bytes(self) -> bytes:
        if not isinstance(self.value, (bytes, bytearray)):
            raise SerializationError(f"Salt must be bytes, got {type(self.value).__name__}")
        return bytes(self.value)

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'Salt':
        return cls(bytes(raw))


@dataclass(frozen=True)
class _Count:
    value: int

    def to_bytes(self) -> bytes:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise SerializationError(f"{type(self).__name__} must be an integer, got {self.value!r}")
        try:
            return _COUNT.pack(self.value)
        except struct.error as e:
            raise SerializationError(f"{type(self).__name__} {self.value} out of range: {e}") from e

    @classmethod
    def from_bytes(cls, raw: bytes):
        if len(raw) != _COUNT.size:
            raise DeserializationError(
                f"{cls.__name__} metadata must be {_COUNT.size} bytes, got {len(raw)}"
            )
        return cls(_COUNT.unpack(raw)[0])


@dataclass(frozen=True)
class PaddingCount(_Count):
    """Number of genuine bytes in the final zero-padded cipher block."""
    TAG = 2


@dataclass(frozen=True)
class OriginalLength(_Count):
    """Length of the data before compression."""
    TAG = 3


Metadata = Union[Salt, PaddingCount, OriginalLength]

METADATA_TYPES: Dict[int, Type] = {cls.TAG: cls for cls in (Salt, PaddingCount, OriginalLength)}


def encode(metadata: Metadata, payload: bytes) -> bytes:
    """
    Encode metadata and payload into a container.

    Raises:
        SerializationError: If the metadata or payload cannot be represented.
    """
    if type(metadata) not in METADATA_TYPES.values():
        raise SerializationError(f"Unsupported metadata type: {type(metadata).__name__}")
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise SerializationError(f"Payload must be bytes, got {type(payload).__name__}")
    payload = bytes(payload)
    meta = metadata.to_bytes()
    try:
        body = (
            _PREFIX.pack(MAGIC, metadata.TAG, len(meta)) + meta +
            _PAYLOAD_LEN.pack(len(payload)) + payload
        )
    except struct.error as e:
        raise SerializationError(f"Container field out of range: {e}") from e
    logger.debug(f"Encoded {type(metadata).__name__} container: metadata={len(meta)} bytes, payload={len(payload)} bytes")
    return body + _CRC.pack(zlib.crc32(body) & 0xFFFFFFFF)


def decode(data: bytes) -> Tuple[Metadata, bytes]:
    """
    Decode a container produced by `encode`.

    Returns:
        tuple: (metadata, payload)

    Raises:
        DeserializationError: If the container is truncated, corrupted or has
            trailing bytes.
    """
    data = bytes(data)
    if len(data) < MIN_CONTAINER_LENGTH:
        raise DeserializationError(
            f"Container too short ({len(data)} bytes, expected at least {MIN_CONTAINER_LENGTH})"
        )
    magic, tag, meta_len = _PREFIX.unpack_from(data, 0)
    if magic != MAGIC:
        raise DeserializationError(f"Invalid container signature: {magic.hex()}")
    metadata_type = METADATA_TYPES.get(tag)
    if metadata_type is None:
        raise DeserializationError(f"Unknown metadata tag: {tag}")

    offset = _PREFIX.size
    if len(data) < offset + meta_len + _PAYLOAD_LEN.size + _CRC.size:
        raise DeserializationError(f"Container too short for {meta_len}-byte metadata at offset {offset}")
    meta = data[offset:offset + meta_len]
    offset += meta_len

    payload_len = _PAYLOAD_LEN.unpack_from(data, offset)[0]
    offset += _PAYLOAD_LEN.size
    expected = offset + payload_len + _CRC.size
    if len(data) != expected:
        raise DeserializationError(
            f"Container length mismatch: {len(data)} bytes, header describes {expected}"
        )
    payload = data[offset:offset + payload_len]
    offset += payload_len

    stored_crc = _CRC.unpack_from(data, offset)[0]
    computed_crc = zlib.crc32(data[:offset]) & 0xFFFFFFFF
    if stored_crc != computed_crc:
        raise DeserializationError(
            f"Container checksum mismatch: stored {stored_crc:08x}, computed {computed_crc:08x}"
        )

    metadata = metadata_type.from_bytes(meta)
    logger.debug(f"Decoded {metadata_type.__name__} container: payload={payload_len} bytes")
    return metadata, payload


def decode_as(data: bytes, metadata_type: Type) -> Tuple[Metadata, bytes]:
    """Decode a container and require a specific metadata variant."""
    metadata, payload = decode(data)
    if not isinstance(metadata, metadata_type):
        raise DeserializationError(
            f"Expected {metadata_type.__name__} container, got {type(metadata).__name__}"
        )
    return metadata, payload


def describe(data: bytes) -> dict:
    """Summarize a container for display."""
    metadata, payload = decode(data)
    value = metadata.value
    return {
        'type': type(metadata).__name__,
        'tag': metadata.TAG,
        'metadata': value.decode('ascii', errors='replace') if isinstance(value, bytes) else value,
        'payload_length': len(payload),
        'container_length': len(data),
        'payload': payload,
    }
