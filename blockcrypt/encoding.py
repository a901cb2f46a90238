"""
Outermost text encoding stage: plain, lowercase hex or standard Base64.

Encoders and decoders stream in fixed windows between binary file objects.
Decoding ignores ASCII whitespace so files touched by editors still decode.
"""
import base64
import binascii
import io
import logging
from typing import BinaryIO

from .config import DEFAULT_CONFIG, Encoding
from .errors import EncodingError, IoFailure

logger = logging.getLogger(__name__)

# Multiple of 3 so full windows encode without padding
B64_WINDOW = (DEFAULT_CONFIG.CHUNK_SIZE // 3) * 3
_WHITESPACE = b' \t\r\n\x0b\x0c'


def _encoding(encoding) -> Encoding:
    if not isinstance(encoding, Encoding):
        encoding = Encoding.from_cli(encoding)
    return encoding


def _encode_hex(src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    for chunk in iter(lambda: src.read(DEFAULT_CONFIG.CHUNK_SIZE), b''):
        out = binascii.hexlify(chunk)
        dst.write(out)
        written += len(out)
    return written


def _decode_hex(src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    carry = b''
    for chunk in iter(lambda: src.read(DEFAULT_CONFIG.CHUNK_SIZE), b''):
        data = carry + chunk.translate(None, _WHITESPACE)
        cut = len(data) - len(data) % 2
        data, carry = data[:cut], data[cut:]
        try:
            out = binascii.unhexlify(data)
        except (binascii.Error, ValueError) as e:
            raise EncodingError(f"Invalid hex input: {e}") from e
        dst.write(out)
        written += len(out)
    if carry:
        raise EncodingError("Invalid hex input: odd number of digits")
    return written


def _encode_b64(src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    carry = b''
    for chunk in iter(lambda: src.read(B64_WINDOW), b''):
        data = carry + chunk
        cut = len(data) - len(data) % 3
        data, carry = data[:cut], data[cut:]
        out = base64.b64encode(data)
        dst.write(out)
        written += len(out)
    if carry:
        out = base64.b64encode(carry)
        dst.write(out)
        written += len(out)
    return written


def _decode_b64(src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    carry = b''
    finished = False
    for chunk in iter(lambda: src.read(DEFAULT_CONFIG.CHUNK_SIZE), b''):
        data = carry + chunk.translate(None, _WHITESPACE)
        if finished and data:
            raise EncodingError("Invalid base64 input: data after padding")
        cut = len(data) - len(data) % 4
        data, carry = data[:cut], data[cut:]
        if b'=' in data[:-2]:
            raise EncodingError("Invalid base64 input: padding inside data")
        finished = data.endswith(b'=')
        try:
            out = base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise EncodingError(f"Invalid base64 input: {e}") from e
        dst.write(out)
        written += len(out)
    if carry:
        raise EncodingError(f"Invalid base64 input: {len(carry)} trailing characters")
    return written


def encode(src: BinaryIO, dst: BinaryIO, encoding) -> int:
    """
    Encode everything readable from src into dst.

    Returns:
        int: Number of bytes written to dst.
    """
    encoding = _encoding(encoding)
    try:
        if encoding is Encoding.HEX:
            return _encode_hex(src, dst)
        if encoding is Encoding.B64:
            return _encode_b64(src, dst)
        written = 0
        for chunk in iter(lambda: src.read(DEFAULT_CONFIG.CHUNK_SIZE), b''):
            dst.write(chunk)
            written += len(chunk)
        return written
    except OSError as e:
        raise IoFailure(f"I/O error during {encoding} encoding: {e}") from e


def decode(src: BinaryIO, dst: BinaryIO, encoding) -> int:
    """
    Decode everything readable from src into dst.

    Returns:
        int: Number of bytes written to dst.

    Raises:
        EncodingError: If the input is not valid for the encoding.
    """
    encoding = _encoding(encoding)
    try:
        if encoding is Encoding.HEX:
            return _decode_hex(src, dst)
        if encoding is Encoding.B64:
            return _decode_b64(src, dst)
        return encode(src, dst, Encoding.PLAIN)
    except OSError as e:
        raise IoFailure(f"I/O error during {encoding} decoding: {e}") from e


def encode_bytes(data: bytes, encoding) -> bytes:
    out = io.BytesIO()
    encode(io.BytesIO(data), out, encoding)
    return out.getvalue()


def decode_bytes(data: bytes, encoding) -> bytes:
    out = io.BytesIO()
    decode(io.BytesIO(data), out, encoding)
    logger.debug(f"Decoded {len(data)} {_encoding(encoding)} bytes to {len(out.getvalue())} bytes")
    return out.getvalue()
