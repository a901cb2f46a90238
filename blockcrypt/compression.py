"""
LZ4 and zstd compression stage.

Compression always runs on plaintext, before encryption. The buffered
helpers wrap the compressed stream as (OriginalLength, compressed bytes) so
decompression can verify it recovered every byte.
"""
import io
import logging
from typing import BinaryIO, Optional

import lz4.frame
import zstandard as zstd

from . import wrapper
from .config import DEFAULT_CONFIG, Compression
from .errors import CompressionFailure, DecompressionFailure, DeserializationError, IoFailure

logger = logging.getLogger(__name__)

CHUNK_SIZE = DEFAULT_CONFIG.CHUNK_SIZE


def _codec(codec) -> Compression:
    if not isinstance(codec, Compression):
        codec = Compression.from_cli(codec)
    return codec


def default_level(codec) -> int:
    if _codec(codec) is Compression.ZSTD:
        return DEFAULT_CONFIG.ZSTD_DEFAULT_LEVEL
    return DEFAULT_CONFIG.LZ4_DEFAULT_LEVEL


def _copy(src: BinaryIO, dst: BinaryIO) -> int:
    written = 0
    for chunk in iter(lambda: src.read(CHUNK_SIZE), b''):
        dst.write(chunk)
        written += len(chunk)
    return written


def compress(src: BinaryIO, dst: BinaryIO, codec, level: Optional[int] = None) -> int:
    """
    Compress everything readable from src into dst.

    Returns:
        int: Number of uncompressed bytes consumed.

    Raises:
        CompressionFailure: If the codec fails.
        IoFailure: If reading or writing fails.
    """
    codec = _codec(codec)
    if level is None:
        level = default_level(codec)
    try:
        if codec is Compression.NONE:
            return _copy(src, dst)
        if codec is Compression.LZ4:
            compressor = lz4.frame.LZ4FrameCompressor(compression_level=level)
            consumed = 0
            dst.write(compressor.begin())
            for chunk in iter(lambda: src.read(CHUNK_SIZE), b''):
                dst.write(compressor.compress(chunk))
                consumed += len(chunk)
            dst.write(compressor.flush())
            return consumed
        consumed, _ = zstd.ZstdCompressor(level=level).copy_stream(
            src, dst, read_size=CHUNK_SIZE, write_size=CHUNK_SIZE
        )
        return consumed
    except OSError as e:
        raise IoFailure(f"I/O error during {codec} compression: {e}") from e
    except Exception as e:
        logger.error(f"{codec} compression failed: {e}")
        raise CompressionFailure(f"Error compressing with {codec}: {e}") from e


def decompress(src: BinaryIO, dst: BinaryIO, codec) -> int:
    """
    Decompress everything readable from src into dst.

    Returns:
        int: Number of decompressed bytes written.

    Raises:
        DecompressionFailure: If the stream is invalid or truncated.
        IoFailure: If reading or writing fails.
    """
    codec = _codec(codec)
    try:
        if codec is Compression.NONE:
            return _copy(src, dst)
        if codec is Compression.LZ4:
            decompressor = lz4.frame.LZ4FrameDecompressor()
            written = 0
            for chunk in iter(lambda: src.read(CHUNK_SIZE), b''):
                out = decompressor.decompress(chunk)
                dst.write(out)
                written += len(out)
            if not decompressor.eof:
                raise DecompressionFailure("Truncated LZ4 frame")
            if decompressor.unused_data:
                raise DecompressionFailure(
                    f"{len(decompressor.unused_data)} unexpected bytes after end of LZ4 frame"
                )
            return written
        _, written = zstd.ZstdDecompressor().copy_stream(
            src, dst, read_size=CHUNK_SIZE, write_size=CHUNK_SIZE
        )
        return written
    except DecompressionFailure:
        raise
    except OSError as e:
        raise IoFailure(f"I/O error during {codec} decompression: {e}") from e
    except Exception as e:
        logger.error(f"{codec} decompression failed: {e}")
        raise DecompressionFailure(f"Error decompressing with {codec}: {e}") from e


def compress_from(src: BinaryIO, codec, level: Optional[int] = None) -> bytes:
    """Compress a readable stream and wrap it as (OriginalLength, compressed)."""
    out = io.BytesIO()
    consumed = compress(src, out, codec, level)
    compressed = out.getvalue()
    logger.debug(f"Compressed {consumed} bytes to {len(compressed)} bytes with {_codec(codec)}")
    return wrapper.encode(wrapper.OriginalLength(consumed), compressed)


def compress_bytes(data: bytes, codec, level: Optional[int] = None) -> bytes:
    """Compress data and wrap it as (OriginalLength, compressed)."""
    return compress_from(io.BytesIO(data), codec, level)


def decompress_bytes(data: bytes, codec) -> bytes:
    """
    Unwrap an (OriginalLength, compressed) container and inflate it.

    Raises:
        DecompressionFailure: If the container is invalid or the inflated
            length does not match the recorded original length.
    """
    try:
        metadata, compressed = wrapper.decode_as(data, wrapper.OriginalLength)
    except DeserializationError as e:
        raise DecompressionFailure(f"Invalid compressed container: {e}") from e
    out = io.BytesIO()
    decompress(io.BytesIO(compressed), out, codec)
    plain = out.getvalue()
    if len(plain) != metadata.value:
        raise DecompressionFailure(
            f"Decompressed length mismatch: got {len(plain)} bytes, expected {metadata.value}"
        )
    logger.debug(f"Decompressed {len(compressed)} bytes to {len(plain)} bytes with {_codec(codec)}")
    return plain
