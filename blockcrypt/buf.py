"""Fixed-size block chunking for block ciphers."""
import logging
from typing import List, Sequence, Tuple

logger = logging.getLogger(__name__)


def chunk(data: bytes, block_size: int) -> Tuple[List[bytes], int]:
    """
    Split data into block_size blocks, zero-padding the final partial block.

    Args:
        data: Arbitrary bytes, possibly empty.
        block_size: Size of every output block.

    Returns:
        tuple: (blocks, extra) where extra is the number of genuine bytes in
        the padded final block, or 0 when no padding block was needed.
    """
    if block_size <= 0:
        raise ValueError(f"Block size must be positive, got {block_size}")
    data = bytes(data)
    full, extra = divmod(len(data), block_size)
    blocks = [data[i * block_size:(i + 1) * block_size] for i in range(full)]
    if extra:
        blocks.append(data[full * block_size:] + b'\x00' * (block_size - extra))
    logger.debug(f"Chunked {len(data)} bytes into {len(blocks)} blocks of {block_size} (extra={extra})")
    return blocks, extra


def join(blocks: Sequence[bytes]) -> bytes:
    """Concatenate blocks back into one buffer."""
    return b''.join(blocks)
