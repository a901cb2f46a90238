"""
AES block cipher adapter.

Wraps the raw AES block transform from `cryptography` with the padding
bookkeeping needed for arbitrary-length input. Each 16-byte block is
transformed on its own (no chaining, no IV); two equal plaintext blocks give
equal ciphertext blocks under the same key.

Encryption output is a container: (PaddingCount(extra), ciphertext blocks).
"""
import logging

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from . import buf, wrapper
from .config import DEFAULT_CONFIG, CipherMode
from .errors import DeserializationError, InvalidKey, MalformedCiphertext

logger = logging.getLogger(__name__)

AES_BLOCKSIZE = DEFAULT_CONFIG.BLOCK_SIZE


class BlockCipher:
    """Block-at-a-time cipher with padding removal on decryption."""
    KEY_SIZE = 0
    BLOCK_SIZE = AES_BLOCKSIZE
    NAME = ''

    @classmethod
    def _cipher(cls, key: bytes) -> Cipher:
        key = bytes(key)
        if len(key) != cls.KEY_SIZE:
            raise InvalidKey(f"{cls.NAME} requires a {cls.KEY_SIZE}-byte key, got {len(key)} bytes")
        # TODO: move to an AEAD mode once the container carries a nonce and tag
        return Cipher(algorithms.AES(key), modes.ECB())

    @classmethod
    def crypt(cls, data: bytes, key: bytes, decrypt: bool) -> bytes:
        if decrypt:
            return cls.decrypt(data, key)
        return cls.encrypt(data, key)

    @classmethod
    def encrypt(cls, data: bytes, key: bytes) -> bytes:
        """
        Encrypt arbitrary-length data.

        Args:
            data: Plaintext bytes (may be empty).
            key: Cipher key of exactly KEY_SIZE bytes.

        Returns:
            bytes: Encoded (PaddingCount, ciphertext) container.

        Raises:
            InvalidKey: If the key has the wrong length.
        """
        encryptor = cls._cipher(key).encryptor()
        blocks, extra = buf.chunk(data, cls.BLOCK_SIZE)
        ciphertext = buf.join([encryptor.update(block) for block in blocks]) + encryptor.finalize()
        logger.debug(f"{cls.NAME}: encrypted {len(blocks)} blocks, extra={extra}")
        return wrapper.encode(wrapper.PaddingCount(extra), ciphertext)

    @classmethod
    def decrypt(cls, data: bytes, key: bytes) -> bytes:
        """
        Decrypt a container produced by `encrypt`.

        Raises:
            MalformedCiphertext: If the container is invalid, the ciphertext
                is not whole blocks, or the padding count is out of range.
            InvalidKey: If the key has the wrong length.
        """
        try:
            metadata, ciphertext = wrapper.decode_as(data, wrapper.PaddingCount)
        except DeserializationError as e:
            raise MalformedCiphertext(f"Invalid {cls.NAME} container: {e}") from e

        blocks, trailing = buf.chunk(ciphertext, cls.BLOCK_SIZE)
        if trailing != 0:
            raise MalformedCiphertext(
                f"Input not full {cls.NAME} blocks: got {trailing} extra trailing bytes"
            )
        extra = metadata.value
        if extra >= cls.BLOCK_SIZE:
            raise MalformedCiphertext(f"Padding count {extra} out of range for {cls.BLOCK_SIZE}-byte blocks")
        if extra and not blocks:
            raise MalformedCiphertext(f"Padding count {extra} given for empty ciphertext")

        decryptor = cls._cipher(key).decryptor()
        plaintext = buf.join([decryptor.update(block) for block in blocks]) + decryptor.finalize()
        logger.debug(f"{cls.NAME}: decrypted {len(blocks)} blocks, extra={extra}")
        return truncate_padding(plaintext, extra, cls.BLOCK_SIZE)


class CipherAes128(BlockCipher):
    """AES with a 128-bit key."""
    KEY_SIZE = DEFAULT_CONFIG.AES128_KEY_SIZE
    NAME = 'AES-128'


class CipherAes256(BlockCipher):
    """AES with a 256-bit key."""
    KEY_SIZE = DEFAULT_CONFIG.AES256_KEY_SIZE
    NAME = 'AES-256'


CIPHERS = {
    CipherMode.AES128: CipherAes128,
    CipherMode.AES256: CipherAes256,
}


def truncate_padding(plaintext: bytes, extra: int, block_size: int = AES_BLOCKSIZE) -> bytes:
    """Drop the zero padding of the final block; extra == 0 means no padding block."""
    if extra == 0:
        return plaintext
    return plaintext[:len(plaintext) - block_size + extra]


def get_cipher(mode) -> type:
    """Look up a cipher class by CipherMode or its command-line name."""
    if not isinstance(mode, CipherMode):
        mode = CipherMode.from_cli(mode)
    return CIPHERS[mode]
