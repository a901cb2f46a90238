"""Error kinds raised by the blockcrypt pipeline.

Every error derives from ``CryptError``, itself a ``ValueError``, so callers
that only care about "the operation failed" can keep catching ``ValueError``.
"""


class CryptError(ValueError):
    """Base class for all pipeline failures."""
    kind = 'error'
    exit_code = 1


class IoFailure(CryptError):
    """Reading, writing or opening a file failed."""
    kind = 'I/O error'
    exit_code = 3


class MalformedCiphertext(CryptError):
    """Ciphertext is not whole blocks, or its nested container is invalid."""
    kind = 'malformed ciphertext'
    exit_code = 4


class DeserializationError(CryptError):
    """Container bytes could not be parsed."""
    kind = 'deserialization error'
    exit_code = 5


class SerializationError(CryptError):
    """Container bytes could not be produced."""
    kind = 'serialization error'
    exit_code = 6


class KeyDerivationFailure(CryptError):
    """Salt generation or key stretching failed."""
    kind = 'key derivation failure'
    exit_code = 7


class EncodingError(CryptError):
    """Text encoding or decoding rejected the input."""
    kind = 'encoding error'
    exit_code = 8


class CompressionFailure(CryptError):
    kind = 'compression failure'
    exit_code = 9


class DecompressionFailure(CryptError):
    kind = 'decompression failure'
    exit_code = 10


class InvalidKey(CryptError):
    """Cipher key has the wrong length."""
    kind = 'invalid key'
    exit_code = 11


EXIT_CODES = {
    cls.__name__: cls.exit_code
    for cls in (
        CryptError, IoFailure, MalformedCiphertext, DeserializationError,
        SerializationError, KeyDerivationFailure, EncodingError,
        CompressionFailure, DecompressionFailure, InvalidKey,
    )
}
