"""blockcrypt: AES block encryption with PBKDF2 keys, compression and text encoding."""
from .aes import CipherAes128, CipherAes256, get_cipher
from .config import PROGRAM_VERSION as __version__
from .config import CipherMode, Compression, CryptConfig, Encoding, KeyType
from .errors import (
    CompressionFailure, CryptError, DecompressionFailure, DeserializationError, EncodingError,
    InvalidKey, IoFailure, KeyDerivationFailure, MalformedCiphertext, SerializationError,
)
from .pipeline import Pipeline, PipelineOptions, decrypt_bytes, encrypt_bytes

__all__ = [
    "CipherAes128",
    "CipherAes256",
    "CipherMode",
    "Compression",
    "CompressionFailure",
    "CryptConfig",
    "CryptError",
    "DecompressionFailure",
    "DeserializationError",
    "Encoding",
    "EncodingError",
    "InvalidKey",
    "IoFailure",
    "KeyDerivationFailure",
    "KeyType",
    "MalformedCiphertext",
    "Pipeline",
    "PipelineOptions",
    "SerializationError",
    "decrypt_bytes",
    "encrypt_bytes",
    "get_cipher",
]
