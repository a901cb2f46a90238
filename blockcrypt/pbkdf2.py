"""PBKDF2 key derivation and salt generation."""
import base64
import logging
import secrets
from typing import Union

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .config import DEFAULT_CONFIG
from .errors import KeyDerivationFailure

logger = logging.getLogger(__name__)

PBKDF2_ROUNDS = DEFAULT_CONFIG.PBKDF2_ROUNDS


def password_bytes(password: Union[str, bytes]) -> bytes:
    """Normalize a passphrase or key-file payload to bytes."""
    if isinstance(password, str):
        return password.encode('utf-8')
    if isinstance(password, (bytes, bytearray, memoryview)):
        return bytes(password)
    raise KeyDerivationFailure(f"Password must be str or bytes, got {type(password).__name__}")


def generate_salt() -> bytes:
    """
    Generate a fresh salt for key derivation.

    16 random bytes from the OS source, Base64-encoded without padding
    (22 ASCII bytes).

    Raises:
        KeyDerivationFailure: If the randomness source fails.
    """
    try:
        raw = secrets.token_bytes(DEFAULT_CONFIG.SALT_LENGTH)
    except Exception as e:
        logger.error(f"Failed to generate salt: {e}")
        raise KeyDerivationFailure(f"Error generating salt: {e}") from e
    salt = base64.b64encode(raw).rstrip(b'=')
    logger.debug(f"Generated salt: {salt.decode('ascii')}")
    return salt


def derive_key(password: Union[str, bytes], salt: bytes, length: int) -> bytes:
    """
    Derive a cipher key using PBKDF2-HMAC-SHA256.

    Args:
        password: Passphrase (UTF-8 encoded if str) or key-file bytes.
        salt: Salt stored in the container.
        length: Key length in bytes.

    Returns:
        bytes: Derived key of exactly `length` bytes.

    Raises:
        KeyDerivationFailure: If the password is empty or stretching fails.
    """
    secret = password_bytes(password)
    if not secret:
        raise KeyDerivationFailure("Password cannot be empty")
    logger.debug(f"Deriving {length}-byte key with salt: {bytes(salt).hex()}")
    try:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=length,
            salt=bytes(salt),
            iterations=PBKDF2_ROUNDS,
        )
        return kdf.derive(secret)
    except Exception as e:
        logger.error(f"Key derivation failed: {e}")
        raise KeyDerivationFailure(f"Error deriving key: {e}") from e
