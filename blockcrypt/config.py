"""Configuration constants and option enums for blockcrypt."""
from dataclasses import dataclass
from enum import Enum

PROGRAM_NAME = "blockcrypt"
PROGRAM_VERSION = "0.3.0"


@dataclass(frozen=True)
class CryptConfig:
    """Configuration constants for blockcrypt."""
    BLOCK_SIZE: int = 16  # AES block size (bytes)
    AES128_KEY_SIZE: int = 16  # Bytes for AES-128 key
    AES256_KEY_SIZE: int = 32  # Bytes for AES-256 key
    SALT_LENGTH: int = 16  # Random bytes before Base64 encoding
    SALT_B64_LENGTH: int = 22  # Salt length after unpadded Base64 encoding
    PBKDF2_ROUNDS: int = 4096  # Fixed PBKDF2-HMAC-SHA256 iteration count
    CONTAINER_MAGIC: bytes = b'BCW1'  # 4-byte container signature
    CHUNK_SIZE: int = 64 * 1024  # Window for streaming compression/encoding
    ZSTD_DEFAULT_LEVEL: int = 3  # zstd level when none is given
    LZ4_DEFAULT_LEVEL: int = 0  # LZ4 frame default (fast mode)
    MAX_PASSWORD_LENGTH: int = 4096  # Recommended max password length (characters)
    LOG_FILE: str = 'blockcrypt.log'
    LOG_MAX_SIZE: int = 10 * 1024 * 1024  # Max log file size (10 MB)
    LOG_BACKUP_COUNT: int = 3  # Number of backup log files


DEFAULT_CONFIG = CryptConfig()


class _CliEnum(Enum):
    """Enum whose values are the command-line spellings."""

    @classmethod
    def from_cli(cls, name: str):
        value = name.strip().lower()
        for member in cls:
            if member.value == value:
                return member
        choices = ', '.join(m.value for m in cls)
        raise ValueError(f"Unsupported {cls.__name__} '{name}' (expected one of: {choices})")

    @classmethod
    def choices(cls):
        return [m.value for m in cls]

    def __str__(self) -> str:
        return self.value


class CipherMode(_CliEnum):
    AES128 = 'aes128'
    AES256 = 'aes256'


class Compression(_CliEnum):
    NONE = 'none'
    LZ4 = 'lz4'
    ZSTD = 'zstd'


class Encoding(_CliEnum):
    PLAIN = 'plain'
    HEX = 'hex'
    B64 = 'b64'


class KeyType(_CliEnum):
    PASSPHRASE = 'passphrase'
    KEYFILE = 'keyfile'
