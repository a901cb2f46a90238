"""
Encrypt/decrypt pipeline.

Encrypt: raw -> [compress] -> crypt -> [text-encode] -> output
Decrypt: input -> [text-decode] -> crypt -> [decompress] -> output

Compression always sits inside encryption and text encoding is always the
outermost layer. The top-level container is (Salt, cipher output) where the
cipher output is itself a (PaddingCount, ciphertext) container.
"""
import io
import logging
import time
from dataclasses import dataclass
from typing import BinaryIO, Callable, Optional, Union

from . import compression, encoding, wrapper
from .aes import get_cipher
from .config import CipherMode, Compression, Encoding
from .errors import IoFailure
from .pbkdf2 import derive_key, generate_salt

logger = logging.getLogger(__name__)

Password = Union[str, bytes]


@dataclass(frozen=True)
class PipelineOptions:
    """Choices for one pipeline run."""
    decrypt: bool = False
    cipher: CipherMode = CipherMode.AES256
    compression: Compression = Compression.NONE
    encoding: Encoding = Encoding.PLAIN
    level: Optional[int] = None

    @classmethod
    def from_cli(cls, decrypt: bool = False, cipher: str = 'aes256', compress: str = 'none',
                 text_encoding: str = 'plain', level: Optional[int] = None) -> 'PipelineOptions':
        return cls(
            decrypt=decrypt,
            cipher=CipherMode.from_cli(cipher),
            compression=Compression.from_cli(compress),
            encoding=Encoding.from_cli(text_encoding),
            level=level,
        )


class Pipeline:
    """Runs the stages in order for one direction."""

    def __init__(self, options: PipelineOptions, salt_factory: Callable[[], bytes] = generate_salt):
        self.options = options
        self.cipher = get_cipher(options.cipher)
        self.salt_factory = salt_factory

    def encrypt_container(self, data: bytes, password: Password) -> bytes:
        """Encrypt with a fresh salt and wrap as (Salt, cipher output)."""
        salt = self.salt_factory()
        key = derive_key(password, salt, self.cipher.KEY_SIZE)
        ciphertext = self.cipher.encrypt(data, key)
        return wrapper.encode(wrapper.Salt(salt), ciphertext)

    def decrypt_container(self, data: bytes, password: Password) -> bytes:
        """Unwrap the salt, re-derive the key and decrypt."""
        metadata, ciphertext = wrapper.decode_as(data, wrapper.Salt)
        logger.debug(f"Container salt: {metadata.value.hex()}, cipher payload: {len(ciphertext)} bytes")
        key = derive_key(password, metadata.value, self.cipher.KEY_SIZE)
        return self.cipher.decrypt(ciphertext, key)

    def _encrypt(self, source: BinaryIO, dest: BinaryIO, password: Password) -> int:
        opts = self.options
        try:
            if opts.compression is Compression.NONE:
                data = source.read()
            else:
                data = compression.compress_from(source, opts.compression, opts.level)
        except OSError as e:
            raise IoFailure(f"Failed to read input: {e}") from e
        container = self.encrypt_container(data, password)
        return encoding.encode(io.BytesIO(container), dest, opts.encoding)

    def _decrypt(self, source: BinaryIO, dest: BinaryIO, password: Password) -> int:
        opts = self.options
        decoded = io.BytesIO()
        encoding.decode(source, decoded, opts.encoding)
        plaintext = self.decrypt_container(decoded.getvalue(), password)
        if opts.compression is not Compression.NONE:
            plaintext = compression.decompress_bytes(plaintext, opts.compression)
        try:
            dest.write(plaintext)
        except OSError as e:
            raise IoFailure(f"Failed to write output: {e}") from e
        return len(plaintext)

    def run(self, source: BinaryIO, dest: BinaryIO, password: Password) -> int:
        """
        Transform everything readable from source into dest.

        Args:
            source: Binary reader with the input.
            dest: Binary writer for the output. Nothing is written unless
                every earlier stage succeeded.
            password: Passphrase or key-file bytes.

        Returns:
            int: Number of bytes written to dest.

        Raises:
            CryptError: Any stage failure, with its originating kind.
        """
        opts = self.options
        direction = 'decrypt' if opts.decrypt else 'encrypt'
        start_time = time.time()
        logger.info(
            f"Starting {direction}: cipher={opts.cipher}, compression={opts.compression}, "
            f"encoding={opts.encoding}"
        )
        if opts.decrypt:
            written = self._decrypt(source, dest, password)
        else:
            written = self._encrypt(source, dest, password)
        logger.info(f"Completed {direction}: wrote {written} bytes in {time.time() - start_time:.2f}s")
        return written

    def run_bytes(self, data: bytes, password: Password) -> bytes:
        out = io.BytesIO()
        self.run(io.BytesIO(data), out, password)
        return out.getvalue()


def encrypt_bytes(data: bytes, password: Password, cipher=CipherMode.AES256,
                  compress=Compression.NONE, text_encoding=Encoding.PLAIN,
                  level: Optional[int] = None,
                  salt_factory: Callable[[], bytes] = generate_salt) -> bytes:
    options = PipelineOptions.from_cli(False, str(cipher), str(compress), str(text_encoding), level)
    return Pipeline(options, salt_factory).run_bytes(data, password)


def decrypt_bytes(data: bytes, password: Password, cipher=CipherMode.AES256,
                  compress=Compression.NONE, text_encoding=Encoding.PLAIN) -> bytes:
    options = PipelineOptions.from_cli(True, str(cipher), str(compress), str(text_encoding))
    return Pipeline(options).run_bytes(data, password)
