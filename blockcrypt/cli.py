"""
blockcrypt - command-line file encryption/decryption.

Usage:
    blockcrypt notes.txt -o notes.bc --password mypass
    blockcrypt notes.bc -o notes.txt -d --password mypass
    blockcrypt notes.txt -o notes.b64 -c zstd -e b64
    blockcrypt notes.txt -o notes.bc -k keyfile -f ./secret.key -m aes128
    blockcrypt notes.bc --analyze

Container: (salt, (padding count, AES blocks)); with compression the
plaintext fed to AES is itself an (original length, compressed) container.
Decrypting needs the same --mode, --compress and --encoding used to encrypt.
"""
import argparse
import getpass
import io
import logging
import os
import sys
import tempfile
import time
from contextlib import suppress
from importlib import metadata as importlib_metadata
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from colorama import Fore, Style, init

from . import encoding, wrapper
from .config import (
    DEFAULT_CONFIG, PROGRAM_NAME, PROGRAM_VERSION, CipherMode, Compression, CryptConfig,
    Encoding, KeyType,
)
from .errors import EXIT_CODES, CryptError, IoFailure
from .pipeline import Pipeline, PipelineOptions

EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def validate_filename(name: str) -> str:
    """argparse type: reject empty filenames."""
    if not name or not name.strip():
        raise argparse.ArgumentTypeError("empty filename")
    return name


class CryptCLI:
    """Command-line interface for blockcrypt."""

    def __init__(self, config: CryptConfig = DEFAULT_CONFIG):
        """Initialize the CLI with configuration and logging."""
        self.config = config
        self.verbose = False
        self.package_logger = logging.getLogger('blockcrypt')

    def _setup_logging(self, debug: bool) -> None:
        log_path = Path(os.environ.get('BLOCKCRYPT_LOG', self.config.LOG_FILE))
        try:
            log_handler = RotatingFileHandler(
                log_path,
                maxBytes=self.config.LOG_MAX_SIZE,
                backupCount=self.config.LOG_BACKUP_COUNT
            )
        except OSError as e:
            print(f"{Fore.YELLOW}Warning: cannot open log file {log_path}: {e}{Style.RESET_ALL}")
            log_handler = logging.NullHandler()
        for handler in list(self.package_logger.handlers):
            self.package_logger.removeHandler(handler)
            handler.close()
        log_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        self.package_logger.addHandler(log_handler)
        self.package_logger.setLevel(logging.DEBUG if debug else logging.INFO)

        versions = []
        for dist in ('cryptography', 'colorama', 'lz4', 'zstandard'):
            try:
                versions.append(f"{dist}={importlib_metadata.version(dist)}")
            except importlib_metadata.PackageNotFoundError:
                versions.append(f"{dist}=unknown")
        logger.info(f"Starting {PROGRAM_NAME} v{PROGRAM_VERSION}, dependencies: {', '.join(versions)}")

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=PROGRAM_NAME,
            description=(
                f"{PROGRAM_NAME}: file encryption with AES blocks, PBKDF2 keys, "
                "optional LZ4/zstd compression and hex/base64 output.\n"
                f"Version {PROGRAM_VERSION}"
            ),
            epilog=(
                "Examples:\n"
                f"  Encrypt: {PROGRAM_NAME} notes.txt -o notes.bc --password mypass\n"
                f"  Decrypt: {PROGRAM_NAME} notes.bc -o notes.txt -d --password mypass\n"
                f"  Compressed, base64: {PROGRAM_NAME} notes.txt -o notes.b64 -c zstd -e b64\n"
                f"  Key file: {PROGRAM_NAME} notes.txt -o notes.bc -k keyfile -f ./secret.key\n"
                f"  Analyze: {PROGRAM_NAME} notes.bc --analyze\n\n"
                "Exit status:\n"
                "    0  success\n"
                f"  {EXIT_USAGE:>3}  usage error\n"
                + "\n".join(f"  {code:>3}  {name}" for name, code in EXIT_CODES.items())
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter
        )
        parser.add_argument('filename', type=validate_filename, help='Input file')
        parser.add_argument('-o', '--outfile', type=validate_filename, help='Output file')
        parser.add_argument('-d', '--decrypt', action='store_true', help='Decrypt instead of encrypt')
        parser.add_argument('-k', '--key', dest='key_type', choices=KeyType.choices(),
                            default=KeyType.PASSPHRASE.value, help='Key source (default: passphrase)')
        parser.add_argument('-f', '--key-file', type=validate_filename, help='Key file for --key keyfile')
        parser.add_argument('-p', '--password', type=str, help='Passphrase (prompted for when omitted)')
        parser.add_argument('-m', '--mode', choices=CipherMode.choices(), default=CipherMode.AES256.value,
                            help='Cipher (default: aes256)')
        parser.add_argument('-c', '--compress', choices=Compression.choices(), default=Compression.NONE.value,
                            help='Compress plaintext before encryption (default: none)')
        parser.add_argument('-l', '--level', type=int, help='Compression level')
        parser.add_argument('-e', '--encoding', choices=Encoding.choices(), default=Encoding.PLAIN.value,
                            help='Text encoding of the container (default: plain)')
        parser.add_argument('--analyze', action='store_true', help='Print the container layout of the input file')
        parser.add_argument('--dry-run', action='store_true', help='Run the pipeline without writing output')
        parser.add_argument('--verbose', action='store_true', help='Enable verbose console output')
        parser.add_argument('--debug', action='store_true', help='Enable debug logging and container dumps')
        return parser

    def _validate_args(self, args: argparse.Namespace) -> Optional[str]:
        """Return an error message for invalid argument combinations."""
        if args.analyze and args.decrypt:
            return "--analyze cannot be combined with --decrypt"
        if not (args.analyze or args.dry_run) and not args.outfile:
            return "--outfile is required"
        if args.key_type == KeyType.KEYFILE.value and not args.key_file:
            return "--key-file is required for --key keyfile"
        if args.key_type == KeyType.PASSPHRASE.value and args.key_file:
            return "--key-file requires --key keyfile"
        if args.password and args.key_file:
            return "Specify either --password or --key-file, not both"
        if args.level is not None and args.compress == Compression.NONE.value:
            return "--level requires --compress"
        input_path = Path(args.filename).expanduser()
        if not input_path.is_file():
            return f"File {input_path} does not exist"
        if args.outfile and Path(args.outfile).expanduser().resolve() == input_path.resolve():
            return "Output file must differ from the input file"
        return None

    def _read_key_file(self, file_path: str) -> bytes:
        """
        Read raw key material from a file.

        Raises:
            IoFailure: If the file cannot be read.
        """
        path = Path(file_path).expanduser()
        try:
            key = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read key file {path}: {e}")
            raise IoFailure(f"Error reading key file {path}: {e}") from e
        logger.debug(f"Read key file: {path} (length: {len(key)} bytes)")
        return key

    def _validate_password(self, password: str) -> None:
        if len(password) > self.config.MAX_PASSWORD_LENGTH:
            warning = (
                f"Password length ({len(password)} characters) exceeds recommended maximum "
                f"({self.config.MAX_PASSWORD_LENGTH} characters). Processing will continue, "
                "but performance may be affected."
            )
            logger.warning(warning)
            print(f"{Fore.YELLOW}Warning: {warning}{Style.RESET_ALL}")

    def _get_key_material(self, args: argparse.Namespace):
        if args.key_type == KeyType.KEYFILE.value:
            return self._read_key_file(args.key_file)
        password = args.password
        if password is None:
            try:
                password = getpass.getpass(f"{Fore.CYAN}Enter password: {Style.RESET_ALL}")
                confirm = None
                if not args.decrypt:
                    confirm = getpass.getpass(f"{Fore.CYAN}Confirm password: {Style.RESET_ALL}")
            except (EOFError, OSError) as e:
                raise CryptError(f"Failed to obtain password: {str(e) or 'no input available'}") from e
            if confirm is not None and confirm != password:
                raise CryptError("Passwords do not match")
        self._validate_password(password)
        logger.debug(f"Password provided (length: {len(password)} characters)")
        return password

    def _write_output(self, output_path: Path, pipeline: Pipeline, source, key) -> int:
        """Run the pipeline into a temp file beside output_path, then move it into place."""
        output_dir = output_path.parent
        temp_name = None
        try:
            with tempfile.NamedTemporaryFile('wb', dir=output_dir, prefix=f".{output_path.name}.",
                                             suffix='.tmp', delete=False) as tmp:
                temp_name = tmp.name
                written = pipeline.run(source, tmp, key)
            if output_path.exists():
                logger.warning(f"Overwriting existing file: {output_path}")
                print(f"{Fore.YELLOW}Warning: Overwriting {output_path}{Style.RESET_ALL}")
            os.replace(temp_name, output_path)
            temp_name = None
            return written
        except OSError as e:
            raise IoFailure(f"Error writing {output_path}: {e}") from e
        finally:
            if temp_name:
                with suppress(OSError):
                    os.unlink(temp_name)

    def _print_debug_container(self, label: str, data: bytes) -> None:
        """Print the nested container layout."""
        outer = wrapper.describe(data)
        print(f"{Fore.YELLOW}Container layout for {label}:{Style.RESET_ALL}")
        print(f"  Container size: {outer['container_length']} bytes")
        print(f"  Metadata: {outer['type']} (tag {outer['tag']}): {outer['metadata']}")
        print(f"  Payload: {outer['payload_length']} bytes")
        if outer['type'] != wrapper.Salt.__name__:
            return
        try:
            inner = wrapper.describe(outer['payload'])
        except CryptError as e:
            print(f"{Fore.RED}  Nested cipher container invalid: {e}{Style.RESET_ALL}")
            return
        print(f"  Nested: {inner['type']} (tag {inner['tag']}): {inner['metadata']}")
        print(f"  Ciphertext: {inner['payload_length']} bytes "
              f"({inner['payload_length'] // self.config.BLOCK_SIZE} blocks of {self.config.BLOCK_SIZE})")

    def analyze_file(self, file_path: str, text_encoding: str) -> None:
        """
        Analyze the container layout of an encrypted file.

        Raises:
            CryptError: If the file cannot be read or is not a container.
        """
        path = Path(file_path).expanduser()
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise IoFailure(f"Error reading {path}: {e}") from e
        data = encoding.decode_bytes(raw, text_encoding)
        print(f"{Fore.CYAN}Analysis of {path}:{Style.RESET_ALL}")
        print(f"File size: {len(raw)} bytes ({text_encoding})")
        self._print_debug_container(str(path), data)
        logger.info(f"Analyzed {path}: {len(raw)} bytes, container {len(data)} bytes")

    def _process(self, args: argparse.Namespace) -> None:
        options = PipelineOptions.from_cli(args.decrypt, args.mode, args.compress, args.encoding, args.level)
        pipeline = Pipeline(options)
        key = self._get_key_material(args)
        input_path = Path(args.filename).expanduser()
        direction = 'Decrypting' if args.decrypt else 'Encrypting'
        start_time = time.time()
        if self.verbose:
            print(f"{Fore.CYAN}{direction} {input_path} ({options.cipher}, compression={options.compression}, "
                  f"encoding={options.encoding})...{Style.RESET_ALL}")

        try:
            source = input_path.open('rb')
        except OSError as e:
            raise IoFailure(f"Error opening {input_path}: {e}") from e
        with source:
            if args.dry_run:
                out = io.BytesIO()
                written = pipeline.run(source, out, key)
                if args.debug and not args.decrypt:
                    self._print_debug_container(str(input_path), encoding.decode_bytes(out.getvalue(), options.encoding))
                logger.info(f"Dry run: {direction.lower()} {input_path} would write {written} bytes")
                print(f"{Fore.YELLOW}Dry run: {direction} {input_path} would write {written} bytes{Style.RESET_ALL}")
                return
            output_path = Path(args.outfile).expanduser()
            written = self._write_output(output_path, pipeline, source, key)

        if args.debug and not args.decrypt:
            self._print_debug_container(str(output_path), encoding.decode_bytes(output_path.read_bytes(), options.encoding))
        elapsed_time = time.time() - start_time
        verb = 'Decrypted' if args.decrypt else 'Encrypted'
        logger.info(f"{verb} {input_path} to {output_path} ({written} bytes) in {elapsed_time:.2f}s")
        print(f"{Fore.GREEN}{verb} {input_path} to {output_path} ({written} bytes) in {elapsed_time:.2f}s{Style.RESET_ALL}")

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Parse command-line arguments and execute the program."""
        parser = self.build_parser()
        args = parser.parse_args(argv)
        self.verbose = args.verbose

        error = self._validate_args(args)
        if error:
            print(f"{Fore.RED}Error: {error}{Style.RESET_ALL}", file=sys.stderr)
            return EXIT_USAGE

        self._setup_logging(args.debug)
        try:
            if args.analyze:
                self.analyze_file(args.filename, args.encoding)
            else:
                self._process(args)
        except CryptError as e:
            logger.error(f"{e.kind}: {e}")
            print(f"{Fore.RED}Error ({e.kind}): {e}{Style.RESET_ALL}", file=sys.stderr)
            return e.exit_code
        except KeyboardInterrupt:
            logger.error("Interrupted")
            print(f"{Fore.RED}Interrupted{Style.RESET_ALL}", file=sys.stderr)
            return 130
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    init(autoreset=True)
    return CryptCLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
