"""
Unified Processor
=================

Routes sources through the configured envelope service into sinks.

Operation Flow:
    encrypt:  source.read() -> service.encrypt() -> sink.write() -> sink.close()
    decrypt:  [detect algorithm from name] -> source.read() -> service.decrypt()
              -> sink.write() -> sink.close() -> [finalize directory archive]

Directory Handling:
    Directory sources arrive as a temp zip and are named with the
    ``.zip<ext>`` suffix. Decrypting such a name writes the zip to the
    output path and then extracts it in place (see finalize_directory).

Error Policy:
    - HycryptError subclasses propagate unchanged
    - Any other failure while reading, transforming or writing is wrapped
      into EncryptionFailedError / DecryptionFailedError carrying the
      algorithm in its context
"""

from __future__ import annotations

import dataclasses
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from hycrypt.core.constants import ALGORITHM_KMAC, ALGORITHM_RSA
from hycrypt.core.crypto.keystore import load_symmetric_key
from hycrypt.core.crypto.kmac_service import KmacEnvelopeService
from hycrypt.core.crypto.rsa_service import RsaEnvelopeService
from hycrypt.core.crypto.service import EnvelopeService
from hycrypt.core.errors import (
    HycryptError,
    InvalidConfigError,
    InvalidInputError,
    decryption_failed,
    encryption_failed,
)
from hycrypt.core.file_ops.archive import finalize_directory
from hycrypt.core.file_ops.sink import DataSink, FileSink, HexSink, TextSink, create_sink
from hycrypt.core.file_ops.source import (
    DataSource,
    FileSource,
    HexSource,
    TextSource,
    create_source,
)
from hycrypt.core.models import CryptoOptions, InputFormat, OperationResult, OutputFormat
from hycrypt.core.naming import DirectoryNamingStrategy, NamingStrategy
from hycrypt.utils.paths import get_secure_temp_dir

if TYPE_CHECKING:
    from hycrypt.core.config import HycryptConfig


class UnifiedProcessor:
    """
    Single entry point for encrypt/decrypt operations.

    Usage:
        processor = UnifiedProcessor.from_config(HycryptConfig.load())

        result = processor.process_file(
            "report.pdf", "out/", True, CryptoOptions(algorithm="rsa")
        )
        result.output_path   # out/report.pdf-k3j9x0-20250101-rsa.hycrypt

        processor.process_file(result.output_path, "restored/", False, CryptoOptions())

    Thread Safety:
        Services hold read-only key material and create session keys per
        call, so one processor can serve several threads.
    """

    __slots__ = ("_rsa_service", "_kmac_service", "_naming", "_directory_naming", "_log")

    def __init__(
        self,
        rsa_service: Optional[RsaEnvelopeService] = None,
        kmac_service: Optional[KmacEnvelopeService] = None,
        naming: Optional[NamingStrategy] = None,
    ) -> None:
        self._rsa_service = rsa_service
        self._kmac_service = kmac_service
        self._naming = naming or NamingStrategy()
        self._directory_naming = DirectoryNamingStrategy(
            self._naming.extension, self._naming.algorithms
        )
        self._log = logging.getLogger("hycrypt.processor")

    @classmethod
    def from_config(
        cls,
        config: HycryptConfig,
        algorithms: Optional[Iterable[str]] = None,
    ) -> "UnifiedProcessor":
        """
        Build a processor with services loaded from the configured key files.

        Args:
            config: Loaded configuration
            algorithms: Services to build; defaults to the configured method

        Raises:
            KeyNotFoundError: If a required key file is missing
            InvalidFormatError: If a key file cannot be parsed
            InvalidConfigError: For unknown algorithms
        """
        encryption = config.encryption
        wanted = tuple(algorithms) if algorithms is not None else (encryption.method,)

        rsa_service = None
        kmac_service = None
        for algorithm in wanted:
            if algorithm == ALGORITHM_RSA:
                rsa_service = RsaEnvelopeService.from_key_files(
                    config.public_key_path,
                    config.private_key_path,
                    aes_key_size=encryption.aes_key_size,
                )
            elif algorithm == ALGORITHM_KMAC:
                secret = load_symmetric_key(config.kmac_key_path, encryption.kmac_key_size)
                kmac_service = KmacEnvelopeService(
                    secret,
                    key_size=encryption.kmac_key_size,
                    aes_key_size=encryption.aes_key_size,
                )
            else:
                raise InvalidConfigError(f"unsupported method: {algorithm}", method=algorithm)

        processor = cls(rsa_service, kmac_service, config.naming_strategy())
        processor.validate_config()
        return processor

    @property
    def naming(self) -> NamingStrategy:
        return self._naming

    def validate_config(self) -> None:
        """Raise InvalidConfigError unless at least one service is available."""
        if self._rsa_service is None and self._kmac_service is None:
            raise InvalidConfigError("no crypto service available")

    def _get_service(self, algorithm: str) -> EnvelopeService:
        if algorithm == ALGORITHM_RSA:
            if self._rsa_service is None:
                raise InvalidConfigError("RSA service not available", method=algorithm)
            return self._rsa_service
        if algorithm == ALGORITHM_KMAC:
            if self._kmac_service is None:
                raise InvalidConfigError("KMAC service not available", method=algorithm)
            return self._kmac_service
        raise InvalidConfigError(f"unsupported method: {algorithm}", method=algorithm)

    def detect_algorithm(self, source_name: str) -> str:
        """Algorithm encoded in a source name, or "" if it carries none."""
        file_name = os.path.basename(source_name)
        if not self._naming.is_encrypted_file(file_name):
            return ""
        return self._naming.parse(file_name).algorithm

    def _resolve_algorithm(self, source_name: str, options: CryptoOptions) -> str:
        if options.algorithm:
            return options.algorithm
        algorithm = self.detect_algorithm(source_name)
        if not algorithm:
            raise decryption_failed(
                "unknown", ValueError("cannot detect encryption method")
            ).with_context("source", os.path.basename(source_name))
        self._log.debug("Detected %s from %s", algorithm, os.path.basename(source_name))
        return algorithm

    def encrypt(self, source: DataSource, sink: DataSink, options: CryptoOptions) -> OperationResult:
        """
        Encrypt a source into a sink. The sink is closed on success.

        Raises:
            InvalidConfigError: If the algorithm has no service
            EncryptionFailedError: If reading, encrypting or writing fails
        """
        start = time.perf_counter()
        algorithm = options.algorithm
        service = self._get_service(algorithm)

        try:
            with source.read() as stream:
                plaintext = stream.read()
            sink.write(service.encrypt(plaintext))
            sink.close()
        except HycryptError:
            raise
        except Exception as e:
            raise encryption_failed(algorithm, e) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._log.info(
            "Encrypted %s (%s, %d bytes) in %.1f ms",
            source.type, algorithm, source.size, elapsed_ms,
        )
        return OperationResult(
            success=True,
            output_path=sink.path,
            processed_size=source.size,
            algorithm=algorithm,
            elapsed_ms=elapsed_ms,
            output_text=sink.result,
        )

    def decrypt(self, source: DataSource, sink: DataSink, options: CryptoOptions) -> OperationResult:
        """
        Decrypt a source into a sink. The sink is closed on success.

        An empty ``options.algorithm`` is detected from the source name.
        When the source name marks a directory archive and the sink is a
        file, the decrypted archive is extracted in place.

        Raises:
            DecryptionFailedError: If the algorithm cannot be detected, or
                reading, decrypting or writing fails
            InvalidConfigError: If the algorithm has no service
            KeyNotFoundError: If the service lacks decryption keys
        """
        start = time.perf_counter()
        algorithm = self._resolve_algorithm(source.name, options)
        service = self._get_service(algorithm)

        try:
            with source.read() as stream:
                envelope = stream.read()
            sink.write(service.decrypt(envelope))
            sink.close()
        except HycryptError:
            raise
        except Exception as e:
            raise decryption_failed(algorithm, e) from e

        output_path = sink.path
        is_directory = self._naming.parse(os.path.basename(source.name)).is_directory
        if is_directory and isinstance(sink, FileSink):
            try:
                output_path = str(finalize_directory(sink.path))
            except HycryptError:
                raise
            except OSError as e:
                raise decryption_failed(algorithm, e).with_context(
                    "stage", "extract directory"
                ) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        self._log.info(
            "Decrypted %s (%s, %d bytes) in %.1f ms",
            source.type, algorithm, source.size, elapsed_ms,
        )
        return OperationResult(
            success=True,
            output_path=output_path,
            processed_size=source.size,
            algorithm=algorithm,
            elapsed_ms=elapsed_ms,
            output_text=sink.result,
        )

    def _output_name(self, source: DataSource, is_encrypt: bool, algorithm: str) -> str:
        base_name = os.path.basename(os.path.normpath(source.name))
        if is_encrypt:
            if source.type == "directory":
                return self._directory_naming.generate(base_name, algorithm)
            return self._naming.generate(base_name, algorithm)
        return self._naming.parse(base_name).original_name

    def process_file(
        self,
        input_path: Path | str,
        output_dir: Path | str,
        is_encrypt: bool,
        options: CryptoOptions,
    ) -> OperationResult:
        """
        Encrypt or decrypt a path into ``output_dir``.

        Encryption accepts files and directories and names the output with
        the naming strategy. Decryption reads a single envelope file and
        restores the original name from it. A failed operation removes
        the output file it created.
        """
        if is_encrypt:
            source = create_source(input_path, options.input_format)
        else:
            source = FileSource(input_path)
            options = dataclasses.replace(
                options, algorithm=self._resolve_algorithm(source.name, options)
            )

        try:
            output_name = self._output_name(source, is_encrypt, options.algorithm)
            sink = create_sink(Path(output_dir) / output_name, options.output_format)
            try:
                with sink:
                    if is_encrypt:
                        return self.encrypt(source, sink, options)
                    return self.decrypt(source, sink, options)
            except HycryptError:
                if isinstance(sink, FileSink):
                    Path(sink.path).unlink(missing_ok=True)
                raise
        finally:
            source.cleanup()

    def process_text(
        self,
        text: str,
        output_dir: Path | str,
        is_encrypt: bool,
        options: CryptoOptions,
    ) -> OperationResult:
        """
        Encrypt or decrypt text entered directly by a user.

        Modes:
            encrypt, hex output    text -> hex string (no file written)
            decrypt, hex input     hex string -> text (algorithm required)
            encrypt, other output  text staged in a temp file, then process_file

        On encrypt, hex input is decoded to raw bytes first.

        Raises:
            InvalidInputError: For blank text, a hex decrypt without an
                algorithm, or a text decrypt without hex input
        """
        if not text or not text.strip():
            raise InvalidInputError("text input is empty")

        if not is_encrypt:
            if options.input_format is not InputFormat.HEX:
                raise InvalidInputError(
                    "text decryption requires hex input", input_format=options.input_format.value
                )
            if not options.algorithm:
                raise InvalidInputError("hex decryption requires an algorithm")
            with TextSink() as sink:
                return self.decrypt(HexSource(text), sink, options)

        # Hex input on encrypt carries raw bytes
        source = HexSource(text) if options.input_format is InputFormat.HEX else TextSource(text)
        if options.output_format is OutputFormat.HEX:
            with HexSink() as sink:
                return self.encrypt(source, sink, options)

        with source.read() as stream:
            staged = self._stage_text(stream.read())
        try:
            file_options = dataclasses.replace(options, input_format=InputFormat.FILE)
            return self.process_file(staged, output_dir, True, file_options)
        finally:
            staged.unlink(missing_ok=True)

    @staticmethod
    def _stage_text(data: bytes) -> Path:
        """Write data to an owner-only temp file in the secure temp dir."""
        fd, temp_name = tempfile.mkstemp(
            prefix="hycrypt-text-", suffix=".tmp", dir=get_secure_temp_dir()
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
        except BaseException:
            os.unlink(temp_name)
            raise
        return Path(temp_name)

    def __repr__(self) -> str:
        return (
            f"UnifiedProcessor(rsa={self._rsa_service is not None}, "
            f"kmac={self._kmac_service is not None}, extension={self._naming.extension!r})"
        )
