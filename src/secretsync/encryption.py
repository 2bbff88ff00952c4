"""
Symmetric authenticated encryption for secrets files.

ChaCha20-Poly1305 with a random 96-bit nonce. The sealed form is
``nonce || ciphertext`` where the ciphertext carries the Poly1305 tag, so
a truncated or tampered file fails to open instead of yielding garbage.

Keys are 32 random bytes, stored and displayed as standard base64.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from .errors import (
    DataDecryptionError,
    DecryptionKeyEncodingError,
    DecryptionKeyParsingError,
    InputFileNotReadable,
    OutputFileNotWritable,
)

logger = logging.getLogger("secretsync.encryption")

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16


class EncryptionKey:
    """A 256-bit symmetric key."""

    __slots__ = ("_raw",)

    def __init__(self, raw: bytes) -> None:
        if len(raw) != KEY_SIZE:
            raise DecryptionKeyParsingError(f"expected {KEY_SIZE} bytes, got {len(raw)}")
        self._raw = bytes(raw)

    @classmethod
    def from_string(cls, encoded: str) -> EncryptionKey:
        """Decode a base64 key, ignoring surrounding whitespace.

        Raises:
            DecryptionKeyEncodingError: Not valid base64.
            DecryptionKeyParsingError: Valid base64 but not a 256-bit key.
        """
        try:
            raw = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError) as exc:
            raise DecryptionKeyEncodingError() from exc
        return cls(raw)

    @property
    def raw(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        return base64.b64encode(self._raw).decode("ascii")

    def __repr__(self) -> str:
        return "EncryptionKey(<redacted>)"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EncryptionKey):
            return NotImplemented
        return self._raw == other._raw

    def __hash__(self) -> int:
        return hash(self._raw)


def generate_key() -> EncryptionKey:
    """Create a new random key."""
    logger.debug("Generating an encryption key")
    return EncryptionKey(ChaCha20Poly1305.generate_key())


def encrypt_bytes(data: bytes, key: EncryptionKey) -> bytes:
    """Seal plaintext under ``key``.

    Args:
        data: Plaintext bytes.
        key: Encryption key.

    Returns:
        bytes: ``nonce || ciphertext``.
    """
    nonce = os.urandom(NONCE_SIZE)
    return nonce + ChaCha20Poly1305(key.raw).encrypt(nonce, data, None)


def decrypt_bytes(data: bytes, key: EncryptionKey) -> bytes:
    """Open a sealed blob produced by :func:`encrypt_bytes`.

    Raises:
        DataDecryptionError: Wrong key, truncated input, or tampered data.
    """
    if len(data) < NONCE_SIZE + TAG_SIZE:
        raise DataDecryptionError("input is too short to contain a nonce and tag")

    nonce, sealed = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        return ChaCha20Poly1305(key.raw).decrypt(nonce, sealed, None)
    except InvalidTag as exc:
        raise DataDecryptionError() from exc


def _read_input(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise InputFileNotReadable(str(path)) from exc


def _write_output(path: Path, data: bytes) -> None:
    try:
        path.write_bytes(data)
    except OSError as exc:
        raise OutputFileNotWritable(str(path)) from exc


def encrypt_file(input_path: Path, output_path: Path, key: EncryptionKey) -> None:
    """Encrypt ``input_path`` and write the sealed bytes to ``output_path``."""
    _write_output(output_path, encrypt_bytes(_read_input(input_path), key))


def decrypt_file(input_path: Path, output_path: Path, key: EncryptionKey) -> None:
    """Decrypt ``input_path`` and write the plaintext to ``output_path``.

    Nothing is written when decryption fails.
    """
    _write_output(output_path, decrypt_bytes(_read_input(input_path), key))
