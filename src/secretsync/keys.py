"""
Per-project key registry and decryption-key resolution.

The registry is ``keys.json`` at the root of the secrets store: a flat
JSON object mapping project names to base64 keys. It is created empty the
first time it is needed.

Decryption may also take its key from the environment so CI machines
never need the registry. Encryption never does: a key exported in a
developer's shell must not silently become the key for every project
they update.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Optional

from . import ENCRYPTION_KEY_ENV, KEYS_FILE_NAME, TEMP_ENCRYPTION_KEY_ENV
from .encryption import EncryptionKey, generate_key
from .errors import (
    KeysFileNotReadable,
    KeysFileNotValid,
    KeysFileNotWritable,
    MissingDecryptionKey,
    MissingProjectKey,
)

logger = logging.getLogger("secretsync.keys")

# Highest precedence first
DECRYPTION_KEY_ENV_VARS = (TEMP_ENCRYPTION_KEY_ENV, ENCRYPTION_KEY_ENV)


class KeyRegistry:
    """The secrets store's ``keys.json``.

    Args:
        path: Path to the registry file.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def for_secrets_root(cls, secrets_root: Path) -> KeyRegistry:
        return cls(secrets_root / KEYS_FILE_NAME)

    def ensure_exists(self) -> None:
        if not self.path.exists():
            logger.info("No keys file found at %s. Creating one for you", self.path)
            self.save({})

    def load(self) -> dict[str, str]:
        """Read the registry, creating it empty when absent.

        Raises:
            KeysFileNotReadable: The file exists but cannot be read.
            KeysFileNotValid: The file is not a JSON object of strings.
        """
        self.ensure_exists()
        logger.debug("Reading keys from %s", self.path)
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise KeysFileNotReadable(str(self.path)) from exc

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise KeysFileNotValid(str(exc)) from exc

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise KeysFileNotValid("expected an object mapping project names to keys")
        return data

    def save(self, keys: dict[str, str]) -> None:
        try:
            self.path.write_text(json.dumps(keys, indent=2), encoding="utf-8")
        except OSError as exc:
            raise KeysFileNotWritable(str(self.path)) from exc

    def key_for(self, project_name: str) -> EncryptionKey:
        """The key registered for ``project_name``.

        Raises:
            MissingProjectKey: The project has no entry.
        """
        keys = self.load()
        if project_name not in keys:
            raise MissingProjectKey(project_name)
        return EncryptionKey.from_string(keys[project_name])

    def ensure_key(self, project_name: str) -> EncryptionKey:
        """Return the project's key, generating and saving one if missing."""
        keys = self.load()
        if project_name in keys:
            return EncryptionKey.from_string(keys[project_name])

        key = generate_key()
        keys[project_name] = str(key)
        self.save(keys)
        logger.info("Created an encryption key for %s in %s", project_name, self.path)
        return key


def resolve_decryption_key(
    project_name: str,
    environ: Mapping[str, str],
    registry: Optional[KeyRegistry],
) -> EncryptionKey:
    """Pick the key used to decrypt a project's files.

    Precedence: ``CONFIGURE_ENCRYPTION_KEY_TEMP``, then
    ``CONFIGURE_ENCRYPTION_KEY``, then the project's registry entry.

    Raises:
        MissingDecryptionKey: No source provides a key.
        DecryptionKeyEncodingError: An override is not valid base64.
        DecryptionKeyParsingError: An override is not a 256-bit key.
    """
    for name in DECRYPTION_KEY_ENV_VARS:
        value = environ.get(name)
        if value:
            logger.info(
                "Found an environment variable named %s. Using its value as the encryption key",
                name,
            )
            return EncryptionKey.from_string(value)

    if registry is None:
        raise MissingDecryptionKey()

    try:
        return registry.key_for(project_name)
    except (MissingProjectKey, KeysFileNotReadable) as exc:
        raise MissingDecryptionKey(project_name) from exc
