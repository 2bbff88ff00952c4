"""
Filesystem discovery and ``.configure`` file persistence.

Finds the consuming project's root and the secrets store on this
machine, reads and writes the configuration file, and provides the small
file helpers the engine needs (digests, parent directories, inferred
output names).
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os
import subprocess
from pathlib import Path
from typing import Mapping, Optional

from . import CONFIGURE_FILE_NAME, SECRETS_REPO_ENV
from .errors import (
    ConfigurationFileNotReadable,
    ConfigurationFileNotWritable,
    InputFileNotReadable,
    ProjectNotPresent,
    SecretsNotPresent,
)
from .models import ENCRYPTED_SUFFIX, Configuration

logger = logging.getLogger("secretsync.project")

DEFAULT_SECRETS_DIR_NAME = ".mobile-secrets"
DECRYPTED_SUFFIX = ".decrypted"


def find_project_root(start: Optional[Path] = None) -> Path:
    """Locate the root of the git working tree containing ``start``.

    Args:
        start: Directory to search from. Defaults to the current directory.

    Returns:
        Path: The working tree root.

    Raises:
        ProjectNotPresent: ``start`` is not inside a git working tree.
    """
    start = start or Path.cwd()
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            capture_output=True, text=True, check=False, cwd=str(start),
        )
    except OSError as exc:
        raise ProjectNotPresent(str(exc)) from exc

    if result.returncode != 0 or not result.stdout.strip():
        raise ProjectNotPresent()

    root = Path(result.stdout.strip())
    logger.debug("Discovered project root at %s", root)
    return root


def find_secrets_repo(
    environ: Optional[Mapping[str, str]] = None,
    home: Optional[Path] = None,
) -> Path:
    """Locate the secrets store on this machine.

    Checked in order: the ``SECRETS_REPO`` environment variable (only when
    it names an existing directory), ``~/.mobile-secrets``, then
    ``~/Projects/.mobile-secrets``.

    Raises:
        SecretsNotPresent: None of the candidates exist.
    """
    environ = os.environ if environ is None else environ
    home = home or Path.home()

    override = environ.get(SECRETS_REPO_ENV)
    if override:
        override_path = Path(override).expanduser()
        if override_path.is_dir():
            return override_path
        logger.debug("%s=%s is not a directory, ignoring it", SECRETS_REPO_ENV, override)

    for candidate in (
        home / DEFAULT_SECRETS_DIR_NAME,
        home / "Projects" / DEFAULT_SECRETS_DIR_NAME,
    ):
        if candidate.is_dir():
            return candidate

    raise SecretsNotPresent()


def configure_file_path(project_root: Path) -> Path:
    return project_root / CONFIGURE_FILE_NAME


def find_configure_file(project_root: Path) -> Path:
    """Return the project's ``.configure`` path, creating an empty one if needed."""
    path = configure_file_path(project_root)
    if not path.exists():
        logger.info("No configure file found at %s. Creating one for you", path)
        write_configuration(Configuration(), path)

    logger.debug("Configure file found at %s", path)
    return path


def resolve_configure_file_path(
    configuration_file_path: Optional[str],
    project_root: Optional[Path] = None,
) -> Path:
    """Use the explicit path when given, else the project's default file."""
    if configuration_file_path:
        return Path(configuration_file_path)
    return find_configure_file(project_root or find_project_root())


def read_configuration(path: Path) -> Configuration:
    """Load a configuration file.

    Raises:
        ConfigurationFileNotReadable: The file is missing or unreadable.
        ConfigurationFileNotValid: The file is not valid configuration JSON.
    """
    if not path.is_file():
        raise ConfigurationFileNotReadable(str(path))
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationFileNotReadable(str(path)) from exc

    return Configuration.from_json(text)


def write_configuration(configuration: Configuration, path: Path) -> None:
    """Persist a configuration as pretty-printed JSON.

    Raises:
        ConfigurationFileNotWritable: The file could not be written.
    """
    serialized = configuration.to_json()
    logger.debug("Writing configuration to %s", path)
    try:
        path.write_text(serialized, encoding="utf-8")
    except OSError as exc:
        raise ConfigurationFileNotWritable(str(path)) from exc


def hash_file(path: Path) -> str:
    """SHA-256 digest of a file, base64-encoded.

    Raises:
        InputFileNotReadable: The file could not be read.
    """
    h = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(8192), b""):
                h.update(chunk)
    except OSError as exc:
        raise InputFileNotReadable(str(path)) from exc
    return base64.b64encode(h.digest()).decode("ascii")


def ensure_parent_directory(path: Path) -> None:
    """Create the parent directory of ``path`` if it does not exist."""
    path.parent.mkdir(parents=True, exist_ok=True)


def infer_encryption_output_filename(path: Path) -> Path:
    """``secrets.json`` -> ``secrets.json.enc``."""
    return Path(str(path) + ENCRYPTED_SUFFIX)


def infer_decryption_output_filename(path: Path) -> Path:
    """``secrets.json.enc`` -> ``secrets.json``; anything else gets ``.decrypted``."""
    text = str(path)
    if text.endswith(ENCRYPTED_SUFFIX):
        return Path(text[: -len(ENCRYPTED_SUFFIX)])
    return Path(text + DECRYPTED_SUFFIX)
