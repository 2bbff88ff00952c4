"""
Top-level secretsync operations.

Each function resolves its own :class:`SyncContext` unless one is passed
in, reads the project's configuration, and dispatches to the engine,
the setup wizard or the validator. The CLI is a thin layer over these.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .context import SyncContext
from .encryption import EncryptionKey, decrypt_file, encrypt_file, generate_key
from .engine import AppliedFile, SyncEngine
from .models import Configuration
from .project import (
    find_configure_file,
    find_project_root,
    infer_decryption_output_filename,
    infer_encryption_output_filename,
    read_configuration,
    write_configuration,
)
from .ui import Prompter
from .validate import ValidationReport, validate_configuration
from .wizard import setup_configuration

logger = logging.getLogger("secretsync.api")


def _load(
    configuration_file_path: Optional[str], context: Optional[SyncContext]
) -> tuple[SyncContext, Configuration]:
    context = context or SyncContext.discover(configuration_file_path)
    return context, read_configuration(context.configuration_path)


def init(
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
    prompter: Optional[Prompter] = None,
) -> Configuration:
    """Set up (or re-run setup for) the current project."""
    context, configuration = _load(configuration_file_path, context)
    return setup_configuration(configuration, context, prompter)


def apply(
    interactive: bool = True,
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
    prompter: Optional[Prompter] = None,
) -> Optional[list[AppliedFile]]:
    """Decrypt the secrets already present in the project.

    An empty configuration starts setup when interactive and is only a
    warning otherwise.

    Returns:
        The applied files, or None when nothing was applied.
    """
    prompter = prompter or Prompter()
    context, configuration = _load(configuration_file_path, context)

    if configuration.is_empty():
        if interactive:
            setup_configuration(configuration, context, prompter)
        else:
            prompter.warn("Unable to apply configuration – it is empty")
        return None

    return SyncEngine(context, prompter).apply(configuration)


def update(
    interactive: bool = True,
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
    prompter: Optional[Prompter] = None,
) -> Optional[Configuration]:
    """Bring the project's secrets up to date with the secrets repo.

    Returns:
        The resulting configuration, or None when the configuration was
        empty and setup did not run.
    """
    prompter = prompter or Prompter()
    context, configuration = _load(configuration_file_path, context)

    if configuration.is_empty():
        if interactive:
            return setup_configuration(configuration, context, prompter)
        prompter.warn(
            "Current configuration is empty – unable to update when running in non-interactive mode"
        )
        return None

    return SyncEngine(context, prompter).update(configuration, interactive)


def _update_field(
    field_name: str,
    value: str,
    configuration_file_path: Optional[str],
    context: Optional[SyncContext],
) -> Configuration:
    context, configuration = _load(configuration_file_path, context)
    setattr(configuration, field_name, value)
    write_configuration(configuration, context.configuration_path)
    logger.debug("Set %s to %s in %s", field_name, value, context.configuration_path)
    return configuration


def update_project_name(
    project_name: str,
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
) -> Configuration:
    return _update_field("project_name", project_name, configuration_file_path, context)


def update_branch_name(
    branch_name: str,
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
) -> Configuration:
    return _update_field("branch", branch_name, configuration_file_path, context)


def update_pinned_hash(
    pinned_hash: str,
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
) -> Configuration:
    return _update_field("pinned_hash", pinned_hash, configuration_file_path, context)


def validate(
    configuration_file_path: Optional[str] = None,
    *,
    context: Optional[SyncContext] = None,
) -> tuple[Configuration, ValidationReport]:
    """Load the configuration and check it against the store and project."""
    context, configuration = _load(configuration_file_path, context)
    return configuration, validate_configuration(configuration, context)


def generate_encryption_key() -> str:
    """A new base64 key suitable for keys.json or the key environment variables."""
    return str(generate_key())


def find_configuration_file(project_root: Optional[Path] = None) -> str:
    """Path of the project's ``.configure`` file, created if missing."""
    return str(find_configure_file(project_root or find_project_root()))


def encrypt_single_file(
    input_file: Path,
    output_file: Optional[Path] = None,
    encryption_key: Optional[str] = None,
) -> tuple[Path, EncryptionKey, bool]:
    """Encrypt one file outside of any project.

    Args:
        input_file: Plaintext file.
        output_file: Destination. Defaults to ``<input_file>.enc``.
        encryption_key: Base64 key. A new one is generated when omitted.

    Returns:
        (output path, key used, whether the key was generated)
    """
    generated = encryption_key is None
    key = generate_key() if generated else EncryptionKey.from_string(encryption_key)
    output_file = output_file or infer_encryption_output_filename(input_file)

    encrypt_file(input_file, output_file, key)
    return output_file, key, generated


def decrypt_single_file(
    input_file: Path,
    encryption_key: str,
    output_file: Optional[Path] = None,
) -> Path:
    """Decrypt one file outside of any project.

    The output defaults to ``input_file`` without its ``.enc`` suffix, or
    with ``.decrypted`` appended when it has none.
    """
    key = EncryptionKey.from_string(encryption_key)
    output_file = output_file or infer_decryption_output_filename(input_file)

    decrypt_file(input_file, output_file, key)
    return output_file
