"""
Error taxonomy for secretsync.

Every failure the tool can report is a ``SecretSyncError`` subclass with a
fixed message and a process exit code. Library code raises them; the CLI
is the only place that catches them.
"""

from __future__ import annotations

from typing import Optional


class SecretSyncError(Exception):
    """Base class for all secretsync failures."""

    message = "Unknown secretsync error"
    exit_code = 1

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


# ---------------------------------------------------------------------------
# Resource not found
# ---------------------------------------------------------------------------

class ResourceNotFoundError(SecretSyncError):
    """Something the run needs does not exist on this machine."""


class ProjectNotPresent(ResourceNotFoundError):
    message = (
        "Unable to find the root of the repository – are you sure you're "
        "running this inside a git repo?"
    )
    exit_code = 2


class SecretsNotPresent(ResourceNotFoundError):
    message = "No secrets repository could be found on this machine"
    exit_code = 3


class ConfigurationFileNotReadable(ResourceNotFoundError):
    message = "The .configure file is missing or could not be read"
    exit_code = 4


class EncryptedFileMissing(ResourceNotFoundError):
    message = (
        "An encrypted file is missing – unable to apply secrets to project. "
        "Run `secretsync update` to fix this"
    )
    exit_code = 5


class KeysFileNotReadable(ResourceNotFoundError):
    message = "Unable to read keys.json file in your secrets repo"
    exit_code = 6


class MissingProjectKey(ResourceNotFoundError):
    message = "That project key is not defined in keys.json"
    exit_code = 7


class MissingDecryptionKey(ResourceNotFoundError):
    message = (
        "No decryption key is available – set an encryption key environment "
        "variable or add the project to keys.json"
    )
    exit_code = 8


class InputFileNotReadable(ResourceNotFoundError):
    message = "Unable to read the input file"
    exit_code = 9


# ---------------------------------------------------------------------------
# Data integrity
# ---------------------------------------------------------------------------

class DataIntegrityError(SecretSyncError):
    """Persisted or computed data is corrupt or inconsistent."""


class ConfigurationFileNotValid(DataIntegrityError):
    message = "Unable to parse configuration file – the JSON is probably invalid"
    exit_code = 10


class ConfigurationDataNotValid(DataIntegrityError):
    message = (
        "Unable to save configuration data – it couldn't be converted to JSON"
    )
    exit_code = 11


class KeysFileNotValid(DataIntegrityError):
    message = (
        "keys.json file in your secrets repo is not valid – it might be "
        "invalid JSON, or it could be structured incorrectly"
    )
    exit_code = 12


class DecryptionKeyEncodingError(DataIntegrityError):
    message = "This decryption key is not valid base64"
    exit_code = 19


class DecryptionKeyParsingError(DataIntegrityError):
    message = "This decryption key is not a valid 256-bit key"
    exit_code = 20


class DataDecryptionError(DataIntegrityError):
    message = "Unable to decrypt file"
    exit_code = 13


class StatusUnrecognized(DataIntegrityError):
    message = "Invalid git status"
    exit_code = 14


class HashNotInHistory(DataIntegrityError):
    message = "The hash doesn't exist in the repository history"
    exit_code = 15


class NoCurrentBranch(DataIntegrityError):
    message = "Unable to find current secrets repo branch"
    exit_code = 16


# ---------------------------------------------------------------------------
# Transport / revision store
# ---------------------------------------------------------------------------

class TransportError(SecretSyncError):
    """The revision store or its remote could not be reached or queried."""


class RevisionStoreError(TransportError):
    message = "Unknown git error"
    exit_code = 17


class FetchFailed(TransportError):
    message = "Unable to fetch latest secrets"
    exit_code = 18


# ---------------------------------------------------------------------------
# Destructive file operations
# ---------------------------------------------------------------------------

class FileOperationError(SecretSyncError):
    """Writing, renaming, or removing a file failed."""


class ConfigurationFileNotWritable(FileOperationError):
    message = "The .configure file could not be written"
    exit_code = 21


class KeysFileNotWritable(FileOperationError):
    message = "Unable to write keys.json file in your secrets repo"
    exit_code = 22


class OutputFileNotWritable(FileOperationError):
    message = "Unable to write the output file"
    exit_code = 23
