"""
Pydantic models for the project configuration and secrets-store state.

The ``.configure`` file is the only thing this package persists inside a
project. Everything else (drift, sync status) is computed per run.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from . import ENCRYPTED_FILES_DIR
from .errors import ConfigurationDataNotValid, ConfigurationFileNotValid

ENCRYPTED_SUFFIX = ".enc"
BACKUP_SUFFIX = ".bak"
BACKUP_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SecretFile(BaseModel):
    """A single secrets-store file mapped into the project.

    Attributes:
        source: Path relative to the secrets store root.
        destination: Path relative to the project root.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    source: str = Field(alias="file")
    destination: str

    def encrypted_destination(self, project_root: Optional[Path]) -> Path:
        """Where the encrypted copy of this file lives.

        Encrypted artifacts are collected in the project's reserved
        ``.configure-files`` directory, named after the destination's file
        name. Without a project root they sit next to the destination.

        Args:
            project_root: Project root, or None when it cannot be resolved.

        Returns:
            Path: ``<root>/.configure-files/<name>.enc`` or ``<destination>.enc``.
        """
        file_name = Path(self.destination).name
        if project_root is not None and file_name:
            return project_root / ENCRYPTED_FILES_DIR / (file_name + ENCRYPTED_SUFFIX)
        return Path(self.destination + ENCRYPTED_SUFFIX)

    def decrypted_destination(self) -> Path:
        """Where the plaintext ends up, relative to the project root."""
        return Path(self.destination)

    def backup_destination(self, at: Optional[datetime] = None, counter: int = 0) -> Path:
        """Timestamped backup path next to the destination.

        ``config/b.txt`` becomes ``config/b-<timestamp>.txt.bak`` and the
        extensionless ``config/b`` becomes ``config/b-<timestamp>.bak``.
        A non-zero ``counter`` is appended to the timestamp
        (``b-<timestamp>-1.txt.bak``) to tell apart backups taken within
        the same second.

        Args:
            at: Instant to stamp the backup with. Defaults to now (UTC).
            counter: Disambiguating suffix, 0 for none.

        Returns:
            Path: The backup path.
        """
        at = at or utc_now()
        path = Path(self.destination)
        stamp = at.strftime(BACKUP_TIMESTAMP_FORMAT)
        if counter:
            stamp = f"{stamp}-{counter}"

        if path.suffix:
            name = f"{path.stem}-{stamp}{path.suffix}{BACKUP_SUFFIX}"
        else:
            name = f"{path.stem}-{stamp}{BACKUP_SUFFIX}"
        return path.parent / name


class Configuration(BaseModel):
    """The project's ``.configure`` file.

    Attributes:
        project_name: Key into the secrets store's keys.json.
        branch: Secrets store branch this project tracks.
        pinned_hash: Secrets store revision the project's files come from.
        files_to_copy: File mappings, applied in order.
    """

    project_name: str = ""
    branch: str = ""
    pinned_hash: str = ""
    files_to_copy: list[SecretFile] = Field(default_factory=list)

    def is_empty(self) -> bool:
        """True when nothing has been configured yet."""
        return self == Configuration()

    @property
    def needs_project_name(self) -> bool:
        return not self.project_name

    @property
    def needs_branch(self) -> bool:
        return not self.branch

    @classmethod
    def from_json(cls, text: str) -> Configuration:
        """Parse the contents of a ``.configure`` file.

        Raises:
            ConfigurationFileNotValid: The text is not a valid configuration.
        """
        try:
            return cls.model_validate_json(text)
        except ValidationError as exc:
            raise ConfigurationFileNotValid(str(exc.errors()[0]["msg"])) from exc

    def to_json(self) -> str:
        """Serialize to the on-disk ``.configure`` format."""
        try:
            return self.model_dump_json(by_alias=True, indent=2)
        except ValueError as exc:
            raise ConfigurationDataNotValid(str(exc)) from exc


class RepoSyncState(str, Enum):
    """Local secrets store relative to its upstream."""

    AHEAD = "ahead"
    BEHIND = "behind"
    SYNCED = "synced"


class RepoStatus(BaseModel):
    """Result of probing the secrets store against its upstream.

    Attributes:
        sync_state: Ahead of, behind, or in sync with the server.
        distance: Number of commits out of sync. Always 0 when synced.
    """

    model_config = ConfigDict(frozen=True)

    sync_state: RepoSyncState
    distance: int = Field(default=0, ge=0)

    @classmethod
    def synced(cls) -> RepoStatus:
        return cls(sync_state=RepoSyncState.SYNCED, distance=0)
