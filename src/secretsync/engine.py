"""
The sync engine -- moves secrets from the secrets store into a project.

Update protocol:
    capture baseline -> fetch -> pick branch -> check store status
    -> measure drift -> advance pin -> save .configure
    -> encrypt files into .configure-files/ -> restore baseline
    -> decrypt into the project

The secrets store has a single working copy, so reading a file at the
pinned revision means checking that revision out. The whole stretch
between baseline capture and rollback runs inside
``RevisionStore.preserved_checkout`` and the store is always left the way
it was found.

Apply protocol:
    for each mapping: back up the existing file, decrypt over it, and
    drop the backup if nothing changed.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .context import SyncContext
from .encryption import EncryptionKey, decrypt_file, encrypt_file
from .errors import EncryptedFileMissing, OutputFileNotWritable, SecretSyncError
from .keys import resolve_decryption_key
from .models import Configuration, RepoSyncState, SecretFile, utc_now
from .project import ensure_parent_directory, hash_file, write_configuration
from .ui import Prompter

logger = logging.getLogger("secretsync.engine")


@dataclass
class AppliedFile:
    """Outcome of decrypting one mapping into the project.

    Attributes:
        destination: Absolute path of the decrypted file.
        backup: Backup of the previous file, if one was made and kept.
        changed: False when the previous file was byte-identical.
    """

    destination: Path
    backup: Optional[Path] = None
    changed: bool = True


class SyncEngine:
    """Runs update and apply for one project.

    Args:
        context: Project, store, key registry and environment for this run.
        prompter: Operator interaction. Defaults to a console prompter.
    """

    def __init__(self, context: SyncContext, prompter: Optional[Prompter] = None) -> None:
        self.context = context
        self.prompter = prompter or Prompter()

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update(self, configuration: Configuration, interactive: bool = True) -> Configuration:
        """Advance the project to the latest secrets and apply them.

        Args:
            configuration: The project's current configuration.
            interactive: Ask before continuing past an out-of-sync store
                and before advancing the pinned hash.

        Returns:
            Configuration: The configuration as saved, or unchanged when the
            operator stopped the update.
        """
        store = self.context.require_store()
        configuration = configuration.model_copy(deep=True)

        self.prompter.heading("Configure Update")

        with store.preserved_checkout():
            logger.debug("Fetching latest secrets")
            with self.prompter.status("Fetching latest secrets"):
                store.fetch_remote()

            if interactive:
                configuration = self.choose_branch(configuration)

            if not self._confirm_store_status(interactive):
                logger.debug("Exiting without updating hash")
                return configuration

            latest = store.latest_remote_revision(configuration.branch)
            distance = self.drift(configuration, latest)
            logger.debug("The project is %d commit(s) behind the latest secrets", distance)

            if distance == 0:
                # Fills in a blank pin on hand-written files without moving anything
                configuration.pinned_hash = latest
            else:
                message = (
                    f"This project is {distance} commit(s) behind the latest secrets. "
                    "Would you like to use the latest secrets?"
                )
                if not interactive or self.prompter.confirm(message):
                    logger.debug("Moving the secrets repo to %s at %s", configuration.branch, latest)
                    store.checkout_branch_at_revision(configuration.branch, latest)
                    logger.debug("Updating the .configure file pinned hash to %s", latest)
                    configuration.pinned_hash = latest

            write_configuration(configuration, self.context.configuration_path)

            # Registry only: environment overrides are for decryption
            key = self.context.require_keys().key_for(configuration.project_name)
            self.write_encrypted_files(configuration, key)

        self.apply(configuration)
        return configuration

    def drift(self, configuration: Configuration, latest: str) -> int:
        """Commits between the pinned hash and ``latest``.

        A blank pin counts as no drift; update then adopts ``latest``.

        Raises:
            HashNotInHistory: The pin is not in ``latest``'s recent history.
        """
        if not configuration.pinned_hash:
            return 0
        store = self.context.require_store()
        return store.distance_between(configuration.pinned_hash, latest, tip=latest)

    def choose_branch(self, configuration: Configuration, force: bool = True) -> Configuration:
        """Let the operator pick the secrets branch the project tracks."""
        if not configuration.needs_branch and not force:
            return configuration

        store = self.context.require_store()
        current = store.current_branch()
        branches = store.local_branch_names()

        self.prompter.info(f"Using the secrets repository at {store.path}")
        self.prompter.info("Which branch would you like to use?")
        self.prompter.info(f"Current Branch: [green]{current}[/]")

        selected = self.prompter.select(branches, current, label="Branch")
        configuration.branch = selected
        self.prompter.info(f"Secrets repo branch set to: {selected}")
        return configuration

    def _confirm_store_status(self, interactive: bool) -> bool:
        status = self.context.require_store().status()
        logger.debug("Repo status is: %s", status)

        if not interactive or status.sync_state == RepoSyncState.SYNCED:
            return True

        if status.sync_state == RepoSyncState.AHEAD:
            self.prompter.warn(
                f"Your local secrets repo has {status.distance} change(s) that the server does not"
            )
        else:
            self.prompter.warn(
                f"The server has {status.distance} change(s) that your local secrets repo does not"
            )
        return self.prompter.confirm("Would you like to continue?")

    def write_encrypted_files(self, configuration: Configuration, key: EncryptionKey) -> list[Path]:
        """Encrypt every mapped source from the store's working copy.

        Mappings are written one at a time. A failure stops the loop and
        leaves already-written files in place.

        Returns:
            list[Path]: Encrypted files written, in mapping order.
        """
        secrets_root = self.context.secrets_root
        written = []
        for secret in configuration.files_to_copy:
            source = secrets_root / secret.source
            destination = secret.encrypted_destination(self.context.project_root)
            ensure_parent_directory(destination)

            logger.debug("Encrypting file at %s and storing contents at %s", source, destination)
            encrypt_file(source, destination, key)
            written.append(destination)
        return written

    # ------------------------------------------------------------------
    # Apply
    # ------------------------------------------------------------------

    def apply(self, configuration: Configuration) -> list[AppliedFile]:
        """Decrypt the project's encrypted files into place."""
        applied = self.decrypt_files(configuration)
        logger.debug("All files copied")
        logger.info("Done")
        return applied

    def decrypt_files(
        self, configuration: Configuration, key: Optional[EncryptionKey] = None
    ) -> list[AppliedFile]:
        """Decrypt every mapping, backing up files that already exist.

        Args:
            configuration: Mappings to apply.
            key: Decryption key. Resolved from the environment and key
                registry when omitted.

        Raises:
            EncryptedFileMissing: A mapping has no encrypted artifact.
            MissingDecryptionKey: No key could be resolved.
        """
        if key is None:
            key = resolve_decryption_key(
                configuration.project_name, self.context.environ, self.context.keys
            )

        project_root = self.context.project_root
        return [self._decrypt_one(secret, project_root, key) for secret in configuration.files_to_copy]

    def _decrypt_one(self, secret: SecretFile, project_root: Path, key: EncryptionKey) -> AppliedFile:
        source = project_root / secret.encrypted_destination(project_root)
        destination = project_root / secret.decrypted_destination()

        ensure_parent_directory(destination)

        if not source.exists():
            logger.info("Encrypted original file at %s not found", source)
            raise EncryptedFileMissing(str(source))

        if not destination.exists():
            logger.debug("Decrypting file at %s and storing contents at %s", source, destination)
            decrypt_file(source, destination, key)
            return AppliedFile(destination=destination)

        backup = self._unused_backup_path(secret, project_root)
        logger.debug("%s already exists – making a backup at %s", destination, backup)
        try:
            os.replace(destination, backup)
        except OSError as exc:
            raise OutputFileNotWritable(str(backup)) from exc

        try:
            decrypt_file(source, destination, key)
        except SecretSyncError:
            os.replace(backup, destination)
            raise

        new_hash = hash_file(destination)
        original_hash = hash_file(backup)
        logger.debug("Original file hash: %s", original_hash)
        logger.debug("New file hash: %s", new_hash)

        if new_hash == original_hash:
            logger.debug("Removing backup file because it's the same as the original")
            backup.unlink()
            return AppliedFile(destination=destination, changed=False)

        logger.debug("Keeping backup file because it differs from the original")
        return AppliedFile(destination=destination, backup=backup)

    def _unused_backup_path(self, secret: SecretFile, project_root: Path) -> Path:
        at = utc_now()
        counter = 0
        backup = project_root / secret.backup_destination(at)
        while backup.exists():
            counter += 1
            backup = project_root / secret.backup_destination(at, counter)
        return backup
