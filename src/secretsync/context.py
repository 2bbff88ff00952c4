"""
Run context -- everything a sync run needs from the outside world.

Built once per invocation by :meth:`SyncContext.discover` and handed to
the engine, so nothing below the CLI reads environment variables or
searches the filesystem on its own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from .errors import ProjectNotPresent, SecretsNotPresent
from .keys import KeyRegistry
from .project import find_project_root, find_secrets_repo, resolve_configure_file_path
from .store import GitRevisionStore, RevisionStore

logger = logging.getLogger("secretsync.context")


@dataclass
class SyncContext:
    """Collaborators for one secretsync invocation.

    Attributes:
        project_root: Root of the consuming project.
        configuration_path: The project's ``.configure`` file.
        store: The secrets store, or None when it is not on this machine.
        keys: The secrets store's key registry, or None without a store.
        environ: Environment variables consulted for key overrides.
    """

    project_root: Path
    configuration_path: Path
    store: Optional[RevisionStore] = None
    keys: Optional[KeyRegistry] = None
    environ: Mapping[str, str] = field(default_factory=dict)

    @property
    def secrets_root(self) -> Path:
        return self.require_store().path

    def require_store(self) -> RevisionStore:
        """The secrets store, for operations that cannot run without it.

        Raises:
            SecretsNotPresent: No secrets store was found.
        """
        if self.store is None:
            raise SecretsNotPresent()
        return self.store

    def require_keys(self) -> KeyRegistry:
        """The key registry, for operations that cannot run without it.

        Raises:
            SecretsNotPresent: No secrets store, so no registry.
        """
        if self.keys is None:
            raise SecretsNotPresent()
        return self.keys

    @classmethod
    def discover(
        cls,
        configuration_file_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> SyncContext:
        """Resolve the project, configuration file and secrets store.

        A missing secrets store is not an error here: applying already
        encrypted files only needs a key, which may come from the
        environment.

        Args:
            configuration_file_path: Explicit ``.configure`` path, if any.
            environ: Environment mapping. Defaults to ``os.environ``.
            cwd: Directory to discover the project from.

        Raises:
            ProjectNotPresent: No project root and no explicit configuration path.
        """
        environ = dict(os.environ if environ is None else environ)

        try:
            project_root = find_project_root(cwd)
        except ProjectNotPresent:
            if not configuration_file_path:
                raise
            project_root = Path(configuration_file_path).resolve().parent
            logger.debug("No git project found, using %s as the project root", project_root)

        configuration_path = resolve_configure_file_path(configuration_file_path, project_root)

        store: Optional[RevisionStore] = None
        keys: Optional[KeyRegistry] = None
        try:
            secrets_root = find_secrets_repo(environ)
        except SecretsNotPresent:
            logger.debug("No secrets repository on this machine")
        else:
            store = GitRevisionStore(secrets_root)
            keys = KeyRegistry.for_secrets_root(secrets_root)

        return cls(
            project_root=project_root,
            configuration_path=configuration_path,
            store=store,
            keys=keys,
            environ=environ,
        )
