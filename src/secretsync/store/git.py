"""
Git-backed revision store.

Shells out to the ``git`` executable in the secrets repository. Assumes
the upstream remote is named ``origin``.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from ..errors import FetchFailed, NoCurrentBranch, RevisionStoreError, TransportError
from .base import DETACHED_HEAD, HASH_LOG_LIMIT, RevisionStore

logger = logging.getLogger("secretsync.store.git")

REMOTE_NAME = "origin"


class GitRevisionStore(RevisionStore):
    """A secrets repository driven through the git command line.

    Args:
        path: Root of the secrets repository's working copy.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path).resolve()

    @property
    def path(self) -> Path:
        return self._path

    def _git(self, *args: str, error: type[TransportError] = RevisionStoreError) -> str:
        """Run a git command in the store and return its stdout.

        Raises:
            TransportError: git is missing or exited non-zero (``error`` kind).
        """
        cmd = ["git", "--no-pager", *args]
        try:
            result = subprocess.run(
                cmd, capture_output=True, text=True, check=False,
                cwd=str(self._path),
            )
        except OSError as exc:
            raise error(str(exc)) from exc

        if result.returncode != 0:
            logger.debug("git command failed: %s -> %s", " ".join(cmd), result.stderr.strip())
            raise error(result.stderr.strip() or " ".join(args))
        return result.stdout

    def current_branch(self) -> str:
        try:
            self._git("rev-parse", "--verify", "--quiet", "HEAD")
        except RevisionStoreError as exc:
            raise NoCurrentBranch(str(self._path)) from exc

        # "HEAD" when detached
        return self._git("rev-parse", "--abbrev-ref", "HEAD").strip()

    def current_revision(self) -> str:
        return self._git("rev-parse", "HEAD").strip()

    def fetch_remote(self) -> None:
        self._git("fetch", REMOTE_NAME, error=FetchFailed)
        logger.debug("Fetch complete")

    def local_branch_names(self) -> set[str]:
        output = self._git("for-each-ref", "--format=%(refname:short)", "refs/heads/")
        return {line.strip() for line in output.splitlines() if line.strip()}

    def local_revision(self, branch: str) -> str:
        return self._git("rev-parse", "--verify", f"refs/heads/{branch}^{{commit}}").strip()

    def latest_remote_revision(self, branch: str) -> str:
        remote_ref = f"refs/remotes/{REMOTE_NAME}/{branch}"
        logger.debug("Looking for remote ref %s", remote_ref)
        return self._git("rev-parse", "--verify", f"{remote_ref}^{{commit}}").strip()

    def checkout_branch(self, name: str) -> None:
        logger.debug("Checking out branch %s", name)
        self._git("checkout", "--force", name)

    def checkout_revision(self, revision: str) -> None:
        logger.debug("Checking out revision %s", revision)
        self._git("checkout", "--force", "--detach", revision)

    def checkout_branch_at_revision(self, name: str, revision: str) -> None:
        if name == DETACHED_HEAD:
            self.checkout_revision(revision)
            return

        logger.debug("Checking out %s at %s", name, revision)
        self._git("checkout", "--force", "-B", name, revision)

    def ordered_hash_log(
        self, limit: int = HASH_LOG_LIMIT, tip: Optional[str] = None
    ) -> list[str]:
        output = self._git("log", f"-{limit}", "--pretty=format:%H", tip or "HEAD")
        hashes = [line.strip() for line in output.splitlines() if line.strip()]
        hashes.reverse()
        logger.debug("Hash list has %d entries", len(hashes))
        return hashes

    def status_summary(self) -> str:
        return self._git("status", "--porcelain", "-b")
