"""
Revision store interface plus the algorithms that sit on top of it.

A revision store is the secrets repository's history: a current branch,
a bounded log of commit hashes, a remote to fetch from, and a single
working copy that can be checked out to any revision. Drift and sync
status are computed here, against whatever the concrete store reports,
so they can be exercised against an in-memory history.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, NamedTuple, Optional, Sequence

from ..errors import HashNotInHistory, StatusUnrecognized
from ..models import RepoStatus, RepoSyncState

logger = logging.getLogger("secretsync.store")

HASH_LOG_LIMIT = 10_000
DETACHED_HEAD = "HEAD"

_TRACKING_RE = re.compile(r"\b(?P<marker>ahead|behind) (?P<count>\d+)")


class Checkout(NamedTuple):
    """A branch and revision the working copy was on."""

    branch: str
    revision: str


def distance_between(hash_a: str, hash_b: str, log: Sequence[str]) -> int:
    """Number of commits separating two hashes in an ordered log.

    Identical hashes are 0 apart without looking at ``log``. Otherwise
    both must appear in ``log`` and the result is the absolute difference
    of their positions. This only measures distance along the single line
    of history the log captures; it does not walk merge topology.

    Args:
        hash_a: First revision.
        hash_b: Second revision.
        log: Revision hashes, oldest first.

    Returns:
        int: Non-negative commit distance.

    Raises:
        HashNotInHistory: Either hash is missing from ``log``.
    """
    if hash_a == hash_b:
        logger.debug("Hashes are identical – skipping checks")
        return 0

    positions = {}
    for index, revision in enumerate(log):
        positions.setdefault(revision, index)

    for revision in (hash_a, hash_b):
        if revision not in positions:
            raise HashNotInHistory(revision)

    logger.debug(
        "%s is at position %d, %s is at position %d",
        hash_a, positions[hash_a], hash_b, positions[hash_b],
    )
    return abs(positions[hash_a] - positions[hash_b])


def parse_repo_status(summary: str) -> RepoStatus:
    """Classify a ``git status --porcelain -b`` summary.

    Only the first line matters. ``ahead N`` or ``behind N`` gives that
    state and magnitude. Otherwise a line naming an upstream (``...``) is
    in sync, as is a ``##`` branch line with no tracking bracket.

    Raises:
        StatusUnrecognized: The first line is none of the above (e.g. no
            branch line at all, or an unexpected bracket with no upstream).
    """
    lines = summary.strip().splitlines()
    branch_line = lines[0].strip() if lines else ""

    match = _TRACKING_RE.search(branch_line)
    if match:
        state = RepoSyncState(match.group("marker"))
        return RepoStatus(sync_state=state, distance=int(match.group("count")))

    if "..." in branch_line:
        return RepoStatus.synced()

    if branch_line.startswith("##") and "[" not in branch_line:
        return RepoStatus.synced()

    raise StatusUnrecognized(branch_line or "<empty>")


class RevisionStore(ABC):
    """A secrets repository with one mutable working copy.

    Every ``checkout_*`` method hard-resets the working copy, discarding
    local changes. The store is machine-managed state, never hand-edited.
    """

    @property
    @abstractmethod
    def path(self) -> Path:
        """Root of the store's working copy."""

    @abstractmethod
    def current_branch(self) -> str:
        """Name of the checked-out branch, ``HEAD`` when detached.

        Raises:
            NoCurrentBranch: HEAD is unborn.
        """

    @abstractmethod
    def current_revision(self) -> str:
        """Hash of the checked-out commit."""

    @abstractmethod
    def fetch_remote(self) -> None:
        """Update remote-tracking refs without touching the working copy.

        Raises:
            FetchFailed: The remote could not be reached.
        """

    @abstractmethod
    def local_branch_names(self) -> set[str]:
        """Names of all local branches."""

    @abstractmethod
    def local_revision(self, branch: str) -> str:
        """Hash at the tip of a local branch."""

    @abstractmethod
    def latest_remote_revision(self, branch: str) -> str:
        """Hash at the tip of ``origin/<branch>`` as of the last fetch."""

    @abstractmethod
    def checkout_branch(self, name: str) -> None:
        """Hard checkout of a branch at its current tip."""

    @abstractmethod
    def checkout_revision(self, revision: str) -> None:
        """Hard checkout of a bare revision (detached)."""

    @abstractmethod
    def checkout_branch_at_revision(self, name: str, revision: str) -> None:
        """Point ``name`` at ``revision`` and hard checkout.

        ``name == "HEAD"`` degenerates to :meth:`checkout_revision`.
        """

    @abstractmethod
    def ordered_hash_log(
        self, limit: int = HASH_LOG_LIMIT, tip: Optional[str] = None
    ) -> list[str]:
        """Up to ``limit`` ancestors of ``tip`` (default: HEAD), oldest first."""

    @abstractmethod
    def status_summary(self) -> str:
        """Porcelain status text including the branch tracking line."""

    def status(self) -> RepoStatus:
        """Where the local store stands relative to its upstream."""
        return parse_repo_status(self.status_summary())

    def distance_between(
        self, hash_a: str, hash_b: str, tip: Optional[str] = None
    ) -> int:
        """Commit distance between two hashes on the history ending at ``tip``."""
        if hash_a == hash_b:
            return distance_between(hash_a, hash_b, ())
        return distance_between(hash_a, hash_b, self.ordered_hash_log(tip=tip))

    def current_checkout(self) -> Checkout:
        return Checkout(self.current_branch(), self.current_revision())

    @contextmanager
    def preserved_checkout(self) -> Iterator[Checkout]:
        """Capture the current checkout and restore it on exit.

        Restoration runs on every exit path, including exceptions, so code
        inside the block may freely move the working copy to read files at
        other revisions.

        Yields:
            Checkout: The baseline that will be restored.
        """
        baseline = self.current_checkout()
        logger.debug("Captured baseline %s at %s", baseline.branch, baseline.revision)
        try:
            yield baseline
        finally:
            logger.debug("Rolling back to %s at %s", baseline.branch, baseline.revision)
            self.checkout_branch_at_revision(baseline.branch, baseline.revision)
