"""Shared test fixtures for secretsync."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Iterable, Optional

import pytest
from rich.console import Console

from secretsync.context import SyncContext
from secretsync.errors import FetchFailed
from secretsync.keys import KeyRegistry
from secretsync.models import Configuration, SecretFile
from secretsync.store.base import DETACHED_HEAD, HASH_LOG_LIMIT, RevisionStore
from secretsync.ui import Prompter

H0 = "0" * 39 + "a"
H1 = "1" * 39 + "b"
H2 = "2" * 39 + "c"

PROJECT_NAME = "test-project"


class FakeRevisionStore(RevisionStore):
    """In-memory linear history that writes each checkout's files to disk.

    Args:
        root: Directory standing in for the working copy.
        commits: ``(hash, {relative path: bytes})`` pairs, oldest first.
        branch: Name of the single tracked branch.
    """

    def __init__(self, root: Path, commits: list[tuple[str, dict[str, bytes]]], branch: str = "trunk"):
        self._root = root
        self._root.mkdir(parents=True, exist_ok=True)
        self.history = [h for h, _ in commits]
        self.snapshots = dict(commits)
        self.branches = {branch: self.history[-1]}
        self.remote = {branch: self.history[-1]}
        self.head_branch = branch
        self.head = self.history[-1]
        self.summary = f"## {branch}...origin/{branch}\n"
        self.fetch_count = 0
        self.fail_fetch = False
        self.checkouts: list[tuple[str, str]] = []
        self._materialize(self.head)

    def _materialize(self, revision: str) -> None:
        for relative, content in self.snapshots[revision].items():
            target = self._root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)

    def move_local(self, branch: str, revision: str) -> None:
        """Put the working copy on ``branch`` at ``revision`` without recording a checkout."""
        self.branches[branch] = revision
        self.head_branch = branch
        self.head = revision
        self._materialize(revision)

    @property
    def path(self) -> Path:
        return self._root

    def current_branch(self) -> str:
        return self.head_branch

    def current_revision(self) -> str:
        return self.head

    def fetch_remote(self) -> None:
        self.fetch_count += 1
        if self.fail_fetch:
            raise FetchFailed("remote unreachable")

    def local_branch_names(self) -> set[str]:
        return set(self.branches)

    def local_revision(self, branch: str) -> str:
        return self.branches[branch]

    def latest_remote_revision(self, branch: str) -> str:
        return self.remote[branch]

    def checkout_branch(self, name: str) -> None:
        self.checkout_branch_at_revision(name, self.branches[name])

    def checkout_revision(self, revision: str) -> None:
        self.checkouts.append((DETACHED_HEAD, revision))
        self.head_branch = DETACHED_HEAD
        self.head = revision
        self._materialize(revision)

    def checkout_branch_at_revision(self, name: str, revision: str) -> None:
        if name == DETACHED_HEAD:
            self.checkout_revision(revision)
            return
        self.checkouts.append((name, revision))
        self.move_local(name, revision)

    def ordered_hash_log(self, limit: int = HASH_LOG_LIMIT, tip: Optional[str] = None) -> list[str]:
        end = self.history.index(tip or self.head) + 1
        return self.history[max(0, end - limit):end]

    def status_summary(self) -> str:
        return self.summary


class ScriptedPrompter(Prompter):
    """Answers prompts from prepared lists and records what was asked."""

    def __init__(
        self,
        confirms: Iterable[bool] = (),
        answers: Iterable[str] = (),
        selection: Optional[str] = None,
    ):
        super().__init__(Console(file=io.StringIO(), width=120))
        self.confirms = list(confirms)
        self.answers = list(answers)
        self.selection = selection
        self.questions: list[str] = []
        self.warnings: list[str] = []
        self.statuses: list[str] = []

    def status(self, text: str):
        self.statuses.append(text)
        return super().status(text)

    def confirm(self, question: str, default: bool = False) -> bool:
        self.questions.append(question)
        return self.confirms.pop(0) if self.confirms else default

    def prompt(self, question: str) -> str:
        self.questions.append(question)
        return self.answers.pop(0)

    def select(self, options, default, label="Choice"):
        return self.selection or default

    def warn(self, text: str) -> None:
        self.warnings.append(text)
        super().warn(text)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """An empty consuming project."""
    root = tmp_path / "project"
    root.mkdir()
    return root


@pytest.fixture
def store(tmp_path: Path) -> FakeRevisionStore:
    """Three-commit secrets history, local and remote both at the tip."""
    return FakeRevisionStore(
        tmp_path / "secrets",
        [
            (H0, {"secret.json": b'{"token": "v0"}'}),
            (H1, {"secret.json": b'{"token": "v1"}'}),
            (H2, {"secret.json": b'{"token": "v2"}'}),
        ],
    )


@pytest.fixture
def keys(store: FakeRevisionStore) -> KeyRegistry:
    """Key registry in the fake store with a key for the test project."""
    registry = KeyRegistry.for_secrets_root(store.path)
    registry.ensure_key(PROJECT_NAME)
    return registry


@pytest.fixture
def context(project_root: Path, store: FakeRevisionStore, keys: KeyRegistry) -> SyncContext:
    return SyncContext(
        project_root=project_root,
        configuration_path=project_root / ".configure",
        store=store,
        keys=keys,
        environ={},
    )


@pytest.fixture
def configuration() -> Configuration:
    """A configured project pinned to the latest commit."""
    return Configuration(
        project_name=PROJECT_NAME,
        branch="trunk",
        pinned_hash=H2,
        files_to_copy=[SecretFile(source="secret.json", destination="config/secret.json")],
    )
