"""Tests for GitRevisionStore against real repositories in tmp_path."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from secretsync.errors import FetchFailed, NoCurrentBranch, RevisionStoreError
from secretsync.models import RepoSyncState
from secretsync.store import GitRevisionStore
from secretsync.store.base import DETACHED_HEAD

pytestmark = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")

GIT_CONFIG = [
    "-c", "user.name=Test",
    "-c", "user.email=test@example.com",
    "-c", "init.defaultBranch=trunk",
    "-c", "commit.gpgsign=false",
]


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *GIT_CONFIG, *args],
        capture_output=True, text=True, check=True, cwd=str(cwd),
    )
    return result.stdout.strip()


def commit(repo: Path, content: str) -> str:
    (repo / "secret.json").write_text(content)
    git(repo, "add", "secret.json")
    git(repo, "commit", "-q", "-m", content)
    return git(repo, "rev-parse", "HEAD")


@pytest.fixture
def repos(tmp_path):
    """An upstream with three commits, and a clone of it as the secrets store.

    Returns (author working copy, secrets clone, [hashes oldest first]).
    """
    author = tmp_path / "author"
    author.mkdir()
    git(author, "init", "-q")
    hashes = [commit(author, f"v{i}") for i in range(3)]

    git(tmp_path, "clone", "-q", "--bare", str(author), "origin.git")
    git(author, "remote", "add", "origin", str(tmp_path / "origin.git"))
    git(tmp_path, "clone", "-q", str(tmp_path / "origin.git"), "secrets")
    return author, tmp_path / "secrets", hashes


class TestGitRevisionStore:
    """Tests for each git operation the store exposes."""

    def test_current_branch_and_revision(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        assert store.current_branch() == "trunk"
        assert store.current_revision() == hashes[-1]
        assert store.current_checkout() == ("trunk", hashes[-1])

    def test_unborn_head_has_no_branch(self, tmp_path):
        git(tmp_path, "init", "-q", "empty")
        with pytest.raises(NoCurrentBranch):
            GitRevisionStore(tmp_path / "empty").current_branch()

    def test_detached_head_reports_head(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        store.checkout_revision(hashes[0])
        assert store.current_branch() == DETACHED_HEAD
        assert (secrets / "secret.json").read_text() == "v0"

    def test_ordered_hash_log_is_oldest_first(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        assert store.ordered_hash_log() == hashes
        assert store.ordered_hash_log(limit=2) == hashes[1:]

    def test_ordered_hash_log_from_tip(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        store.checkout_revision(hashes[0])
        assert store.ordered_hash_log(tip=hashes[2]) == hashes
        assert store.distance_between(hashes[0], hashes[2], tip=hashes[2]) == 2

    def test_local_branches(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        git(secrets, "branch", "release", hashes[1])
        assert store.local_branch_names() == {"trunk", "release"}
        assert store.local_revision("release") == hashes[1]

    def test_unknown_branch_fails(self, repos):
        _, secrets, _ = repos
        with pytest.raises(RevisionStoreError):
            GitRevisionStore(secrets).local_revision("nope")

    def test_fetch_updates_remote_tip_only(self, repos):
        author, secrets, hashes = repos
        newest = commit(author, "v3")
        git(author, "push", "-q", "origin", "trunk")

        store = GitRevisionStore(secrets)
        assert store.latest_remote_revision("trunk") == hashes[-1]
        store.fetch_remote()
        assert store.latest_remote_revision("trunk") == newest
        assert store.current_revision() == hashes[-1]
        assert store.status().sync_state == RepoSyncState.BEHIND
        assert store.status().distance == 1

    def test_fetch_failure(self, repos, tmp_path):
        _, secrets, _ = repos
        shutil.rmtree(tmp_path / "origin.git")
        with pytest.raises(FetchFailed):
            GitRevisionStore(secrets).fetch_remote()

    def test_status_ahead(self, repos):
        _, secrets, _ = repos
        commit(secrets, "local")
        status = GitRevisionStore(secrets).status()
        assert status.sync_state == RepoSyncState.AHEAD
        assert status.distance == 1

    def test_status_synced(self, repos):
        _, secrets, _ = repos
        assert GitRevisionStore(secrets).status().sync_state == RepoSyncState.SYNCED

    def test_checkout_branch_at_revision_moves_branch(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        store.checkout_branch_at_revision("trunk", hashes[0])
        assert store.current_checkout() == ("trunk", hashes[0])
        assert (secrets / "secret.json").read_text() == "v0"

    def test_checkout_discards_local_changes(self, repos):
        _, secrets, hashes = repos
        (secrets / "secret.json").write_text("scribbled")
        store = GitRevisionStore(secrets)
        store.checkout_branch("trunk")
        assert (secrets / "secret.json").read_text() == "v2"

    def test_preserved_checkout_restores_branch_tip(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        store.checkout_branch_at_revision("trunk", hashes[1])
        with store.preserved_checkout():
            store.checkout_branch_at_revision("trunk", hashes[2])
            assert (secrets / "secret.json").read_text() == "v2"
        assert store.current_checkout() == ("trunk", hashes[1])
        assert (secrets / "secret.json").read_text() == "v1"

    def test_preserved_checkout_restores_detached_head(self, repos):
        _, secrets, hashes = repos
        store = GitRevisionStore(secrets)
        store.checkout_revision(hashes[0])
        with store.preserved_checkout():
            store.checkout_branch_at_revision("trunk", hashes[2])
        assert store.current_checkout() == (DETACHED_HEAD, hashes[0])
        assert store.local_revision("trunk") == hashes[2]
