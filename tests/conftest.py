"""Shared fixtures: isolated git config and an in-memory repository double."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from linenotes.errors import SyncError
from linenotes.vcs.base import Identity

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(cwd: Path, *args: str) -> str:
    """Run git synchronously for test setup; returns stdout."""
    result = subprocess.run(
        ["git", *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout


@pytest.fixture(autouse=True)
def isolated_git(tmp_path_factory, monkeypatch) -> Path:
    """Point git at a throwaway global config with a known identity."""
    home = tmp_path_factory.mktemp("home")
    gitconfig = home / ".gitconfig"
    gitconfig.write_text(
        "[user]\n\tname = Test User\n\temail = test@example.com\n", encoding="utf-8"
    )
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(gitconfig))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    for key in ["LINENOTES_REPO_DIR", "LINENOTES_REMOTE", "LINENOTES_GIT", "LINENOTES_LOG_LEVEL"]:
        monkeypatch.delenv(key, raising=False)
    return gitconfig


class FakeRepository:
    """Records commits and pulls instead of running git."""

    def __init__(self, root: Path | None = None) -> None:
        self._root = root
        self.commits: list[str] = []
        self.pulls = 0
        self.pull_error: SyncError | None = None
        self.author = Identity(name="Alice", email="alice@example.com")

    @property
    def repo_root(self) -> Path | None:
        return self._root

    async def initialize(self, repo_root: Path) -> None:
        repo_root.mkdir(parents=True, exist_ok=True)
        self._root = repo_root

    async def identity(self) -> Identity:
        return self.author

    async def commit_and_maybe_push(self, message: str) -> bool:
        self.commits.append(message)
        return True

    async def pull(self) -> bool:
        self.pulls += 1
        if self.pull_error:
            raise self.pull_error
        return False


@pytest.fixture
def fake_repo(tmp_path: Path) -> FakeRepository:
    root = tmp_path / "annotations"
    root.mkdir()
    return FakeRepository(root)
