"""Git adapter for the annotation repository.

Runs the ``git`` executable through asyncio subprocesses. Every caller
awaits each command to completion; there is no timeout or retry layer.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from linenotes.errors import (
    CommitError,
    RepositoryError,
    RepositoryInitError,
    SyncError,
)
from linenotes.vcs.base import FALLBACK_EMAIL, FALLBACK_NAME, Identity

logger = logging.getLogger(__name__)

README_CONTENT = """\
# Code Annotations Repository

This repository stores code annotations created by linenotes.

## Structure

Annotations are stored in JSON files organized by project:
- Each project has its own subdirectory named `<project>_<hash>`, where
  `<hash>` is the first 16 hex characters of the SHA-256 of the project's
  absolute path
- Annotations are stored in `annotations.json` files
"""

INITIAL_COMMIT_MESSAGE = "Initial commit"


@dataclass
class GitResult:
    """Outcome of a single git invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class GitCommandError(Exception):
    """A git command exited non-zero."""

    def __init__(self, result: GitResult) -> None:
        self.result = result
        detail = result.stderr.strip() or result.stdout.strip() or f"exit {result.returncode}"
        super().__init__(f"git {' '.join(result.args)} failed: {detail}")


class GitRepository:
    """Version-control adapter bound to a single repository root."""

    def __init__(self, *, git: str = "git", default_remote: str = "origin") -> None:
        self.git = git
        self.default_remote = default_remote
        self._root: Path | None = None

    @property
    def repo_root(self) -> Path | None:
        return self._root

    @property
    def is_initialized(self) -> bool:
        return self._root is not None

    # ── Lifecycle ─────────────────────────────────────────────

    async def initialize(self, repo_root: Path) -> None:
        """Bind to repo_root, creating the directory and repository if needed."""
        repo_root = Path(repo_root).expanduser()
        try:
            repo_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise RepositoryInitError(
                "Cannot create annotation repository directory", path=repo_root, cause=e
            ) from e

        try:
            if not (repo_root / ".git").exists():
                logger.info("Initializing annotation repository at %s", repo_root)
                await self._check(repo_root, "init")
            if await self._has_commits(repo_root):
                logger.debug("Using existing repository at %s", repo_root)
            else:
                # Fresh repository, or one left without its initial commit
                readme = repo_root / "README.md"
                if not readme.exists():
                    readme.write_text(README_CONTENT, encoding="utf-8")
                await self._check(repo_root, "add", "-A")
                await self._commit(repo_root, INITIAL_COMMIT_MESSAGE)
        except (GitCommandError, OSError) as e:
            raise RepositoryInitError(
                "Failed to initialize annotation repository", path=repo_root, cause=e
            ) from e
        self._root = repo_root

    # ── Identity ──────────────────────────────────────────────

    async def identity(self) -> Identity:
        """Author name/email from git config. Falls back instead of raising."""
        return await self._read_identity(self._root)

    async def _read_identity(self, cwd: Path | None) -> Identity:
        try:
            name = await self._config_value(cwd, "user.name")
            email = await self._config_value(cwd, "user.email")
        except OSError as e:
            logger.warning("Could not read git identity, using defaults: %s", e)
            return Identity.fallback(f"Could not get git user info ({e}). Using defaults.")

        if name and email:
            return Identity(name=name, email=email)

        logger.warning("Git identity incomplete (name=%r, email=%r)", name, email)
        return Identity(
            name=name or FALLBACK_NAME,
            email=email or FALLBACK_EMAIL,
            warning="Git user.name/user.email not configured. Using defaults.",
        )

    async def _config_value(self, cwd: Path | None, key: str) -> str:
        result = await self._run(cwd, "config", key)
        return result.stdout.strip() if result.ok else ""

    # ── Commit / push / pull ──────────────────────────────────

    async def remotes(self) -> list[str]:
        root = self._require_root()
        try:
            result = await self._check(root, "remote")
        except (GitCommandError, OSError) as e:
            raise RepositoryError("Cannot list remotes", path=root, cause=e) from e
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def _pick_remote(self, remotes: list[str]) -> str:
        if self.default_remote in remotes:
            return self.default_remote
        return remotes[0]

    async def commit_and_maybe_push(self, message: str) -> bool:
        """Stage everything and commit; push when a remote exists.

        Returns False without committing when nothing changed.
        """
        root = self._require_root()
        await self._refuse_unresolved_merge(root)
        try:
            await self._check(root, "add", "-A")
            status = await self._check(root, "status", "--porcelain")
            if not status.stdout.strip():
                logger.debug("Nothing to commit in %s", root)
                return False
            await self._commit(root, message)
        except (GitCommandError, OSError) as e:
            raise CommitError("Commit failed", path=root, cause=e) from e
        logger.info("Committed: %s", message)

        remotes = await self.remotes()
        if remotes:
            remote = self._pick_remote(remotes)
            try:
                await self._check(root, "push", "--set-upstream", remote, "HEAD")
            except (GitCommandError, OSError) as e:
                raise SyncError(f"Push to {remote} failed", path=root, cause=e) from e
            logger.info("Pushed to %s", remote)
        return True

    async def pull(self) -> bool:
        """Pull the current branch from the default remote.

        Local-only repositories are a no-op and return False.
        """
        root = self._require_root()
        remotes = await self.remotes()
        if not remotes:
            logger.debug("No remotes configured, skipping pull")
            return False

        remote = self._pick_remote(remotes)
        try:
            branch = (await self._check(root, "rev-parse", "--abbrev-ref", "HEAD")).stdout.strip()
            await self._check(root, "pull", "--no-rebase", "--no-edit", remote, branch)
        except (GitCommandError, OSError) as e:
            raise SyncError(f"Pull from {remote} failed", path=root, cause=e) from e
        logger.info("Pulled %s from %s", branch, remote)
        return True

    # ── Internal helpers ──────────────────────────────────────

    async def _has_commits(self, cwd: Path) -> bool:
        return (await self._run(cwd, "rev-parse", "--verify", "--quiet", "HEAD")).ok

    async def _commit(self, cwd: Path, message: str) -> None:
        """Commit, supplying the fallback identity when git config lacks one."""
        author = await self._read_identity(cwd)
        overrides: list[str] = []
        if author.warning:
            overrides = ["-c", f"user.name={author.name}", "-c", f"user.email={author.email}"]
        await self._check(cwd, *overrides, "commit", "-m", message)

    async def _refuse_unresolved_merge(self, root: Path) -> None:
        """Raise SyncError while a conflicted pull is waiting to be resolved."""
        try:
            merging = (await self._run(root, "rev-parse", "--verify", "--quiet", "MERGE_HEAD")).ok
            conflicted = await self._check(root, "diff", "--name-only", "--diff-filter=U")
        except (GitCommandError, OSError) as e:
            raise CommitError("Cannot inspect repository state", path=root, cause=e) from e
        unmerged = conflicted.stdout.split()
        if merging or unmerged:
            raise SyncError(
                "Unresolved merge in annotation repository, resolve it with git first "
                f"(conflicted: {', '.join(unmerged) or 'none'})",
                path=root,
            )

    def _require_root(self) -> Path:
        if self._root is None:
            raise RepositoryError("Annotation repository not initialized")
        return self._root

    async def _check(self, cwd: Path, *args: str) -> GitResult:
        result = await self._run(cwd, *args)
        if not result.ok:
            raise GitCommandError(result)
        return result

    async def _run(self, cwd: Path | None, *args: str) -> GitResult:
        """Run git with args in cwd and capture its output."""
        logger.debug("$ git %s (cwd=%s)", " ".join(args), cwd)
        env = {**os.environ, "GIT_TERMINAL_PROMPT": "0"}
        process = await asyncio.create_subprocess_exec(
            self.git,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(cwd) if cwd is not None else None,
            env=env,
        )
        stdout, stderr = await process.communicate()
        return GitResult(
            args=args,
            returncode=process.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
