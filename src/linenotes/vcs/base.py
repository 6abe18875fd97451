"""Repository protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

FALLBACK_NAME = "Unknown"
FALLBACK_EMAIL = "unknown@example.com"


@dataclass
class Identity:
    """Author identity read from the version-control configuration."""

    name: str
    email: str
    warning: str | None = None  # set when the fallback identity was used

    @classmethod
    def fallback(cls, warning: str) -> Identity:
        return cls(name=FALLBACK_NAME, email=FALLBACK_EMAIL, warning=warning)


@runtime_checkable
class Repository(Protocol):
    """What the annotation store needs from a version-control backend."""

    @property
    def repo_root(self) -> Path | None:
        """Bound repository root, or None before initialize()."""
        ...

    async def initialize(self, repo_root: Path) -> None: ...

    async def identity(self) -> Identity: ...

    async def commit_and_maybe_push(self, message: str) -> bool:
        """Commit all pending changes. Returns False when there was nothing to commit."""
        ...

    async def pull(self) -> bool:
        """Pull from the default remote. Returns False when no remote is configured."""
        ...
