"""Version-control backends for the annotation repository."""

from linenotes.vcs.base import Identity, Repository
from linenotes.vcs.git import GitRepository

__all__ = ["GitRepository", "Identity", "Repository"]
