"""Configuration loading from environment variables and linenotes.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_DEFAULT_REPO_DIR = Path.home() / ".linenotes" / "annotations"
_CONFIG_FILENAME = "linenotes.toml"


@dataclass
class RepositoryConfig:
    """Where the annotation repository lives and how to reach git."""

    path: Path = _DEFAULT_REPO_DIR
    remote: str = "origin"
    git: str = "git"


@dataclass
class DisplayConfig:
    """CLI presentation settings."""

    truncate: int = 60


@dataclass
class LinenotesConfig:
    """Top-level linenotes configuration."""

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> LinenotesConfig:
    """Load configuration from environment variables and optional linenotes.toml.

    Priority: environment variables > linenotes.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.linenotes/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".linenotes" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    repo_data = file_data.get("repository", {})
    display_data = file_data.get("display", {})

    repo_path = os.getenv("LINENOTES_REPO_DIR", repo_data.get("path"))
    return LinenotesConfig(
        repository=RepositoryConfig(
            path=Path(repo_path).expanduser() if repo_path else _DEFAULT_REPO_DIR,
            remote=os.getenv("LINENOTES_REMOTE", repo_data.get("remote", "origin")),
            git=os.getenv("LINENOTES_GIT", repo_data.get("git", "git")),
        ),
        display=DisplayConfig(
            truncate=int(display_data.get("truncate", 60)),
        ),
        log_level=os.getenv("LINENOTES_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
