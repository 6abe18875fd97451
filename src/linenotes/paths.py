"""Map a project path to its directory inside the annotation repository."""

from __future__ import annotations

import hashlib
import posixpath
import re
from pathlib import Path

ANNOTATIONS_FILENAME = "annotations.json"
DIGEST_LENGTH = 16


def normalize_project_path(project_path: str) -> str:
    """Canonical form: forward slashes, no '.', '..', duplicate or trailing separators."""
    return posixpath.normpath(project_path.replace("\\", "/"))


def project_dir_name(project_path: str) -> str:
    """Readable basename prefix + sha256 prefix of the normalized path."""
    normalized = normalize_project_path(project_path)
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]
    name = re.sub(r"[^A-Za-z0-9_-]", "_", posixpath.basename(normalized))
    return f"{name}_{digest}"


def location_for(project_path: str, repo_root: Path | str) -> Path:
    """Path of the annotations document for project_path under repo_root."""
    return Path(repo_root) / project_dir_name(project_path) / ANNOTATIONS_FILENAME
