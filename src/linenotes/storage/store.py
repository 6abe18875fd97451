"""Annotation store: per-project in-memory index mirrored to JSON on disk.

Each project's annotations live in one document inside the annotation
repository (see ``linenotes.paths.location_for``). Every mutation rewrites
the whole document; committing and syncing are delegated to the
repository adapter.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

from linenotes.errors import RepositoryError, StorageReadWarning, StorageWriteError
from linenotes.models import FORMAT_VERSION, Annotation, AnnotationData, now_ms
from linenotes.paths import location_for
from linenotes.vcs.base import Repository

logger = logging.getLogger(__name__)


@dataclass
class LoadResult:
    """Annotations read for a project, plus the warning if the read degraded."""

    annotations: list[Annotation]
    warning: StorageReadWarning | None = None

    @property
    def degraded(self) -> bool:
        return self.warning is not None


class AnnotationStore:
    """Owns annotation collections keyed by absolute project path."""

    def __init__(self, repository: Repository) -> None:
        self.repository = repository
        self._annotations: dict[str, list[Annotation]] = {}

    # ── Paths ─────────────────────────────────────────────────

    def document_path(self, project_path: str) -> Path:
        repo_root = self.repository.repo_root
        if repo_root is None:
            raise RepositoryError("Annotation repository not configured")
        return location_for(project_path, repo_root)

    # ── Load / save ───────────────────────────────────────────

    async def load(self, project_path: str) -> LoadResult:
        """(Re)build the project's collection from disk.

        A missing document loads as empty. An unreadable or malformed one
        also loads as empty, and the returned result carries a warning.
        """
        path = self.document_path(project_path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No annotations yet for %s", project_path)
            self._annotations[project_path] = []
            return LoadResult(annotations=[])
        except (OSError, ValueError) as e:
            return self._degrade(project_path, path, e)

        try:
            data = AnnotationData.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            return self._degrade(project_path, path, e)

        if data.version != FORMAT_VERSION:
            logger.warning(
                "Annotation document %s has version %s (expected %s), loading as-is",
                path,
                data.version,
                FORMAT_VERSION,
            )

        annotations: list[Annotation] = []
        seen: set[str] = set()
        for annotation in data.annotations:
            if annotation.id in seen:
                logger.warning("Duplicate annotation id %s in %s, keeping first", annotation.id, path)
                continue
            seen.add(annotation.id)
            annotation.project_path = project_path
            annotations.append(annotation)

        self._annotations[project_path] = annotations
        logger.info("Loaded %d annotations for %s", len(annotations), project_path)
        return LoadResult(annotations=list(annotations))

    def _degrade(self, project_path: str, path: Path, error: Exception) -> LoadResult:
        warning = StorageReadWarning(f"Failed to load annotations: {error}", path, error)
        logger.warning("Failed to load annotations from %s: %s", path, error)
        self._annotations[project_path] = []
        return LoadResult(annotations=[], warning=warning)

    async def save(self, project_path: str) -> None:
        """Rewrite the project's document from the in-memory collection."""
        path = self.document_path(project_path)
        data = AnnotationData(annotations=await self._collection(project_path))
        content = json.dumps(data.to_dict(), indent=2, ensure_ascii=False)
        tmp = path.with_name(f".{path.name}.tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(content, encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                tmp.unlink()
            raise StorageWriteError("Failed to save annotations", path=path, cause=e) from e
        logger.debug("Saved %d annotations to %s", len(data.annotations), path)

    # ── Mutations ─────────────────────────────────────────────

    async def _collection(self, project_path: str) -> list[Annotation]:
        """The project's in-memory collection, loading it from disk on first use."""
        if project_path not in self._annotations:
            await self.load(project_path)
        return self._annotations[project_path]

    async def add(self, annotation: Annotation) -> None:
        project = await self._collection(annotation.project_path)
        if any(a.id == annotation.id for a in project):
            raise ValueError(f"Annotation {annotation.id} already exists")
        project.append(annotation)
        try:
            await self.save(annotation.project_path)
        except StorageWriteError:
            project.remove(annotation)
            raise

    async def update(self, annotation_id: str, project_path: str, new_text: str) -> bool:
        """Replace an annotation's text. Returns False if the id is unknown."""
        await self._collection(project_path)
        annotation = self.get(annotation_id, project_path)
        if annotation is None:
            logger.debug("Update of unknown annotation %s ignored", annotation_id)
            return False

        old_text, old_timestamp = annotation.text, annotation.timestamp
        annotation.text = new_text
        annotation.timestamp = max(now_ms(), old_timestamp + 1)
        try:
            await self.save(project_path)
        except StorageWriteError:
            annotation.text, annotation.timestamp = old_text, old_timestamp
            raise
        return True

    async def remove(self, annotation_id: str, project_path: str) -> bool:
        """Drop an annotation. Returns False if the id is unknown."""
        before = await self._collection(project_path)
        after = [a for a in before if a.id != annotation_id]
        self._annotations[project_path] = after
        try:
            await self.save(project_path)
        except StorageWriteError:
            self._annotations[project_path] = before
            raise
        return len(after) != len(before)

    # ── Queries ───────────────────────────────────────────────

    def annotations_for_file(self, file_path: str, project_path: str) -> list[Annotation]:
        return [a for a in self._annotations.get(project_path, []) if a.file_path == file_path]

    def all_annotations(self, project_path: str) -> list[Annotation]:
        return list(self._annotations.get(project_path, []))

    def get(self, annotation_id: str, project_path: str) -> Annotation | None:
        for annotation in self._annotations.get(project_path, []):
            if annotation.id == annotation_id:
                return annotation
        return None

    def projects(self) -> list[str]:
        return list(self._annotations)

    # ── Repository round-trips ────────────────────────────────

    async def sync(self, project_path: str) -> LoadResult:
        """Pull from the remote, then reload the project from disk."""
        await self.repository.pull()
        return await self.load(project_path)

    async def commit_changes(self, project_path: str, message: str) -> bool:
        """Save the project and commit. Returns False if nothing changed."""
        await self.save(project_path)
        return await self.repository.commit_and_maybe_push(message)

    def dispose(self) -> None:
        self._annotations.clear()
