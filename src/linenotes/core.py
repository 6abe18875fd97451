"""Annotator: the caller layer that drives the store on behalf of an editor.

Responsibilities:
1. Own the repository adapter and the store (no module-level instances)
2. Track the current project and compute project-relative file paths
3. Build fully-formed annotations (id, timestamp, author from git config)
4. Commit after every mutation with a human-readable message
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from linenotes.config import LinenotesConfig
from linenotes.models import Annotation, new_annotation
from linenotes.storage.export import render_markdown
from linenotes.storage.store import AnnotationStore, LoadResult
from linenotes.vcs.git import GitRepository

if TYPE_CHECKING:
    from linenotes.vcs.base import Identity, Repository

logger = logging.getLogger(__name__)


class Annotator:
    """Context object tying one repository and one store to a current project."""

    def __init__(self, config: LinenotesConfig, repository: Repository | None = None) -> None:
        self.config = config
        self.repository = repository or GitRepository(
            git=config.repository.git,
            default_remote=config.repository.remote,
        )
        self.store = AnnotationStore(self.repository)
        self.project_path: str | None = None

    # ── Lifecycle ─────────────────────────────────────────────

    async def start(self, project_path: str) -> LoadResult:
        """Initialize the repository and load the given project."""
        await self.repository.initialize(self.config.repository.path)
        return await self.open_project(project_path)

    async def open_project(self, project_path: str) -> LoadResult:
        self.project_path = os.path.abspath(project_path)
        result = await self.store.load(self.project_path)
        logger.info("Opened project %s (%d annotations)", self.project_path, len(result.annotations))
        return result

    def close(self) -> None:
        self.store.dispose()
        self.project_path = None

    def _require_project(self) -> str:
        if self.project_path is None:
            raise RuntimeError("No project open; call start() or open_project() first")
        return self.project_path

    def relative_path(self, file_path: str) -> str:
        """Path of file_path relative to the current project root."""
        project = self._require_project()
        return os.path.relpath(os.path.abspath(file_path), project)

    # ── Mutations ─────────────────────────────────────────────

    async def identity(self) -> Identity:
        return await self.repository.identity()

    async def annotate(self, file_path: str, line: int, text: str) -> Annotation:
        """Create, persist and commit a new annotation at file_path:line."""
        if line < 1:
            raise ValueError(f"line must be 1 or greater, got {line}")
        project = self._require_project()
        relative = self.relative_path(file_path)
        author = await self.identity()

        annotation = new_annotation(project, relative, line, text, author.name)
        await self.store.add(annotation)
        await self.store.commit_changes(project, f"Add annotation by {author.name} to {relative}")
        return annotation

    async def edit(self, annotation_id: str, text: str) -> bool:
        project = self._require_project()
        if not await self.store.update(annotation_id, project, text):
            logger.warning("Annotation %s not found, nothing updated", annotation_id)
            return False
        await self.store.commit_changes(project, f"Update annotation {annotation_id}")
        return True

    async def delete(self, annotation_id: str) -> bool:
        project = self._require_project()
        if not await self.store.remove(annotation_id, project):
            logger.warning("Annotation %s not found, nothing removed", annotation_id)
            return False
        await self.store.commit_changes(project, f"Remove annotation {annotation_id}")
        return True

    async def sync(self) -> LoadResult:
        return await self.store.sync(self._require_project())

    # ── Queries ───────────────────────────────────────────────

    def notes_for(self, file_path: str) -> list[Annotation]:
        return self.store.annotations_for_file(
            self.relative_path(file_path), self._require_project()
        )

    def all_notes(self) -> list[Annotation]:
        return self.store.all_annotations(self._require_project())

    def export_markdown(self) -> str:
        project = self._require_project()
        return render_markdown(project, self.store.all_annotations(project))
