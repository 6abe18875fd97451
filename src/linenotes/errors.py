"""Typed errors raised by the annotation store and the git adapter."""

from __future__ import annotations

from pathlib import Path


class AnnotationError(Exception):
    """Base class for every linenotes failure."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.cause = cause

    def __str__(self) -> str:
        text = super().__str__()
        if self.cause is not None:
            text = f"{text}: {self.cause}"
        return text


class RepositoryInitError(AnnotationError):
    """The repository root could not be created or initialized."""


class RepositoryError(AnnotationError):
    """An operation needed an initialized repository but there was none."""


class SyncError(AnnotationError):
    """Push or pull against a remote failed (network, auth, conflict)."""


class StorageWriteError(AnnotationError):
    """The annotation document could not be written."""


class CommitError(StorageWriteError):
    """Staging or committing the written document failed."""


class StorageReadWarning(UserWarning):
    """The annotation document was unreadable; the project loaded empty.

    Returned as a value from ``AnnotationStore.load``, never raised.
    """

    def __init__(self, message: str, path: Path, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.path = path
        self.cause = cause
