"""Annotation records and the on-disk document that holds them."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import Any

FORMAT_VERSION = "1.0"


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Annotation:
    """One note attached to a line of a file within a project."""

    id: str
    file_path: str  # relative to project_path
    line: int  # 1-indexed, not re-anchored when the file changes
    text: str
    author: str
    timestamp: int  # ms since epoch
    project_path: str
    column: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filePath": self.file_path,
            "line": self.line,
            "column": self.column,
            "text": self.text,
            "author": self.author,
            "timestamp": self.timestamp,
            "projectPath": self.project_path,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Annotation:
        """Build from the camelCase JSON form. Raises KeyError/TypeError on bad input."""
        if not isinstance(data, dict):
            raise TypeError(f"annotation entry must be an object, got {type(data).__name__}")
        return cls(
            id=str(data["id"]),
            file_path=str(data["filePath"]),
            line=int(data["line"]),
            column=int(data.get("column", 0)),
            text=str(data["text"]),
            author=str(data.get("author", "")),
            timestamp=int(data["timestamp"]),
            project_path=str(data.get("projectPath", "")),
        )


@dataclass
class AnnotationData:
    """The per-project document: ``{"version": ..., "annotations": [...]}``."""

    annotations: list[Annotation] = field(default_factory=list)
    version: str = FORMAT_VERSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "annotations": [a.to_dict() for a in self.annotations],
        }

    @classmethod
    def from_dict(cls, data: Any) -> AnnotationData:
        if not isinstance(data, dict):
            raise TypeError("annotation document must be a JSON object")
        entries = data.get("annotations", [])
        if not isinstance(entries, list):
            raise TypeError("'annotations' must be a list")
        return cls(
            annotations=[Annotation.from_dict(e) for e in entries],
            version=str(data.get("version", FORMAT_VERSION)),
        )


def new_annotation(
    project_path: str,
    file_path: str,
    line: int,
    text: str,
    author: str,
) -> Annotation:
    """Create a fresh annotation with a random id and the current timestamp."""
    return Annotation(
        id=str(uuid.uuid4()),
        file_path=file_path,
        line=line,
        column=0,
        text=text,
        author=author,
        timestamp=now_ms(),
        project_path=project_path,
    )


# ── Text helpers ──────────────────────────────────────────


def is_multi_line(text: str) -> bool:
    return "\n" in text


def first_line(text: str) -> str:
    return text.split("\n", 1)[0]


def truncate_text(text: str, max_length: int = 60) -> str:
    """First line of text, cut to max_length with a trailing '...'."""
    line = first_line(text)
    if len(line) <= max_length:
        return line
    return line[: max_length - 3] + "..."
