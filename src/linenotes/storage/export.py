"""Render a project's annotations as a markdown document with YAML front matter."""

from __future__ import annotations

from datetime import datetime

import frontmatter

from linenotes.models import Annotation


def _format_timestamp(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).isoformat(timespec="seconds")


def render_markdown(project_path: str, annotations: list[Annotation]) -> str:
    """Group annotations by file (first-seen order), lines within a file ascending."""
    by_file: dict[str, list[Annotation]] = {}
    for annotation in annotations:
        by_file.setdefault(annotation.file_path, []).append(annotation)

    parts: list[str] = []
    for file_path, items in by_file.items():
        parts.append(f"## {file_path}\n")
        for a in sorted(items, key=lambda a: a.line):
            parts.append(f"### L{a.line}: {a.author} ({_format_timestamp(a.timestamp)})\n")
            parts.append(f"{a.text.rstrip()}\n")

    post = frontmatter.Post(
        "\n".join(parts) if parts else "_No annotations._\n",
        project=project_path,
        exported=datetime.now().isoformat(timespec="seconds"),
        count=len(annotations),
        files=sorted(by_file),
    )
    return frontmatter.dumps(post) + "\n"
