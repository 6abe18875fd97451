"""Entry point: python -m linenotes <command>

- init:    Create (or open) the annotation repository
- whoami:  Show the git identity used as annotation author
- add:     Annotate FILE:LINE with TEXT ("-" reads stdin)
- list:    Show annotations for a file, or the whole project
- edit:    Replace the text of an annotation
- rm:      Delete an annotation
- sync:    Pull from the remote and reload
- export:  Write the project's annotations as markdown
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from linenotes.config import LinenotesConfig, load_config
from linenotes.core import Annotator
from linenotes.errors import AnnotationError
from linenotes.models import Annotation, is_multi_line, truncate_text


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="linenotes", description="Line annotations kept in git")
    parser.add_argument("--config", type=Path, help="path to linenotes.toml")
    parser.add_argument("--repo", type=Path, help="annotation repository (overrides config)")
    parser.add_argument("--project", default=".", help="project root (default: cwd)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="create or open the annotation repository")
    sub.add_parser("whoami", help="show the annotation author identity")

    add = sub.add_parser("add", help="annotate a line")
    add.add_argument("file")
    add.add_argument("line", type=int)
    add.add_argument("text", help='note text, or "-" to read stdin')

    ls = sub.add_parser("list", help="list annotations")
    ls.add_argument("file", nargs="?")
    ls.add_argument("--full", action="store_true", help="print full text")

    edit = sub.add_parser("edit", help="replace an annotation's text")
    edit.add_argument("id")
    edit.add_argument("text", help='new text, or "-" to read stdin')

    rm = sub.add_parser("rm", help="delete an annotation")
    rm.add_argument("id")

    sub.add_parser("sync", help="pull from the remote and reload")

    export = sub.add_parser("export", help="export annotations as markdown")
    export.add_argument("-o", "--output", type=Path, help="write to file instead of stdout")
    return parser


def _read_text(value: str) -> str:
    if value == "-":
        return sys.stdin.read().rstrip("\n")
    return value


def _format(annotation: Annotation, width: int, full: bool) -> str:
    text = annotation.text if full else truncate_text(annotation.text, width)
    more = " [+]" if not full and is_multi_line(annotation.text) else ""
    return (
        f"{annotation.file_path}:{annotation.line}  {annotation.author}  "
        f"{annotation.id}\n    {text}{more}"
    )


async def _run(args: argparse.Namespace, config: LinenotesConfig) -> int:
    annotator = Annotator(config)
    result = await annotator.start(args.project)
    if result.warning:
        print(f"warning: {result.warning}", file=sys.stderr)

    if args.command == "init":
        print(f"Annotation repository: {annotator.repository.repo_root}")
    elif args.command == "whoami":
        identity = await annotator.identity()
        if identity.warning:
            print(f"warning: {identity.warning}", file=sys.stderr)
        print(f"{identity.name} <{identity.email}>")
    elif args.command == "add":
        annotation = await annotator.annotate(args.file, args.line, _read_text(args.text))
        print(annotation.id)
    elif args.command == "list":
        notes = annotator.notes_for(args.file) if args.file else annotator.all_notes()
        for annotation in notes:
            print(_format(annotation, config.display.truncate, args.full))
    elif args.command == "edit":
        if not await annotator.edit(args.id, _read_text(args.text)):
            print(f"No annotation with id {args.id}", file=sys.stderr)
            return 1
    elif args.command == "rm":
        if not await annotator.delete(args.id):
            print(f"No annotation with id {args.id}", file=sys.stderr)
            return 1
    elif args.command == "sync":
        synced = await annotator.sync()
        if synced.warning:
            print(f"warning: {synced.warning}", file=sys.stderr)
        print(f"{len(synced.annotations)} annotations")
    elif args.command == "export":
        content = annotator.export_markdown()
        if args.output:
            args.output.write_text(content, encoding="utf-8")
        else:
            sys.stdout.write(content)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    config = load_config(args.config)
    if args.repo:
        config.repository.path = args.repo
    _setup_logging(config.log_level)

    try:
        return asyncio.run(_run(args, config))
    except (AnnotationError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
