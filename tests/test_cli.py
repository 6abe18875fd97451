"""End-to-end tests for python -m linenotes against a real git repository."""

from __future__ import annotations

import io
from pathlib import Path

import pytest

from conftest import git, requires_git
from linenotes.__main__ import main

pytestmark = requires_git


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch):
    project = tmp_path / "proj"
    project.mkdir()
    monkeypatch.chdir(project)
    repo = tmp_path / "annotations"
    return project, repo


def run(repo: Path, *args: str) -> int:
    return main(["--repo", str(repo), *args])


class TestCLI:
    def test_init(self, workspace, capsys):
        _, repo = workspace
        assert run(repo, "init") == 0
        assert str(repo) in capsys.readouterr().out
        assert (repo / "README.md").exists()

    def test_whoami(self, workspace, capsys):
        _, repo = workspace
        assert run(repo, "whoami") == 0
        assert "Test User <test@example.com>" in capsys.readouterr().out

    def test_add_list_edit_rm(self, workspace, capsys):
        _, repo = workspace
        assert run(repo, "add", "a.py", "3", "hello there") == 0
        note_id = capsys.readouterr().out.strip()

        assert run(repo, "list", "a.py") == 0
        out = capsys.readouterr().out
        assert "a.py:3" in out
        assert "hello there" in out
        assert note_id in out
        assert "Test User" in out

        assert run(repo, "edit", note_id, "changed") == 0
        run(repo, "list")
        assert "changed" in capsys.readouterr().out

        assert run(repo, "rm", note_id) == 0
        run(repo, "list")
        assert capsys.readouterr().out == ""

        log = git(repo, "log", "--format=%s")
        assert f"Remove annotation {note_id}" in log
        assert f"Update annotation {note_id}" in log
        assert "Add annotation by Test User to a.py" in log

    def test_add_from_stdin(self, workspace, capsys, monkeypatch):
        _, repo = workspace
        monkeypatch.setattr("sys.stdin", io.StringIO("line one\nline two\n"))
        assert run(repo, "add", "a.py", "1", "-") == 0
        capsys.readouterr()

        run(repo, "list")
        assert "line one [+]" in capsys.readouterr().out
        run(repo, "list", "--full")
        assert "line two" in capsys.readouterr().out

    def test_unknown_id(self, workspace, capsys):
        _, repo = workspace
        assert run(repo, "rm", "nope") == 1
        assert "No annotation" in capsys.readouterr().err

    def test_sync_local_only(self, workspace, capsys):
        _, repo = workspace
        run(repo, "add", "a.py", "1", "x")
        capsys.readouterr()
        assert run(repo, "sync") == 0
        assert "1 annotations" in capsys.readouterr().out

    def test_export_to_file(self, workspace, tmp_path, capsys):
        _, repo = workspace
        run(repo, "add", "a.py", "7", "exported")
        out_file = tmp_path / "notes.md"
        assert run(repo, "export", "-o", str(out_file)) == 0
        content = out_file.read_text(encoding="utf-8")
        assert "## a.py" in content
        assert "exported" in content

    def test_bad_line_reports_error(self, workspace, capsys):
        _, repo = workspace
        assert run(repo, "add", "a.py", "0", "x") == 1
        assert "error:" in capsys.readouterr().err

    def test_init_failure(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        blocker = tmp_path / "file"
        blocker.write_text("x")
        assert main(["--repo", str(blocker / "repo"), "init"]) == 1
        assert "error:" in capsys.readouterr().err
