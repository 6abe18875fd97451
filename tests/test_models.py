"""Tests for annotation records and text helpers."""

import json

import pytest

from linenotes.models import (
    FORMAT_VERSION,
    Annotation,
    AnnotationData,
    first_line,
    is_multi_line,
    new_annotation,
    truncate_text,
)


def _sample() -> Annotation:
    return Annotation(
        id="a1",
        file_path="src/a.ts",
        line=42,
        text="free text\nsecond line",
        author="Alice",
        timestamp=1234567890000,
        project_path="/abs/proj",
    )


class TestAnnotation:
    def test_to_dict_keys(self):
        assert _sample().to_dict() == {
            "id": "a1",
            "filePath": "src/a.ts",
            "line": 42,
            "column": 0,
            "text": "free text\nsecond line",
            "author": "Alice",
            "timestamp": 1234567890000,
            "projectPath": "/abs/proj",
        }

    def test_from_dict(self):
        assert Annotation.from_dict(_sample().to_dict()) == _sample()

    def test_from_dict_defaults_column(self):
        data = _sample().to_dict()
        del data["column"]
        assert Annotation.from_dict(data).column == 0

    def test_from_dict_missing_required(self):
        data = _sample().to_dict()
        del data["filePath"]
        with pytest.raises(KeyError):
            Annotation.from_dict(data)

    def test_from_dict_not_object(self):
        with pytest.raises(TypeError):
            Annotation.from_dict(["a1"])


class TestAnnotationData:
    def test_default_version(self):
        assert AnnotationData().to_dict() == {"version": FORMAT_VERSION, "annotations": []}

    def test_json_round_trip_preserves_order(self):
        notes = [_sample()]
        second = _sample()
        second.id, second.line = "a2", 1
        notes.append(second)
        data = AnnotationData(annotations=notes)
        restored = AnnotationData.from_dict(json.loads(json.dumps(data.to_dict())))
        assert restored == data
        assert [a.id for a in restored.annotations] == ["a1", "a2"]

    def test_rejects_non_list(self):
        with pytest.raises(TypeError):
            AnnotationData.from_dict({"version": "1.0", "annotations": {}})

    def test_rejects_non_object(self):
        with pytest.raises(TypeError):
            AnnotationData.from_dict([])


class TestNewAnnotation:
    def test_fields(self):
        a = new_annotation("/p", "a.py", 3, "note", "Bob")
        assert a.column == 0
        assert a.project_path == "/p"
        assert a.timestamp > 0
        assert len(a.id) == 36

    def test_unique_ids(self):
        ids = {new_annotation("/p", "a.py", 1, "x", "Bob").id for _ in range(500)}
        assert len(ids) == 500


class TestTextHelpers:
    def test_is_multi_line(self):
        assert is_multi_line("a\nb")
        assert not is_multi_line("ab")

    def test_first_line(self):
        assert first_line("one\ntwo") == "one"
        assert first_line("only") == "only"

    def test_truncate_short(self):
        assert truncate_text("short\nmore") == "short"

    def test_truncate_long(self):
        result = truncate_text("x" * 100, max_length=20)
        assert result == "x" * 17 + "..."
        assert len(result) == 20

    def test_truncate_exact(self):
        assert truncate_text("y" * 60) == "y" * 60
