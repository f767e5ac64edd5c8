"""Tests for analysis/snapshot.py module.

Covers:
- load_snapshot() for JSON and YAML documents
- Error mapping (missing file, parse error, validation error)
- Derived extension/language/package
- Content sources (inline, disk, layered)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
import yaml

from codeinspect.analysis.snapshot import build_inventory, load_snapshot, parse_snapshot
from codeinspect.core.errors import ErrorCode, SnapshotError


def _document(**overrides: Any) -> dict[str, Any]:
    doc: dict[str, Any] = {
        "files": [
            {"path": "src/app.ts", "line_count": 40},
            {"path": "./packages/ui/src/Button.vue", "line_count": 12},
        ],
        "imports": {"src/app.ts": [{"target": "./util", "specifiers": ["fmt"], "is_default": True}]},
        "symbols": [{"name": "App", "kind": "class", "file": "src/app.ts", "line": 3}],
        "complexity": {"src/app.ts": {"cyclomatic": 4, "cognitive": 2, "function_count": 1, "max_function_length": 9}},
    }
    doc.update(overrides)
    return doc


class TestLoadSnapshot:
    """File loading."""

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(_document()))

        inventory = load_snapshot(path, packages=["packages/ui"])

        assert [f.path for f in inventory.files] == ["src/app.ts", "packages/ui/src/Button.vue"]
        app, button = inventory.files
        assert (app.extension, app.language, app.package) == (".ts", "typescript", None)
        assert (button.extension, button.language, button.package) == (".vue", "vue", "packages/ui")
        (raw,) = inventory.imports["src/app.ts"]
        assert raw.target == "./util"
        assert raw.specifiers == ("fmt",)
        assert raw.is_default is True
        assert inventory.complexity["src/app.ts"].cyclomatic == 4
        assert inventory.symbols[0].is_exported is True
        assert inventory.churn is None

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.yaml"
        path.write_text(yaml.safe_dump(_document(churn={"src/app.ts": {"commit_count": 7}})))

        inventory = load_snapshot(path)

        assert len(inventory.files) == 2
        assert inventory.commit_count("src/app.ts") == 7
        assert inventory.commit_count("packages/ui/src/Button.vue") == 0

    def test_content_read_from_root(self, tmp_path: Path) -> None:
        repo = tmp_path / "repo"
        (repo / "src").mkdir(parents=True)
        (repo / "src" / "app.ts").write_text("export const app = 1;\n")
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(_document()))

        inventory = load_snapshot(path, repo)

        assert inventory.content.read("src/app.ts") == "export const app = 1;\n"
        assert inventory.content.read("src/missing.ts") == ""

    def test_inline_content_layered_over_disk(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "app.ts").write_text("on disk")
        (tmp_path / "src" / "other.ts").write_text("other on disk")
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps(_document(contents={"src/app.ts": "inline"})))

        inventory = load_snapshot(path)

        assert inventory.content.read("src/app.ts") == "inline"
        assert inventory.content.read("src/other.ts") == "other on disk"

    def test_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(tmp_path / "missing.json")
        assert exc_info.value.code == ErrorCode.SNAPSHOT_NOT_FOUND

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.json"
        path.write_text("{not json")
        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.code == ErrorCode.SNAPSHOT_PARSE_ERROR

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SnapshotError) as exc_info:
            load_snapshot(path)
        assert exc_info.value.code == ErrorCode.SNAPSHOT_PARSE_ERROR


class TestParseSnapshot:
    """Validation."""

    def test_files_required(self) -> None:
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot({"imports": {}})
        assert exc_info.value.code == ErrorCode.SNAPSHOT_INVALID
        assert exc_info.value.details["location"] == "files"

    def test_negative_line_count_rejected(self) -> None:
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot({"files": [{"path": "a.ts", "line_count": -1}]})
        assert exc_info.value.details["location"] == "files.0.line_count"

    def test_absolute_path_rejected(self) -> None:
        with pytest.raises(SnapshotError):
            parse_snapshot({"files": [{"path": "/etc/passwd"}]})

    @pytest.mark.parametrize("path", ["../secret.ts", "src/../../secret.ts", "..", "./"])
    def test_path_outside_root_rejected(self, path: str) -> None:
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot({"files": [{"path": path}]})
        assert exc_info.value.code == ErrorCode.SNAPSHOT_INVALID
        assert exc_info.value.details["location"] == "files.0.path"

    def test_symbol_file_outside_root_rejected(self) -> None:
        with pytest.raises(SnapshotError) as exc_info:
            parse_snapshot({"files": [], "symbols": [{"name": "x", "file": "../x.ts"}]})
        assert exc_info.value.details["location"] == "symbols.0.file"

    def test_dot_segments_collapsed(self) -> None:
        document = parse_snapshot({"files": [{"path": "src/./lib/../a.ts"}]})
        assert document.files[0].path == "src/a.ts"

    def test_backslashes_normalized(self) -> None:
        document = parse_snapshot({"files": [{"path": "src\\win\\a.ts"}]})
        assert document.files[0].path == "src/win/a.ts"

    def test_unknown_keys_ignored(self) -> None:
        document = parse_snapshot({"files": [], "generator": "walker 1.2"})
        assert document.files == []


class TestBuildInventory:
    """Document → Inventory."""

    def test_duplicate_path_rejected(self) -> None:
        document = parse_snapshot({"files": [{"path": "a.ts"}, {"path": "./a.ts"}]})
        with pytest.raises(SnapshotError) as exc_info:
            build_inventory(document)
        assert exc_info.value.details["location"] == "files.1"

    def test_explicit_fields_win(self) -> None:
        document = parse_snapshot(
            {"files": [{"path": "lib/a.ts", "extension": ".TS", "language": "custom", "package": "lib"}]}
        )
        (record,) = build_inventory(document).files
        assert (record.extension, record.language, record.package) == (".ts", "custom", "lib")

    def test_inline_contents_default(self) -> None:
        document = parse_snapshot({"files": [{"path": "a.ts"}], "contents": {"a.ts": "x"}})
        assert build_inventory(document).content.read("a.ts") == "x"
