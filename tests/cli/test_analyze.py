"""Tests for cinspect analyze command."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from codeinspect import __version__
from codeinspect.cli.main import cli

runner = CliRunner()

SHARED = [
    "const total = items.reduce((sum, item) => sum + item.price, 0);",
    "const discount = total > 100 ? total * 0.1 : 0;",
    "const shipping = total > 50 ? 0 : 4.99;",
    "const tax = (total - discount) * 0.2;",
    "const grandTotal = total - discount + shipping + tax;",
    "console.log('checkout', grandTotal);",
]


def _snapshot() -> dict[str, Any]:
    return {
        "files": [
            {"path": "src/main.ts", "line_count": 3},
            {"path": "src/features/cart/Cart.ts", "line_count": 6},
            {"path": "src/features/orders/Orders.ts", "line_count": 6},
            {"path": "src/shared/format.ts", "line_count": 1},
        ],
        "imports": {
            "src/main.ts": [{"target": "./features/cart/Cart", "specifiers": ["Cart"]}],
            "src/features/cart/Cart.ts": [{"target": "@/shared/format", "specifiers": ["format"]}],
        },
        "symbols": [{"name": "Orders", "kind": "function", "file": "src/features/orders/Orders.ts", "line": 1}],
        "complexity": {
            "src/features/cart/Cart.ts": {"cyclomatic": 2},
            "src/features/orders/Orders.ts": {"cyclomatic": 3},
        },
        "contents": {
            "src/features/cart/Cart.ts": "\n".join(SHARED),
            "src/features/orders/Orders.ts": "\n".join(SHARED),
        },
    }


@pytest.fixture(autouse=True)
def no_global_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("codeinspect.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml")


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    """Repo root with an alias config and a snapshot file."""
    root = tmp_path / "repo"
    (root / ".codeinspect").mkdir(parents=True)
    (root / ".codeinspect" / "config.yaml").write_text("analysis:\n  aliases:\n    '@/': src/\n")
    (root / "snapshot.json").write_text(json.dumps(_snapshot()))
    return root


def _analyze(repo: Path, *args: str) -> Any:
    return runner.invoke(cli, ["analyze", str(repo / "snapshot.json"), "--root", str(repo), *args])


class TestCliGroup:
    """Top-level group behavior."""

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_analyze(self) -> None:
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "analyze" in result.output


class TestAnalyzeCommand:
    """cinspect analyze."""

    def test_json_output(self, repo: Path) -> None:
        result = _analyze(repo, "--json")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["summary"]["files"] == 4
        assert data["summary"]["edges"] == 2
        assert data["summary"]["duplicates"] == 1
        assert {c["id"] for c in data["clusters"]} >= {"cart", "orders"}
        assert data["failures"] == []

    def test_human_output(self, repo: Path) -> None:
        result = _analyze(repo)

        assert result.exit_code == 0, result.output
        assert "4 files" in result.output
        assert "2 import edges" in result.output
        assert "1 duplicate pair" in result.output

    def test_feature_filter(self, repo: Path) -> None:
        result = _analyze(repo, "--json", "--feature", "orders")

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [c["id"] for c in data["clusters"]] == ["orders"]
        assert data["summary"]["files"] == 4

    def test_migration_reported(self, repo: Path) -> None:
        (repo / ".codeinspect" / "config.yaml").write_text(
            "analysis:\n"
            "  migration:\n"
            "    source_extensions: ['.vue']\n"
            "    target_extensions: ['.tsx']\n"
        )
        snapshot = _snapshot()
        snapshot["files"] += [
            {"path": "legacy/cart/Cart.vue", "line_count": 20},
            {"path": "src/features/cart/CartView.tsx", "line_count": 20},
        ]
        (repo / "snapshot.json").write_text(json.dumps(snapshot))

        result = _analyze(repo)
        assert result.exit_code == 0, result.output
        assert "Migration: 100.0% of 1 component migrated" in result.output

        data = json.loads(_analyze(repo, "--json").stdout)
        (entry,) = data["migration"]
        assert entry["source_file"] == "legacy/cart/Cart.vue"
        assert entry["target_folder"] == "src/features/cart"
        assert entry["status"] == "migrated"
        assert data["summary"]["migrated_components"] == 1

    def test_no_migration_line_without_config(self, repo: Path) -> None:
        result = _analyze(repo)
        assert "Migration:" not in result.output

    def test_workers_option(self, repo: Path) -> None:
        result = _analyze(repo, "--json", "--workers", "1")
        assert result.exit_code == 0, result.output

    def test_workers_must_be_positive(self, repo: Path) -> None:
        result = _analyze(repo, "--workers", "0")
        assert result.exit_code == 2

    def test_missing_snapshot(self, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["analyze", str(tmp_path / "missing.json")])
        assert result.exit_code == 2

    def test_malformed_snapshot(self, repo: Path) -> None:
        (repo / "snapshot.json").write_text("{broken")
        result = _analyze(repo)

        assert result.exit_code == 1
        assert "SNAPSHOT_PARSE_ERROR" in result.output

    def test_invalid_snapshot(self, repo: Path) -> None:
        (repo / "snapshot.json").write_text(json.dumps({"files": [{"path": "/abs.ts"}]}))
        result = _analyze(repo)

        assert result.exit_code == 1
        assert "SNAPSHOT_INVALID" in result.output

    def test_invalid_config(self, repo: Path) -> None:
        (repo / ".codeinspect" / "config.yaml").write_text("execution:\n  max_workers: 0\n")
        result = _analyze(repo)

        assert result.exit_code == 1
        assert "CONFIG_INVALID_VALUE" in result.output

    def test_analyzer_failure_exits_nonzero(self, repo: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(*args: object, **kwargs: object) -> None:
            raise RuntimeError("duplication exploded")

        monkeypatch.setattr("codeinspect.analysis.pipeline.detect_duplicates", boom)
        result = _analyze(repo, "--json")

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["failures"][0]["details"]["analyzer"] == "duplication"
        assert data["duplicates"] == []
        # siblings still delivered
        assert data["clusters"]

    def test_unexpected_crash_reported_as_internal_error(
        self, repo: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        def boom(*args: object, **kwargs: object) -> None:
            raise KeyError("graph")

        monkeypatch.setattr("codeinspect.analysis.pipeline.ImportGraph.build", boom)
        result = _analyze(repo, "--json")

        assert result.exit_code == 1
        assert "INTERNAL_ERROR" in result.output
