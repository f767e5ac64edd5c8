"""Shared fixtures for analysis tests."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from typing import Any

import pytest

from codeinspect.analysis.content import InMemoryContent
from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.models import (
    ChurnRecord,
    ComplexityPrimitives,
    FileRecord,
    Inventory,
    RawImport,
    SymbolEntry,
)
from codeinspect.config.models import AnalysisConfig
from codeinspect.core.languages import detect_language, extension_of

InventoryFactory = Callable[..., Inventory]


def file_record(path: str, line_count: int = 10, package: str | None = None) -> FileRecord:
    return FileRecord(
        path=path,
        extension=extension_of(path),
        line_count=line_count,
        language=detect_language(path),
        package=package,
    )


@pytest.fixture
def context() -> AnalysisContext:
    """Default layout knowledge, no aliases or route paths."""
    return AnalysisContext.default()


@pytest.fixture
def make_context() -> Callable[..., AnalysisContext]:
    """Build a context from AnalysisConfig keyword overrides."""

    def _make(**overrides: Any) -> AnalysisContext:
        return AnalysisContext.from_config(AnalysisConfig(**overrides))

    return _make


@pytest.fixture
def make_inventory() -> InventoryFactory:
    """Build an Inventory from compact literals.

    ``files`` maps path -> line count (or is a plain list of paths);
    ``imports`` maps importer -> list of specifiers or RawImport.
    """

    def _make(
        files: Mapping[str, int] | Sequence[str],
        *,
        imports: Mapping[str, Sequence[str | RawImport]] | None = None,
        contents: Mapping[str, str] | None = None,
        complexity: Mapping[str, ComplexityPrimitives] | None = None,
        churn: Mapping[str, ChurnRecord] | None = None,
        symbols: Sequence[SymbolEntry] = (),
    ) -> Inventory:
        line_counts = files if isinstance(files, Mapping) else dict.fromkeys(files, 10)
        raw_imports = {
            importer: [s if isinstance(s, RawImport) else RawImport(target=s) for s in specs]
            for importer, specs in (imports or {}).items()
        }
        return Inventory(
            files=[file_record(p, n) for p, n in line_counts.items()],
            content=InMemoryContent(contents),
            imports=raw_imports,
            symbols=list(symbols),
            complexity=dict(complexity or {}),
            churn=dict(churn) if churn is not None else None,
        )

    return _make
