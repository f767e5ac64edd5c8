"""Snapshot loading at the walker/extractor boundary.

A snapshot is a JSON or YAML document produced by the external walker,
import/symbol/complexity extractor and git collaborator::

    files:      [{path, extension?, line_count, language?, package?}]
    imports:    {path: [{target, specifiers?, is_default?, is_dynamic?}]}
    symbols:    [{name, kind, file, line, is_default?, is_exported?}]
    complexity: {path: {cyclomatic, cognitive, function_count,
                        max_function_length, prop_count?}}
    churn:      {path: {commit_count, author_count?, co_changed_with?}} | null
    contents:   {path: text}

The document is validated with pydantic and converted into an ``Inventory``.
A missing ``extension`` or ``language`` is derived from the path.
"""

from __future__ import annotations

import json
import posixpath
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from codeinspect.analysis.content import (
    ContentSource,
    FileContentReader,
    InMemoryContent,
    LayeredContent,
)
from codeinspect.analysis.models import (
    ChurnRecord,
    ComplexityPrimitives,
    FileRecord,
    Inventory,
    RawImport,
    SymbolEntry,
)
from codeinspect.core.errors import SnapshotError
from codeinspect.core.languages import detect_language, extension_of

log = structlog.get_logger(__name__)

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def _normalize_path(v: str) -> str:
    v = v.replace("\\", "/")
    if not v or v.startswith("/"):
        raise ValueError(f"path must be repo-relative: {v!r}")
    v = posixpath.normpath(v)
    if v == ".." or v.startswith("../"):
        raise ValueError(f"path escapes the repository root: {v!r}")
    if v == ".":
        raise ValueError("path must name a file")
    return v


class _Entry(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class FileEntry(_Entry):
    path: str
    extension: str | None = None
    line_count: int = Field(default=0, ge=0)
    language: str | None = None
    package: str | None = None

    @field_validator("path")
    @classmethod
    def normalize_path(cls, v: str) -> str:
        return _normalize_path(v)


class ImportEntry(_Entry):
    target: str
    specifiers: list[str] = Field(default_factory=list)
    is_default: bool = False
    is_dynamic: bool = False


class SymbolItem(_Entry):
    name: str
    kind: str = "unknown"
    file: str
    line: int = Field(default=0, ge=0)
    is_default: bool = False
    is_exported: bool = True

    @field_validator("file")
    @classmethod
    def normalize_file(cls, v: str) -> str:
        return _normalize_path(v)


class ComplexityEntry(_Entry):
    cyclomatic: int = Field(default=0, ge=0)
    cognitive: int = Field(default=0, ge=0)
    function_count: int = Field(default=0, ge=0)
    max_function_length: int = Field(default=0, ge=0)
    prop_count: int = Field(default=0, ge=0)


class ChurnEntry(_Entry):
    commit_count: int = Field(default=0, ge=0)
    author_count: int = Field(default=0, ge=0)
    co_changed_with: list[str] = Field(default_factory=list)


class SnapshotDocument(_Entry):
    files: list[FileEntry]
    imports: dict[str, list[ImportEntry]] = Field(default_factory=dict)
    symbols: list[SymbolItem] = Field(default_factory=list)
    complexity: dict[str, ComplexityEntry] = Field(default_factory=dict)
    churn: dict[str, ChurnEntry] | None = None
    contents: dict[str, str] = Field(default_factory=dict)


def _package_of(path: str, packages: Sequence[str]) -> str | None:
    for pkg in packages:
        if path.startswith(pkg + "/"):
            return pkg
    return None


def _to_record(entry: FileEntry, packages: Sequence[str]) -> FileRecord:
    extension = (entry.extension or extension_of(entry.path)).lower()
    return FileRecord(
        path=entry.path,
        extension=extension,
        line_count=entry.line_count,
        language=entry.language or detect_language(entry.path),
        package=entry.package or _package_of(entry.path, packages),
    )


def build_inventory(
    document: SnapshotDocument,
    content: ContentSource | None = None,
    *,
    packages: Sequence[str] = (),
) -> Inventory:
    """Convert a validated document into an ``Inventory``.

    ``content`` defaults to the document's inline ``contents``.
    """
    files: list[FileRecord] = []
    seen: set[str] = set()
    for i, entry in enumerate(document.files):
        if entry.path in seen:
            raise SnapshotError.invalid(f"files.{i}", f"duplicate path {entry.path!r}")
        seen.add(entry.path)
        files.append(_to_record(entry, packages))

    churn = None
    if document.churn is not None:
        churn = {
            path: ChurnRecord(
                path=path,
                commit_count=c.commit_count,
                author_count=c.author_count,
                co_changed_with=tuple(c.co_changed_with),
            )
            for path, c in document.churn.items()
        }

    return Inventory(
        files=files,
        content=content if content is not None else InMemoryContent(document.contents),
        imports={
            path: [
                RawImport(
                    target=imp.target,
                    specifiers=tuple(imp.specifiers),
                    is_default=imp.is_default,
                    is_dynamic=imp.is_dynamic,
                )
                for imp in raw
            ]
            for path, raw in document.imports.items()
        },
        symbols=[
            SymbolEntry(
                name=s.name,
                kind=s.kind,
                file=s.file,
                line=s.line,
                is_default=s.is_default,
                is_exported=s.is_exported,
            )
            for s in document.symbols
        ],
        complexity={
            path: ComplexityPrimitives(
                cyclomatic=c.cyclomatic,
                cognitive=c.cognitive,
                function_count=c.function_count,
                max_function_length=c.max_function_length,
                prop_count=c.prop_count,
            )
            for path, c in document.complexity.items()
        },
        churn=churn,
    )


def parse_snapshot(data: Mapping[str, Any], *, source: str = "<memory>") -> SnapshotDocument:
    try:
        return SnapshotDocument.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        location = ".".join(str(loc) for loc in err["loc"]) or source
        raise SnapshotError.invalid(location, err["msg"]) from e


def _read_document(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise SnapshotError.parse_error(str(path), str(e)) from e

    if path.suffix.lower() in _YAML_SUFFIXES:
        try:
            return yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise SnapshotError.parse_error(str(path), str(e)) from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SnapshotError.parse_error(str(path), str(e)) from e


def load_snapshot(
    path: Path,
    root: Path | None = None,
    *,
    packages: Sequence[str] = (),
) -> Inventory:
    """Load a snapshot file into an ``Inventory``.

    File content comes from the inline ``contents`` section first, then from
    disk under ``root`` (defaults to the snapshot's directory).

    Raises:
        SnapshotError: File missing, unparsable, or failing validation.
    """
    if not path.is_file():
        raise SnapshotError.not_found(str(path))

    data = _read_document(path)
    if not isinstance(data, dict):
        raise SnapshotError.parse_error(str(path), "top-level value must be a mapping")

    document = parse_snapshot(data, source=str(path))
    disk = FileContentReader(root if root is not None else path.parent)
    content: ContentSource = (
        LayeredContent(InMemoryContent(document.contents), disk) if document.contents else disk
    )
    inventory = build_inventory(document, content, packages=packages)

    log.info(
        "snapshot_loaded",
        path=str(path),
        files=len(inventory.files),
        importers=len(inventory.imports),
        symbols=len(inventory.symbols),
        churn=inventory.churn is not None,
    )
    return inventory
