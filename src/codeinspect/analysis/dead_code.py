"""Dead-code candidates from the resolved import graph.

Four findings:

- dead files: never the target of any edge, and not a test, asset, entry
  point, tool config file, or file under a route or convention directory
- unused exports: exported symbols never named by an importing edge
  (default exports match an edge's default flag)
- orphaned convention files: files in a mixin or composable convention
  directory that nothing imports
- unused stores: store ``index.js``/``index.ts`` modules nothing imports

All are heuristics.  Files loaded by a framework at runtime rather than
imported (plugins, lazy routes outside the configured directories) show up
as dead.
"""

from __future__ import annotations

from collections.abc import Sequence

import structlog

from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.import_graph import ImportGraph
from codeinspect.analysis.models import (
    DeadCodeReport,
    FeatureCluster,
    FileRecord,
    Inventory,
    UnusedExport,
)
from codeinspect.core.languages import is_test_file

log = structlog.get_logger(__name__)

_DEFAULT_EXPORT = "default"
_ORPHAN_DIR_MARKERS = ("mixin", "composable")
_STORE_INDEX_SUFFIXES = ("/index.js", "/index.ts")


def _is_exempt(file: FileRecord, entry_points: set[str], context: AnalysisContext) -> bool:
    if file.is_test or file.is_asset:
        return True
    if file.path in entry_points or context.is_entry_pattern(file.path):
        return True
    if context.is_convention_path(file.path):
        return True
    return any(pattern in file.path for pattern in context.config_file_patterns)


def find_dead_files(
    files: Sequence[FileRecord],
    graph: ImportGraph,
    clusters: Sequence[FeatureCluster],
    context: AnalysisContext,
) -> list[str]:
    entry_points = {p for c in clusters for p in c.entry_points}
    dead = [
        f.path
        for f in files
        if not graph.is_imported(f.path) and not _is_exempt(f, entry_points, context)
    ]
    return sorted(dead)


def find_unused_exports(inventory: Inventory, graph: ImportGraph) -> list[UnusedExport]:
    imported: set[tuple[str, str]] = set()
    for edge in graph.edges:
        for name in edge.specifiers:
            imported.add((edge.target, name))
        if edge.is_default:
            imported.add((edge.target, _DEFAULT_EXPORT))

    unused = []
    for symbol in inventory.symbols:
        if not symbol.is_exported or is_test_file(symbol.file):
            continue
        key = (symbol.file, _DEFAULT_EXPORT if symbol.is_default else symbol.name)
        if key not in imported:
            unused.append(
                UnusedExport(file=symbol.file, name=symbol.name, kind=symbol.kind, line=symbol.line)
            )
    unused.sort(key=lambda u: (u.file, u.line, u.name))
    return unused


def find_orphaned_convention_files(
    files: Sequence[FileRecord],
    graph: ImportGraph,
    context: AnalysisContext,
) -> list[str]:
    """Unimported files under a mixin or composable convention directory.

    Convention directories are exempt from the dead-file check; members
    of these two kinds still only run when something imports them.
    """
    orphan_dirs = [
        d for d in context.convention_paths if any(marker in d.lower() for marker in _ORPHAN_DIR_MARKERS)
    ]
    if not orphan_dirs:
        return []
    return sorted(
        f.path
        for f in files
        if any(f.path.startswith(d) for d in orphan_dirs) and not graph.is_imported(f.path)
    )


def find_unused_stores(
    files: Sequence[FileRecord],
    graph: ImportGraph,
    context: AnalysisContext,
) -> list[str]:
    """Store modules (``<store dir>/**/index.{js,ts}``) nothing imports."""
    return sorted(
        f.path
        for f in files
        if f.path.endswith(_STORE_INDEX_SUFFIXES)
        and any(f.path.startswith(d + "/") for d in context.store_dirs)
        and not graph.is_imported(f.path)
    )


def detect_dead_code(
    inventory: Inventory,
    graph: ImportGraph,
    clusters: Sequence[FeatureCluster],
    context: AnalysisContext,
) -> DeadCodeReport:
    report = DeadCodeReport(
        dead_files=find_dead_files(inventory.files, graph, clusters, context),
        unused_exports=find_unused_exports(inventory, graph),
        orphaned_convention_files=find_orphaned_convention_files(inventory.files, graph, context),
        unused_stores=find_unused_stores(inventory.files, graph, context),
    )
    log.info(
        "dead_code_detected",
        dead_files=len(report.dead_files),
        unused_exports=len(report.unused_exports),
        orphaned_convention_files=len(report.orphaned_convention_files),
        unused_stores=len(report.unused_stores),
    )
    return report
