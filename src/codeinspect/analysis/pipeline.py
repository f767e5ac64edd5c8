"""Analysis orchestrator.

Phases run in data-dependency order:

1. resolve   raw imports → ImportGraph
2. cluster   files → FeatureClusters
3. analyze   {metrics, impact, duplication, dead-code, migration} concurrently

Phase 3 is fork-join: each analyzer returns its own result object and the
orchestrator merges them after all have finished.  An analyzer that raises
is recorded in ``AnalysisResult.failures`` and its output left empty; the
others still deliver.
"""

from __future__ import annotations

import contextvars
import time
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from contextlib import contextmanager
from typing import Any

import structlog

from codeinspect.analysis.clustering import FeatureClusterer
from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.dead_code import detect_dead_code
from codeinspect.analysis.duplication import detect_duplicates
from codeinspect.analysis.impact import score_impact
from codeinspect.analysis.import_graph import ImportGraph
from codeinspect.analysis.metrics import compute_file_metrics, score_features
from codeinspect.analysis.migration import track_migration
from codeinspect.analysis.models import (
    AnalysisResult,
    DeadCodeReport,
    DuplicateMatch,
    FeatureCluster,
    FeatureScore,
    FileMetrics,
    ImpactRecord,
    Inventory,
    MigrationEntry,
)
from codeinspect.core.errors import AnalysisError

log = structlog.get_logger(__name__)


@contextmanager
def _timed(timings: dict[str, float], phase: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        timings[phase] = round(time.perf_counter() - start, 4)


def _metrics_phase(
    inventory: Inventory,
    graph: ImportGraph,
    clusters: list[FeatureCluster],
    context: AnalysisContext,
) -> tuple[list[FileMetrics], list[FeatureScore]]:
    file_metrics = compute_file_metrics(inventory, graph)
    scores = score_features(clusters, file_metrics, inventory, context)
    return list(file_metrics.values()), scores


def _run_timed(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> tuple[Any, float]:
    start = time.perf_counter()
    result = fn(*args, **kwargs)
    return result, round(time.perf_counter() - start, 4)


def _matches_feature(feature_filter: str, *names: str) -> bool:
    needle = feature_filter.lower()
    return any(needle in name.lower() for name in names)


def run_analysis(
    inventory: Inventory,
    context: AnalysisContext,
    *,
    max_workers: int = 4,
    feature_filter: str | None = None,
) -> AnalysisResult:
    """Run every analyzer over ``inventory``.

    Args:
        inventory: Files, raw imports, symbols, complexity and churn.
        context: Read-only project layout knowledge.
        max_workers: Threads for the concurrent phase and per-file hashing.
        feature_filter: Case-insensitive substring; narrows the reported
            clusters and feature scores.  Analysis always covers every file.

    Returns:
        Merged result, with ``failures`` listing analyzers that raised.
    """
    result = AnalysisResult(file_count=len(inventory.files))
    timings = result.timings
    paths = [f.path for f in inventory.files]

    log.info("analysis_started", files=len(paths), workers=max_workers)

    with _timed(timings, "resolve"):
        graph = ImportGraph.build(paths, inventory.imports, context)
    result.edges = list(graph.edges)
    log.info("import_graph_built", edges=len(graph))

    with _timed(timings, "cluster"):
        clusters = FeatureClusterer(context).cluster(inventory.files, graph, inventory.churn)
    result.clusters = clusters

    analyzers: dict[str, tuple[Callable[..., Any], tuple[Any, ...], dict[str, Any]]] = {
        "metrics": (_metrics_phase, (inventory, graph, clusters, context), {}),
        "impact": (score_impact, (inventory, graph, clusters), {}),
        "duplication": (detect_duplicates, (inventory,), {"max_workers": max_workers}),
        "dead_code": (detect_dead_code, (inventory, graph, clusters, context), {}),
        "migration": (track_migration, (inventory, context), {}),
    }

    outputs: dict[str, Any] = {}
    with _timed(timings, "analyze"), ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures: dict[Future[tuple[Any, float]], str] = {
            # copy_context carries the run id into worker threads
            executor.submit(contextvars.copy_context().run, _run_timed, fn, *args, **kwargs): name
            for name, (fn, args, kwargs) in analyzers.items()
        }
        for future in as_completed(futures):
            name = futures[future]
            try:
                outputs[name], timings[name] = future.result()
            except Exception as e:
                log.exception("analyzer_failed", analyzer=name, error=str(e))
                result.failures.append(AnalysisError.analyzer_failed(name, str(e)))

    if "metrics" in outputs:
        file_metrics: list[FileMetrics]
        feature_scores: list[FeatureScore]
        file_metrics, feature_scores = outputs["metrics"]
        result.file_metrics = file_metrics
        result.feature_scores = feature_scores
    impact: list[ImpactRecord] = outputs.get("impact", [])
    duplicates: list[DuplicateMatch] = outputs.get("duplication", [])
    dead_code: DeadCodeReport = outputs.get("dead_code", DeadCodeReport())
    migration: list[MigrationEntry] = outputs.get("migration", [])
    result.impact = impact
    result.duplicates = duplicates
    result.dead_code = dead_code
    result.migration = migration
    result.failures.sort(key=lambda f: f.details.get("analyzer", ""))

    if feature_filter:
        result.clusters = [c for c in result.clusters if _matches_feature(feature_filter, c.id, c.name)]
        result.feature_scores = [
            s for s in result.feature_scores if _matches_feature(feature_filter, s.feature_id, s.name)
        ]

    log.info("analysis_complete", failures=len(result.failures), **timings)
    return result
