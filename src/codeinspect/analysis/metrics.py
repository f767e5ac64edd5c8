"""Per-file metrics and per-feature health scores.

File metrics combine the extractor's complexity primitives with coupling
from the resolved graph.  Feature scores aggregate member file metrics into
four 0-10 sub-scores, each ``10 - sum(bucket penalties)`` clamped to
[0, 10], and a weighted overall with a letter grade.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence

import structlog

from codeinspect.analysis.constants import (
    ARCHITECTURE_WEIGHT,
    AVG_CHURN_BUCKETS,
    AVG_COGNITIVE_BUCKETS,
    AVG_CYCLOMATIC_BUCKETS,
    AVG_FAN_IN_BUCKETS,
    AVG_FAN_OUT_BUCKETS,
    AVG_LOC_BUCKETS,
    AVG_MAX_FUNCTION_BUCKETS,
    BUG_RISK_WEIGHT,
    CODE_QUALITY_WEIGHT,
    FILE_COUNT_BUCKETS,
    GRADE_CUTOFFS,
    MAX_FAN_IN_BUCKETS,
    MAX_LOC_BUCKETS,
    MAX_SUB_SCORE,
    MIGRATION_WEIGHT,
    NEUTRAL_MIGRATION_SCORE,
    RISK_CYCLOMATIC_BUCKETS,
    TEST_COVERAGE_WEIGHT,
    TEST_COVERAGE_WEIGHT_WITH_MIGRATION,
    Buckets,
)
from codeinspect.analysis.context import AnalysisContext, MigrationTarget
from codeinspect.analysis.import_graph import ImportGraph
from codeinspect.analysis.models import (
    FeatureCluster,
    FeatureScore,
    FileMetrics,
    Grade,
    Inventory,
)
from codeinspect.core.languages import extension_of, has_sibling_test, is_test_file

log = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def bucket_penalty(value: float, buckets: Buckets) -> int:
    """Penalty of the first bucket whose threshold ``value`` strictly exceeds."""
    for threshold, penalty in buckets:
        if value > threshold:
            return penalty
    return 0


def clamp_score(value: float) -> float:
    return max(0.0, min(MAX_SUB_SCORE, value))


def round1(value: float) -> float:
    """Round half-up to one decimal."""
    return math.floor(value * 10 + 0.5) / 10


def grade_for(overall: float) -> Grade:
    """Letter grade; boundaries belong to the higher grade."""
    for cutoff, letter in GRADE_CUTOFFS:
        if overall >= cutoff:
            return Grade(letter)
    return Grade.F


def _avg(values: Iterable[float]) -> float:
    items = list(values)
    return sum(items) / len(items) if items else 0.0


# ---------------------------------------------------------------------------
# File metrics
# ---------------------------------------------------------------------------


def compute_file_metrics(inventory: Inventory, graph: ImportGraph) -> dict[str, FileMetrics]:
    """Metrics for every file with readable content and complexity data.

    Keyed by path, in inventory order.
    """
    exports = Counter(s.file for s in inventory.symbols if s.is_exported)
    metrics: dict[str, FileMetrics] = {}
    skipped = 0

    for file in inventory.files:
        primitives = inventory.complexity.get(file.path)
        if primitives is None or not inventory.content.read(file.path).strip():
            skipped += 1
            continue
        metrics[file.path] = FileMetrics(
            path=file.path,
            line_count=file.line_count,
            cyclomatic=primitives.cyclomatic,
            cognitive=primitives.cognitive,
            function_count=primitives.function_count,
            max_function_length=primitives.max_function_length,
            prop_count=primitives.prop_count,
            export_count=exports.get(file.path, 0),
            import_count=len(inventory.imports.get(file.path, ())),
            fan_in=graph.fan_in(file.path),
            fan_out=graph.fan_out(file.path),
        )

    log.info("file_metrics_computed", files=len(metrics), skipped=skipped)
    return metrics


# ---------------------------------------------------------------------------
# Feature scoring
# ---------------------------------------------------------------------------


def architecture_score(members: Sequence[FileMetrics]) -> float:
    penalty = (
        bucket_penalty(_avg(m.fan_out for m in members), AVG_FAN_OUT_BUCKETS)
        + bucket_penalty(_avg(m.line_count for m in members), AVG_LOC_BUCKETS)
        + bucket_penalty(max((m.line_count for m in members), default=0), MAX_LOC_BUCKETS)
        + bucket_penalty(len(members), FILE_COUNT_BUCKETS)
    )
    return clamp_score(MAX_SUB_SCORE - penalty)


def code_quality_score(members: Sequence[FileMetrics]) -> float:
    penalty = (
        bucket_penalty(_avg(m.cyclomatic for m in members), AVG_CYCLOMATIC_BUCKETS)
        + bucket_penalty(_avg(m.cognitive for m in members), AVG_COGNITIVE_BUCKETS)
        + bucket_penalty(_avg(m.max_function_length for m in members), AVG_MAX_FUNCTION_BUCKETS)
    )
    return clamp_score(MAX_SUB_SCORE - penalty)


def bug_risk_score(members: Sequence[FileMetrics], churn: Mapping[str, int]) -> float:
    """Fan-in, churn and complexity penalize independently."""
    penalty = (
        bucket_penalty(_avg(m.fan_in for m in members), AVG_FAN_IN_BUCKETS)
        + bucket_penalty(max((m.fan_in for m in members), default=0), MAX_FAN_IN_BUCKETS)
        + bucket_penalty(_avg(churn.get(m.path, 0) for m in members), AVG_CHURN_BUCKETS)
        + bucket_penalty(_avg(m.cyclomatic for m in members), RISK_CYCLOMATIC_BUCKETS)
    )
    return clamp_score(MAX_SUB_SCORE - penalty)


def coverage_score(members: Sequence[str], indexed: frozenset[str]) -> float:
    if not members:
        return 0.0
    covered = sum(1 for p in members if is_test_file(p) or has_sibling_test(p, indexed))
    return clamp_score(math.floor(covered / len(members) * 10 + 0.5))


def migration_score(members: Sequence[str], migration: MigrationTarget | None) -> float:
    if migration is None:
        return NEUTRAL_MIGRATION_SCORE
    extensions = [extension_of(p) for p in members]
    source = sum(1 for ext in extensions if ext in migration.source_extensions)
    target = sum(1 for ext in extensions if ext in migration.target_extensions)
    if source + target == 0:
        return NEUTRAL_MIGRATION_SCORE
    return clamp_score(math.floor(target / (source + target) * 10 + 0.5))


def score_features(
    clusters: Sequence[FeatureCluster],
    file_metrics: Mapping[str, FileMetrics],
    inventory: Inventory,
    context: AnalysisContext,
) -> list[FeatureScore]:
    """One score per cluster that has at least one member with metrics."""
    indexed = inventory.paths
    churn = {f.path: inventory.commit_count(f.path) for f in inventory.files}
    has_migration = context.migration is not None
    test_weight = TEST_COVERAGE_WEIGHT_WITH_MIGRATION if has_migration else TEST_COVERAGE_WEIGHT
    migration_weight = MIGRATION_WEIGHT if has_migration else 0.0

    scores: list[FeatureScore] = []
    for cluster in clusters:
        members = [file_metrics[p] for p in cluster.files if p in file_metrics]
        if not members:
            continue
        member_paths = [m.path for m in members]

        architecture = architecture_score(members)
        quality = code_quality_score(members)
        risk = bug_risk_score(members, churn)
        coverage = coverage_score(member_paths, indexed)
        migration = migration_score(member_paths, context.migration)

        overall = round1(
            architecture * ARCHITECTURE_WEIGHT
            + quality * CODE_QUALITY_WEIGHT
            + risk * BUG_RISK_WEIGHT
            + coverage * test_weight
            + migration * migration_weight
        )
        scores.append(
            FeatureScore(
                feature_id=cluster.id,
                name=cluster.name,
                file_count=len(members),
                architecture=round1(architecture),
                code_quality=round1(quality),
                bug_risk=round1(risk),
                test_coverage=round1(coverage),
                migration_health=round1(migration),
                overall=overall,
                grade=grade_for(overall),
            )
        )

    log.info("features_scored", features=len(scores))
    return scores
