"""Blast-radius scoring.

Five terms, 100 points total:

    fan-in       35  (saturates at 30 importing edges)
    features     25  (saturates at 5 distinct clusters)
    churn        20  (saturates at 100 commits)
    no tests     10
    complexity   10  (saturates at cyclomatic 50)

Files scoring below 15 are left out of the result entirely.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import structlog

from codeinspect.analysis.clustering import cluster_index
from codeinspect.analysis.constants import (
    CHURN_CAP,
    CHURN_POINTS,
    COMPLEXITY_CAP,
    COMPLEXITY_POINTS,
    CRITICAL_SCORE,
    FAN_IN_CAP,
    FAN_IN_POINTS,
    FEATURE_CAP,
    FEATURE_POINTS,
    HIGH_SCORE,
    MEDIUM_SCORE,
    MIN_IMPACT_SCORE,
    NO_TEST_POINTS,
)
from codeinspect.analysis.import_graph import ImportGraph
from codeinspect.analysis.models import FeatureCluster, ImpactRecord, Inventory, Severity
from codeinspect.core.languages import has_sibling_test

log = structlog.get_logger(__name__)


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def impact_score(
    fan_in: int,
    feature_count: int,
    commit_count: int,
    has_tests: bool,
    cyclomatic: int,
) -> int:
    """Rounded blast-radius score in [0, 100]."""
    total = (
        min(fan_in / FAN_IN_CAP, 1) * FAN_IN_POINTS
        + min(feature_count / FEATURE_CAP, 1) * FEATURE_POINTS
        + min(commit_count / CHURN_CAP, 1) * CHURN_POINTS
        + (0 if has_tests else NO_TEST_POINTS)
        + min(cyclomatic / COMPLEXITY_CAP, 1) * COMPLEXITY_POINTS
    )
    return _round_half_up(total)


def severity_for(score: int) -> Severity:
    if score >= CRITICAL_SCORE:
        return Severity.critical
    if score >= HIGH_SCORE:
        return Severity.high
    if score >= MEDIUM_SCORE:
        return Severity.medium
    return Severity.low


def feature_breadth(path: str, graph: ImportGraph, index: dict[str, str]) -> int:
    """Distinct clusters among ``path`` itself and every file importing it."""
    features = {index[p] for p in [path, *graph.importers(path)] if p in index}
    return len(features)


def score_impact(
    inventory: Inventory,
    graph: ImportGraph,
    clusters: Sequence[FeatureCluster],
) -> list[ImpactRecord]:
    """Impact records for non-test, non-asset files, highest score first."""
    index = cluster_index(clusters)
    indexed = inventory.paths
    records: list[ImpactRecord] = []

    for file in inventory.files:
        if file.is_test or file.is_asset:
            continue

        fan_in = graph.fan_in(file.path)
        feature_count = feature_breadth(file.path, graph, index)
        churn = inventory.commit_count(file.path)
        has_tests = has_sibling_test(file.path, indexed)
        primitives = inventory.complexity.get(file.path)
        cyclomatic = primitives.cyclomatic if primitives else 0

        score = impact_score(fan_in, feature_count, churn, has_tests, cyclomatic)
        if score < MIN_IMPACT_SCORE:
            continue
        records.append(
            ImpactRecord(
                path=file.path,
                fan_in=fan_in,
                feature_count=feature_count,
                churn=churn,
                has_tests=has_tests,
                score=score,
                severity=severity_for(score),
            )
        )

    records.sort(key=lambda r: (-r.score, r.path))
    log.info(
        "impact_scored",
        hotspots=len(records),
        critical=sum(1 for r in records if r.severity is Severity.critical),
        high=sum(1 for r in records if r.severity is Severity.high),
    )
    return records
