"""Feature clustering: partition the inventory into feature clusters.

Four evidence signals run in fixed order, one pass each:

1. folder          (0.35)  ``<container>/<Feature>/...`` directory layout
2. route           (0.30)  first segment below a route directory
3. import-cluster  (0.20)  unassigned files imported by a clustered file
4. git-cochange    (0.15)  unassigned files co-changed with a clustered file

Assignments are kept in an arena of clusters keyed by id plus a separate
file → cluster-id index.  A pass only adds index entries; once a file is
assigned it never moves.  Signals 3 and 4 read the index as it stood when
the pass began, so propagation is exactly one hop per run.

Whatever is still unassigned lands in the reserved ``cross-cutting``
cluster.  Every indexed file therefore ends up in exactly one cluster.
"""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from pathlib import PurePosixPath

import structlog

from codeinspect.analysis.constants import (
    COCHANGE_WEIGHT,
    FALLBACK_CLUSTER_ID,
    FALLBACK_CLUSTER_NAME,
    FOLDER_WEIGHT,
    IMPORT_CLUSTER_WEIGHT,
    LOW_CONFIDENCE_THRESHOLD,
    ROUTE_WEIGHT,
    SIGNAL_DIVERSITY_BONUS,
)
from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.import_graph import ImportGraph
from codeinspect.analysis.models import (
    ChurnRecord,
    ClusterState,
    FeatureCluster,
    FeatureSignal,
    FileRecord,
    SignalKind,
)

log = structlog.get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")
_WORD_START = re.compile(r"\b\w")


def display_name(cluster_id: str) -> str:
    """Human-readable name for a cluster id.

    Examples:
        >>> display_name("user-profile")
        'User Profile'
        >>> display_name("shoppingCart")
        'Shopping Cart'
    """
    name = cluster_id.replace("-", " ").replace("_", " ")
    name = _CAMEL_BOUNDARY.sub(r"\1 \2", name)
    return _WORD_START.sub(lambda m: m.group(0).upper(), name)


def compute_confidence(signals: Sequence[FeatureSignal]) -> float:
    """``min(1, avg signal weight + 0.1 × distinct signal kinds)``."""
    if not signals:
        return 0.0
    avg_weight = sum(s.weight for s in signals) / len(signals)
    kinds = {s.kind for s in signals}
    return min(1.0, avg_weight + SIGNAL_DIVERSITY_BONUS * len(kinds))


# ---------------------------------------------------------------------------
# Path signals
# ---------------------------------------------------------------------------


def _is_feature_name(name: str, context: AnalysisContext) -> bool:
    return (
        bool(name)
        and not name.startswith(".")
        and name.lower() not in context.shared_dirs
        and name != FALLBACK_CLUSTER_ID
    )


def feature_from_path(path: str, context: AnalysisContext) -> str | None:
    """Directory-convention feature id for ``path``, if any.

    The first directory following a feature container wins; runs of
    containers are skipped (``src/components/Cart/x.ts`` → ``Cart``).
    """
    dirs = path.split("/")[:-1]
    for i in range(len(dirs) - 1):
        if dirs[i].lower() not in context.feature_containers:
            continue
        candidate = dirs[i + 1]
        if candidate.lower() in context.feature_containers:
            continue
        if _is_feature_name(candidate, context):
            return candidate
    return None


def feature_from_route(path: str, context: AnalysisContext) -> str | None:
    """Route-convention feature id: first segment below the first matching route dir.

    The segment loses its last extension whether it names a file or a
    directory (``pages/blog.v2/x.vue`` → ``blog``).
    """
    for prefix in context.route_paths:
        if not path.startswith(prefix):
            continue
        head = path[len(prefix) :].split("/")[0]
        if not head or head.startswith(("_", ".")):
            return None
        feature_id = PurePosixPath(head).stem
        if feature_id == "index" or not _is_feature_name(feature_id, context):
            return None
        return feature_id
    return None


# ---------------------------------------------------------------------------
# Arena
# ---------------------------------------------------------------------------


class _ClusterArena:
    """Clusters keyed by stable id plus the file → cluster-id index."""

    def __init__(self) -> None:
        self.clusters: dict[str, FeatureCluster] = {}
        self.index: dict[str, str] = {}

    def _get_or_create(self, cluster_id: str) -> FeatureCluster:
        cluster = self.clusters.get(cluster_id)
        if cluster is None:
            cluster = FeatureCluster(id=cluster_id, name=display_name(cluster_id))
            self.clusters[cluster_id] = cluster
        return cluster

    def assign(self, path: str, cluster_id: str, signal: FeatureSignal) -> None:
        if path in self.index:
            return
        cluster = self._get_or_create(cluster_id)
        cluster.files.append(path)
        cluster.signals.append(signal)
        self.index[path] = cluster_id

    def mark_entry_point(self, path: str, signal: FeatureSignal) -> None:
        cluster = self.clusters[self.index[path]]
        if path not in cluster.entry_points:
            cluster.entry_points.append(path)
        cluster.signals.append(signal)


class FeatureClusterer:
    """Runs the four signals over one inventory.

    Usage::

        clusters = FeatureClusterer(context).cluster(files, graph, churn)
    """

    def __init__(self, context: AnalysisContext) -> None:
        self._context = context

    def cluster(
        self,
        files: Sequence[FileRecord],
        graph: ImportGraph,
        churn: Mapping[str, ChurnRecord] | None = None,
    ) -> list[FeatureCluster]:
        arena = _ClusterArena()
        paths = [f.path for f in files]

        self._apply_folders(arena, paths)
        self._apply_routes(arena, paths)
        self._apply_imports(arena, graph)
        if churn:
            self._apply_cochange(arena, paths, churn)
        else:
            log.debug("cochange_skipped", reason="no churn data")

        fallback = self._assign_fallback(arena, paths)
        clusters = list(arena.clusters.values())
        self._score(clusters)
        if fallback is not None:
            clusters.append(fallback)

        log.info(
            "features_clustered",
            dedicated=sum(1 for c in clusters if c.state is ClusterState.dedicated),
            low_confidence=sum(1 for c in clusters if c.is_low_confidence),
            cross_cutting_files=len(fallback.files) if fallback else 0,
        )
        return clusters

    def _apply_folders(self, arena: _ClusterArena, paths: Sequence[str]) -> None:
        for path in paths:
            feature_id = feature_from_path(path, self._context)
            if feature_id is None:
                continue
            arena.assign(
                path,
                feature_id,
                FeatureSignal(
                    SignalKind.folder,
                    FOLDER_WEIGHT,
                    f"File path contains feature folder: {feature_id}",
                ),
            )

    def _apply_routes(self, arena: _ClusterArena, paths: Sequence[str]) -> None:
        for path in paths:
            feature_id = feature_from_route(path, self._context)
            if feature_id is None:
                continue
            signal = FeatureSignal(SignalKind.route, ROUTE_WEIGHT, f"Page route: {path}")
            if path not in arena.index:
                arena.assign(path, feature_id, signal)
                arena.clusters[feature_id].entry_points.append(path)
            else:
                # Already owned by a folder cluster: entry point only
                arena.mark_entry_point(path, signal)

    def _apply_imports(self, arena: _ClusterArena, graph: ImportGraph) -> None:
        seeded = dict(arena.index)
        added = 0
        for edge in graph.edges:
            source_cluster = seeded.get(edge.source)
            if source_cluster is None or edge.target in arena.index:
                continue
            arena.assign(
                edge.target,
                source_cluster,
                FeatureSignal(
                    SignalKind.import_cluster,
                    IMPORT_CLUSTER_WEIGHT,
                    f"Imported by {edge.source} (feature: {source_cluster})",
                ),
            )
            added += 1
        log.debug("import_propagation", added=added)

    def _apply_cochange(
        self,
        arena: _ClusterArena,
        paths: Sequence[str],
        churn: Mapping[str, ChurnRecord],
    ) -> None:
        seeded = dict(arena.index)
        indexed = set(paths)
        top_n = self._context.cochange_top_n
        added = 0
        for path in paths:
            cluster_id = seeded.get(path)
            record = churn.get(path)
            if cluster_id is None or record is None:
                continue
            for other in record.co_changed_with[:top_n]:
                if other not in indexed or other in arena.index:
                    continue
                arena.assign(
                    other,
                    cluster_id,
                    FeatureSignal(
                        SignalKind.git_cochange,
                        COCHANGE_WEIGHT,
                        f"Co-changed with {path} in git history",
                    ),
                )
                added += 1
        log.debug("cochange_propagation", added=added)

    def _assign_fallback(self, arena: _ClusterArena, paths: Sequence[str]) -> FeatureCluster | None:
        unassigned = [p for p in paths if p not in arena.index]
        if not unassigned:
            return None
        fallback = FeatureCluster(
            id=FALLBACK_CLUSTER_ID,
            name=FALLBACK_CLUSTER_NAME,
            files=unassigned,
            confidence=0.0,
            state=ClusterState.fallback,
        )
        for path in unassigned:
            arena.index[path] = FALLBACK_CLUSTER_ID
        return fallback

    @staticmethod
    def _score(clusters: Sequence[FeatureCluster]) -> None:
        for cluster in clusters:
            cluster.confidence = compute_confidence(cluster.signals)
            if cluster.confidence < LOW_CONFIDENCE_THRESHOLD:
                cluster.state = ClusterState.low_confidence


def cluster_index(clusters: Sequence[FeatureCluster]) -> dict[str, str]:
    """File → cluster id over base membership."""
    return {path: cluster.id for cluster in clusters for path in cluster.files}
