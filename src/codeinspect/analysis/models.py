"""Analysis domain models: enums, dataclasses, inventory.

Pure data.  No I/O.  Input records (FileRecord, RawImport, SymbolEntry,
ComplexityPrimitives, ChurnRecord) arrive from the walker/extractor via an
``Inventory``; every other type is derived fresh on each run.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from codeinspect.core.languages import is_asset_language, is_test_file

if TYPE_CHECKING:
    from codeinspect.analysis.content import ContentSource
    from codeinspect.core.errors import AnalysisError


# ===================================================================
# Inventory input records
# ===================================================================


@dataclass(frozen=True, slots=True)
class FileRecord:
    """One indexed file.  ``path`` is repo-relative and ``/``-separated."""

    path: str
    extension: str
    line_count: int
    language: str
    package: str | None = None

    @property
    def is_test(self) -> bool:
        return is_test_file(self.path)

    @property
    def is_asset(self) -> bool:
        return is_asset_language(self.language)


@dataclass(frozen=True, slots=True)
class RawImport:
    """An import statement as extracted, before resolution."""

    target: str
    specifiers: tuple[str, ...] = ()
    is_default: bool = False
    is_dynamic: bool = False


@dataclass(frozen=True, slots=True)
class ImportEdge:
    """Resolved file-to-file import.  Duplicate pairs are kept."""

    source: str
    target: str
    specifiers: tuple[str, ...] = ()
    is_default: bool = False
    is_dynamic: bool = False


@dataclass(frozen=True, slots=True)
class SymbolEntry:
    name: str
    kind: str
    file: str
    line: int
    is_default: bool = False
    is_exported: bool = True


@dataclass(frozen=True, slots=True)
class ComplexityPrimitives:
    """Per-file counts supplied by the extractor."""

    cyclomatic: int = 0
    cognitive: int = 0
    function_count: int = 0
    max_function_length: int = 0
    prop_count: int = 0


@dataclass(frozen=True, slots=True)
class ChurnRecord:
    """Git history summary for one file.

    ``co_changed_with`` is ordered most-frequent first.
    """

    path: str
    commit_count: int
    author_count: int = 0
    co_changed_with: tuple[str, ...] = ()


@dataclass
class Inventory:
    """Everything the walker/extractor collaborators hand to the core.

    ``churn`` is ``None`` when git data is unavailable; that degrades churn
    terms to zero rather than failing.
    """

    files: list[FileRecord]
    content: ContentSource
    imports: dict[str, list[RawImport]] = field(default_factory=dict)
    symbols: list[SymbolEntry] = field(default_factory=list)
    complexity: dict[str, ComplexityPrimitives] = field(default_factory=dict)
    churn: dict[str, ChurnRecord] | None = None

    @property
    def paths(self) -> frozenset[str]:
        return frozenset(f.path for f in self.files)

    def commit_count(self, path: str) -> int:
        if self.churn is None:
            return 0
        record = self.churn.get(path)
        return record.commit_count if record else 0


# ===================================================================
# Feature clusters
# ===================================================================


class SignalKind(StrEnum):
    """Evidence kinds, in application order."""

    folder = "folder"
    route = "route"
    import_cluster = "import-cluster"
    git_cochange = "git-cochange"


class ClusterState(StrEnum):
    dedicated = "dedicated"
    low_confidence = "low-confidence"
    fallback = "fallback"


@dataclass(frozen=True, slots=True)
class FeatureSignal:
    kind: SignalKind
    weight: float
    detail: str


@dataclass
class FeatureCluster:
    """A named group of files believed to implement one feature.

    ``files`` is the base membership: each indexed file appears in exactly
    one cluster.  ``entry_points`` is always a subset of ``files``.
    """

    id: str
    name: str
    files: list[str] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    signals: list[FeatureSignal] = field(default_factory=list)
    confidence: float = 0.0
    state: ClusterState = ClusterState.dedicated

    @property
    def is_low_confidence(self) -> bool:
        return self.state is ClusterState.low_confidence

    @property
    def is_fallback(self) -> bool:
        return self.state is ClusterState.fallback

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ===================================================================
# Impact
# ===================================================================


class Severity(StrEnum):
    critical = "critical"
    high = "high"
    medium = "medium"
    low = "low"


@dataclass(frozen=True, slots=True)
class ImpactRecord:
    path: str
    fan_in: int
    feature_count: int
    churn: int
    has_tests: bool
    score: int
    severity: Severity


# ===================================================================
# Duplication
# ===================================================================


@dataclass(frozen=True, slots=True)
class DuplicateMatch:
    """One duplicated chunk shared by an unordered pair of files.

    Line numbers are 1-based.  ``file_a`` sorts before ``file_b``.
    """

    file_a: str
    line_a: int
    file_b: str
    line_b: int
    chunk_size: int
    hash: str
    snippet: str

    @property
    def pair(self) -> tuple[str, str]:
        return (self.file_a, self.file_b)


# ===================================================================
# Metrics and scoring
# ===================================================================


@dataclass(frozen=True, slots=True)
class FileMetrics:
    path: str
    line_count: int
    cyclomatic: int
    cognitive: int
    function_count: int
    max_function_length: int
    prop_count: int
    export_count: int
    import_count: int
    fan_in: int
    fan_out: int


class Grade(StrEnum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


@dataclass(frozen=True, slots=True)
class FeatureScore:
    """Composite 0-10 health score of one feature cluster."""

    feature_id: str
    name: str
    file_count: int
    architecture: float
    code_quality: float
    bug_risk: float
    test_coverage: float
    migration_health: float
    overall: float
    grade: Grade


# ===================================================================
# Migration
# ===================================================================


class MigrationStatus(StrEnum):
    migrated = "migrated"
    partial = "partial"
    unmigrated = "unmigrated"


@dataclass(frozen=True, slots=True)
class MigrationEntry:
    """Migration state of one source-framework file.

    ``target_folder`` is the folder of target-framework files matched to
    the source file's folder, or ``None``.
    """

    source_file: str
    target_folder: str | None
    bridge_events: tuple[str, ...]
    status: MigrationStatus


# ===================================================================
# Dead code
# ===================================================================


@dataclass(frozen=True, slots=True)
class UnusedExport:
    file: str
    name: str
    kind: str
    line: int


@dataclass
class DeadCodeReport:
    dead_files: list[str] = field(default_factory=list)
    unused_exports: list[UnusedExport] = field(default_factory=list)
    orphaned_convention_files: list[str] = field(default_factory=list)
    unused_stores: list[str] = field(default_factory=list)


# ===================================================================
# Run result
# ===================================================================


@dataclass
class AnalysisResult:
    """Merged output of one analysis run.

    Collections of a failed analyzer stay empty; the failure is listed in
    ``failures`` instead.
    """

    file_count: int = 0
    edges: list[ImportEdge] = field(default_factory=list)
    clusters: list[FeatureCluster] = field(default_factory=list)
    impact: list[ImpactRecord] = field(default_factory=list)
    duplicates: list[DuplicateMatch] = field(default_factory=list)
    file_metrics: list[FileMetrics] = field(default_factory=list)
    feature_scores: list[FeatureScore] = field(default_factory=list)
    dead_code: DeadCodeReport = field(default_factory=DeadCodeReport)
    migration: list[MigrationEntry] = field(default_factory=list)
    failures: list[AnalysisError] = field(default_factory=list)
    timings: dict[str, float] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> dict[str, Any]:
        """Headline counts for status output."""
        return {
            "files": self.file_count,
            "edges": len(self.edges),
            "features": sum(1 for c in self.clusters if not c.is_fallback),
            "low_confidence_features": sum(1 for c in self.clusters if c.is_low_confidence),
            "cross_cutting_files": sum(len(c.files) for c in self.clusters if c.is_fallback),
            "impact_hotspots": len(self.impact),
            "critical": sum(1 for r in self.impact if r.severity is Severity.critical),
            "duplicates": len(self.duplicates),
            "dead_files": len(self.dead_code.dead_files),
            "unused_exports": len(self.dead_code.unused_exports),
            "orphaned_convention_files": len(self.dead_code.orphaned_convention_files),
            "unused_stores": len(self.dead_code.unused_stores),
            "migration_components": len(self.migration),
            "migrated_components": sum(1 for e in self.migration if e.status is MigrationStatus.migrated),
            "failures": len(self.failures),
        }

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "summary": self.summary(),
            "edges": [asdict(e) for e in self.edges],
            "clusters": [c.to_dict() for c in self.clusters],
            "impact": [asdict(r) for r in self.impact],
            "duplicates": [asdict(d) for d in self.duplicates],
            "file_metrics": [asdict(m) for m in self.file_metrics],
            "feature_scores": [asdict(s) for s in self.feature_scores],
            "dead_code": asdict(self.dead_code),
            "migration": [asdict(e) for e in self.migration],
            "failures": [f.to_dict() for f in self.failures],
            "timings": dict(self.timings),
        }
