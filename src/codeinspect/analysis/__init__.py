"""Analysis engine: import graph, feature clustering, impact, duplication, metrics, dead code, migration."""

from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.models import AnalysisResult, Inventory
from codeinspect.analysis.pipeline import run_analysis
from codeinspect.analysis.snapshot import load_snapshot

__all__ = [
    "AnalysisContext",
    "AnalysisResult",
    "Inventory",
    "load_snapshot",
    "run_analysis",
]
