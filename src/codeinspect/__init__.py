"""codeinspect - dependency graph, feature clustering and blast-radius analysis."""

__version__ = "0.1.0"
