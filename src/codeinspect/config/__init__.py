"""Config module exports."""

from codeinspect.config.loader import load_config
from codeinspect.config.models import (
    AnalysisConfig,
    CodeInspectConfig,
    ExecutionConfig,
    LoggingConfig,
    MigrationConfig,
)

__all__ = [
    "load_config",
    "AnalysisConfig",
    "CodeInspectConfig",
    "ExecutionConfig",
    "LoggingConfig",
    "MigrationConfig",
]
