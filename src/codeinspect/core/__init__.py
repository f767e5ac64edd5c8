"""Core module exports."""

from codeinspect.core.errors import (
    AnalysisError,
    CodeInspectError,
    ConfigError,
    ErrorCode,
    InternalError,
    SnapshotError,
)
from codeinspect.core.logging import (
    clear_run_id,
    configure_logging,
    get_logger,
    get_run_id,
    set_run_id,
)
from codeinspect.core.progress import spinner, status

__all__ = [
    # Errors
    "AnalysisError",
    "CodeInspectError",
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "SnapshotError",
    # Logging
    "clear_run_id",
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_id",
    # Progress
    "spinner",
    "status",
]
