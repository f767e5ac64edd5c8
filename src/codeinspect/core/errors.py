"""codeinspect error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Snapshot (walker/extractor input)
- 4xxx: Analysis
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002

    # Snapshot (3xxx)
    SNAPSHOT_NOT_FOUND = 3001
    SNAPSHOT_PARSE_ERROR = 3002
    SNAPSHOT_INVALID = 3003

    # Analysis (4xxx)
    ANALYZER_FAILED = 4001

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class CodeInspectError(Exception):
    """Base error with structured context for CLI and JSON output."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CONFIG_PARSE_ERROR')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(CodeInspectError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class SnapshotError(CodeInspectError):
    """Errors reading the walker/extractor snapshot."""

    @classmethod
    def not_found(cls, path: str) -> "SnapshotError":
        return cls(
            code=ErrorCode.SNAPSHOT_NOT_FOUND,
            message=f"Snapshot file not found: {path}",
            details={"path": path},
        )

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "SnapshotError":
        return cls(
            code=ErrorCode.SNAPSHOT_PARSE_ERROR,
            message=f"Failed to parse snapshot at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid(cls, location: str, reason: str) -> "SnapshotError":
        return cls(
            code=ErrorCode.SNAPSHOT_INVALID,
            message=f"Invalid snapshot entry at '{location}': {reason}",
            details={"location": location, "reason": reason},
        )


class AnalysisError(CodeInspectError):
    """An analyzer failed inside the pipeline.

    Recorded on the result rather than raised, so sibling analyzers
    still deliver their output.
    """

    @classmethod
    def analyzer_failed(cls, analyzer: str, reason: str) -> "AnalysisError":
        return cls(
            code=ErrorCode.ANALYZER_FAILED,
            message=f"Analyzer '{analyzer}' failed: {reason}",
            details={"analyzer": analyzer, "reason": reason},
        )


class InternalError(CodeInspectError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
