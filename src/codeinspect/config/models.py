"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (CODEINSPECT__SECTION__KEY)
3. Repo YAML (.codeinspect/config.yaml)
4. Global YAML (~/.config/codeinspect/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    CODEINSPECT__<SECTION>__<KEY>=<VALUE>

Examples:
    CODEINSPECT__LOGGING__LEVEL=DEBUG
    CODEINSPECT__EXECUTION__MAX_WORKERS=8
    CODEINSPECT__ANALYSIS__ALIASES='{"@/": "src/"}'

The ``analysis`` section is what project auto-detection produces (aliases,
route directories, workspace packages...). It is loaded once and frozen into
an ``AnalysisContext`` before any analyzer runs.
"""

import re
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

DEFAULT_SOURCE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".vue", ".svelte", ".mjs"]

DEFAULT_FEATURE_CONTAINERS = [
    "src",
    "components",
    "features",
    "modules",
    "views",
    "store",
    "pages",
    "screens",
    "app",
    "sections",
    "domains",
    "patterns",
]

DEFAULT_SHARED_DIRS = [
    "common",
    "shared",
    "utils",
    "helpers",
    "types",
    "assets",
    "styles",
    "static",
    "public",
    "test-utils",
    "support",
    "plugin",
    "plugins",
    "middleware",
    "layouts",
    "composables",
    "hooks",
    "lib",
    "config",
    "constants",
    "interfaces",
    "models",
    "services",
    "api",
    "i18n",
    "locales",
    "theme",
    "__tests__",
    "tests",
    "test",
    "mocks",
    "__mocks__",
    "fixtures",
    "cypress",
    "e2e",
    "node_modules",
    "dist",
    "build",
]

DEFAULT_CONFIG_FILE_PATTERNS = [
    "nuxt.config",
    "vite.config",
    "webpack.config",
    "next.config",
    "svelte.config",
    "astro.config",
    "eslint",
    "jest",
    "tailwind",
    "tsconfig",
    "babel.config",
    "postcss.config",
    ".prettierrc",
    "vitest.config",
]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        CODEINSPECT__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs per-phase detail.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class MigrationConfig(BaseModel):
    """Framework migration being tracked (e.g. ``.vue`` → ``.tsx``).

    Enables the migration-health term of feature scores and the migration
    tracker.  Empty package lists mean "anywhere in the repository".
    """

    source_extensions: list[str] = Field(default_factory=list)
    target_extensions: list[str] = Field(default_factory=list)
    source_packages: list[str] = Field(
        default_factory=list,
        description="Workspace packages holding source-framework components.",
    )
    target_packages: list[str] = Field(
        default_factory=list,
        description="Workspace packages holding target-framework components.",
    )

    @field_validator("source_packages", "target_packages")
    @classmethod
    def normalize_packages(cls, v: list[str]) -> list[str]:
        return [p.strip("/") for p in v if p.strip("/") not in ("", ".")]

    @property
    def enabled(self) -> bool:
        return bool(self.source_extensions) and bool(self.target_extensions)


class AnalysisConfig(BaseModel):
    """Project layout knowledge consumed by the analyzers.

    Env vars:
        CODEINSPECT__ANALYSIS__ALIASES: JSON object, prefix -> directory
        CODEINSPECT__ANALYSIS__ROUTE_PATHS: JSON list of route directories
    """

    aliases: dict[str, str] = Field(
        default_factory=dict,
        description="Import alias table, prefix -> directory. First match in order wins.",
    )
    source_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SOURCE_EXTENSIONS),
        description="Extensions tried, in order, when resolving extension-less imports.",
    )
    feature_containers: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FEATURE_CONTAINERS),
        description="Directory names whose subdirectories are feature candidates.",
    )
    shared_dirs: list[str] = Field(
        default_factory=lambda: list(DEFAULT_SHARED_DIRS),
        description="Directory names never treated as features (case-insensitive).",
    )
    route_paths: list[str] = Field(
        default_factory=list,
        description="Route/entry directories (e.g. 'web/src/pages/'). First segment below is a feature.",
    )
    entry_patterns: list[str] = Field(
        default_factory=list,
        description="Regexes marking entry-point files (never reported as dead code).",
    )
    convention_paths: list[str] = Field(
        default_factory=list,
        description=(
            "Directories the framework loads by convention (layouts, plugins, middleware, "
            "mixins, composables). Never reported as dead files; mixin/composable dirs are "
            "checked for orphans instead."
        ),
    )
    store_dirs: list[str] = Field(
        default_factory=list,
        description="State-management store directories; unimported index modules are unused stores.",
    )
    config_file_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CONFIG_FILE_PATTERNS),
        description="Substrings marking tool config files (never reported as dead code).",
    )
    packages: list[str] = Field(
        default_factory=list,
        description="Workspace package directories (monorepo).",
    )
    migration: MigrationConfig | None = Field(
        default=None,
        description="Optional migration tracking. Absent = neutral migration health.",
    )
    cochange_top_n: int = Field(
        default=10,
        description="Co-changed files considered per clustered file during co-change propagation.",
    )

    @field_validator("source_extensions")
    @classmethod
    def validate_extensions(cls, v: list[str]) -> list[str]:
        for ext in v:
            if not ext.startswith("."):
                raise ValueError(f"Extension must start with '.': {ext}")
        return v

    @field_validator("entry_patterns")
    @classmethod
    def validate_entry_patterns(cls, v: list[str]) -> list[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"Invalid entry pattern {pattern!r}: {e}") from e
        return v

    @field_validator("route_paths", "convention_paths")
    @classmethod
    def normalize_dir_prefixes(cls, v: list[str]) -> list[str]:
        return [p if p.endswith("/") else f"{p}/" for p in v if p.strip("/")]

    @field_validator("packages", "store_dirs")
    @classmethod
    def normalize_packages(cls, v: list[str]) -> list[str]:
        return [p.strip("/") for p in v if p.strip("/") not in ("", ".")]

    @field_validator("cochange_top_n")
    @classmethod
    def validate_top_n(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"cochange_top_n must be >= 0, got {v}")
        return v


class ExecutionConfig(BaseModel):
    """Execution configuration.

    Env vars:
        CODEINSPECT__EXECUTION__MAX_WORKERS: Threads for concurrent analyzers
    """

    max_workers: int = Field(
        default=4,
        description="Threads used for the concurrent analysis phase and per-file chunk hashing.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class CodeInspectConfig(BaseModel):
    """Root configuration for codeinspect."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
