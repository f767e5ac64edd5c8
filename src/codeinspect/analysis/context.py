"""Read-only analysis context.

Project layout knowledge (aliases, container names, route directories...)
is loaded once from configuration and passed explicitly to every analyzer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from codeinspect.config.models import AnalysisConfig, CodeInspectConfig


def _clean_dir(path: str) -> str:
    path = path.strip()
    while path.startswith("./"):
        path = path[2:]
    return path.rstrip("/")


@dataclass(frozen=True, slots=True)
class MigrationTarget:
    """Extensions and packages on each side of a framework migration.

    Empty package tuples match every path.
    """

    source_extensions: frozenset[str]
    target_extensions: frozenset[str]
    source_packages: tuple[str, ...] = ()
    target_packages: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class AnalysisContext:
    """Frozen view of the ``analysis`` config section.

    ``aliases`` keeps table order; alias prefixes, alias directories and
    ``store_dirs`` carry no trailing ``/`` while ``route_paths`` and
    ``convention_paths`` always end with one.  Container and shared
    directory names are lowercase.
    """

    aliases: tuple[tuple[str, str], ...] = ()
    source_extensions: tuple[str, ...] = ()
    feature_containers: frozenset[str] = frozenset()
    shared_dirs: frozenset[str] = frozenset()
    route_paths: tuple[str, ...] = ()
    entry_patterns: tuple[re.Pattern[str], ...] = ()
    convention_paths: tuple[str, ...] = ()
    store_dirs: tuple[str, ...] = ()
    config_file_patterns: tuple[str, ...] = ()
    packages: tuple[str, ...] = ()
    migration: MigrationTarget | None = None
    cochange_top_n: int = 10

    @classmethod
    def from_config(cls, config: CodeInspectConfig | AnalysisConfig) -> AnalysisContext:
        analysis = config.analysis if isinstance(config, CodeInspectConfig) else config

        migration = None
        if analysis.migration is not None and analysis.migration.enabled:
            migration = MigrationTarget(
                source_extensions=frozenset(e.lower() for e in analysis.migration.source_extensions),
                target_extensions=frozenset(e.lower() for e in analysis.migration.target_extensions),
                source_packages=tuple(analysis.migration.source_packages),
                target_packages=tuple(analysis.migration.target_packages),
            )

        return cls(
            aliases=tuple(
                (prefix.rstrip("/"), _clean_dir(directory))
                for prefix, directory in analysis.aliases.items()
                if prefix.rstrip("/")
            ),
            source_extensions=tuple(analysis.source_extensions),
            feature_containers=frozenset(c.lower() for c in analysis.feature_containers),
            shared_dirs=frozenset(d.lower() for d in analysis.shared_dirs),
            route_paths=tuple(f"{_clean_dir(p)}/" for p in analysis.route_paths),
            entry_patterns=tuple(re.compile(p) for p in analysis.entry_patterns),
            convention_paths=tuple(f"{_clean_dir(p)}/" for p in analysis.convention_paths),
            store_dirs=tuple(_clean_dir(d) for d in analysis.store_dirs),
            config_file_patterns=tuple(analysis.config_file_patterns),
            packages=tuple(analysis.packages),
            migration=migration,
            cochange_top_n=analysis.cochange_top_n,
        )

    @classmethod
    def default(cls) -> AnalysisContext:
        return cls.from_config(AnalysisConfig())

    def is_entry_pattern(self, path: str) -> bool:
        return any(p.search(path) for p in self.entry_patterns)

    def is_convention_path(self, path: str) -> bool:
        """Under a route directory or a framework convention directory."""
        return any(path.startswith(prefix) for prefix in (*self.route_paths, *self.convention_paths))
