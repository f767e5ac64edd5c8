"""Migration tracking between two UI frameworks.

Runs only when a migration target is configured.  Source-framework files
(source extension, inside a source package, outside route and convention
directories) are grouped by folder.  Each source folder is matched by name
to a folder holding target-framework files:

1. a target folder named like the source folder, or containing it as a
   path segment
2. failing that, a target folder named like the source folder's parent

Every file of a source folder gets the folder's status:

- ``migrated``    a target folder matched
- ``partial``     a target folder matched but the source files still
                  listen on an event bus (``.on('event', ...)``)
- ``unmigrated``  no target folder matched

Graph-free: only the inventory and file contents are read.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Iterable, Sequence

import structlog

from codeinspect.analysis.content import ContentSource
from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.models import (
    FileRecord,
    Inventory,
    MigrationEntry,
    MigrationStatus,
)
from codeinspect.core.formatting import format_percentage

log = structlog.get_logger(__name__)

_BRIDGE_LISTENER = re.compile(r"""\.on\(\s*['"]([^'"]+)['"]""")


def _in_packages(path: str, packages: Sequence[str]) -> bool:
    return not packages or any(path.startswith(pkg + "/") for pkg in packages)


def group_by_folder(paths: Iterable[str]) -> dict[str, list[str]]:
    """Folder → files, both in first-seen order."""
    folders: dict[str, list[str]] = {}
    for path in paths:
        folders.setdefault(posixpath.dirname(path), []).append(path)
    return folders


def match_target_folder(source_folder: str, target_folders: Sequence[str]) -> str | None:
    """First target folder matching ``source_folder`` by name, else by parent name."""
    name = posixpath.basename(source_folder)
    if name:
        for target in target_folders:
            if posixpath.basename(target) == name or f"/{name}/" in target:
                return target

    parent = posixpath.basename(posixpath.dirname(source_folder))
    if parent:
        for target in target_folders:
            if posixpath.basename(target) == parent:
                return target
    return None


def bridge_events(paths: Iterable[str], content: ContentSource) -> tuple[str, ...]:
    """Event names listened to in ``paths``, deduplicated in first-seen order."""
    events: dict[str, None] = {}
    for path in paths:
        for match in _BRIDGE_LISTENER.finditer(content.read(path)):
            events.setdefault(match.group(1), None)
    return tuple(events)


def _status(target: str | None, events: tuple[str, ...]) -> MigrationStatus:
    if target is None:
        return MigrationStatus.unmigrated
    if events:
        return MigrationStatus.partial
    return MigrationStatus.migrated


def track_migration(inventory: Inventory, context: AnalysisContext) -> list[MigrationEntry]:
    """One entry per source-framework file, grouped by source folder."""
    migration = context.migration
    if migration is None:
        log.debug("migration_skipped", reason="no migration configured")
        return []

    def is_source(f: FileRecord) -> bool:
        return (
            f.extension in migration.source_extensions
            and _in_packages(f.path, migration.source_packages)
            and not context.is_convention_path(f.path)
        )

    def is_target(f: FileRecord) -> bool:
        return f.extension in migration.target_extensions and _in_packages(f.path, migration.target_packages)

    sources = group_by_folder(f.path for f in inventory.files if is_source(f))
    targets = list(group_by_folder(f.path for f in inventory.files if is_target(f)))

    entries: list[MigrationEntry] = []
    for folder, files in sources.items():
        target = match_target_folder(folder, targets)
        events = bridge_events(files, inventory.content)
        status = _status(target, events)
        entries.extend(
            MigrationEntry(source_file=path, target_folder=target, bridge_events=events, status=status)
            for path in files
        )

    migrated = sum(1 for e in entries if e.status is MigrationStatus.migrated)
    log.info(
        "migration_tracked",
        components=len(entries),
        migrated=migrated,
        partial=sum(1 for e in entries if e.status is MigrationStatus.partial),
        unmigrated=sum(1 for e in entries if e.status is MigrationStatus.unmigrated),
        percentage=format_percentage(migrated, len(entries)),
    )
    return entries
