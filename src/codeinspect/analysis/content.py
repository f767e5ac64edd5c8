"""File content sources.

Content-dependent analyzers (duplication, metrics) read through a
``ContentSource``.  Reads never raise: unreadable content is ``""`` and the
file is skipped by those analyzers while staying in the inventory and graph.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

import structlog

log = structlog.get_logger(__name__)


class ContentSource(Protocol):
    def read(self, path: str) -> str: ...


class FileContentReader:
    """Reads repo-relative paths from disk under ``root``.

    A path that resolves outside ``root`` (``..`` segments, absolute paths,
    symlinks pointing elsewhere) reads as ``""``.
    """

    def __init__(self, root: Path) -> None:
        self._root = root
        self._resolved_root = root.resolve()

    @property
    def root(self) -> Path:
        return self._root

    def read(self, path: str) -> str:
        target = (self._root / path).resolve()
        if not target.is_relative_to(self._resolved_root):
            log.debug("content_outside_root", path=path)
            return ""
        try:
            return target.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            log.debug("content_unreadable", path=path, error=str(e))
            return ""


class InMemoryContent:
    """Content supplied inline (snapshot ``contents`` section, tests)."""

    def __init__(self, contents: Mapping[str, str] | None = None) -> None:
        self._contents = dict(contents or {})

    def read(self, path: str) -> str:
        return self._contents.get(path, "")


class LayeredContent:
    """Inline content first, falling back to disk for everything else."""

    def __init__(self, inline: InMemoryContent, disk: FileContentReader) -> None:
        self._inline = inline
        self._disk = disk

    def read(self, path: str) -> str:
        return self._inline.read(path) or self._disk.read(path)
