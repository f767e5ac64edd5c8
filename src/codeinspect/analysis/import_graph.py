"""Import graph: resolve raw import specifiers into file-to-file edges.

Two pieces:

1. ``ImportResolver`` maps one specifier, seen from one importing file, to
   an indexed path (or nothing).  External package imports and specifiers
   that match no indexed file are dropped silently; resolution never raises.
2. ``ImportGraph`` holds the resolved edges with fan-in/fan-out counters and
   importer lookup for the downstream analyzers.

Fan-in and fan-out count edges, not distinct files: two imports of the same
module from one file are two edges.
"""

from __future__ import annotations

import posixpath
from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping, Sequence

import structlog

from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.models import ImportEdge, RawImport
from codeinspect.core.languages import strip_extension

log = structlog.get_logger(__name__)


class ImportResolver:
    """Resolves specifiers against a fixed set of indexed paths.

    Candidate lookup order for an internal specifier resolved to ``base``:

    1. ``base`` exactly
    2. ``base`` + each source extension
    3. ``base/index`` + each source extension
    4. ``base`` with its own extension stripped

    First indexed candidate wins.
    """

    def __init__(self, indexed_paths: Iterable[str], context: AnalysisContext) -> None:
        self._indexed = frozenset(indexed_paths)
        self._aliases = context.aliases
        self._extensions = context.source_extensions

    def _alias_base(self, specifier: str) -> str | None:
        for prefix, directory in self._aliases:
            if specifier == prefix or specifier.startswith(prefix + "/"):
                rest = specifier[len(prefix) :].lstrip("/")
                if not directory:
                    return rest
                return f"{directory}/{rest}" if rest else directory
        return None

    def _base_path(self, specifier: str, from_file: str) -> str | None:
        """Turn an internal specifier into a normalized repo-relative path.

        Returns None for external specifiers and for paths escaping the root.
        """
        base = self._alias_base(specifier)
        if base is None:
            if specifier.startswith("/"):
                base = specifier.lstrip("/")
            elif specifier.startswith("."):
                base = posixpath.join(posixpath.dirname(from_file), specifier)
            else:
                return None

        normalized = posixpath.normpath(base) if base else "."
        if normalized == ".." or normalized.startswith("../"):
            return None
        return "" if normalized == "." else normalized

    def _candidates(self, base: str) -> Iterable[str]:
        if base:
            yield base
            for ext in self._extensions:
                yield base + ext
        index_stem = f"{base}/index" if base else "index"
        for ext in self._extensions:
            yield index_stem + ext
        if base:
            stripped = strip_extension(base)
            if stripped != base:
                yield stripped

    def resolve(self, specifier: str, from_file: str) -> str | None:
        """Resolve ``specifier`` imported from ``from_file`` to an indexed path."""
        base = self._base_path(specifier, from_file)
        if base is None:
            return None
        for candidate in self._candidates(base):
            if candidate in self._indexed:
                return candidate
        return None

    def resolve_import(self, raw: RawImport, from_file: str) -> ImportEdge | None:
        target = self.resolve(raw.target, from_file)
        if target is None:
            return None
        return ImportEdge(
            source=from_file,
            target=target,
            specifiers=raw.specifiers,
            is_default=raw.is_default,
            is_dynamic=raw.is_dynamic,
        )

    def build_edges(
        self,
        imports: Mapping[str, Sequence[RawImport]],
        order: Sequence[str] | None = None,
    ) -> list[ImportEdge]:
        """Resolve every raw import, walking importers in ``order``.

        Importers not in the indexed set are ignored.
        """
        edges: list[ImportEdge] = []
        raw_total = 0
        for from_file in order if order is not None else list(imports):
            if from_file not in self._indexed:
                continue
            for raw in imports.get(from_file, ()):
                raw_total += 1
                edge = self.resolve_import(raw, from_file)
                if edge is not None:
                    edges.append(edge)

        log.debug(
            "imports_resolved",
            raw=raw_total,
            edges=len(edges),
            dropped=raw_total - len(edges),
        )
        return edges


class ImportGraph:
    """Resolved edges plus the lookups every analyzer needs."""

    def __init__(self, edges: Sequence[ImportEdge]) -> None:
        self._edges = tuple(edges)
        self._fan_in: Counter[str] = Counter(e.target for e in self._edges)
        self._fan_out: Counter[str] = Counter(e.source for e in self._edges)
        importers: defaultdict[str, list[str]] = defaultdict(list)
        for e in self._edges:
            importers[e.target].append(e.source)
        self._importers = dict(importers)

    @classmethod
    def build(
        cls,
        files: Sequence[str],
        imports: Mapping[str, Sequence[RawImport]],
        context: AnalysisContext,
    ) -> ImportGraph:
        resolver = ImportResolver(files, context)
        return cls(resolver.build_edges(imports, order=files))

    @property
    def edges(self) -> tuple[ImportEdge, ...]:
        return self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def fan_in(self, path: str) -> int:
        return self._fan_in.get(path, 0)

    def fan_out(self, path: str) -> int:
        return self._fan_out.get(path, 0)

    def importers(self, path: str) -> list[str]:
        """Files importing ``path``, one entry per edge, in edge order."""
        return list(self._importers.get(path, ()))

    def is_imported(self, path: str) -> bool:
        return path in self._fan_in
