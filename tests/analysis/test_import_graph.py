"""Tests for analysis/import_graph.py module.

Covers:
- ImportResolver.resolve() candidate order and alias handling
- External and unresolvable specifiers
- ImportResolver.build_edges()
- ImportGraph fan-in/fan-out counters
"""

from __future__ import annotations

from collections.abc import Callable

import pytest

from codeinspect.analysis.context import AnalysisContext
from codeinspect.analysis.import_graph import ImportGraph, ImportResolver
from codeinspect.analysis.models import ImportEdge, RawImport


@pytest.fixture
def resolver(make_context: Callable[..., AnalysisContext]) -> ImportResolver:
    indexed = [
        "src/app.ts",
        "src/utils/format.ts",
        "src/utils/index.ts",
        "src/components/Button.vue",
        "src/components/Card/index.tsx",
        "src/legacy/old",
        "src/styles/theme.css",
        "lib/shared.js",
    ]
    context = make_context(aliases={"@/": "src/", "~lib": "./lib"})
    return ImportResolver(indexed, context)


class TestResolveExternal:
    """Specifiers that never produce an edge."""

    @pytest.mark.parametrize("specifier", ["react", "lodash/debounce", "@vue/reactivity", "vue"])
    def test_bare_package_is_external(self, resolver: ImportResolver, specifier: str) -> None:
        """Neither relative nor aliased means external."""
        assert resolver.resolve(specifier, "src/app.ts") is None

    def test_unmatched_relative_dropped(self, resolver: ImportResolver) -> None:
        """Relative import with no indexed candidate resolves to nothing."""
        assert resolver.resolve("./missing", "src/app.ts") is None

    def test_escaping_root_dropped(self, resolver: ImportResolver) -> None:
        """Paths climbing above the repository root produce no edge."""
        assert resolver.resolve("../../outside", "src/app.ts") is None

    def test_alias_prefix_must_end_at_segment(self, resolver: ImportResolver) -> None:
        """'~library' does not match the '~lib' alias."""
        assert resolver.resolve("~library/shared", "src/app.ts") is None


class TestResolveCandidateOrder:
    """Candidate order: exact, +ext, /index+ext, stripped extension."""

    def test_exact_match(self, resolver: ImportResolver) -> None:
        assert resolver.resolve("./components/Button.vue", "src/app.ts") == "src/components/Button.vue"

    def test_extension_appended(self, resolver: ImportResolver) -> None:
        assert resolver.resolve("./utils/format", "src/app.ts") == "src/utils/format.ts"

    def test_index_file(self, resolver: ImportResolver) -> None:
        assert resolver.resolve("./components/Card", "src/app.ts") == "src/components/Card/index.tsx"

    def test_extension_before_index(self, resolver: ImportResolver) -> None:
        """'./utils' has no 'src/utils.ts', so the index file wins."""
        assert resolver.resolve("./utils", "src/app.ts") == "src/utils/index.ts"

    def test_stripped_extension(self, resolver: ImportResolver) -> None:
        """'old.js' falls back to the extension-less indexed path."""
        assert resolver.resolve("./legacy/old.js", "src/app.ts") == "src/legacy/old"

    def test_parent_relative(self, resolver: ImportResolver) -> None:
        assert resolver.resolve("../app", "src/utils/format.ts") == "src/app.ts"

    def test_root_absolute(self, resolver: ImportResolver) -> None:
        """A leading '/' is rooted at the repository root."""
        assert resolver.resolve("/lib/shared", "src/app.ts") == "lib/shared.js"


class TestResolveAliases:
    """Alias substitution."""

    def test_alias_substituted(self, resolver: ImportResolver) -> None:
        assert resolver.resolve("@/utils/format", "src/components/Button.vue") == "src/utils/format.ts"

    def test_alias_directory_with_dot_prefix(self, resolver: ImportResolver) -> None:
        assert resolver.resolve("~lib/shared", "src/app.ts") == "lib/shared.js"

    def test_first_alias_in_table_order_wins(self, make_context: Callable[..., AnalysisContext]) -> None:
        """Two aliases matching the same specifier: the earlier entry wins."""
        context = make_context(aliases={"@": "src", "@/x": "other"})
        resolver = ImportResolver(["src/x/a.ts", "other/a.ts"], context)
        assert resolver.resolve("@/x/a", "main.ts") == "src/x/a.ts"

    def test_resolution_is_deterministic(self, resolver: ImportResolver) -> None:
        """Same (specifier, from_file) always gives the same outcome."""
        first = resolver.resolve("@/utils", "src/app.ts")
        second = resolver.resolve("@/utils", "src/app.ts")
        assert first == second == "src/utils/index.ts"


class TestResolveImport:
    """RawImport → ImportEdge."""

    def test_carries_specifiers_and_flags(self, resolver: ImportResolver) -> None:
        raw = RawImport(target="./utils/format", specifiers=("formatDate",), is_default=True)
        edge = resolver.resolve_import(raw, "src/app.ts")
        assert edge == ImportEdge(
            source="src/app.ts",
            target="src/utils/format.ts",
            specifiers=("formatDate",),
            is_default=True,
            is_dynamic=False,
        )

    def test_external_returns_none(self, resolver: ImportResolver) -> None:
        assert resolver.resolve_import(RawImport(target="react"), "src/app.ts") is None


class TestBuildEdges:
    """Whole-inventory resolution."""

    def test_duplicate_imports_kept(self, context: AnalysisContext) -> None:
        """Two imports of the same module are two edges."""
        resolver = ImportResolver(["a.ts", "b.ts"], context)
        edges = resolver.build_edges({"a.ts": [RawImport("./b"), RawImport("./b")]})
        assert [(e.source, e.target) for e in edges] == [("a.ts", "b.ts"), ("a.ts", "b.ts")]

    def test_unindexed_importer_ignored(self, context: AnalysisContext) -> None:
        resolver = ImportResolver(["b.ts"], context)
        assert resolver.build_edges({"ghost.ts": [RawImport("./b")]}) == []

    def test_order_follows_given_file_order(self, context: AnalysisContext) -> None:
        resolver = ImportResolver(["a.ts", "b.ts", "c.ts"], context)
        imports = {"b.ts": [RawImport("./c")], "a.ts": [RawImport("./c")]}
        edges = resolver.build_edges(imports, order=["a.ts", "b.ts", "c.ts"])
        assert [e.source for e in edges] == ["a.ts", "b.ts"]


class TestImportGraph:
    """Fan-in/fan-out counting."""

    def test_counts_edges_not_files(self, context: AnalysisContext) -> None:
        graph = ImportGraph.build(
            ["a.ts", "b.ts", "c.ts"],
            {"a.ts": [RawImport("./c"), RawImport("./c")], "b.ts": [RawImport("./c")]},
            context,
        )
        assert len(graph) == 3
        assert graph.fan_in("c.ts") == 3
        assert graph.fan_out("a.ts") == 2
        assert graph.fan_in("a.ts") == 0
        assert graph.importers("c.ts") == ["a.ts", "a.ts", "b.ts"]

    def test_is_imported(self, context: AnalysisContext) -> None:
        graph = ImportGraph.build(["a.ts", "b.ts"], {"a.ts": [RawImport("./b")]}, context)
        assert graph.is_imported("b.ts")
        assert not graph.is_imported("a.ts")
