"""Tests for core/languages.py module.

Covers:
- detect_language() / extension_of()
- is_asset_language()
- is_test_file()
- sibling_test_paths() / has_sibling_test()
- strip_extension()
"""

from __future__ import annotations

import pytest

from codeinspect.core.languages import (
    ALL_LANGUAGES,
    OTHER_LANGUAGE,
    detect_language,
    extension_of,
    has_sibling_test,
    is_asset_language,
    is_test_file,
    sibling_test_paths,
    strip_extension,
)


class TestLanguageTable:
    """Invariants of the canonical language table."""

    def test_extensions_unique(self) -> None:
        """No extension maps to two languages."""
        seen: set[str] = set()
        for lang in ALL_LANGUAGES:
            assert not (lang.extensions & seen), lang.name
            seen |= lang.extensions

    def test_extensions_lowercase_with_dot(self) -> None:
        for lang in ALL_LANGUAGES:
            for ext in lang.extensions:
                assert ext.startswith(".")
                assert ext == ext.lower()


class TestDetectLanguage:
    """Tests for detect_language function."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("src/app.ts", "typescript"),
            ("src/App.TSX", "typescript"),
            ("src/legacy.js", "javascript"),
            ("src/entry.mjs", "javascript"),
            ("src/Cart.vue", "vue"),
            ("src/Cart.svelte", "vue"),
            ("tools/gen.py", "python"),
            ("src/theme.scss", "css"),
            ("package.json", "json"),
            ("README.md", OTHER_LANGUAGE),
            ("Makefile", OTHER_LANGUAGE),
        ],
    )
    def test_detect(self, path: str, expected: str) -> None:
        assert detect_language(path) == expected

    def test_extension_of(self) -> None:
        assert extension_of("a/b/Widget.Spec.TS") == ".ts"
        assert extension_of("Makefile") == ""


class TestIsAssetLanguage:
    """Tests for is_asset_language function."""

    @pytest.mark.parametrize(("language", "expected"), [("css", True), ("json", True), ("typescript", False), ("other", False)])
    def test_assets(self, language: str, expected: bool) -> None:
        assert is_asset_language(language) is expected


class TestIsTestFile:
    """Tests for is_test_file function."""

    @pytest.mark.parametrize(
        "path",
        [
            "src/cart/Cart.spec.ts",
            "src/cart/Cart.test.tsx",
            "packages/web/__tests__/util.ts",
            "tests/unit/helpers.ts",
            "cypress/e2e/login.cy.ts",
            "tools/test_gen.py",
            "tools/gen_test.py",
            "src/__testUtils__.ts",
        ],
    )
    def test_detected(self, path: str) -> None:
        assert is_test_file(path)

    @pytest.mark.parametrize("path", ["src/cart/Cart.ts", "src/testing.ts", "src/attest/x.ts", "tests.ts"])
    def test_not_detected(self, path: str) -> None:
        assert not is_test_file(path)


class TestSiblingTests:
    """Tests for sibling_test_paths and has_sibling_test."""

    def test_candidates(self) -> None:
        assert sibling_test_paths("a/Widget.ts") == ("a/Widget.spec.ts", "a/Widget.test.ts")

    def test_no_extension(self) -> None:
        assert sibling_test_paths("Makefile") == ()

    def test_has_sibling_test(self) -> None:
        indexed = frozenset({"a/Widget.ts", "a/Widget.test.ts"})
        assert has_sibling_test("a/Widget.ts", indexed)
        assert not has_sibling_test("a/Other.ts", indexed)

    def test_sibling_must_share_extension(self) -> None:
        assert not has_sibling_test("a/Widget.vue", {"a/Widget.spec.ts"})


class TestStripExtension:
    """Tests for strip_extension function."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("a/b.ts", "a/b"), ("a/b.spec.ts", "a/b.spec"), ("a/b", "a/b")],
    )
    def test_strip(self, path: str, expected: str) -> None:
        assert strip_extension(path) == expected
