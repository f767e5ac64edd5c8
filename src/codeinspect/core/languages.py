"""Canonical language definitions.

This module defines the authoritative mapping of:
- File extensions → language tags
- Which languages are assets (stylesheets, data) rather than code
- Test file patterns and test directory names
- Sibling test naming (``Widget.ts`` → ``Widget.spec.ts`` / ``Widget.test.ts``)

Design decisions:
1. Extensions are matched case-insensitively
2. Asset languages stay in the inventory and the import graph but are skipped
   by impact scoring, duplication and dead-code detection
3. Test detection combines filename globs (per language) with well-known
   test directory names anywhere in the path
"""

from __future__ import annotations

from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import PurePosixPath


@dataclass(frozen=True, slots=True)
class Language:
    """Canonical definition for a language tag.

    Attributes:
        name: Unique identifier (lowercase, e.g., "typescript")
        extensions: File extensions including dot (e.g., ".ts")
        test_patterns: fnmatch globs matched against the file name
        asset: True for non-code formats (css, json)
    """

    name: str
    extensions: frozenset[str]
    test_patterns: tuple[str, ...] = ()
    asset: bool = False


OTHER_LANGUAGE = "other"

ALL_LANGUAGES: tuple[Language, ...] = (
    Language(
        name="typescript",
        extensions=frozenset({".ts", ".tsx", ".mts", ".cts"}),
        test_patterns=("*.test.*", "*.spec.*"),
    ),
    Language(
        name="javascript",
        extensions=frozenset({".js", ".jsx", ".mjs", ".cjs"}),
        test_patterns=("*.test.*", "*.spec.*"),
    ),
    Language(
        name="vue",
        extensions=frozenset({".vue", ".svelte"}),
        test_patterns=("*.test.*", "*.spec.*"),
    ),
    Language(
        name="python",
        extensions=frozenset({".py", ".pyi"}),
        test_patterns=("test_*.py", "*_test.py"),
    ),
    Language(
        name="css",
        extensions=frozenset({".css", ".scss", ".sass", ".less"}),
        asset=True,
    ),
    Language(
        name="json",
        extensions=frozenset({".json"}),
        asset=True,
    ),
)

LANGUAGES_BY_NAME: dict[str, Language] = {lang.name: lang for lang in ALL_LANGUAGES}

_EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ext: lang.name for lang in ALL_LANGUAGES for ext in lang.extensions
}

# Directory names whose contents are always treated as tests
TEST_DIRECTORIES: frozenset[str] = frozenset(
    {"test", "tests", "__tests__", "__test__", "cypress", "e2e"}
)

# Infixes inserted before the extension to name a sibling test file
TEST_INFIXES: tuple[str, ...] = (".spec", ".test")


def extension_of(path: str) -> str:
    """Return the lowercase extension of ``path`` including the dot, or ``""``."""
    return PurePosixPath(path).suffix.lower()


def detect_language(path: str) -> str:
    """Map a file path to its language tag, ``"other"`` when unknown."""
    return _EXTENSION_TO_LANGUAGE.get(extension_of(path), OTHER_LANGUAGE)


def is_asset_language(language: str) -> bool:
    """True for stylesheet/data languages that carry no executable code."""
    lang = LANGUAGES_BY_NAME.get(language)
    return lang is not None and lang.asset


def is_test_file(path: str) -> bool:
    """Check if a file path looks like a test.

    A path is a test when its file name matches a known test glob
    (``*.spec.*``, ``*.test.*``, ``test_*.py``...), contains ``__test``,
    or when any directory segment is a well-known test directory.

    Examples:
        >>> is_test_file("src/cart/Cart.spec.ts")
        True
        >>> is_test_file("packages/web/__tests__/util.ts")
        True
        >>> is_test_file("src/cart/Cart.ts")
        False
    """
    p = PurePosixPath(path)
    name = p.name

    if "__test" in name:
        return True
    if any(part in TEST_DIRECTORIES for part in p.parts[:-1]):
        return True

    for lang in ALL_LANGUAGES:
        for pattern in lang.test_patterns:
            if fnmatch(name, pattern):
                return True
    return False


def sibling_test_paths(path: str) -> tuple[str, ...]:
    """Candidate sibling test paths for a source file.

    Examples:
        >>> sibling_test_paths("a/Widget.ts")
        ('a/Widget.spec.ts', 'a/Widget.test.ts')
        >>> sibling_test_paths("Makefile")
        ()
    """
    p = PurePosixPath(path)
    if not p.suffix:
        return ()
    stem_path = str(p.with_suffix(""))
    return tuple(f"{stem_path}{infix}{p.suffix}" for infix in TEST_INFIXES)


def has_sibling_test(path: str, indexed: set[str] | frozenset[str]) -> bool:
    """True when any sibling test path of ``path`` is in ``indexed``."""
    return any(candidate in indexed for candidate in sibling_test_paths(path))


def strip_extension(path: str) -> str:
    """Remove the last extension from ``path`` (``a/b.ts`` → ``a/b``)."""
    p = PurePosixPath(path)
    if not p.suffix:
        return path
    return str(p.with_suffix(""))
