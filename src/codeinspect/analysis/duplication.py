"""Near-duplicate detection by sliding-window chunk hashing.

For every eligible file, windows of 6, 10, ... 30 lines slide over the
content with a stride of 3.  Each window is normalized (lines trimmed;
blanks, comments and imports dropped) and, if at least 100 characters
remain, hashed.  A hash seen in two or more files is a duplicate.

The scan is sampled, not exhaustive: a duplicate whose start line is not
a multiple of the stride away from the file start can be missed.

Per-file scanning is pure and runs on a thread pool.  Occurrences are
merged into the hash index in inventory order so results do not depend
on scheduling.
"""

from __future__ import annotations

import hashlib
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import structlog

from codeinspect.analysis.constants import (
    CHUNK_SIZE_STEP,
    HASH_PREFIX_LEN,
    MAX_CHUNK_LINES,
    MAX_DUPLICATES,
    MIN_CHUNK_CHARS,
    MIN_CHUNK_LINES,
    SNIPPET_LINES,
    WINDOW_STRIDE,
)
from codeinspect.analysis.content import ContentSource
from codeinspect.analysis.models import DuplicateMatch, FileRecord, Inventory
from codeinspect.core.formatting import format_percentage

log = structlog.get_logger(__name__)

_COMMENT_PREFIXES = ("//", "/*", "*", "#")
_IMPORT_LINE = re.compile(r"^(import\b|from\s+\S+\s+import\b)")


@dataclass(frozen=True, slots=True)
class ChunkOccurrence:
    """A hashed window.  ``start`` is 0-based."""

    hash: str
    file: str
    start: int
    chunk_size: int
    snippet: str


def _keep_line(line: str) -> bool:
    return bool(line) and not line.startswith(_COMMENT_PREFIXES) and not _IMPORT_LINE.match(line)


def normalize_chunk(lines: list[str]) -> str:
    """Trim, drop blank/comment/import lines, join with newlines."""
    return "\n".join(stripped for stripped in (line.strip() for line in lines) if _keep_line(stripped))


def chunk_hash(normalized: str) -> str:
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:HASH_PREFIX_LEN]


def scan_file(path: str, content: str) -> list[ChunkOccurrence]:
    """All recorded chunk occurrences of one file, in scan order.

    A window is not recorded when the same hash was already recorded in
    this file less than one chunk size earlier (window self-overlap).
    """
    lines = content.split("\n")
    recorded: dict[str, list[int]] = {}
    occurrences: list[ChunkOccurrence] = []

    for chunk_size in range(MIN_CHUNK_LINES, min(MAX_CHUNK_LINES, len(lines)) + 1, CHUNK_SIZE_STEP):
        for start in range(0, len(lines) - chunk_size + 1, WINDOW_STRIDE):
            window = lines[start : start + chunk_size]
            normalized = normalize_chunk(window)
            if len(normalized) < MIN_CHUNK_CHARS:
                continue

            digest = chunk_hash(normalized)
            starts = recorded.setdefault(digest, [])
            if any(abs(prev - start) < chunk_size for prev in starts):
                continue
            starts.append(start)
            occurrences.append(
                ChunkOccurrence(
                    hash=digest,
                    file=path,
                    start=start,
                    chunk_size=chunk_size,
                    snippet="\n".join(window[: min(SNIPPET_LINES, chunk_size)]),
                )
            )
    return occurrences


def _eligible(file: FileRecord) -> bool:
    return not (file.is_test or file.is_asset or file.line_count < MIN_CHUNK_LINES)


def _scan(file: FileRecord, content: ContentSource) -> list[ChunkOccurrence]:
    text = content.read(file.path)
    if not text:
        return []
    return scan_file(file.path, text)


def match_occurrences(
    index: dict[str, list[ChunkOccurrence]],
    max_matches: int = MAX_DUPLICATES,
) -> list[DuplicateMatch]:
    """Turn a hash index into one match per unordered file pair."""
    matches: list[DuplicateMatch] = []
    seen_pairs: set[tuple[str, str]] = set()

    for digest, occurrences in index.items():
        # First occurrence per file is representative
        by_file: dict[str, ChunkOccurrence] = {}
        for occ in occurrences:
            by_file.setdefault(occ.file, occ)
        if len(by_file) < 2:
            continue

        representatives = list(by_file.values())
        for i, first in enumerate(representatives):
            for second in representatives[i + 1 :]:
                if len(matches) >= max_matches:
                    return matches
                a, b = (first, second) if first.file < second.file else (second, first)
                if (a.file, b.file) in seen_pairs:
                    continue
                seen_pairs.add((a.file, b.file))
                matches.append(
                    DuplicateMatch(
                        file_a=a.file,
                        line_a=a.start + 1,
                        file_b=b.file,
                        line_b=b.start + 1,
                        chunk_size=first.chunk_size,
                        hash=digest,
                        snippet=first.snippet,
                    )
                )
    return matches


def detect_duplicates(inventory: Inventory, *, max_workers: int = 1) -> list[DuplicateMatch]:
    """Cross-file duplicate chunks, at most ``MAX_DUPLICATES`` pairs."""
    eligible = [f for f in inventory.files if _eligible(f)]

    if max_workers > 1 and len(eligible) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            per_file = list(executor.map(lambda f: _scan(f, inventory.content), eligible))
    else:
        per_file = [_scan(f, inventory.content) for f in eligible]

    index: dict[str, list[ChunkOccurrence]] = {}
    for occurrences in per_file:
        for occ in occurrences:
            index.setdefault(occ.hash, []).append(occ)

    matches = match_occurrences(index)

    files_with_dups = {m.file_a for m in matches} | {m.file_b for m in matches}
    log.info(
        "duplicates_detected",
        pairs=len(matches),
        files=len(files_with_dups),
        percentage=format_percentage(len(files_with_dups), len(inventory.files)),
        scanned=len(eligible),
        files_with_chunks=sum(1 for occ in per_file if occ),
    )
    return matches
