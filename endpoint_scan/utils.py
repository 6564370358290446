"""
Utility functions for endpoint_scan.
"""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Iterable

GLOB_CHARS = frozenset("*?[")


def is_excluded_name(name: str, exclude: Iterable[str]) -> bool:
    """
    Check if a directory basename matches an exclusion entry.

    Args:
        name: Directory basename.
        exclude: Exclusion entries. Entries containing glob characters
            (e.g. "*.egg-info") are matched with fnmatch, others must
            equal the basename exactly.

    Returns:
        True if the directory should be skipped.
    """
    for pattern in exclude:
        if GLOB_CHARS.intersection(pattern):
            if fnmatch.fnmatchcase(name, pattern):
                return True
        elif name == pattern:
            return True
    return False


def read_text(filepath: Path) -> str:
    """
    Read a whole source file as UTF-8.

    Invalid UTF-8 bytes are replaced with U+FFFD.

    Raises:
        OSError: If the file can't be opened or read.
    """
    with open(filepath, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def line_and_column(text: str, offset: int) -> tuple[int, int]:
    """
    Convert a character offset into a 1-based (line, column) pair.

    Args:
        text: Full file text.
        offset: Character offset into text.

    Returns:
        Line number and column, both starting at 1.
    """
    line = text.count("\n", 0, offset) + 1
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def relative_posix(filepath: Path, root: Path) -> str:
    """Return filepath relative to root with forward slashes."""
    try:
        return filepath.relative_to(root).as_posix()
    except ValueError:
        return filepath.as_posix()


def truncate_string(text: str | None, max_length: int = 100) -> str | None:
    """
    Truncate a string to a maximum length.

    Args:
        text: String to truncate.
        max_length: Maximum length.

    Returns:
        Truncated string with "..." suffix if needed, or None if input is None.
    """
    if not text:
        return None
    first_line = text.split('\n')[0].strip()
    if len(first_line) > max_length:
        return first_line[:max_length] + "..."
    return first_line
