"""
Source tree walker for endpoint_scan.

Yields candidate source files under a root directory, pruning excluded
directories before descending into them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator

from endpoint_scan.models import Notice
from endpoint_scan.utils import is_excluded_name, relative_posix

logger = logging.getLogger(__name__)


def walk_files(
    root: Path,
    exclude: Iterable[str],
    extensions: Iterable[str],
    notices: list[Notice] | None = None,
) -> Iterator[Path]:
    """
    Walk a project tree depth-first yielding source files.

    Symbolic links are never followed. Directories that can't be listed
    are skipped and recorded in ``notices``.

    Args:
        root: Root directory to walk.
        exclude: Directory basenames (or glob patterns) to skip at any depth.
        extensions: Lowercase file extensions to include, with leading dot.
        notices: Optional list collecting non-fatal walk errors.

    Yields:
        Path objects for matching source files, in sorted order.
    """
    exclude = frozenset(exclude)
    extensions = frozenset(extensions)

    def on_error(error: OSError) -> None:
        path = Path(error.filename) if error.filename else root
        message = f"Could not list directory: {error.strerror or error}"
        logger.debug("Skipping %s: %s", path, error)
        if notices is not None:
            notices.append(Notice(path=relative_posix(path, root), message=message))

    for dirpath, dirs, files in os.walk(root, onerror=on_error, followlinks=False):
        current = Path(dirpath)
        dirs[:] = sorted(
            d for d in dirs
            if not is_excluded_name(d, exclude) and not (current / d).is_symlink()
        )
        for fname in sorted(files):
            filepath = current / fname
            if filepath.suffix.lower() not in extensions:
                continue
            if filepath.is_symlink():
                logger.debug("Skipping symlink %s", filepath)
                continue
            yield filepath
