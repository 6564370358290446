"""
Main scanner orchestrator for endpoint_scan.

Coordinates the tree walker, call extractor and rules to produce a report.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, NamedTuple, Optional

from endpoint_scan.config import ScanConfig
from endpoint_scan.exceptions import InvalidRootError
from endpoint_scan.models import FileEntry, FileReport, Finding, Notice, Report
from endpoint_scan.rules import classify
from endpoint_scan.scanners import HttpCallsScanner
from endpoint_scan.utils import read_text, relative_posix
from endpoint_scan.walker import walk_files

logger = logging.getLogger(__name__)


class _FileResult(NamedTuple):
    """Outcome of scanning one file: findings, or a notice when unreadable."""

    path: str
    findings: list[Finding]
    notice: Optional[Notice]


class EndpointScanner:
    """Scan a source tree for suspicious API calls."""

    def __init__(self, root: Path, config: ScanConfig):
        """
        Initialize the endpoint scanner.

        Args:
            root: Root directory to scan.
            config: Scan configuration.

        Raises:
            InvalidRootError: If root is missing or not a directory.
        """
        root = Path(root)
        if not root.exists():
            raise InvalidRootError(f"Path '{root}' does not exist")
        if not root.is_dir():
            raise InvalidRootError(f"Path '{root}' is not a directory")

        self.root = root.resolve()
        self.config = config
        self.http_calls_scanner = HttpCallsScanner()

    def scan(self) -> Report:
        """
        Scan the whole tree.

        Returns:
            Report with files in discovery order and findings in call-site order.
        """
        report = Report()
        walk_notices: list[Notice] = []
        file_notices: list[Notice] = []
        paths = walk_files(
            self.root,
            exclude=self.config.exclude,
            extensions=self.config.extensions,
            notices=walk_notices,
        )

        for result in self._scan_files(paths):
            if result.notice is not None:
                file_notices.append(result.notice)
                continue
            report.files_scanned += 1
            if result.findings:
                report.files.append(FileReport(path=result.path, findings=result.findings))

        # Same order whether files were scanned sequentially or on a pool
        report.notices = walk_notices + file_notices

        logger.debug(
            "Scanned %d files under %s: %s",
            report.files_scanned, self.root, report.summary(),
        )
        return report

    def _scan_files(self, paths: Iterable[Path]) -> Iterable[_FileResult]:
        """Scan files sequentially, or on a thread pool with results kept in order."""
        if self.config.jobs <= 1:
            return (self.scan_file(path) for path in paths)

        with ThreadPoolExecutor(max_workers=self.config.jobs) as executor:
            return list(executor.map(self.scan_file, list(paths)))

    def scan_file(self, filepath: Path) -> _FileResult:
        """
        Read, extract and classify a single file.

        Args:
            filepath: Absolute path of a file under the root.

        Returns:
            Findings for the file, or a notice if it couldn't be read.
        """
        rel_path = relative_posix(filepath, self.root)
        try:
            text = read_text(filepath)
        except OSError as e:
            logger.debug("Could not scan %s: %s", filepath, e)
            reason = e.strerror or str(e)
            return _FileResult(rel_path, [], Notice(path=rel_path, message=f"Could not read file: {reason}"))

        return _FileResult(rel_path, self.scan_text(FileEntry(path=rel_path, text=text)), None)

    def scan_text(self, entry: FileEntry) -> list[Finding]:
        """Extract call sites from a file entry and classify each one."""
        findings: list[Finding] = []
        for site in self.http_calls_scanner.extract(entry):
            findings.extend(classify(site, self.config))
        return findings
