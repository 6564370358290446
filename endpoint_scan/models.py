"""
Data model shared by the scan pipeline stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

# Severities, most severe first
ERROR = "error"
WARNING = "warning"
INFO = "info"
SEVERITIES = (ERROR, WARNING, INFO)

# Construction kinds of a call argument
LITERAL = "literal"
TEMPLATE = "template"
CONCATENATION = "concatenation"


def severity_rank(severity: str) -> int:
    """Return the sort rank of a severity (0 is most severe)."""
    return SEVERITIES.index(severity)


@dataclass(frozen=True)
class FileEntry:
    """A source file's root-relative path and its raw text."""

    path: str
    text: str


@dataclass(frozen=True)
class CallSite:
    """One candidate API call discovered in a file."""

    path: str
    line: int
    column: int
    callee: str
    text: str
    kind: str
    url: str
    static_prefix: str
    all_literal: bool = True


@dataclass(frozen=True)
class Finding:
    """A rule violation attached to a call site."""

    site: CallSite
    rule_id: str
    message: str
    severity: str
    suggestion: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "line": self.site.line,
            "column": self.site.column,
            "severity": self.severity,
            "ruleId": self.rule_id,
            "message": self.message,
            "code": self.site.text,
            "url": self.site.url,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class Notice:
    """A recovered, non-fatal problem encountered while scanning."""

    path: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "message": self.message}


@dataclass
class FileReport:
    """Findings for one file, in call-site order."""

    path: str
    findings: list[Finding] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "findings": [f.to_dict() for f in self.findings],
        }


@dataclass
class Report:
    """Complete result of one scan."""

    files: list[FileReport] = field(default_factory=list)
    files_scanned: int = 0
    notices: list[Notice] = field(default_factory=list)

    @property
    def findings(self) -> list[Finding]:
        return [f for file_report in self.files for f in file_report.findings]

    def summary(self) -> dict[str, int]:
        """Count findings per severity."""
        counts = {ERROR: 0, WARNING: 0, INFO: 0}
        for finding in self.findings:
            counts[finding.severity] += 1
        return {
            "errors": counts[ERROR],
            "warnings": counts[WARNING],
            "info": counts[INFO],
        }

    @property
    def has_errors(self) -> bool:
        return any(f.severity == ERROR for f in self.findings)

    def top_offenders(self, limit: int = 10) -> list[tuple[str, int]]:
        """Files with the most findings, ties kept in discovery order."""
        counts = [(fr.path, len(fr.findings)) for fr in self.files]
        return sorted(counts, key=lambda item: -item[1])[:limit]

    def to_dict(self) -> dict[str, Any]:
        return {
            "files": [fr.to_dict() for fr in self.files],
            "summary": self.summary(),
            "filesScanned": self.files_scanned,
            "notices": [n.to_dict() for n in self.notices],
        }
