"""
Report rendering for endpoint_scan.

Renders a Report as a console listing, a JSON document or a Markdown file,
and maps it to the process exit status.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from endpoint_scan.models import Report
from endpoint_scan.utils import truncate_string

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_STARTUP_FAILURE = 2


def exit_code(report: Report) -> int:
    """0 when no error-severity finding exists, 1 otherwise."""
    return EXIT_FINDINGS if report.has_errors else EXIT_OK


def format_summary(report: Report) -> str:
    """Format the trailing 'Errors: N, Warnings: N, Info: N' line."""
    summary = report.summary()
    return f"Errors: {summary['errors']}, Warnings: {summary['warnings']}, Info: {summary['info']}"


def render_console(report: Report) -> str:
    """
    Render a human-readable report.

    One header per file, then ``<line>:<severity>:<rule-id> <message>`` per
    finding, followed by notices, top offenders and the summary line.
    """
    lines: list[str] = []

    if not report.files:
        lines.append("No API issues found.")

    for file_report in report.files:
        lines.append(file_report.path)
        for finding in file_report.findings:
            lines.append(
                f"  {finding.site.line}:{finding.severity}:{finding.rule_id} {finding.message}"
            )
            if finding.suggestion:
                lines.append(f"      fix: {finding.suggestion}")
        lines.append("")

    if report.notices:
        lines.append("Notices:")
        for notice in report.notices:
            lines.append(f"  {notice.path}: {notice.message}")
        lines.append("")

    offenders = report.top_offenders()
    if len(offenders) > 1:
        lines.append("Top offenders:")
        for i, (path, count) in enumerate(offenders, 1):
            lines.append(f"  {i}. {path} ({count} issues)")
        lines.append("")

    lines.append(f"Files scanned: {report.files_scanned}")
    lines.append(format_summary(report))
    return "\n".join(lines)


def render_json(report: Report) -> str:
    """Render the report as a JSON document."""
    return json.dumps(report.to_dict(), indent=2)


def render_markdown(report: Report, generated_at: datetime | None = None) -> str:
    """Render the report as a Markdown document."""
    generated_at = generated_at or datetime.now(timezone.utc)
    summary = report.summary()

    md = "# API Endpoint Scan Report\n"
    md += f"Generated: {generated_at.isoformat()}\n\n"
    md += "## Summary\n"
    md += f"- Files Scanned: {report.files_scanned}\n"
    md += f"- Total Findings: {len(report.findings)}\n"
    md += f"- Errors: {summary['errors']}\n"
    md += f"- Warnings: {summary['warnings']}\n"
    md += f"- Info: {summary['info']}\n\n"

    offenders = report.top_offenders(limit=20)
    if offenders:
        md += "## Top Offenders\n\n"
        for path, count in offenders:
            md += f"- `{path}`: {count} issues\n"
        md += "\n"

    if report.notices:
        md += "## Notices\n\n"
        for notice in report.notices:
            md += f"- `{notice.path}`: {notice.message}\n"
        md += "\n"

    md += "## Detailed Findings\n\n"
    for file_report in report.files:
        for finding in file_report.findings:
            md += f"### {file_report.path}:{finding.site.line}\n"
            md += f"- **Rule**: {finding.rule_id}\n"
            md += f"- **Severity**: {finding.severity}\n"
            md += f"- **Message**: {finding.message}\n"
            md += f"- **URL**: `{finding.site.url}`\n"
            md += f"- **Code**: `{truncate_string(finding.site.text, 80)}`\n"
            if finding.suggestion:
                md += f"- **Suggestion**: `{finding.suggestion}`\n"
            md += "\n"

    return md
