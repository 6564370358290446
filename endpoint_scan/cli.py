"""
CLI interface for endpoint_scan.

Provides the command-line interface for scanning a source tree.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from endpoint_scan import __version__
from endpoint_scan.config import (
    DEFAULT_CONFIG,
    ScanConfig,
    get_config_template,
    load_config,
)
from endpoint_scan.exceptions import EndpointScanError
from endpoint_scan.models import Report
from endpoint_scan.reporter import (
    EXIT_OK,
    EXIT_STARTUP_FAILURE,
    exit_code,
    render_console,
    render_json,
    render_markdown,
)
from endpoint_scan.scanner import EndpointScanner

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="scan-endpoints",
        description="Find suspicious API calls in frontend source code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
QUICK START
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  scan-endpoints                       # Scan current directory
  scan-endpoints ./apps/web --json     # Machine-readable output
  scan-endpoints . -o report.json      # Also save the JSON report

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
RULES
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  double-prefix             error    URL contains /api/api/
  hardcoded-loopback        warning  URL hardcodes localhost:PORT or 127.0.0.1:PORT
  missing-api-prefix        warning  Absolute path without the API prefix
  route-as-endpoint         info     Page route called as an API endpoint
  suspicious-concatenation  info     URL concatenated from runtime values
  relative-path             info     ./ or ../ path passed to an HTTP call

━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
EXIT STATUS
━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
  0  no error-severity findings
  1  at least one error-severity finding
  2  scan could not start (bad root path or config)
""",
    )

    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Root directory to scan (default: current directory)",
    )

    output_group = parser.add_argument_group("Output")
    output_group.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON (nothing else is written to stdout)",
    )
    output_group.add_argument(
        "-o", "--output",
        metavar="FILE",
        help="Also write the JSON report to FILE",
    )
    output_group.add_argument(
        "--markdown",
        metavar="FILE",
        help="Also write a Markdown report to FILE",
    )

    config_group = parser.add_argument_group("Configuration")
    config_group.add_argument(
        "--config",
        metavar="FILE",
        help="YAML config file (see --init-config)",
    )
    config_group.add_argument(
        "--init-config",
        action="store_true",
        help="Print a starter YAML config and exit",
    )
    config_group.add_argument(
        "--prefix",
        metavar="PREFIX",
        help="Required API prefix (default: /api/)",
    )
    config_group.add_argument(
        "--exclude-dirs",
        nargs="+",
        metavar="DIR",
        help="Additional directory names to skip",
    )
    config_group.add_argument(
        "--ext",
        nargs="+",
        metavar="EXT",
        help="File extensions to scan (replaces the defaults)",
    )
    config_group.add_argument(
        "-j", "--jobs",
        type=int,
        default=1,
        metavar="N",
        help="Scan files on N worker threads (default: 1)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"endpoint_scan {__version__}",
    )

    return parser


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def build_config(args: argparse.Namespace) -> ScanConfig:
    """
    Build the run configuration from the config file and CLI flags.

    Raises:
        ConfigError: If the config file can't be loaded.
    """
    config = DEFAULT_CONFIG
    if args.config:
        config = load_config(Path(args.config))
        logger.debug("Loaded config: %s", args.config)

    return ScanConfig.from_dict(
        config,
        extra_exclude=args.exclude_dirs,
        extensions=args.ext,
        required_prefix=args.prefix,
        jobs=args.jobs,
    )


def scan_endpoints(args: argparse.Namespace) -> Report:
    """Scan the tree named on the command line and return the report."""
    config = build_config(args)
    root = Path(args.path)
    logger.debug("Scanning: %s", root.resolve())
    if args.exclude_dirs:
        logger.debug("CLI excluded directories: %s", args.exclude_dirs)
    return EndpointScanner(root, config).scan()


def write_reports(args: argparse.Namespace, report: Report) -> None:
    """Write the optional report files."""
    if args.output:
        Path(args.output).write_text(render_json(report) + "\n", encoding="utf-8")
        logger.debug("JSON report written to %s", args.output)
    if args.markdown:
        Path(args.markdown).write_text(render_markdown(report), encoding="utf-8")
        logger.debug("Markdown report written to %s", args.markdown)


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    # Handle --init-config: just output the template and exit
    if args.init_config:
        print(get_config_template())
        sys.exit(EXIT_OK)

    try:
        report = scan_endpoints(args)
    except EndpointScanError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(EXIT_STARTUP_FAILURE)

    if args.json:
        print(render_json(report))
    else:
        print(render_console(report))

    try:
        write_reports(args, report)
    except OSError as e:
        logger.error("Could not write report: %s", e)

    sys.exit(exit_code(report))
