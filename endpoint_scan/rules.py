"""
Rules that classify extracted call sites.

Each rule is a pure function of (CallSite, ScanConfig) returning a Finding or
None. Rules are evaluated independently, so one call site can produce several
findings.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Optional

from endpoint_scan.config import ScanConfig
from endpoint_scan.models import CONCATENATION, ERROR, INFO, WARNING, CallSite, Finding

logger = logging.getLogger(__name__)

Rule = Callable[[CallSite, ScanConfig], Optional[Finding]]

DOUBLE_PREFIX = "/api/api/"
LOOPBACK_PATTERN = re.compile(r'(?:[a-z][a-z0-9+.-]*://)?(?:localhost|127\.0\.0\.1):\d+(?=/)', re.IGNORECASE)
SEGMENT_END_PATTERN = re.compile(r'[/?#]')


def _is_whitelisted(path: str, config: ScanConfig) -> bool:
    return any(path.startswith(allowed) for allowed in config.path_whitelist)


def _has_required_prefix(path: str, config: ScanConfig) -> bool:
    prefix = config.required_prefix
    return path.startswith(prefix) or path == prefix.rstrip("/")


def _first_segment(path: str) -> str:
    """Return the first segment of an absolute path ("/orders/1?x" -> "orders")."""
    return SEGMENT_END_PATTERN.split(path[1:], maxsplit=1)[0]


def _with_required_prefix(path: str, config: ScanConfig) -> str:
    return config.required_prefix.rstrip("/") + path


def check_double_prefix(site: CallSite, config: ScanConfig) -> Finding | None:
    """URL contains /api/api/, which the backend never serves."""
    if DOUBLE_PREFIX not in site.url:
        return None
    return Finding(
        site=site,
        rule_id="double-prefix",
        message="Path contains /api/api/ which will cause 404",
        severity=ERROR,
        suggestion=site.url.replace(DOUBLE_PREFIX, "/api/"),
    )


def check_hardcoded_loopback(site: CallSite, config: ScanConfig) -> Finding | None:
    """URL points at localhost or 127.0.0.1 with an explicit port."""
    match = LOOPBACK_PATTERN.search(site.url)
    if match is None:
        return None
    return Finding(
        site=site,
        rule_id="hardcoded-loopback",
        message=f"URL hardcodes {match.group(0)} which will break in production",
        severity=WARNING,
        suggestion=LOOPBACK_PATTERN.sub("", site.url, count=1),
    )


def check_missing_api_prefix(site: CallSite, config: ScanConfig) -> Finding | None:
    """Absolute path that does not start with the required API prefix."""
    path = site.static_prefix
    if not path.startswith("/") or path.startswith("//"):
        return None
    if _has_required_prefix(path, config) or _is_whitelisted(path, config):
        return None
    return Finding(
        site=site,
        rule_id="missing-api-prefix",
        message=f"Path should likely start with {config.required_prefix}",
        severity=WARNING,
        suggestion=_with_required_prefix(site.url, config),
    )


def check_route_as_endpoint(site: CallSite, config: ScanConfig) -> Finding | None:
    """Path names a UI page route instead of an API resource."""
    path = site.static_prefix
    if not path.startswith("/") or path.startswith("//"):
        return None
    if _has_required_prefix(path, config) or _is_whitelisted(path, config):
        return None

    segment = _first_segment(path)
    page_segments = {route.strip("/") for route in config.page_routes}
    if not segment or segment not in page_segments:
        return None
    return Finding(
        site=site,
        rule_id="route-as-endpoint",
        message=f"/{segment} is a page route, not an API endpoint",
        severity=INFO,
        suggestion=_with_required_prefix(site.url, config),
    )


def check_suspicious_concatenation(site: CallSite, config: ScanConfig) -> Finding | None:
    """URL concatenated from runtime values."""
    if site.kind != CONCATENATION or site.all_literal:
        return None
    return Finding(
        site=site,
        rule_id="suspicious-concatenation",
        message="URL is concatenated from runtime values; prefer a template or URL builder",
        severity=INFO,
    )


def check_relative_path(site: CallSite, config: ScanConfig) -> Finding | None:
    """Relative paths resolve against the current page, not the API."""
    if not site.static_prefix.startswith(("./", "../")):
        return None
    return Finding(
        site=site,
        rule_id="relative-path",
        message="Relative path resolves against the current page, not the API",
        severity=INFO,
    )


RULES: tuple[Rule, ...] = (
    check_double_prefix,
    check_hardcoded_loopback,
    check_missing_api_prefix,
    check_route_as_endpoint,
    check_suspicious_concatenation,
    check_relative_path,
)


def classify(site: CallSite, config: ScanConfig, rules: tuple[Rule, ...] = RULES) -> list[Finding]:
    """
    Run every rule against a call site.

    Args:
        site: Call site produced by the extractor.
        config: Scan configuration.
        rules: Rules to evaluate, in reporting order.

    Returns:
        All findings, in rule order.
    """
    findings: list[Finding] = []
    for rule in rules:
        finding = rule(site, config)
        if finding is not None:
            findings.append(finding)
    if findings:
        logger.debug(
            "%s:%d: %s", site.path, site.line, ", ".join(f.rule_id for f in findings)
        )
    return findings
