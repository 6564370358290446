"""
Configuration constants and loading utilities for endpoint_scan.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from endpoint_scan.exceptions import ConfigError


DEFAULT_EXCLUDE = [
    "node_modules",
    ".next",
    "dist",
    "build",
    ".git",
    "coverage",
    "*.egg-info",
    "__pycache__",
    ".turbo",
    ".cursor-cache",
    ".venv",
    "venv",
    ".pytest_cache",
    ".mypy_cache",
]


DEFAULT_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs"]


DEFAULT_REQUIRED_PREFIX = "/api/"


DEFAULT_CONFIG: dict[str, Any] = {
    # Every backend call must start with this prefix
    "required_prefix": DEFAULT_REQUIRED_PREFIX,

    # Paths that are served by the frontend or CDN and never need the prefix
    "path_whitelist": [
        "/_next/",
        "/images/",
        "/favicon",
        "/robots.txt",
        "/sitemap",
        "/fonts/",
        "/login",
        "/register",
        "/auth/",
        "/socket.io",
    ],

    # UI page routes that should never be called as API endpoints
    "page_routes": [
        "/customers",
        "/suppliers",
        "/workshops",
        "/orders",
        "/cashbook",
        "/catalog",
        "/inventory",
        "/employees",
        "/reports",
        "/dashboard",
        "/settings",
        "/users",
        "/roles",
        "/permissions",
        "/wallets",
        "/categories",
        "/projects",
        "/transactions",
        "/reminders",
        "/jobs",
    ],

    # Exclusions (applied in addition to CLI exclusions)
    "exclude": {
        "directories": [],  # e.g., ["vendor", "fixtures"]
    },

    # Source extensions to scan (replaces the defaults when set)
    "extensions": [],
}


@dataclass(frozen=True)
class ScanConfig:
    """Run configuration, built once at startup and passed to every stage."""

    exclude: frozenset[str]
    extensions: frozenset[str]
    required_prefix: str = DEFAULT_REQUIRED_PREFIX
    path_whitelist: tuple[str, ...] = ()
    page_routes: tuple[str, ...] = ()
    jobs: int = 1

    @classmethod
    def from_dict(
        cls,
        config: dict[str, Any] | None = None,
        extra_exclude: list[str] | None = None,
        extensions: list[str] | None = None,
        required_prefix: str | None = None,
        jobs: int = 1,
    ) -> "ScanConfig":
        """
        Build a ScanConfig from a config dictionary plus CLI overrides.

        Args:
            config: Configuration dictionary (merged with defaults).
            extra_exclude: Directory names to exclude on top of the defaults.
            extensions: Extensions that replace the configured ones.
            required_prefix: Overrides the configured required prefix.
            jobs: Number of worker threads for reading and classifying.

        Returns:
            Immutable scan configuration.
        """
        config = config or DEFAULT_CONFIG

        exclude = list(DEFAULT_EXCLUDE)
        exclude.extend(config.get("exclude", {}).get("directories") or [])
        exclude.extend(extra_exclude or [])

        exts = extensions or config.get("extensions") or DEFAULT_EXTENSIONS

        prefix = required_prefix or config.get("required_prefix") or DEFAULT_REQUIRED_PREFIX
        if not prefix.startswith("/"):
            prefix = "/" + prefix

        return cls(
            exclude=frozenset(exclude),
            extensions=frozenset(normalize_extension(ext) for ext in exts),
            required_prefix=prefix,
            path_whitelist=tuple(config.get("path_whitelist") or ()),
            page_routes=tuple(config.get("page_routes") or ()),
            jobs=max(1, jobs),
        )


def normalize_extension(ext: str) -> str:
    """Lowercase an extension and give it a leading dot."""
    ext = ext.strip().lower()
    if not ext.startswith("."):
        ext = "." + ext
    return ext


def _is_string_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def validate_config(user_config: dict[str, Any], config_path: Path) -> None:
    """
    Check the shape of each known key in a user config.

    Missing and null keys are allowed; unknown keys are ignored.

    Raises:
        ConfigError: If a key holds a value of the wrong type.
    """
    def fail(key: str, expected: str) -> None:
        raise ConfigError(f"Config file '{config_path}': '{key}' must be {expected}")

    prefix = user_config.get("required_prefix")
    if prefix is not None and (not isinstance(prefix, str) or not prefix.strip()):
        fail("required_prefix", "a non-empty string")

    for key in ("path_whitelist", "page_routes", "extensions"):
        value = user_config.get(key)
        if value is not None and not _is_string_list(value):
            fail(key, "a list of strings")

    exclude = user_config.get("exclude")
    if exclude is not None:
        if not isinstance(exclude, dict):
            fail("exclude", "a mapping with a 'directories' list")
        directories = exclude.get("directories")
        if directories is not None and not _is_string_list(directories):
            fail("exclude.directories", "a list of strings")


def load_config(config_path: Path) -> dict[str, Any]:
    """
    Load configuration from YAML file, merged with defaults.

    Args:
        config_path: Path to the YAML configuration file.

    Returns:
        Configuration dictionary with user values merged over defaults.

    Raises:
        ConfigError: If the file is missing, unreadable, not a YAML mapping,
            or a key holds a value of the wrong type.
    """
    if not config_path.is_file():
        raise ConfigError(f"Config file '{config_path}' does not exist")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not load config '{config_path}': {e}") from e

    if not isinstance(user_config, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a mapping")

    validate_config(user_config, config_path)

    # Shallow merge, one level deep for nested sections
    config = DEFAULT_CONFIG.copy()
    for key, value in user_config.items():
        if isinstance(value, dict) and key in config and isinstance(config[key], dict):
            config[key] = {**config[key], **value}
        elif value is not None:
            config[key] = value

    return config


def get_config_template() -> str:
    """Generate a documented YAML config template."""
    return '''# =============================================================================
# Endpoint Scan Configuration
# =============================================================================
# Customizes how scan-endpoints inspects HTTP calls in your frontend code.
#
# Usage:
#   scan-endpoints . --config endpoint-scan.yaml
#
# =============================================================================
# DISCLAIMER: LIMITATIONS OF TEXT SCANNING
# =============================================================================
# This tool uses regex patterns on raw source text. It MAY:
#
#   MISS: URLs built in helper functions, URLs stored in variables,
#         clients with unusual method names
#
#   FALSE POSITIVE: Map/Set .get() calls on path-like keys,
#                   test fixtures that mimic production calls
# =============================================================================

# Every backend call must start with this prefix
required_prefix: "/api/"

# =============================================================================
# ALLOW-LIST
# =============================================================================
# Paths served by the frontend/CDN that never need the API prefix.
# Matched as string prefixes.
# =============================================================================
path_whitelist:
  - /_next/
  - /images/
  - /favicon
  - /robots.txt
  - /sitemap
  - /fonts/
  - /login
  - /register
  - /auth/
  - /socket.io

# =============================================================================
# PAGE ROUTES
# =============================================================================
# UI page routes. Calling one of these as an endpoint usually means the
# API prefix was forgotten. Matched against the first path segment.
# =============================================================================
page_routes:
  - /customers
  - /orders
  - /dashboard
  - /settings
  # Add your application's page routes here

# =============================================================================
# EXCLUSIONS
# =============================================================================
# Directory basenames to skip, in addition to the built-in list
# (node_modules, .next, dist, build, .git, coverage, ...).
# Glob patterns such as "*.generated" are allowed.
# =============================================================================
exclude:
  directories:
    # - vendor
    # - fixtures

# Source extensions to scan (default: .ts .tsx .js .jsx .mjs .cjs)
extensions:
  # - .ts
  # - .tsx
  # - .vue
'''
