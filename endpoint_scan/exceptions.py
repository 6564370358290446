"""
Exceptions raised by endpoint_scan before a scan can start.

Per-file problems are never raised; they are recorded as notices on the report.
"""


class EndpointScanError(Exception):
    """Base class for startup failures."""


class InvalidRootError(EndpointScanError):
    """The scan root does not exist or is not a directory."""


class ConfigError(EndpointScanError):
    """The configuration file is missing or malformed."""
