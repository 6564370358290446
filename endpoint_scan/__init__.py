"""
Endpoint Scan - A CLI tool that finds suspicious API calls in frontend code.

Flags double /api/api/ prefixes, hardcoded localhost URLs, missing API
prefixes, page routes called as endpoints and runtime URL concatenation.
"""

__version__ = "1.0.0"

from endpoint_scan.config import DEFAULT_CONFIG, DEFAULT_EXCLUDE, ScanConfig
from endpoint_scan.scanner import EndpointScanner

__all__ = [
    "EndpointScanner",
    "ScanConfig",
    "DEFAULT_CONFIG",
    "DEFAULT_EXCLUDE",
    "__version__",
]
