"""
Call-site extractors for endpoint_scan.

These scanners pull candidate API calls out of raw source text.
"""

from endpoint_scan.scanners.http_calls import HttpCallsScanner

__all__ = [
    "HttpCallsScanner",
]
