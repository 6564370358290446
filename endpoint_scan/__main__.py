"""
Entry point for running endpoint_scan as a module.

Usage: python -m endpoint_scan [args]
"""

from endpoint_scan.cli import main

if __name__ == "__main__":
    main()
