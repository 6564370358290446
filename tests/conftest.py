"""Shared fixtures for endpoint_scan tests."""

from pathlib import Path

import pytest

from endpoint_scan.config import ScanConfig


@pytest.fixture
def make_tree(tmp_path):
    """Create files under tmp_path from a {relative_path: content} mapping."""

    def _make(files: dict) -> Path:
        for rel_path, content in files.items():
            path = tmp_path / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content, encoding="utf-8")
        return tmp_path

    return _make


@pytest.fixture
def config():
    """Default scan configuration."""
    return ScanConfig.from_dict()
