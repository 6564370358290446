"""Tests for the source tree walker."""

import errno
import os

import pytest

from endpoint_scan.config import DEFAULT_EXCLUDE, DEFAULT_EXTENSIONS
from endpoint_scan.utils import is_excluded_name
from endpoint_scan.walker import walk_files


def walk(root, notices=None, exclude=DEFAULT_EXCLUDE, extensions=DEFAULT_EXTENSIONS):
    return [p.relative_to(root).as_posix() for p in walk_files(root, exclude, extensions, notices)]


class TestIsExcludedName:
    """Test directory basename exclusion."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("node_modules", True),
            (".git", True),
            ("my_pkg.egg-info", True),
            ("dist", True),
            ("distribution", False),
            ("src", False),
        ],
    )
    def test_default_exclusions(self, name, expected):
        assert is_excluded_name(name, DEFAULT_EXCLUDE) is expected


class TestWalkFiles:
    """Test walking a project tree."""

    def test_excluded_directories_at_any_depth(self, make_tree):
        root = make_tree({
            "src/app.ts": "",
            "src/node_modules/lib/index.js": "",
            "packages/web/deep/dist/bundle.js": "",
            "packages/web/deep/page.tsx": "",
            "tool.egg-info/setup.js": "",
            ".git/hooks/pre-commit.js": "",
        })
        assert walk(root) == ["packages/web/deep/page.tsx", "src/app.ts"]

    def test_extension_allow_list(self, make_tree):
        root = make_tree({
            "a.ts": "",
            "b.md": "",
            "c.py": "",
            "D.TSX": "",
            "e.mjs": "",
        })
        assert walk(root) == ["D.TSX", "a.ts", "e.mjs"]

    def test_custom_extensions(self, make_tree):
        root = make_tree({"a.ts": "", "c.py": ""})
        assert walk(root, extensions=[".py"]) == ["c.py"]

    def test_deterministic_order(self, make_tree):
        root = make_tree({
            "b/z.ts": "",
            "b/a.ts": "",
            "a/m.js": "",
            "root.js": "",
        })
        assert walk(root) == ["root.js", "a/m.js", "b/a.ts", "b/z.ts"]
        assert walk(root) == walk(root)

    def test_empty_root(self, tmp_path):
        assert walk(tmp_path) == []

    def test_symlinks_not_followed(self, make_tree):
        root = make_tree({"src/app.ts": ""})
        try:
            os.symlink(root / "src", root / "linked", target_is_directory=True)
            os.symlink(root / "src" / "app.ts", root / "alias.ts")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")
        assert walk(root) == ["src/app.ts"]

    def test_unlistable_directory_recorded(self, make_tree, monkeypatch):
        root = make_tree({
            "ok/app.ts": "",
            "locked/secret.ts": "",
        })
        real_scandir = os.scandir

        def fake_scandir(path="."):
            if os.fspath(path).endswith("locked"):
                raise PermissionError(errno.EACCES, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", fake_scandir)

        notices = []
        assert walk(root, notices=notices) == ["ok/app.ts"]
        assert len(notices) == 1
        assert notices[0].path == "locked"
        assert "Permission denied" in notices[0].message
