"""Tests for stylegate.scanning.scanner — traversal, classification and parsing."""

from __future__ import annotations

import os
import threading
from typing import TYPE_CHECKING

import pytest

from stylegate.errors import ScanCancelledError
from stylegate.model import COMPONENT, CONFIG, DIRECTORY, OTHER, STORE, ComponentFacts
from stylegate.scanning.scanner import is_ignored, scan_project

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

COMPONENT_SRC = "<script setup>\n</script>\n\n<template>\n  <div />\n</template>\n"

STORE_SRC = "export const useUserStore = defineStore('user', {\n  state: () => ({}),\n})\n"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _paths(root: Path) -> list[str]:
    return [n.path for n in scan_project(root).files()]


# ---------------------------------------------------------------------------
# Traversal
# ---------------------------------------------------------------------------


class TestTraversal:
    def test_empty_root(self, tmp_path: Path) -> None:
        model = scan_project(tmp_path)
        assert model.files() == []
        assert model.root.kind == DIRECTORY
        assert model.root.path == "."
        assert model.parse_errors == ()

    def test_tree_shape(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(
            {
                "src/components/UserCard.vue": COMPONENT_SRC,
                "src/stores/user.ts": STORE_SRC,
                "README.md": "# readme\n",
            }
        )
        model = scan_project(root)
        assert [n.path for n in model.files()] == [
            "README.md",
            "src/components/UserCard.vue",
            "src/stores/user.ts",
        ]
        assert model.has_directory("src/components")
        node = model.get("src/components/UserCard.vue")
        assert node is not None
        assert node.kind == COMPONENT
        assert node.parent is not None
        assert node.parent.path == "src/components"

    def test_kinds(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(
            {
                "src/stores/user.ts": STORE_SRC,
                ".prettierrc": "semi: false\n",
                "notes.txt": "hello\n",
            }
        )
        model = scan_project(root)
        kinds = {n.path: n.kind for n in model.files()}
        assert kinds == {".prettierrc": CONFIG, "notes.txt": OTHER, "src/stores/user.ts": STORE}

    def test_scanning_is_deterministic(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project(
            {
                "src/components/B.vue": COMPONENT_SRC,
                "src/components/A.vue": COMPONENT_SRC,
                "src/stores/user.ts": STORE_SRC,
                "src/router/index.ts": "createRouter({ routes: [{ path: '/' }] })\n",
            }
        )
        first = scan_project(root, jobs=4)
        second = scan_project(root, jobs=1)
        assert first.snapshot() == second.snapshot()
        assert first == second

    def test_skip_dirs(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(
            {
                "node_modules/lib/index.js": "export default 1\n",
                "dist/app.js": "x\n",
                "src/main.ts": "export {}\n",
            }
        )
        assert _paths(root) == ["src/main.ts"]

    def test_ignore_patterns(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(
            {
                "src/legacy/Old.vue": COMPONENT_SRC,
                "src/main.ts": "export {}\n",
                "src/types.generated.ts": "export {}\n",
            }
        )
        model = scan_project(root, ignore=["src/legacy/**", "*.generated.*"])
        assert [n.path for n in model.files()] == ["src/main.ts"]
        assert model.get("src/legacy") is None


class TestIsIgnored:
    def test_full_path_glob(self) -> None:
        assert is_ignored("src/legacy/Old.vue", ["src/legacy/**"])

    def test_subtree_glob_matches_directory(self) -> None:
        assert is_ignored("src/legacy", ["src/legacy/**"])

    def test_base_name_glob(self) -> None:
        assert is_ignored("deep/nested/file.snap", ["*.snap"])

    def test_trailing_slash(self) -> None:
        assert is_ignored("fixtures", ["fixtures/"])

    def test_no_match(self) -> None:
        assert not is_ignored("src/main.ts", ["tests/**", "*.snap"])


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParsing:
    def test_units_attached(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project({"src/components/UserCard.vue": COMPONENT_SRC})
        node = scan_project(root).get("src/components/UserCard.vue")
        assert node is not None
        assert isinstance(node.unit, ComponentFacts)
        assert node.unit.block_order == ("script", "template")
        assert node.content == COMPONENT_SRC

    def test_zero_byte_file(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project({"src/components/Empty.vue": ""})
        model = scan_project(root)
        node = model.get("src/components/Empty.vue")
        assert node is not None
        assert node.kind == COMPONENT
        assert isinstance(node.unit, ComponentFacts)
        assert node.unit.block_order == ()
        assert model.parse_errors == ()

    def test_parse_error_recorded(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project({"src/components/Broken.vue": "<template>\n  <div>\n"})
        model = scan_project(root)
        assert len(model.parse_errors) == 1
        error = model.parse_errors[0]
        assert error.path == "src/components/Broken.vue"
        assert error.line == 1
        node = model.get("src/components/Broken.vue")
        assert node is not None
        assert node.unit is None

    def test_invalid_utf8(self, tmp_path: Path) -> None:
        target = tmp_path / "src" / "components" / "Bad.vue"
        target.parent.mkdir(parents=True)
        target.write_bytes(b"\xff\xfe\x00<template>")
        model = scan_project(tmp_path)
        assert [e.path for e in model.parse_errors] == ["src/components/Bad.vue"]
        assert "UTF-8" in model.parse_errors[0].message

    def test_suppressions_collected(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project(
            {
                "src/main.ts": "// stylegate-disable-file formatting-no-tabs\nexport {}\n",
                "src/other.ts": "export {}\n",
            }
        )
        model = scan_project(root)
        assert list(model.suppressions) == ["src/main.ts"]


# ---------------------------------------------------------------------------
# Cycles and cancellation
# ---------------------------------------------------------------------------


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
class TestSymlinkCycles:
    def test_cycle_is_reported_and_not_followed(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project({"src/main.ts": "export {}\n"})
        os.symlink(root / "src", root / "src" / "loop", target_is_directory=True)
        model = scan_project(root)
        assert [(c.path, c.target) for c in model.cycles] == [("src/loop", "src")]
        assert [n.path for n in model.files()] == ["src/main.ts"]

    def test_non_cyclic_link_is_followed(
        self, make_project: Callable[[dict[str, str]], Path]
    ) -> None:
        root = make_project({"shared/util.ts": "export {}\n", "src/main.ts": "export {}\n"})
        os.symlink(root / "shared", root / "src" / "shared", target_is_directory=True)
        model = scan_project(root)
        assert model.cycles == ()
        assert "src/shared/util.ts" in [n.path for n in model.files()]


class TestCancellation:
    def test_cancelled_scan_raises(self, make_project: Callable[[dict[str, str]], Path]) -> None:
        root = make_project({"src/main.ts": "export {}\n"})
        cancel = threading.Event()
        cancel.set()
        with pytest.raises(ScanCancelledError):
            scan_project(root, cancel=cancel)

    def test_missing_root_raises_oserror(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            scan_project(tmp_path / "missing")
