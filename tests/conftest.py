"""Shared test fixtures for Stylegate."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from stylegate.rules import build_default_registry

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from stylegate.rules import RuleRegistry


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write *files* (relative POSIX path -> content) below *root*."""
    for rel, content in files.items():
        target = root / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
    return root


@pytest.fixture()
def make_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Return a helper that writes a project tree into ``tmp_path``."""

    def _make(files: dict[str, str]) -> Path:
        return write_tree(tmp_path, files)

    return _make


@pytest.fixture()
def registry() -> RuleRegistry:
    """A fresh copy of the built-in rule catalogue."""
    return build_default_registry()
