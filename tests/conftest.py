"""Shared pytest fixtures for dist-deps-prune tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest


def _write_tree(root: Path, files: dict[str, str]) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def write_tree() -> Callable[[Path, dict[str, str]], None]:
    """Write ``{relative path: content}`` files below a root directory."""
    return _write_tree


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Path]:
    """Write a package.json plus source files under ``tmp_path``."""

    def _make(manifest: dict, files: dict[str, str] | None = None) -> Path:
        (tmp_path / "package.json").write_text(
            json.dumps(manifest, indent=2) + "\n", encoding="utf-8"
        )
        _write_tree(tmp_path, files or {})
        return tmp_path

    return _make
