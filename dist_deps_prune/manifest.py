"""package.json reading, validation and writing."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from dist_deps_prune.exceptions import FileError, ManifestError
from dist_deps_prune.models import DEPENDENCY_GROUPS


def _decode_group(name: str, value: Any) -> dict[str, str]:
    if not isinstance(value, dict):
        raise ManifestError(f"{name} must be an object")
    for key, version in value.items():
        if not isinstance(version, str):
            raise ManifestError(f"{name}.{key} must be a string")
    return value


def decode_manifest(value: Any) -> dict[str, Any]:
    """Validate a parsed package.json value.

    Only the dependency groups are checked; every other field is carried
    through untouched.

    Raises:
        ManifestError: the value is not an object, or a dependency group is
            malformed.
    """
    if not isinstance(value, dict):
        raise ManifestError("package.json must be an object")
    for group in DEPENDENCY_GROUPS:
        if group in value:
            _decode_group(group, value[group])
    return value


def omit_dependency_fields(manifest: dict[str, Any]) -> dict[str, Any]:
    """Shallow copy of *manifest* without the four dependency groups."""
    return {key: value for key, value in manifest.items() if key not in DEPENDENCY_GROUPS}


def read_manifest(path: str | Path) -> dict[str, Any]:
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise FileError(f"Invalid JSON in {path}: {exc}") from exc
    return decode_manifest(value)


def write_manifest(path: str | Path, manifest: dict[str, Any]) -> None:
    path = Path(path)
    payload = json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"
    try:
        path.write_text(payload, encoding="utf-8")
    except OSError as exc:
        raise FileError(f"Cannot write {path}: {exc.strerror or exc}") from exc
