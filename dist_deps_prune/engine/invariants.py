"""Cross-checks between what the dist imports and how the manifest declares it."""

from __future__ import annotations

from collections.abc import Set
from typing import Any

_RUNTIME_GROUPS = ("dependencies", "peerDependencies", "optionalDependencies")


def list_dev_dependencies_used_in_dist(used: Set[str], manifest: dict[str, Any]) -> list[str]:
    """Sorted devDependencies that the dist imports but no runtime group declares.

    Such packages are not installed for consumers, so the published build
    would fail to resolve them.
    """
    dev = manifest.get("devDependencies")
    if not dev:
        return []
    runtime: set[str] = set()
    for group in _RUNTIME_GROUPS:
        runtime.update(manifest.get(group) or {})
    return sorted(name for name in dev if name in used and name not in runtime)
