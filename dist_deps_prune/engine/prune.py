"""Prune plan builder — decide which unused dependencies may be removed."""

from __future__ import annotations

from collections.abc import Iterable, Set
from typing import Any

from dist_deps_prune.manifest import omit_dependency_fields
from dist_deps_prune.models import PrunePlan, UnusedByGroup


def _unused(group: dict[str, str] | None, used: Set[str], keep: Set[str]) -> tuple[str, ...]:
    if not group:
        return ()
    return tuple(name for name in group if name not in used and name not in keep)


def _without(group: dict[str, str] | None, remove: Iterable[str]) -> dict[str, str] | None:
    """Copy of *group* minus *remove*; ``None`` when nothing is left."""
    if group is None:
        return None
    removed = set(remove)
    remaining = {name: version for name, version in group.items() if name not in removed}
    return remaining or None


def build_prune_plan(
    manifest: dict[str, Any],
    *,
    used: Set[str],
    keep: Iterable[str] = (),
    prune_dev: bool = False,
    prune_optional: bool = False,
    conservative: bool = False,
    has_uncertainty: bool = False,
) -> PrunePlan:
    """Build the prune plan for a validated manifest.

    ``peerDependencies`` are reported but never pruned. Under
    ``conservative`` any scan uncertainty freezes every group.
    """
    keep_list = list(dict.fromkeys(keep))
    keep_set = set(keep_list)

    unused = UnusedByGroup(
        dependencies=_unused(manifest.get("dependencies"), used, keep_set),
        devDependencies=_unused(manifest.get("devDependencies"), used, keep_set),
        optionalDependencies=_unused(manifest.get("optionalDependencies"), used, keep_set),
        peerDependencies=_unused(manifest.get("peerDependencies"), used, keep_set),
    )

    frozen = conservative and has_uncertainty
    prunable = UnusedByGroup(
        dependencies=() if frozen else unused.dependencies,
        devDependencies=unused.devDependencies if prune_dev and not frozen else (),
        optionalDependencies=unused.optionalDependencies if prune_optional and not frozen else (),
        peerDependencies=(),
    )

    kept_by_rule = [name for name in keep_list if name not in used]
    for group in ("dependencies", "devDependencies", "optionalDependencies"):
        removable = set(prunable.get(group))
        kept_by_rule.extend(name for name in unused.get(group) if name not in removable)
    kept_by_rule.extend(unused.peerDependencies)

    return PrunePlan(
        unused=unused,
        prunable=prunable,
        kept_by_rule=tuple(kept_by_rule),
        next_manifest=_next_manifest(manifest, prunable),
    )


def _next_manifest(manifest: dict[str, Any], prunable: UnusedByGroup) -> dict[str, Any]:
    # Non-dependency fields keep their order; rebuilt groups follow them.
    result = omit_dependency_fields(manifest)
    for group in ("dependencies", "devDependencies", "optionalDependencies"):
        remaining = _without(manifest.get(group), prunable.get(group))
        if remaining is not None:
            result[group] = remaining
    if manifest.get("peerDependencies") is not None:
        result["peerDependencies"] = manifest["peerDependencies"]
    return result
