"""Package specifier normalization.

``lodash/get`` -> ``lodash``, ``@scope/name/x`` -> ``@scope/name``; relative,
absolute, aliased and builtin specifiers are not external packages.
"""

from __future__ import annotations

import re
from collections.abc import Container

_WINDOWS_DRIVE_RE = re.compile(r"^[a-zA-Z]:[\\/]")
_NON_PACKAGE_PREFIXES = ("#", "data:", "http:")
_NODE_PROTOCOL = "node:"


def _is_relative(specifier: str) -> bool:
    return specifier.startswith("./") or specifier.startswith("../")


def _is_absolute(specifier: str) -> bool:
    return specifier.startswith("/") or bool(_WINDOWS_DRIVE_RE.match(specifier))


def _strip_node_protocol(specifier: str) -> str:
    if specifier.startswith(_NODE_PROTOCOL):
        return specifier[len(_NODE_PROTOCOL) :]
    return specifier


def _external_candidate(specifier: str, builtins: Container[str]) -> str | None:
    if not specifier:
        return None
    if (
        _is_relative(specifier)
        or _is_absolute(specifier)
        or specifier.startswith(_NON_PACKAGE_PREFIXES)
    ):
        return None
    without_protocol = _strip_node_protocol(specifier)
    first_segment = without_protocol.split("/", 1)[0]
    if without_protocol in builtins or first_segment in builtins:
        return None
    return without_protocol


def normalize_package_name(specifier: str, builtins: Container[str]) -> str | None:
    """Normalize an import specifier into a top-level package name.

    Args:
        specifier: Raw import/require text.
        builtins: Builtin module names, without the ``node:`` prefix.

    Returns:
        The package name, or ``None`` when the specifier is not an external
        package.
    """
    candidate = _external_candidate(specifier.strip(), builtins)
    if candidate is None:
        return None
    parts = candidate.split("/")
    if candidate.startswith("@"):
        if len(parts) < 2 or len(parts[0]) <= 1 or not parts[1]:
            return None
        return f"{parts[0]}/{parts[1]}"
    return parts[0] or None
