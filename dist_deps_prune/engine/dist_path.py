"""Infer which published directories to scan from package.json metadata."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Any

from dist_deps_prune.engine.globs import normalize_slashes, strip_dot_slash

_JS_EXTENSIONS = (".js", ".mjs", ".cjs", ".node")
_DIST_EXTENSIONS = ("js", "mjs", "cjs", "d.ts")


def _clean(value: str) -> str:
    cleaned = strip_dot_slash(normalize_slashes(value.strip()))
    return cleaned[1:] if cleaned.startswith("/") else cleaned


def _wildcard_index(value: str) -> int:
    hits = [i for i in (value.find("*"), value.find("?")) if i != -1]
    return min(hits) if hits else -1


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def _string_field(value: Any) -> list[str]:
    return [value] if isinstance(value, str) else []


def _bin_field(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [entry for entry in value.values() if isinstance(entry, str)]
    return []


def _export_paths(value: Any) -> list[str]:
    """Every string leaf of an ``exports`` value, at any depth."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [path for entry in value for path in _export_paths(entry)]
    if isinstance(value, dict):
        return [path for entry in value.values() for path in _export_paths(entry)]
    return []


def _files_entries(manifest: dict[str, Any]) -> list[str]:
    files = manifest.get("files")
    if not isinstance(files, list):
        return []
    return [entry for entry in files if isinstance(entry, str)]


def _top_level_from_path(value: str) -> str | None:
    first, *rest = _clean(value).split("/")
    if first in ("", ".", "..") or "*" in first:
        return None
    if not rest:
        return None
    return first


def _top_level_from_files_entry(value: str) -> str | None:
    if value.strip().startswith("!"):
        return None
    sanitized = _clean(value)
    if sanitized in ("", ".", ".."):
        return None
    first, *rest = sanitized.split("/")
    if "*" in first:
        return None
    if rest or sanitized.endswith("/") or "." not in first:
        return first
    return None


def _root_from_files_entry(value: str) -> str | None:
    if not value.strip() or value.strip().startswith("!"):
        return None
    sanitized = _clean(value)
    if sanitized in ("", ".", ".."):
        return None
    wildcard = _wildcard_index(sanitized)
    prefix = sanitized[:wildcard] if wildcard >= 0 else sanitized
    trimmed = prefix[:-1] if prefix.endswith("/") else prefix
    if trimmed in ("", ".", ".."):
        return None
    segments = trimmed.split("/")
    looks_like_file = "." in segments[-1]
    if len(segments) == 1:
        return None if looks_like_file else trimmed
    if looks_like_file:
        return "/".join(segments[:-1])
    return trimmed


def _most_frequent(values: list[str]) -> str | None:
    if not values:
        return None
    counts = Counter(values)
    return min(counts, key=lambda key: (-counts[key], key))


def _choose_candidate(primary: list[str], secondary: list[str]) -> str | None:
    if not primary:
        return None
    distinct = _unique(primary)
    if len(distinct) == 1:
        return distinct[0]
    secondary_set = set(secondary)
    intersection = [value for value in distinct if value in secondary_set]
    if len(intersection) == 1:
        return intersection[0]
    return _most_frequent(primary)


def _entrypoint_paths(manifest: dict[str, Any]) -> list[str]:
    return [
        *_string_field(manifest.get("main")),
        *_string_field(manifest.get("module")),
        *_string_field(manifest.get("types")),
        *_string_field(manifest.get("typings")),
        *_bin_field(manifest.get("bin")),
        *_export_paths(manifest.get("exports")),
    ]


def _dirs(paths: Iterable[str]) -> list[str]:
    return [d for d in (_top_level_from_path(p) for p in paths) if d is not None]


def infer_dist_dir(manifest: dict[str, Any]) -> str | None:
    """Infer the single top-level dist directory.

    Tiers, highest first: JS entrypoints, all entrypoints, ``files``
    directories. Within a tier a unique candidate wins, then a unique
    intersection with the ``files`` directories, then the most frequent
    candidate (ties go to the lexicographically smallest).
    """
    entrypoints = _entrypoint_paths(manifest)
    js_dirs = _dirs(p for p in entrypoints if normalize_slashes(p).lower().endswith(_JS_EXTENSIONS))
    entry_dirs = _dirs(entrypoints)
    files_dirs = [
        d for d in (_top_level_from_files_entry(e) for e in _files_entries(manifest)) if d is not None
    ]

    chosen = _choose_candidate(js_dirs, files_dirs)
    if chosen is not None:
        return chosen
    chosen = _choose_candidate(entry_dirs, files_dirs)
    if chosen is not None:
        return chosen
    return _most_frequent(files_dirs)


def infer_dist_roots(manifest: dict[str, Any]) -> list[str]:
    """Every distinct published root declared by ``files``, in first-seen order."""
    roots = (_root_from_files_entry(entry) for entry in _files_entries(manifest))
    return _unique(root for root in roots if root is not None)


def default_patterns(dist_path: str) -> list[str]:
    """Scan globs for a dist directory; trailing separators are ignored."""
    base = normalize_slashes(dist_path).rstrip("/") or "."
    return [f"{base}/**/*.{ext}" for ext in _DIST_EXTENSIONS]
