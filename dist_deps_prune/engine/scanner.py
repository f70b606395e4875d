"""Dist scanner — walk built output and collect the external packages it imports."""

from __future__ import annotations

import asyncio
import functools
import os
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from dist_deps_prune.engine.extractor import ImportExtractor
from dist_deps_prune.engine.globs import compile_globs, matches_patterns, normalize_slashes
from dist_deps_prune.engine.normalize import normalize_package_name
from dist_deps_prune.exceptions import DistNotFoundError, FileError, ParseFailureError
from dist_deps_prune.models import ScanOutcome, ScanStats, ScanWarning
from dist_deps_prune.node_builtins import NODE_BUILTINS

log = structlog.get_logger("dist_deps_prune.engine")

DEFAULT_CONCURRENCY = 4


@dataclass(frozen=True)
class ScanSettings:
    dist_path: str
    patterns: Sequence[str]
    ignore_patterns: Sequence[str] = ()
    strict: bool = False
    builtins: frozenset[str] = field(default=NODE_BUILTINS)


def _raise_walk_error(error: OSError) -> None:
    raise FileError(f"Cannot read directory {error.filename}: {error.strerror}") from error


def _list_files(root: Path) -> list[Path]:
    """All files below *root*, in a stable (sorted) walk order."""
    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        dirnames.sort()
        for name in sorted(filenames):
            files.append(Path(dirpath) / name)
    return files


def _candidate_forms(path: Path, root: Path, cwd: str) -> list[str]:
    absolute = os.path.abspath(path)
    forms = [normalize_slashes(absolute), path.relative_to(root).as_posix()]
    try:
        forms.append(normalize_slashes(os.path.relpath(absolute, cwd)))
    except ValueError:
        # Different drive on Windows; no cwd-relative form exists.
        pass
    return forms


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise FileError(f"Cannot read {path}: {exc.strerror or exc}") from exc


def scan_dist(settings: ScanSettings, extractor: ImportExtractor | None = None) -> ScanOutcome:
    """Scan one dist root.

    Raises:
        DistNotFoundError: the root does not exist.
        FileError: the root cannot be walked or a file cannot be read.
        ParseFailureError: a file failed to parse and ``settings.strict`` is set.
    """
    root = Path(settings.dist_path)
    if not root.exists():
        raise DistNotFoundError(settings.dist_path)

    extractor = extractor or ImportExtractor()
    include = compile_globs(settings.patterns)
    exclude = compile_globs(settings.ignore_patterns)
    cwd = os.getcwd()

    files = [
        path
        for path in _list_files(root)
        if matches_patterns(include, exclude, _candidate_forms(path, root, cwd))
    ]

    used: set[str] = set()
    warnings: list[ScanWarning] = []
    imports_found = 0

    for path in files:
        label = normalize_slashes(str(path))
        source = _read_source(path)
        try:
            parsed = extractor.extract(source, label)
        except ParseFailureError as exc:
            if settings.strict:
                raise
            warnings.append(ScanWarning(type="parse-error", file=label, error=exc.error))
            continue

        for expr in parsed.dynamic_imports:
            warnings.append(ScanWarning(type="dynamic-import", file=label, expr=expr))
        for expr in parsed.dynamic_requires:
            warnings.append(ScanWarning(type="dynamic-require", file=label, expr=expr))
        for specifier in parsed.static_specifiers:
            name = normalize_package_name(specifier, settings.builtins)
            if name is not None:
                used.add(name)
        imports_found += len(parsed.static_specifiers)

    log.info(
        "scanner.root_scanned",
        root=settings.dist_path,
        files=len(files),
        imports=imports_found,
        warnings=len(warnings),
    )
    return ScanOutcome(
        used=frozenset(used),
        warnings=tuple(warnings),
        stats=ScanStats(files_scanned=len(files), imports_found=imports_found),
    )


async def scan_roots(
    settings_list: Sequence[ScanSettings],
    concurrency: int = DEFAULT_CONCURRENCY,
) -> ScanOutcome:
    """Scan several roots with bounded concurrency and merge the outcomes.

    Outcomes are folded in *settings_list* order starting from the empty
    outcome, so warnings keep each root's discovery order.
    """
    sem = asyncio.Semaphore(max(1, concurrency))

    async def _scan_one(settings: ScanSettings) -> ScanOutcome:
        async with sem:
            return await asyncio.to_thread(scan_dist, settings)

    outcomes = await asyncio.gather(*(_scan_one(s) for s in settings_list))
    return functools.reduce(ScanOutcome.merge, outcomes, ScanOutcome.empty())


def scan_all(
    settings_list: Sequence[ScanSettings],
    concurrency: int = DEFAULT_CONCURRENCY,
) -> ScanOutcome:
    """Synchronous entry point for :func:`scan_roots`."""
    return asyncio.run(scan_roots(settings_list, concurrency))
