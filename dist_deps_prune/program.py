"""Program orchestration — the scan / apply / release / restore commands.

Each handler analyzes the project (config, scan, manifest, prune plan),
emits the report and returns a :class:`ProgramResult`. Output is written
through ``echo`` so the CLI controls where it goes.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from dist_deps_prune.config import DEFAULT_CONFIG_PATH, load_config_file, resolve_config
from dist_deps_prune.engine.dist_path import default_patterns, infer_dist_dir, infer_dist_roots
from dist_deps_prune.engine.invariants import list_dev_dependencies_used_in_dist
from dist_deps_prune.engine.prune import build_prune_plan
from dist_deps_prune.engine.scanner import DEFAULT_CONCURRENCY, ScanSettings, scan_all
from dist_deps_prune.exceptions import DevDependencyInDistError
from dist_deps_prune.manifest import read_manifest, write_manifest
from dist_deps_prune.models import PrunePlan, Report
from dist_deps_prune.release import (
    backup_path_for,
    ensure_backup,
    restore_manifest,
    run_command,
)
from dist_deps_prune.report import build_report, render_human_report, render_json_report

log = structlog.get_logger("dist_deps_prune.program")

DEFAULT_DIST = "dist"
DEFAULT_PACKAGE = "./package.json"
EXIT_UNUSED = 2


@dataclass
class CliOptions:
    """Parsed command-line options. ``None`` means the flag was not given."""

    command: str = "scan"
    dist: str | None = None
    package_path: str = DEFAULT_PACKAGE
    ignore_path: str | None = None
    keep: list[str] = field(default_factory=list)
    patterns: list[str] | None = None
    prune_dev: bool | None = None
    prune_optional: bool | None = None
    json: bool = False
    silent: bool = False
    strict: bool = False
    conservative: bool = False
    fail_on_unused: bool = False
    write: bool = False
    release_command: str | None = None
    jobs: int = DEFAULT_CONCURRENCY


@dataclass(frozen=True)
class ProgramResult:
    report: Report
    exit_code: int


@dataclass(frozen=True)
class Analysis:
    report: Report
    plan: PrunePlan


Echo = Callable[[str], None]


def _select_roots(opts: CliOptions, manifest: dict) -> list[str]:
    """Dist roots to scan: ``--dist``, else ``files`` roots, else inferred."""
    if opts.dist is not None:
        return [opts.dist]
    base = Path(opts.package_path).parent
    roots = infer_dist_roots(manifest)
    if len(roots) <= 1:
        roots = [infer_dist_dir(manifest) or DEFAULT_DIST]
    return [(base / root).as_posix() for root in roots]


def analyze_project(opts: CliOptions) -> Analysis:
    """Load config and manifest, scan the dist roots and build the prune plan.

    Raises:
        DevDependencyInDistError: the dist imports a package declared only in
            devDependencies.
    """
    config_path = opts.ignore_path or DEFAULT_CONFIG_PATH
    file_config = load_config_file(config_path, explicit=opts.ignore_path is not None)
    manifest = read_manifest(opts.package_path)
    roots = _select_roots(opts, manifest)

    resolved = resolve_config(
        dist=roots[0],
        command=opts.command,
        file_config=file_config,
        patterns=opts.patterns,
        keep=opts.keep,
        prune_dev=opts.prune_dev,
        prune_optional=opts.prune_optional,
    )
    # Explicit patterns apply to every root; otherwise each root gets its own.
    explicit_patterns = opts.patterns is not None or (
        file_config is not None and file_config.patterns is not None
    )
    if len(roots) == 1 or explicit_patterns:
        settings = [
            ScanSettings(
                dist_path=root,
                patterns=resolved.patterns,
                ignore_patterns=resolved.ignore_patterns,
                strict=opts.strict,
            )
            for root in roots
        ]
    else:
        settings = [
            ScanSettings(
                dist_path=root,
                patterns=default_patterns(root),
                ignore_patterns=resolved.ignore_patterns,
                strict=opts.strict,
            )
            for root in roots
        ]
    log.debug("program.roots_selected", roots=roots, command=opts.command)

    outcome = scan_all(settings, concurrency=opts.jobs)

    dev_only = list_dev_dependencies_used_in_dist(outcome.used, manifest)
    if dev_only:
        raise DevDependencyInDistError(dev_only)

    plan = build_prune_plan(
        manifest,
        used=outcome.used,
        keep=resolved.keep,
        prune_dev=resolved.prune_dev,
        prune_optional=resolved.prune_optional,
        conservative=opts.conservative,
        has_uncertainty=outcome.has_uncertainty,
    )
    return Analysis(report=build_report(outcome, plan), plan=plan)


def _emit(report: Report, opts: CliOptions, echo: Echo) -> None:
    if opts.silent:
        return
    echo(render_json_report(report) if opts.json else render_human_report(report))


def handle_scan(opts: CliOptions, echo: Echo) -> ProgramResult:
    report = analyze_project(opts).report
    _emit(report, opts, echo)
    exit_code = EXIT_UNUSED if opts.fail_on_unused and report.has_unused else 0
    return ProgramResult(report=report, exit_code=exit_code)


def handle_apply(opts: CliOptions, echo: Echo) -> ProgramResult:
    analysis = analyze_project(opts)
    if opts.write:
        write_manifest(opts.package_path, analysis.plan.next_manifest)
        log.info("program.manifest_written", package=opts.package_path)
    _emit(analysis.report, opts, echo)
    return ProgramResult(report=analysis.report, exit_code=0)


def handle_release(opts: CliOptions, echo: Echo) -> ProgramResult:
    analysis = analyze_project(opts)
    backup = backup_path_for(opts.package_path)
    ensure_backup(opts.package_path, backup)
    write_manifest(opts.package_path, analysis.plan.next_manifest)

    if opts.release_command:
        try:
            exit_code = run_command(opts.release_command, os.getcwd())
        finally:
            restore_manifest(opts.package_path, backup)
        _emit(analysis.report, opts, echo)
        return ProgramResult(report=analysis.report, exit_code=exit_code)

    _emit(analysis.report, opts, echo)
    if not opts.json and not opts.silent:
        echo(
            "package.json modified for release. "
            f"Restore with: dist-deps-prune restore --package {opts.package_path}"
        )
    return ProgramResult(report=analysis.report, exit_code=0)


def handle_restore(opts: CliOptions, echo: Echo) -> ProgramResult:
    restore_manifest(opts.package_path, backup_path_for(opts.package_path))
    report = Report.empty()
    _emit(report, opts, echo)
    return ProgramResult(report=report, exit_code=0)


_HANDLERS: dict[str, Callable[[CliOptions, Echo], ProgramResult]] = {
    "scan": handle_scan,
    "apply": handle_apply,
    "release": handle_release,
    "restore": handle_restore,
}


def run_program(opts: CliOptions, echo: Echo) -> ProgramResult:
    return _HANDLERS[opts.command](opts, echo)
