"""CLI entry point: dist-deps-prune.

Subcommands:
    dist-deps-prune scan                       # Report used/unused dependencies (default)
    dist-deps-prune apply --write              # Rewrite package.json without unused deps
    dist-deps-prune release --command "npm publish"
    dist-deps-prune restore                    # Put the release backup back
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Any

import click

from dist_deps_prune import __version__
from dist_deps_prune.core.logging import setup_logging
from dist_deps_prune.engine.scanner import DEFAULT_CONCURRENCY
from dist_deps_prune.exceptions import DistDepsPruneError
from dist_deps_prune.program import DEFAULT_PACKAGE, CliOptions, run_program


def _split_list(values: tuple[str, ...]) -> list[str]:
    """Flatten repeated comma-separated option values."""
    return [item.strip() for value in values for item in value.split(",") if item.strip()]


def _common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    options = [
        click.option("--dist", default=None, help="Dist directory to scan (inferred from package.json)"),
        click.option("--package", "package_path", default=DEFAULT_PACKAGE, show_default=True,
                     help="Path to package.json"),
        click.option("--ignore", "ignore_path", default=None,
                     help="Config file path (default ./.dist-deps-prune.json)"),
        click.option("--keep", multiple=True, help="Packages never pruned (comma list, repeatable)"),
        click.option("--patterns", default=None, help="Glob patterns of files to scan (comma list)"),
        click.option("--prune-dev/--no-prune-dev", default=None, help="Prune unused devDependencies"),
        click.option("--prune-optional/--no-prune-optional", default=None,
                     help="Prune unused optionalDependencies"),
        click.option("--json", "as_json", is_flag=True, help="Print the report as JSON"),
        click.option("--silent", is_flag=True, help="Print nothing"),
        click.option("--strict", is_flag=True, help="Fail on the first parse error"),
        click.option("--conservative", is_flag=True,
                     help="Prune nothing when dynamic imports or parse errors were seen"),
        click.option("--jobs", default=DEFAULT_CONCURRENCY, show_default=True, type=click.IntRange(min=1),
                     help="Dist roots scanned in parallel"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _build_options(command: str, **kwargs: Any) -> CliOptions:
    patterns = kwargs.pop("patterns")
    return CliOptions(
        command=command,
        dist=kwargs.pop("dist"),
        package_path=kwargs.pop("package_path"),
        ignore_path=kwargs.pop("ignore_path"),
        keep=_split_list(kwargs.pop("keep")),
        patterns=_split_list((patterns,)) if patterns is not None else None,
        prune_dev=kwargs.pop("prune_dev"),
        prune_optional=kwargs.pop("prune_optional"),
        json=kwargs.pop("as_json"),
        silent=kwargs.pop("silent"),
        strict=kwargs.pop("strict"),
        conservative=kwargs.pop("conservative"),
        jobs=kwargs.pop("jobs"),
        **kwargs,
    )


def _run(opts: CliOptions) -> None:
    try:
        result = run_program(opts, click.echo)
    except DistDepsPruneError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if result.exit_code != 0:
        sys.exit(result.exit_code)


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.version_option(__version__, prog_name="dist-deps-prune")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """dist-deps-prune: drop dependencies your published build never imports."""
    setup_logging(verbose=verbose)
    if ctx.invoked_subcommand is None:
        ctx.invoke(scan)


@main.command()
@_common_options
@click.option("--fail-on-unused", is_flag=True, help="Exit 2 when unused dependencies exist")
def scan(**kwargs: Any) -> None:
    """Scan the dist and report used and unused dependencies."""
    _run(_build_options("scan", **kwargs))


@main.command()
@_common_options
@click.option("--write", is_flag=True, help="Write the pruned package.json")
def apply(**kwargs: Any) -> None:
    """Compute the pruned package.json, writing it with --write."""
    _run(_build_options("apply", **kwargs))


@main.command()
@_common_options
@click.option("--command", "release_command", default=None,
              help="Command to run against the pruned package.json, then restore")
def release(**kwargs: Any) -> None:
    """Prune package.json for publishing (devDependencies pruned by default)."""
    _run(_build_options("release", **kwargs))


@main.command()
@click.option("--package", "package_path", default=DEFAULT_PACKAGE, show_default=True,
              help="Path to package.json")
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--silent", is_flag=True, help="Print nothing")
def restore(package_path: str, as_json: bool, silent: bool) -> None:
    """Restore package.json from the release backup."""
    _run(CliOptions(command="restore", package_path=package_path, json=as_json, silent=silent))


if __name__ == "__main__":
    main()
