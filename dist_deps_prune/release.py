"""Release helpers — manifest backup/restore and running the release command."""

from __future__ import annotations

import shlex
import shutil
import subprocess
from pathlib import Path

import structlog

from dist_deps_prune.exceptions import FileError, RestoreError

log = structlog.get_logger("dist_deps_prune.release")

BACKUP_NAME = ".package.json.release.bak"


def backup_path_for(package_path: str | Path) -> Path:
    return Path(package_path).parent / BACKUP_NAME


def ensure_backup(package_path: str | Path, backup_path: str | Path) -> None:
    package_path = Path(package_path)
    if not package_path.exists():
        raise FileError(f"package.json not found: {package_path}")
    try:
        shutil.copyfile(package_path, backup_path)
    except OSError as exc:
        raise FileError(f"Cannot back up {package_path}: {exc.strerror or exc}") from exc
    log.info("release.backup_written", backup=str(backup_path))


def restore_manifest(package_path: str | Path, backup_path: str | Path) -> None:
    backup_path = Path(backup_path)
    if not backup_path.exists():
        raise RestoreError(f"Backup file not found: {backup_path}")
    try:
        shutil.copyfile(backup_path, package_path)
    except OSError as exc:
        raise RestoreError(f"Cannot restore {package_path}: {exc.strerror or exc}") from exc
    log.info("release.restored", package=str(package_path))


def split_command_line(text: str) -> list[str]:
    """Tokenize a command line with POSIX shell quoting rules."""
    try:
        parts = shlex.split(text)
    except ValueError as exc:
        raise FileError(f"Invalid --command: {exc}") from exc
    if not parts:
        raise FileError("Empty --command")
    return parts


def run_command(text: str, cwd: str | Path) -> int:
    """Run *text* with inherited stdio and return its exit code."""
    argv = split_command_line(text)
    log.info("release.command_started", argv=argv, cwd=str(cwd))
    try:
        completed = subprocess.run(argv, cwd=cwd, check=False)
    except OSError as exc:
        raise FileError(f"Cannot run {argv[0]}: {exc.strerror or exc}") from exc
    log.info("release.command_finished", returncode=completed.returncode)
    return completed.returncode
