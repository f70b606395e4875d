"""Configuration — the ``.dist-deps-prune.json`` file and flag precedence.

Precedence is CLI flags, then the config file, then defaults.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from dist_deps_prune.engine.dist_path import default_patterns
from dist_deps_prune.exceptions import ConfigError, FileError

log = structlog.get_logger("dist_deps_prune.config")

DEFAULT_CONFIG_PATH = "./.dist-deps-prune.json"


class FileConfig(BaseModel):
    """Validated contents of the config file. Unknown keys are ignored."""

    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")

    keep: list[str] | None = None
    ignore_patterns: list[str] | None = Field(default=None, alias="ignorePatterns")
    prune_dev: bool | None = Field(default=None, alias="pruneDev")
    prune_optional: bool | None = Field(default=None, alias="pruneOptional")
    patterns: list[str] | None = None


@dataclass(frozen=True)
class ResolvedConfig:
    patterns: tuple[str, ...]
    ignore_patterns: tuple[str, ...]
    keep: tuple[str, ...]
    prune_dev: bool
    prune_optional: bool


def _format_validation_error(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = " → ".join(str(part) for part in err["loc"]) or "(root)"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def load_config_file(path: str | Path | None, explicit: bool = False) -> FileConfig | None:
    """Load and validate the config file.

    Returns ``None`` when the file is absent and was not named explicitly.

    Raises:
        FileError: an explicitly named file is missing, or cannot be read.
        ConfigError: the contents are not valid JSON of the expected shape.
    """
    if path is None:
        return None
    path = Path(path)
    if not path.exists():
        if explicit:
            raise FileError(f"Config file not found: {path}")
        log.debug("config.not_found", path=str(path))
        return None
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FileError(f"Cannot read {path}: {exc.strerror or exc}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    try:
        config = FileConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(_format_validation_error(exc)) from exc
    log.debug("config.loaded", path=str(path))
    return config


def resolve_config(
    *,
    dist: str,
    command: str,
    file_config: FileConfig | None = None,
    patterns: list[str] | None = None,
    keep: list[str] | None = None,
    prune_dev: bool | None = None,
    prune_optional: bool | None = None,
) -> ResolvedConfig:
    """Merge CLI values (``None`` means not given) with the file config."""
    fc = file_config or FileConfig()

    if patterns is not None:
        resolved_patterns = patterns
    elif fc.patterns is not None:
        resolved_patterns = fc.patterns
    else:
        resolved_patterns = default_patterns(dist)

    if prune_dev is None:
        prune_dev = fc.prune_dev if fc.prune_dev is not None else command == "release"
    if prune_optional is None:
        prune_optional = fc.prune_optional if fc.prune_optional is not None else False

    return ResolvedConfig(
        patterns=tuple(resolved_patterns),
        ignore_patterns=tuple(fc.ignore_patterns or ()),
        keep=tuple(dict.fromkeys([*(fc.keep or ()), *(keep or ())])),
        prune_dev=prune_dev,
        prune_optional=prune_optional,
    )
