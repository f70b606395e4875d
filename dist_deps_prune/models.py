"""Data models for the scan and prune pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

DEPENDENCY_GROUPS: tuple[str, ...] = (
    "dependencies",
    "devDependencies",
    "optionalDependencies",
    "peerDependencies",
)

WARNING_TYPES = frozenset({"dynamic-import", "dynamic-require", "parse-error"})


@dataclass(frozen=True)
class ScanWarning:
    """A dynamic import/require that could not be resolved, or a parse failure."""

    type: str  # "dynamic-import" | "dynamic-require" | "parse-error"
    file: str
    expr: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if self.type not in WARNING_TYPES:
            raise ValueError(f"unknown warning type: {self.type}")

    @property
    def detail(self) -> str:
        return self.error if self.type == "parse-error" else (self.expr or "")

    def to_dict(self) -> dict[str, str]:
        if self.type == "parse-error":
            return {"type": self.type, "file": self.file, "error": self.error or ""}
        return {"type": self.type, "file": self.file, "expr": self.expr or ""}


@dataclass(frozen=True)
class ScanStats:
    files_scanned: int = 0
    imports_found: int = 0


@dataclass(frozen=True)
class ScanOutcome:
    """Aggregated result of scanning one or more dist roots.

    Outcomes form a monoid: :meth:`empty` is the identity and :meth:`merge`
    unions ``used``, concatenates ``warnings`` and sums ``stats``.
    """

    used: frozenset[str] = frozenset()
    warnings: tuple[ScanWarning, ...] = ()
    stats: ScanStats = field(default_factory=ScanStats)

    @classmethod
    def empty(cls) -> ScanOutcome:
        return cls()

    def merge(self, other: ScanOutcome) -> ScanOutcome:
        return ScanOutcome(
            used=self.used | other.used,
            warnings=self.warnings + other.warnings,
            stats=ScanStats(
                files_scanned=self.stats.files_scanned + other.stats.files_scanned,
                imports_found=self.stats.imports_found + other.stats.imports_found,
            ),
        )

    @property
    def has_uncertainty(self) -> bool:
        return len(self.warnings) > 0


@dataclass(frozen=True)
class ParsedImports:
    """Import specifiers found in a single file, in discovery order."""

    static_specifiers: tuple[str, ...] = ()
    dynamic_imports: tuple[str, ...] = ()
    dynamic_requires: tuple[str, ...] = ()


@dataclass(frozen=True)
class UnusedByGroup:
    dependencies: tuple[str, ...] = ()
    devDependencies: tuple[str, ...] = ()  # noqa: N815
    optionalDependencies: tuple[str, ...] = ()  # noqa: N815
    peerDependencies: tuple[str, ...] = ()  # noqa: N815

    def get(self, group: str) -> tuple[str, ...]:
        return getattr(self, group)

    def to_dict(self) -> dict[str, list[str]]:
        return {group: list(self.get(group)) for group in DEPENDENCY_GROUPS}


@dataclass(frozen=True)
class PrunePlan:
    unused: UnusedByGroup
    prunable: UnusedByGroup
    kept_by_rule: tuple[str, ...]
    next_manifest: dict[str, Any]


@dataclass(frozen=True)
class Report:
    """Sorted, de-duplicated view of a scan + prune run, ready for rendering."""

    used: tuple[str, ...]
    unused: UnusedByGroup
    kept_by_rule: tuple[str, ...]
    warnings: tuple[ScanWarning, ...]
    stats: ScanStats

    @classmethod
    def empty(cls) -> Report:
        return cls(
            used=(),
            unused=UnusedByGroup(),
            kept_by_rule=(),
            warnings=(),
            stats=ScanStats(),
        )

    @property
    def has_unused(self) -> bool:
        return bool(self.unused.dependencies or self.unused.devDependencies)
