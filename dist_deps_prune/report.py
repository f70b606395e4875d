"""Report building and rendering (human text and JSON)."""

from __future__ import annotations

import json
from collections.abc import Iterable

from dist_deps_prune.models import PrunePlan, Report, ScanOutcome, ScanWarning, UnusedByGroup


def _sort_unique(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted(set(values)))


def build_report(outcome: ScanOutcome, plan: PrunePlan) -> Report:
    unused = plan.unused
    return Report(
        used=_sort_unique(outcome.used),
        unused=UnusedByGroup(
            dependencies=_sort_unique(unused.dependencies),
            devDependencies=_sort_unique(unused.devDependencies),
            optionalDependencies=_sort_unique(unused.optionalDependencies),
            peerDependencies=_sort_unique(unused.peerDependencies),
        ),
        kept_by_rule=_sort_unique(plan.kept_by_rule),
        warnings=outcome.warnings,
        stats=outcome.stats,
    )


def _section(title: str, values: Iterable[str]) -> list[str]:
    values = list(values)
    if not values:
        return [f"{title}: (none)"]
    return [f"{title}:", *(f"  - {value}" for value in values)]


def _format_warning(warning: ScanWarning) -> str:
    return f"[{warning.type}] {warning.file}: {warning.detail}"


def render_human_report(report: Report) -> str:
    lines = [
        *_section("USED", report.used),
        *_section("Unused dependencies", report.unused.dependencies),
        *_section("Unused devDependencies", report.unused.devDependencies),
        *_section("Unused optionalDependencies", report.unused.optionalDependencies),
        *_section("Peer dependencies (reported only)", report.unused.peerDependencies),
        *_section("Warnings", (_format_warning(w) for w in report.warnings)),
        f"Stats: filesScanned={report.stats.files_scanned}, "
        f"importsFound={report.stats.imports_found}",
    ]
    return "\n".join(lines)


def render_json_report(report: Report) -> str:
    payload = {
        "used": list(report.used),
        "unused": {
            "dependencies": list(report.unused.dependencies),
            "devDependencies": list(report.unused.devDependencies),
        },
        "keptByRule": list(report.kept_by_rule),
        "warnings": [w.to_dict() for w in report.warnings],
        "stats": {
            "filesScanned": report.stats.files_scanned,
            "importsFound": report.stats.imports_found,
        },
    }
    return json.dumps(payload, indent=2, ensure_ascii=False)
