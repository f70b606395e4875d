"""dist-deps-prune: find dependencies a published JS/TS build never imports."""

__version__ = "0.1.0"

from dist_deps_prune.engine.dist_path import infer_dist_dir, infer_dist_roots
from dist_deps_prune.engine.extractor import ImportExtractor
from dist_deps_prune.engine.normalize import normalize_package_name
from dist_deps_prune.engine.prune import build_prune_plan
from dist_deps_prune.engine.scanner import ScanSettings, scan_all, scan_dist
from dist_deps_prune.models import (
    ParsedImports,
    PrunePlan,
    Report,
    ScanOutcome,
    ScanStats,
    ScanWarning,
    UnusedByGroup,
)

__all__ = [
    "ImportExtractor",
    "ParsedImports",
    "PrunePlan",
    "Report",
    "ScanOutcome",
    "ScanSettings",
    "ScanStats",
    "ScanWarning",
    "UnusedByGroup",
    "build_prune_plan",
    "infer_dist_dir",
    "infer_dist_roots",
    "normalize_package_name",
    "scan_all",
    "scan_dist",
]
