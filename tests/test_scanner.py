"""Tests for the dist scanner and scan outcome merging."""

from __future__ import annotations

import pytest

from dist_deps_prune.engine.dist_path import default_patterns
from dist_deps_prune.engine.scanner import ScanSettings, scan_all, scan_dist
from dist_deps_prune.exceptions import DistNotFoundError, ParseFailureError
from dist_deps_prune.models import ScanOutcome, ScanStats, ScanWarning


def _settings(root, **kwargs) -> ScanSettings:
    return ScanSettings(dist_path=str(root), patterns=default_patterns(str(root)), **kwargs)


# ── scan_dist ──────────────────────────────────────────────────────────


class TestScanDist:
    def test_collects_used_packages(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(
            dist,
            {
                "index.js": 'import a from "a";\nimport fs from "node:fs";\nimport "./local.js";\n',
                "cjs/index.cjs": 'const b = require("b/sub");\n',
                "types/index.d.ts": 'import type { T } from "@types/c";\n',
                "README.md": 'import x from "not-scanned"',
            },
        )
        outcome = scan_dist(_settings(dist))
        assert outcome.used == frozenset({"a", "b", "@types/c"})
        assert outcome.warnings == ()
        assert outcome.stats == ScanStats(files_scanned=3, imports_found=5)

    def test_missing_root(self, tmp_path):
        with pytest.raises(DistNotFoundError, match="Dist directory not found"):
            scan_dist(_settings(tmp_path / "nope"))

    def test_dynamic_warnings_in_order(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(dist, {"a.js": "import(foo);\nrequire(bar);\nimport(baz);\n"})
        outcome = scan_dist(_settings(dist))
        assert [w.type for w in outcome.warnings] == [
            "dynamic-import",
            "dynamic-import",
            "dynamic-require",
        ]
        assert outcome.warnings[0].expr == "import(foo)"
        assert outcome.has_uncertainty

    def test_parse_error_becomes_warning(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(dist, {"bad.js": "const = ;", "good.js": 'import "ok";'})
        outcome = scan_dist(_settings(dist))
        assert outcome.used == frozenset({"ok"})
        assert len(outcome.warnings) == 1
        warning = outcome.warnings[0]
        assert warning.type == "parse-error"
        assert warning.file.endswith("dist/bad.js")
        assert outcome.stats.files_scanned == 2

    def test_strict_parse_error_raises(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(dist, {"bad.js": "const = ;"})
        with pytest.raises(ParseFailureError):
            scan_dist(_settings(dist, strict=True))

    def test_ignore_patterns(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(
            dist,
            {"index.js": 'import "kept";', "vendor/x.js": 'import "skipped";'},
        )
        outcome = scan_dist(_settings(dist, ignore_patterns=["vendor/**"]))
        assert outcome.used == frozenset({"kept"})
        assert outcome.stats.files_scanned == 1

    def test_root_relative_patterns(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(dist, {"esm/a.mjs": 'import "m";', "cjs/a.cjs": 'require("c");'})
        outcome = scan_dist(ScanSettings(dist_path=str(dist), patterns=["esm/**/*.mjs"]))
        assert outcome.used == frozenset({"m"})

    def test_invalid_utf8_still_scanned(self, tmp_path):
        dist = tmp_path / "dist"
        dist.mkdir()
        (dist / "index.js").write_bytes(b'// \xff\nconst a = require("a");\n')
        outcome = scan_dist(_settings(dist))
        assert outcome.used == frozenset({"a"})
        assert outcome.warnings == ()

    def test_trailing_slash_dist_path(self, tmp_path, write_tree):
        dist = tmp_path / "dist"
        write_tree(dist, {"index.js": 'import "a";'})
        root = f"{dist}/"
        outcome = scan_dist(ScanSettings(dist_path=root, patterns=default_patterns(root)))
        assert outcome.used == frozenset({"a"})
        assert outcome.stats.files_scanned == 1

    def test_import_attributes_never_silently_dropped(self, tmp_path, write_tree):
        # Grammar versions differ on import attributes: either the
        # specifier is found or the file is reported as unparsed.
        dist = tmp_path / "dist"
        write_tree(dist, {"index.js": 'export { a } from "b" with { type: "json" };\n'})
        outcome = scan_dist(_settings(dist))
        parse_errors = [w for w in outcome.warnings if w.type == "parse-error"]
        assert "b" in outcome.used or parse_errors
        assert outcome.stats.files_scanned == 1


# ── multi-root ─────────────────────────────────────────────────────────


class TestScanAll:
    def test_merges_roots_in_order(self, tmp_path, write_tree):
        write_tree(
            tmp_path,
            {
                "lib/index.js": 'import "a";\nimport(x);\n',
                "bin/cli.js": 'require("b");\nrequire(y);\n',
            },
        )
        outcome = scan_all([_settings(tmp_path / "lib"), _settings(tmp_path / "bin")], concurrency=2)
        assert outcome.used == frozenset({"a", "b"})
        assert [w.expr for w in outcome.warnings] == ["import(x)", "require(y)"]
        assert outcome.stats.files_scanned == 2

    def test_empty_list(self):
        assert scan_all([]) == ScanOutcome.empty()

    def test_missing_root_propagates(self, tmp_path):
        (tmp_path / "lib").mkdir()
        with pytest.raises(DistNotFoundError):
            scan_all([_settings(tmp_path / "lib"), _settings(tmp_path / "gone")])


# ── ScanOutcome merge ──────────────────────────────────────────────────


def _outcome(used, files, warn_file=None) -> ScanOutcome:
    warnings = (ScanWarning(type="dynamic-import", file=warn_file, expr="import(x)"),) if warn_file else ()
    return ScanOutcome(used=frozenset(used), warnings=warnings, stats=ScanStats(files, len(used)))


class TestScanOutcomeMerge:
    def test_union_and_sum(self):
        merged = _outcome({"a"}, 1, "x.js").merge(_outcome({"a", "b"}, 2, "y.js"))
        assert merged.used == frozenset({"a", "b"})
        assert merged.stats == ScanStats(files_scanned=3, imports_found=3)
        assert [w.file for w in merged.warnings] == ["x.js", "y.js"]

    def test_identity(self):
        a = _outcome({"a"}, 1, "x.js")
        assert ScanOutcome.empty().merge(a) == a
        assert a.merge(ScanOutcome.empty()) == a

    def test_associative(self):
        a, b, c = _outcome({"a"}, 1, "a.js"), _outcome({"b"}, 2), _outcome({"c"}, 3, "c.js")
        assert a.merge(b).merge(c) == a.merge(b.merge(c))

    def test_commutative_on_used_and_stats(self):
        a, b = _outcome({"a"}, 1), _outcome({"b", "c"}, 2)
        assert a.merge(b).used == b.merge(a).used
        assert a.merge(b).stats == b.merge(a).stats


class TestScanWarning:
    def test_unknown_type_rejected(self):
        with pytest.raises(ValueError):
            ScanWarning(type="other", file="a.js")

    def test_to_dict(self):
        assert ScanWarning(type="parse-error", file="a.js", error="boom").to_dict() == {
            "type": "parse-error",
            "file": "a.js",
            "error": "boom",
        }
        assert ScanWarning(type="dynamic-require", file="a.js", expr="require(x)").to_dict() == {
            "type": "dynamic-require",
            "file": "a.js",
            "expr": "require(x)",
        }
