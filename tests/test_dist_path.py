"""Tests for dist directory and root inference."""

from __future__ import annotations

import pytest

from dist_deps_prune.engine.dist_path import (
    default_patterns,
    infer_dist_dir,
    infer_dist_roots,
)


class TestInferDistDir:
    def test_prefers_js_entrypoints(self):
        manifest = {"name": "fixture", "main": "lib/index.js", "files": ["dist", "README.md"]}
        assert infer_dist_dir(manifest) == "lib"

    def test_exports_intersected_with_files(self):
        manifest = {
            "name": "fixture",
            "exports": {".": {"import": "./dist/index.mjs", "types": "./types/index.d.ts"}},
            "files": ["dist", "types"],
        }
        assert infer_dist_dir(manifest) == "dist"

    def test_types_only_entrypoint(self):
        manifest = {"types": "./types/index.d.ts"}
        assert infer_dist_dir(manifest) == "types"

    def test_falls_back_to_files(self):
        manifest = {"name": "fixture", "files": ["build", "README.md"]}
        assert infer_dist_dir(manifest) == "build"

    def test_nothing_to_infer(self):
        assert infer_dist_dir({"name": "fixture", "files": ["README.md"]}) is None
        assert infer_dist_dir({}) is None

    def test_bin_map(self):
        manifest = {"bin": {"tool": "./bin/tool.js"}}
        assert infer_dist_dir(manifest) == "bin"

    def test_root_level_entrypoint_ignored(self):
        manifest = {"main": "index.js", "files": ["out/"]}
        assert infer_dist_dir(manifest) == "out"

    def test_most_frequent_then_lexicographic(self):
        manifest = {"main": "b/index.js", "module": "a/index.mjs", "exports": {"x": "./a/x.js"}}
        assert infer_dist_dir(manifest) == "a"
        tie = {"main": "b/index.js", "module": "a/index.mjs"}
        assert infer_dist_dir(tie) == "a"

    def test_negated_files_ignored(self):
        assert infer_dist_dir({"files": ["!dist", "lib"]}) == "lib"


class TestInferDistRoots:
    def test_unique_roots(self):
        manifest = {"name": "fixture", "files": ["dist", "lib/", "README.md", "lib/"]}
        assert infer_dist_roots(manifest) == ["dist", "lib"]

    def test_negation_and_wildcards(self):
        manifest = {"files": ["bin/cli.js", "lib/cjs/**", "!dist/secret.js"]}
        assert infer_dist_roots(manifest) == ["bin", "lib/cjs"]

    def test_no_files(self):
        assert infer_dist_roots({}) == []
        assert infer_dist_roots({"files": "dist"}) == []

    def test_top_level_wildcard_skipped(self):
        assert infer_dist_roots({"files": ["*.js", "./out/**/*.js"]}) == ["out"]


class TestPatterns:
    def test_default_patterns(self):
        assert default_patterns("dist") == [
            "dist/**/*.js",
            "dist/**/*.mjs",
            "dist/**/*.cjs",
            "dist/**/*.d.ts",
        ]

    @pytest.mark.parametrize("dist", ["dist/", "./dist/", "dist\\", "dist//"])
    def test_trailing_separators_ignored(self, dist):
        patterns = default_patterns(dist)
        assert patterns[0] in ("dist/**/*.js", "./dist/**/*.js")
        assert all("//" not in p for p in patterns)
