"""Tests for package specifier normalization."""

from __future__ import annotations

import pytest

from dist_deps_prune.engine.normalize import normalize_package_name
from dist_deps_prune.node_builtins import NODE_BUILTINS


class TestNormalizePackageName:
    @pytest.mark.parametrize(
        "specifier, expected",
        [
            ("lodash", "lodash"),
            ("lodash/get", "lodash"),
            ("@scope/pkg", "@scope/pkg"),
            ("@scope/pkg/sub/path", "@scope/pkg"),
            ("  react  ", "react"),
        ],
    )
    def test_external_packages(self, specifier, expected):
        assert normalize_package_name(specifier, NODE_BUILTINS) == expected

    @pytest.mark.parametrize(
        "specifier",
        [
            "./local",
            "../up",
            "/abs/path",
            "C:\\win\\path",
            "#internal",
            "data:text/javascript,1",
            "http://example.com/x.js",
            "",
            "@",
            "@scope",
            "@/alias",
        ],
    )
    def test_not_a_package(self, specifier):
        assert normalize_package_name(specifier, NODE_BUILTINS) is None

    @pytest.mark.parametrize("specifier", ["fs", "node:fs", "fs/promises", "node:test", "path/posix"])
    def test_builtins(self, specifier):
        assert normalize_package_name(specifier, NODE_BUILTINS) is None

    def test_node_prefix_stripped_for_unknown_module(self):
        assert normalize_package_name("node:not-a-builtin", NODE_BUILTINS) == "not-a-builtin"

    def test_scoped_subpath_with_empty_builtins(self):
        assert normalize_package_name("@scope/pkg/sub", frozenset()) == "@scope/pkg"

    def test_builtin_name_is_package_without_builtins(self):
        assert normalize_package_name("fs", frozenset()) == "fs"

    @pytest.mark.parametrize("specifier", ["lodash/fp", "@a/b/c", "node:left-pad/x"])
    def test_idempotent(self, specifier):
        once = normalize_package_name(specifier, NODE_BUILTINS)
        assert normalize_package_name(once, NODE_BUILTINS) == once
