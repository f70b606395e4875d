"""Import extractor — finds module specifiers in built JS/TS files.

Uses tree-sitter with the JavaScript and TypeScript grammars. The extractor
only classifies four construct categories: import declarations, re-exports,
type-only ``import("x")`` references, and ``import()`` / ``require()`` /
``require.resolve()`` calls.
"""

from __future__ import annotations

import structlog
import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts
from tree_sitter import Language, Node, Parser

from dist_deps_prune.exceptions import ParseFailureError
from dist_deps_prune.models import ParsedImports

log = structlog.get_logger("dist_deps_prune.engine")

JS_LANGUAGE = Language(tsjs.language())
TS_LANGUAGE = Language(tsts.language_typescript())
TSX_LANGUAGE = Language(tsts.language_tsx())

_DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")
_TS_SUFFIXES = (".ts", ".mts", ".cts")

# Parents under which an ``import`` token is not a type-only reference.
_IMPORT_TOKEN_OWNERS = frozenset(
    {"import_statement", "call_expression", "meta_property", "import_alias"}
)
# Wrappers that may sit between a type-position ``import`` and its string.
_LITERAL_WRAPPERS = frozenset(
    {"arguments", "literal_type", "parenthesized_type", "parenthesized_expression", "ERROR"}
)

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


def language_for(file_name: str) -> tuple[Language, bool]:
    """Return ``(language, is_declaration)`` for a file name."""
    lowered = file_name.lower()
    if lowered.endswith(_DECLARATION_SUFFIXES):
        return TS_LANGUAGE, True
    if lowered.endswith(_TS_SUFFIXES):
        return TS_LANGUAGE, False
    if lowered.endswith(".tsx"):
        return TSX_LANGUAGE, False
    return JS_LANGUAGE, False


def _text(node: Node) -> str:
    return node.text.decode("utf-8", errors="replace")


def _decode_escape(sequence: str) -> str:
    body = sequence[1:]
    if body in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[body]
    if body in ("\n", "\r\n", "\r"):
        return ""
    try:
        if body.startswith("u{"):
            return chr(int(body[2:-1], 16))
        if body.startswith("u") and len(body) == 5:
            return chr(int(body[1:], 16))
        if body.startswith("x") and len(body) == 3:
            return chr(int(body[1:], 16))
    except ValueError:
        return body
    return body


def _string_literal(node: Node) -> str | None:
    """Value of a string or substitution-free template literal, else None."""
    if node.type == "string":
        pieces: list[str] = []
        for child in node.named_children:
            if child.type == "escape_sequence":
                pieces.append(_decode_escape(_text(child)))
            else:
                pieces.append(_text(child))
        return "".join(pieces)
    if node.type == "template_string":
        if any(c.type == "template_substitution" for c in node.named_children):
            return None
        # Template chars are not always exposed as nodes; slice around escapes.
        raw = node.text
        pieces = []
        cursor = 1
        for child in node.named_children:
            if child.type == "escape_sequence":
                start = child.start_byte - node.start_byte
                pieces.append(raw[cursor:start].decode("utf-8", errors="replace"))
                pieces.append(_decode_escape(_text(child)))
                cursor = child.end_byte - node.start_byte
        pieces.append(raw[cursor:-1].decode("utf-8", errors="replace"))
        return "".join(pieces)
    return None


def _first_argument_literal(arguments: Node | None) -> str | None:
    if arguments is None or arguments.type != "arguments":
        return None
    named = arguments.named_children
    if not named:
        return None
    return _string_literal(named[0])


def _unwrap_literal(node: Node, depth: int = 0) -> str | None:
    literal = _string_literal(node)
    if literal is not None:
        return literal
    if depth < 3 and node.type in _LITERAL_WRAPPERS and node.named_children:
        return _unwrap_literal(node.named_children[0], depth + 1)
    return None


def _is_require_resolve(function: Node) -> bool:
    if function.type != "member_expression":
        return False
    obj = function.child_by_field_name("object")
    prop = function.child_by_field_name("property")
    return (
        obj is not None
        and prop is not None
        and obj.type == "identifier"
        and _text(obj) == "require"
        and _text(prop) == "resolve"
    )


class ImportExtractor:
    """Parse a source file and collect its import specifiers."""

    def extract(self, source: str, file_name: str) -> ParsedImports:
        """Extract specifiers from *source*.

        Declaration files are parsed tolerantly; any other file whose tree
        contains syntax errors raises :class:`ParseFailureError`.
        """
        language, is_declaration = language_for(file_name)
        parser = Parser(language)
        tree = parser.parse(source.encode("utf-8"))

        if not is_declaration and tree.root_node.has_error:
            message = "; ".join(self._diagnostics(tree.root_node)) or "syntax error"
            log.debug("extractor.parse_failed", file=file_name, error=message)
            raise ParseFailureError(file_name, message)

        return self._collect(tree.root_node)

    def _collect(self, root: Node) -> ParsedImports:
        static: list[str] = []
        dynamic_imports: list[str] = []
        dynamic_requires: list[str] = []

        # Iterative pre-order walk; minified bundles nest deeply.
        stack = [root]
        while stack:
            node = stack.pop()
            kind = node.type
            if kind == "import_statement":
                literal = self._import_statement_source(node)
                if literal is not None:
                    static.append(literal)
            elif kind == "export_statement":
                source = node.child_by_field_name("source")
                literal = _string_literal(source) if source is not None else None
                if literal is not None:
                    static.append(literal)
            elif kind == "call_expression":
                self._classify_call(node, static, dynamic_imports, dynamic_requires)
            elif kind == "import":
                literal = self._import_type_literal(node)
                if literal is not None:
                    static.append(literal)
            stack.extend(reversed(node.children))

        return ParsedImports(
            static_specifiers=tuple(static),
            dynamic_imports=tuple(dynamic_imports),
            dynamic_requires=tuple(dynamic_requires),
        )

    @staticmethod
    def _import_statement_source(node: Node) -> str | None:
        source = node.child_by_field_name("source")
        if source is None:
            # TypeScript: import x = require("y")
            for child in node.named_children:
                if child.type == "import_require_clause":
                    source = child.child_by_field_name("source") or next(
                        (c for c in child.named_children if c.type == "string"), None
                    )
                    break
        return _string_literal(source) if source is not None else None

    @staticmethod
    def _classify_call(
        node: Node,
        static: list[str],
        dynamic_imports: list[str],
        dynamic_requires: list[str],
    ) -> None:
        function = node.child_by_field_name("function")
        if function is None:
            return
        if function.type == "import":
            target = dynamic_imports
        elif (
            function.type == "identifier" and _text(function) == "require"
        ) or _is_require_resolve(function):
            target = dynamic_requires
        else:
            return
        literal = _first_argument_literal(node.child_by_field_name("arguments"))
        if literal is None:
            target.append(_text(node))
        else:
            static.append(literal)

    @staticmethod
    def _import_type_literal(node: Node) -> str | None:
        """Literal of a type-position ``import("x")`` reference, if any."""
        parent = node.parent
        if parent is None or parent.type in _IMPORT_TOKEN_OWNERS:
            return None
        sibling = node.next_sibling
        while sibling is not None and not sibling.is_named:
            if _text(sibling) != "(":
                return None
            sibling = sibling.next_sibling
        if sibling is None:
            return None
        return _unwrap_literal(sibling)

    @staticmethod
    def _diagnostics(root: Node) -> list[str]:
        messages: list[str] = []
        stack = [root]
        while stack:
            node = stack.pop()
            row, column = node.start_point
            if node.is_missing:
                messages.append(f"{row + 1}:{column + 1} missing '{node.type}'")
                continue
            if node.type == "ERROR":
                snippet = _text(node).strip().splitlines()
                shown = snippet[0][:40] if snippet else ""
                messages.append(f"{row + 1}:{column + 1} unexpected '{shown}'")
                continue
            if node.has_error:
                stack.extend(reversed(node.children))
        return messages
