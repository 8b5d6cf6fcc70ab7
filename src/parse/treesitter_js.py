"""Tree-sitter based JavaScript parsing with in-order comment interception."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser, Tree
from tree_sitter_javascript import language as get_javascript_language

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    CommentCallback = Callable[[bool, str, int, int], None]

_PARSER: Parser | None = None

# Grammar releases before 0.21 name function expressions plain "function".
FUNCTION_EXPRESSION_TYPES = frozenset(
    {"function", "function_expression", "arrow_function", "generator_function"}
)
FUNCTION_DECLARATION_TYPES = frozenset(
    {"function_declaration", "generator_function_declaration"}
)


class JavaScriptSyntaxError(ValueError):
    """Raised when the source does not parse as JavaScript."""

    def __init__(self, message: str, *, line: int, column: int) -> None:
        super().__init__(f"{message} at line {line}, column {column}")
        self.line = line
        self.column = column


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with JavaScript language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_javascript_language())
        _PARSER = Parser(lang)

    return _PARSER


def node_text(source_bytes: bytes, node: Node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf8", errors="ignore")


def _string_literal_value(source_bytes: bytes, node: Node) -> str | None:
    if node.type != "string":
        return None
    fragments = [
        node_text(source_bytes, child)
        for child in node.named_children
        if child.type == "string_fragment"
    ]
    if any(child.type == "escape_sequence" for child in node.named_children):
        return None
    return "".join(fragments)


def property_key(source_bytes: bytes, node: Node | None) -> str | None:
    """Return the static name of an object-literal key, if it has one."""
    if node is None:
        return None
    if node.type in ("property_identifier", "identifier", "number"):
        return node_text(source_bytes, node)
    return _string_literal_value(source_bytes, node)


def member_chain(source_bytes: bytes, node: Node | None) -> list[str] | None:
    """Flatten ``A.b["c"].d`` into ``["A", "b", "c", "d"]``.

    Returns None for anything that is not a static chain rooted at a plain
    identifier (``this``, calls, computed subscripts, optional chaining).
    """
    segments: list[str] = []
    while node is not None:
        if node.type == "identifier":
            segments.append(node_text(source_bytes, node))
            segments.reverse()
            return segments
        if node.type == "parenthesized_expression" and node.named_child_count == 1:
            node = node.named_children[0]
        elif node.type == "member_expression":
            prop = node.child_by_field_name("property")
            if (
                node.child_by_field_name("optional_chain") is not None
                or prop is None
                or prop.type != "property_identifier"
            ):
                return None
            segments.append(node_text(source_bytes, prop))
            node = node.child_by_field_name("object")
        elif node.type == "subscript_expression":
            index = node.child_by_field_name("index")
            key = _string_literal_value(source_bytes, index) if index else None
            if key is None:
                return None
            segments.append(key)
            node = node.child_by_field_name("object")
        else:
            return None
    return None


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield ``node`` and its descendants in pre-order (source order)."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _first_error(root: Node) -> Node | None:
    if not root.has_error:
        return None
    for node in iter_nodes(root):
        if node.is_error or node.is_missing:
            return node
    return None


def _comment_body(raw: str) -> tuple[bool, str]:
    """Split a comment node's text into (is_block, text without delimiters)."""
    if raw.startswith("/*"):
        body = raw[2:]
        return True, body[:-2] if body.endswith("*/") else body
    return False, raw[2:] if raw.startswith("//") else raw


def parse_javascript(
    source_bytes: bytes,
    on_comment: CommentCallback | None = None,
) -> Tree:
    """Parse JavaScript source and report every comment in source order.

    Args:
        source_bytes: UTF-8 encoded source of one compilation unit
        on_comment: Optional callback invoked as
            ``on_comment(is_block, text, start_byte, end_byte)`` for each
            comment, with the ``//`` or ``/* */`` delimiters removed

    Returns:
        The Tree-sitter syntax tree, unmodified.

    Raises:
        JavaScriptSyntaxError: if the tree contains error or missing nodes.
    """
    parser = _get_parser()
    tree = parser.parse(source_bytes)
    root_node = tree.root_node

    error_node = _first_error(root_node)
    if error_node is not None:
        kind = "missing token" if error_node.is_missing else "unexpected token"
        raise JavaScriptSyntaxError(
            kind,
            line=error_node.start_point[0] + 1,
            column=error_node.start_point[1] + 1,
        )

    if on_comment is not None:
        for node in iter_nodes(root_node):
            if node.type != "comment":
                continue
            is_block, text = _comment_body(node_text(source_bytes, node))
            on_comment(is_block, text, node.start_byte, node.end_byte)

    return tree


__all__ = [
    "FUNCTION_DECLARATION_TYPES",
    "FUNCTION_EXPRESSION_TYPES",
    "JavaScriptSyntaxError",
    "iter_nodes",
    "member_chain",
    "node_text",
    "parse_javascript",
    "property_key",
]
