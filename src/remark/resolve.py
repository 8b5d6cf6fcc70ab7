"""Bind pending annotation records to the declarations they decorate.

One pre-order traversal of the syntax tree. A node is considered only when
its relevant start line is a pending annotation target, and each claim is
owned by the nearest enclosing statement, so a later statement on the same
line can never overwrite an earlier one.

Four declaration shapes are recognized:

* function declarations: ``function name() {}``
* member assignments: ``A.b.c = function () {}``; the whole left-hand chain
  is rebuilt once per assignment and must name an existing callable
* variable declarations with object literals:
  ``var root = { a: { b: function () {} } }``
* bare calls: ``doSomething()``; collected during traversal and applied only
  after it, to records no other shape claimed
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

from parse.treesitter_js import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_EXPRESSION_TYPES,
    member_chain,
    node_text,
    property_key,
)
from remark.models import QualifiedName

if TYPE_CHECKING:
    from tree_sitter import Node, Tree

    from remark.context import ScanContext, StatementKey

_STATEMENT_SUFFIXES = ("_statement", "_declaration")
_VARIABLE_DECLARATION_TYPES = frozenset({"variable_declaration", "lexical_declaration"})

Candidate = tuple[int, QualifiedName]


def _statement_key(node: Node) -> StatementKey:
    return (node.start_byte, node.end_byte, node.type)


class DeclarationResolver:
    def __init__(self, context: ScanContext) -> None:
        self.context = context
        self._calls: dict[int, list[tuple[Node, StatementKey]]] = {}

    @property
    def _source(self) -> bytes:
        return self.context.source_bytes

    def run(self, tree: Tree) -> None:
        if not self.context.line_index:
            return
        root = tree.root_node
        stack = [(root, _statement_key(root))]
        while stack:
            node, statement = stack.pop()
            if node.type.endswith(_STATEMENT_SUFFIXES):
                statement = _statement_key(node)
            self._visit(node, statement)
            stack.extend((child, statement) for child in reversed(node.children))
        self._apply_call_fallback()

    def _visit(self, node: Node, statement: StatementKey) -> None:
        if node.type in FUNCTION_DECLARATION_TYPES:
            self._function_declaration(node, statement)
        elif node.type == "assignment_expression":
            self._member_assignment(node, statement)
        elif node.type == "call_expression":
            self._collect_call(node, statement)
        elif node.type in _VARIABLE_DECLARATION_TYPES:
            self._variable_declaration(node, statement)

    def _function_declaration(self, node: Node, statement: StatementKey) -> None:
        index = self.context.pending_at(node.start_byte)
        name_node = node.child_by_field_name("name")
        if index is None or name_node is None:
            return
        name = QualifiedName(leaf_name=node_text(self._source, name_node))
        self.context.claim(index, name, "function", statement)

    def _member_assignment(self, node: Node, statement: StatementKey) -> None:
        left = node.child_by_field_name("left")
        if left is None:
            return
        index = self.context.pending_at(left.start_byte)
        if index is None:
            return
        chain = member_chain(self._source, left)
        if not chain:
            return

        name = QualifiedName(path_segments=tuple(chain[:-1]), leaf_name=chain[-1])
        if self.context.is_callable(name):
            self.context.claim(index, name, "member", statement)
        else:
            logger.debug("{} is not a known callable", name.dotted)

    def _collect_call(self, node: Node, statement: StatementKey) -> None:
        line = self.context.line_of(node.start_byte)
        if line in self.context.line_index:
            self._calls.setdefault(line, []).append((node, statement))

    def _callee_name(self, node: Node) -> QualifiedName | None:
        callee = node.child_by_field_name("function")
        if callee is None:
            return None
        if callee.type == "identifier":
            return QualifiedName(leaf_name=node_text(self._source, callee))

        chain = member_chain(self._source, callee)
        if not chain or len(chain) < 2:
            return None
        name = QualifiedName(path_segments=tuple(chain[:-1]), leaf_name=chain[-1])
        return name if self.context.is_callable(name) else None

    def _apply_call_fallback(self) -> None:
        for line, calls in self._calls.items():
            index = self.context.line_index[line]
            if self.context.records[index].resolved:
                continue
            for node, statement in calls:
                name = self._callee_name(node)
                if name is not None:
                    self.context.claim(index, name, "call", statement)
                    break

    def _variable_declaration(self, node: Node, statement: StatementKey) -> None:
        candidates: list[Candidate] = []
        for declarator in node.named_children:
            if declarator.type != "variable_declarator":
                continue
            name_node = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name_node is None or name_node.type != "identifier" or value is None:
                continue

            root = node_text(self._source, name_node)
            if value.type == "object":
                self._collect_members(value, [root], candidates)
            elif value.type in FUNCTION_EXPRESSION_TYPES:
                self._add_candidate(value, [], root, candidates)

        for index, name in candidates:
            if self.context.is_callable(name):
                self.context.claim(index, name, "variable", statement)
            else:
                logger.debug("{} is not a known callable", name.dotted)

    def _collect_members(
        self, obj: Node, prefix: list[str], out: list[Candidate]
    ) -> None:
        for prop in obj.named_children:
            if prop.type == "method_definition":
                key = property_key(self._source, prop.child_by_field_name("name"))
                if key is not None:
                    self._add_candidate(prop, prefix, key, out)
                continue
            if prop.type != "pair":
                continue

            key = property_key(self._source, prop.child_by_field_name("key"))
            value = prop.child_by_field_name("value")
            if key is None or value is None:
                continue
            if value.type == "object":
                # Each branch extends its own copy of the prefix.
                self._collect_members(value, [*prefix, key], out)
            elif value.type in FUNCTION_EXPRESSION_TYPES:
                self._add_candidate(value, prefix, key, out)

    def _add_candidate(
        self, node: Node, prefix: list[str], leaf: str, out: list[Candidate]
    ) -> None:
        index = self.context.pending_at(node.start_byte)
        if index is not None:
            name = QualifiedName(path_segments=tuple(prefix), leaf_name=leaf)
            out.append((index, name))


__all__ = ["DeclarationResolver"]
