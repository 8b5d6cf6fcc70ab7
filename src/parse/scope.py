"""Scope resolvers answering "does ``root.a.b.leaf`` exist and is it callable".

Two implementations of the same lookup contract:

* ``StaticScopeResolver`` works on a table of global bindings inferred from
  the parsed program itself (see ``build_static_scope``).
* ``NamespaceScopeResolver`` walks a live Python object graph, for callers
  that mirror the annotated program's objects in Python.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from parse.treesitter_js import (
    FUNCTION_DECLARATION_TYPES,
    FUNCTION_EXPRESSION_TYPES,
    iter_nodes,
    member_chain,
    node_text,
    property_key,
)

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from tree_sitter import Node, Tree

_MISSING = object()


@dataclass(frozen=True)
class ScopeLookup:
    """Outcome of a qualified-name lookup."""

    found: bool
    is_callable: bool = False


NOT_FOUND = ScopeLookup(found=False)


class ScopeResolver(Protocol):
    def resolve(
        self, root: Any, path_segments: Sequence[str], leaf_name: str
    ) -> ScopeLookup: ...


@dataclass
class Binding:
    """A statically inferred value: callable or not, plus known members."""

    callable: bool = False
    members: dict[str, Binding] = field(default_factory=dict)

    def walk(self, segments: Sequence[str]) -> Binding | None:
        current: Binding | None = self
        for segment in segments:
            if current is None:
                return None
            current = current.members.get(segment)
        return current


class StaticScopeResolver:
    """Resolve qualified names against a ``Binding`` table."""

    def resolve(
        self, root: Binding, path_segments: Sequence[str], leaf_name: str
    ) -> ScopeLookup:
        leaf = root.walk([*path_segments, leaf_name])
        if leaf is None:
            return NOT_FOUND
        return ScopeLookup(found=True, is_callable=leaf.callable)


def _lookup_member(container: Any, name: str) -> Any:
    if isinstance(container, Mapping) and name in container:
        return container[name]
    return getattr(container, name, _MISSING)


class NamespaceScopeResolver:
    """Resolve qualified names against Python objects and mappings.

    Mapping keys are consulted before attributes at every step.
    """

    def resolve(
        self, root: Any, path_segments: Sequence[str], leaf_name: str
    ) -> ScopeLookup:
        current = root
        for segment in (*path_segments, leaf_name):
            current = _lookup_member(current, segment)
            if current is _MISSING:
                return NOT_FOUND
        return ScopeLookup(found=True, is_callable=callable(current))


def _top_level_statements(program: Node) -> Iterator[Node]:
    for child in program.named_children:
        if child.type == "export_statement":
            declaration = child.child_by_field_name("declaration")
            if declaration is not None:
                yield declaration
            continue
        yield child


class _ScopeBuilder:
    def __init__(self, source_bytes: bytes) -> None:
        self.source_bytes = source_bytes
        self.root = Binding()
        self.hosts: set[str] = set()

    def _name(self, node: Node | None) -> str | None:
        if node is None or node.type != "identifier":
            return None
        return node_text(self.source_bytes, node)

    def binding_for(self, value: Node | None) -> Binding:
        if value is None:
            return Binding()
        if value.type in FUNCTION_EXPRESSION_TYPES or value.type == "class":
            return Binding(callable=True)
        if value.type == "object":
            return self.object_binding(value)
        if value.type == "assignment_expression":
            return self.binding_for(value.child_by_field_name("right"))
        if value.type == "parenthesized_expression" and value.named_child_count == 1:
            return self.binding_for(value.named_children[0])

        chain = member_chain(self.source_bytes, value)
        if chain is not None:
            aliased = self.root.walk(chain)
            if aliased is not None:
                return aliased
        return Binding()

    def object_binding(self, node: Node) -> Binding:
        binding = Binding()
        for child in node.named_children:
            if child.type == "pair":
                key = property_key(self.source_bytes, child.child_by_field_name("key"))
                if key is not None:
                    binding.members[key] = self.binding_for(
                        child.child_by_field_name("value")
                    )
            elif child.type == "method_definition":
                key = property_key(
                    self.source_bytes, child.child_by_field_name("name")
                )
                if key is not None:
                    binding.members[key] = Binding(callable=True)
            elif child.type == "shorthand_property_identifier":
                key = node_text(self.source_bytes, child)
                binding.members[key] = self.root.members.get(key, Binding())
        return binding

    def declare_hoisted(self, program: Node) -> None:
        for statement in _top_level_statements(program):
            if statement.type in FUNCTION_DECLARATION_TYPES:
                name = self._name(statement.child_by_field_name("name"))
                if name is not None:
                    self.root.members.setdefault(name, Binding(callable=True))

    def declare(self, statement: Node) -> None:
        if statement.type == "class_declaration":
            name = self._name(statement.child_by_field_name("name"))
            if name is not None:
                self.root.members[name] = Binding(callable=True)
            return
        if statement.type not in ("variable_declaration", "lexical_declaration"):
            return
        for declarator in statement.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = self._name(declarator.child_by_field_name("name"))
            if name is None:
                continue
            value = declarator.child_by_field_name("value")
            if value is None:
                self.root.members.setdefault(name, Binding())
            else:
                self.root.members[name] = self.binding_for(value)

    def _owner(self, path: Sequence[str]) -> Binding | None:
        if not path:
            return self.root
        head = path[0]
        if head not in self.root.members:
            # Undeclared roots are host objects (window, exports, ...).
            self.hosts.add(head)
            self.root.members[head] = Binding()
        if head not in self.hosts:
            return self.root.walk(path)
        current = self.root
        for segment in path:
            current = current.members.setdefault(segment, Binding())
        return current

    def assign(self, node: Node) -> None:
        chain = member_chain(self.source_bytes, node.child_by_field_name("left"))
        if not chain:
            return
        owner = self._owner(chain[:-1])
        # Assigning through a missing parent throws at runtime; nothing binds.
        if owner is None:
            return
        owner.members[chain[-1]] = self.binding_for(node.child_by_field_name("right"))


def build_static_scope(tree: Tree, source_bytes: bytes) -> Binding:
    """Infer the program's global bindings, applying statements in source order.

    Function declarations are hoisted. Top-level ``var``/``let``/``const``
    and class declarations bind globals; assignments anywhere in the file
    (including inside function bodies) extend existing bindings or create
    implicit globals. A member chain rooted at an undeclared identifier is
    treated as a host object whose intermediate members spring into
    existence; through a declared root, a missing intermediate binds nothing.
    """
    program = tree.root_node
    builder = _ScopeBuilder(source_bytes)
    builder.declare_hoisted(program)

    top_level = {
        (statement.start_byte, statement.end_byte, statement.type)
        for statement in _top_level_statements(program)
    }
    for node in iter_nodes(program):
        if node.type == "assignment_expression":
            builder.assign(node)
        elif (node.start_byte, node.end_byte, node.type) in top_level:
            builder.declare(node)

    return builder.root


__all__ = [
    "NOT_FOUND",
    "Binding",
    "NamespaceScopeResolver",
    "ScopeLookup",
    "ScopeResolver",
    "StaticScopeResolver",
    "build_static_scope",
]
