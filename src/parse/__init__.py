"""Parsing utilities for remarker."""

from parse.line_map import LineMapper, LinePosition
from parse.scope import (
    Binding,
    NamespaceScopeResolver,
    ScopeLookup,
    ScopeResolver,
    StaticScopeResolver,
    build_static_scope,
)
from parse.treesitter_js import JavaScriptSyntaxError, parse_javascript

__all__ = [
    "Binding",
    "JavaScriptSyntaxError",
    "LineMapper",
    "LinePosition",
    "NamespaceScopeResolver",
    "ScopeLookup",
    "ScopeResolver",
    "StaticScopeResolver",
    "build_static_scope",
    "parse_javascript",
]
