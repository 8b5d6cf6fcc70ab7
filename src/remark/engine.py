"""Entry points: parse, resolve and dispatch one JavaScript source unit."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger

from parse.line_map import LineMapper
from parse.scope import StaticScopeResolver, build_static_scope
from parse.treesitter_js import parse_javascript
from remark.comments import AnnotationExtractor
from remark.context import ScanContext
from remark.dispatch import dispatch
from remark.resolve import DeclarationResolver
from rules.config import RemarkConfig

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tree_sitter import Tree

    from parse.scope import ScopeResolver
    from remark.dispatch import Handler
    from remark.models import AnnotationRecord


def _scan(
    source: str | bytes,
    *,
    resolver: ScopeResolver | None,
    scope_root: Any,
    config: RemarkConfig,
) -> tuple[Tree, list[AnnotationRecord]]:
    source_bytes = source.encode("utf-8") if isinstance(source, str) else source
    context = ScanContext(
        source_bytes=source_bytes,
        line_mapper=LineMapper(source_bytes),
        resolver=resolver or StaticScopeResolver(),
        scope_root=scope_root,
    )

    extractor = AnnotationExtractor(
        context, skip_malformed=config.malformed_params == "skip"
    )
    tree = parse_javascript(source_bytes, on_comment=extractor)

    if context.scope_root is None and isinstance(context.resolver, StaticScopeResolver):
        context.scope_root = build_static_scope(tree, source_bytes)

    DeclarationResolver(context).run(tree)

    records = context.records
    if config.unresolved == "drop":
        for record in records:
            if not record.resolved:
                logger.debug(
                    "Dropping unresolved @{} on line {}", record.name, record.line
                )
        records = [record for record in records if record.resolved]
    return tree, records


def collect(
    source: str | bytes,
    *,
    resolver: ScopeResolver | None = None,
    scope_root: Any = None,
    config: RemarkConfig | None = None,
) -> list[AnnotationRecord]:
    """Extract and resolve annotations without dispatching them.

    Args:
        source: JavaScript source (``str`` or UTF-8 ``bytes``)
        resolver: Scope resolver used for existence/callable checks; defaults
            to a ``StaticScopeResolver`` over the program's own bindings
        scope_root: Root object handed to the resolver; built from the
            program when omitted and the resolver is static
        config: Processing policies; defaults apply when omitted

    Returns:
        Annotation records in source order.
    """
    _, records = _scan(
        source,
        resolver=resolver,
        scope_root=scope_root,
        config=config or RemarkConfig(),
    )
    return records


def process(
    source: str | bytes,
    handlers: Mapping[str, Handler] | None = None,
    *,
    resolver: ScopeResolver | None = None,
    scope_root: Any = None,
    config: RemarkConfig | None = None,
) -> Tree:
    """Extract, resolve and dispatch annotations; return the syntax tree."""
    config = config or RemarkConfig()
    tree, records = _scan(
        source, resolver=resolver, scope_root=scope_root, config=config
    )
    dispatch(records, handlers, isolate=config.isolate_handlers)
    return tree


__all__ = ["collect", "process"]
