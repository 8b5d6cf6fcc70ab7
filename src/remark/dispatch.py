"""Invoke annotation handlers for resolved records, in discovery order."""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

    from remark.models import AnnotationRecord

    Handler = Callable[[AnnotationRecord], object]

DEFAULT_HANDLER = "Info"


def describe(record: AnnotationRecord) -> None:
    """Log which declaration an annotation was bound to."""
    target = record.declaration.dotted if record.declaration else "<unresolved>"
    logger.info(
        "Annotation {} at line {} for {}", record.name, record.line, target
    )


DEFAULT_HANDLERS: dict[str, Handler] = {DEFAULT_HANDLER: describe}


def build_registry(handlers: Mapping[str, Handler] | None = None) -> dict[str, Handler]:
    """Merge caller handlers over the built-in ones (caller wins)."""
    return {**DEFAULT_HANDLERS, **(handlers or {})}


def dispatch(
    records: Iterable[AnnotationRecord],
    handlers: Mapping[str, Handler] | None = None,
    *,
    isolate: bool = False,
) -> int:
    """Call the handler registered for each record's annotation name.

    Records without an exact match go to the ``Info`` handler. Handler
    errors propagate and stop dispatch unless ``isolate`` is set, in which
    case they are logged and the remaining records are still dispatched.

    Returns:
        Number of handler calls that completed.
    """
    registry = build_registry(handlers)
    fallback = registry[DEFAULT_HANDLER]

    completed = 0
    for record in records:
        handler = registry.get(record.name, fallback)
        if not isolate:
            handler(record)
            completed += 1
            continue
        try:
            handler(record)
        except Exception:
            logger.exception(
                "Handler for @{} on line {} failed", record.name, record.line
            )
            continue
        completed += 1
    return completed


__all__ = [
    "DEFAULT_HANDLER",
    "DEFAULT_HANDLERS",
    "build_registry",
    "describe",
    "dispatch",
]
