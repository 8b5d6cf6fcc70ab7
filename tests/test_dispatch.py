from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from loguru import logger

from remark.dispatch import DEFAULT_HANDLER, build_registry, describe, dispatch
from remark.engine import process
from remark.models import AnnotationRecord, QualifiedName
from rules.config import RemarkConfig

if TYPE_CHECKING:
    from collections.abc import Iterator

_SOURCE = (
    "var app = {\n"
    "  // @Log\n"
    "  start: function () {}\n"
    "};\n"
    "// @Cache({\"ttl\": 30})\n"
    "function load() {}\n"
    "// @Log\n"
    "app.stop = function () {};\n"
)


@pytest.fixture
def log_messages() -> Iterator[list[str]]:
    messages: list[str] = []
    handler_id = logger.add(
        lambda message: messages.append(str(message).rstrip()),
        format="{message}",
        level="INFO",
    )
    yield messages
    logger.remove(handler_id)


def _record(
    name: str, line: int, declaration: QualifiedName | None = None
) -> AnnotationRecord:
    return AnnotationRecord(
        line=line, name=name, comment_line=line - 1, declaration=declaration
    )


def test_each_resolved_annotation_dispatches_once_in_source_order() -> None:
    calls: list[tuple[str, str | None]] = []

    def record_call(record: AnnotationRecord) -> None:
        target = record.declaration.dotted if record.declaration else None
        calls.append((record.name, target))

    process(_SOURCE, {"Log": record_call, "Cache": record_call})

    assert calls == [
        ("Log", "app.start"),
        ("Cache", "load"),
        ("Log", "app.stop"),
    ]


def test_handler_receives_params() -> None:
    received: list[dict] = []

    process(_SOURCE, {"Cache": lambda record: received.append(record.params)})

    assert received == [{"ttl": 30}]


def test_unknown_names_fall_back_to_info_handler() -> None:
    seen: list[str] = []

    process(_SOURCE, {DEFAULT_HANDLER: lambda record: seen.append(record.name)})

    assert seen == ["Log", "Cache", "Log"]


def test_caller_handlers_override_defaults() -> None:
    custom = lambda record: None  # noqa: E731

    registry = build_registry({DEFAULT_HANDLER: custom})

    assert registry[DEFAULT_HANDLER] is custom
    assert build_registry()[DEFAULT_HANDLER] is describe


def test_describe_logs_declaration(log_messages: list[str]) -> None:
    start = QualifiedName(path_segments=("app",), leaf_name="start")
    describe(_record("Log", 3, start))
    describe(_record("Log", 9))

    assert log_messages == [
        "Annotation Log at line 3 for app.start",
        "Annotation Log at line 9 for <unresolved>",
    ]


def test_default_dispatch_logs_every_annotation(log_messages: list[str]) -> None:
    process(_SOURCE)

    assert log_messages == [
        "Annotation Log at line 3 for app.start",
        "Annotation Cache at line 6 for load",
        "Annotation Log at line 8 for app.stop",
    ]


def test_handler_errors_propagate_and_stop_dispatch() -> None:
    calls: list[str] = []

    def explode(record: AnnotationRecord) -> None:
        raise RuntimeError(record.name)

    records = [_record("Boom", 2), _record("Ok", 4)]

    with pytest.raises(RuntimeError, match="Boom"):
        dispatch(records, {"Boom": explode, "Ok": lambda r: calls.append(r.name)})

    assert calls == []


def test_isolated_dispatch_logs_and_continues(log_messages: list[str]) -> None:
    calls: list[str] = []

    def explode(record: AnnotationRecord) -> None:
        raise RuntimeError(record.name)

    records = [_record("Boom", 2), _record("Ok", 4)]

    completed = dispatch(
        records,
        {"Boom": explode, "Ok": lambda r: calls.append(r.name)},
        isolate=True,
    )

    assert completed == 1
    assert calls == ["Ok"]
    assert any("Handler for @Boom on line 2 failed" in m for m in log_messages)


def test_isolation_can_be_enabled_through_config() -> None:
    calls: list[str] = []

    def explode(record: AnnotationRecord) -> None:
        raise RuntimeError(record.name)

    process(
        _SOURCE,
        {"Cache": explode, "Log": lambda r: calls.append(r.name)},
        config=RemarkConfig(isolate_handlers=True),
    )

    assert calls == ["Log", "Log"]


def test_unresolved_records_are_dispatched_with_no_declaration() -> None:
    seen: list[AnnotationRecord] = []

    process("// @Log\nlet x = 1;\n", {"Log": seen.append})

    assert len(seen) == 1
    assert seen[0].declaration is None
