from __future__ import annotations

from types import SimpleNamespace

from parse.scope import NamespaceScopeResolver
from remark.engine import collect
from remark.models import AnnotationRecord, QualifiedName
from rules.config import RemarkConfig


def _only(records: list[AnnotationRecord]) -> AnnotationRecord:
    assert len(records) == 1
    return records[0]


def _qualified(path: tuple[str, ...], leaf: str) -> QualifiedName:
    return QualifiedName(path_segments=path, leaf_name=leaf)


def test_function_declaration_resolves_to_its_name() -> None:
    record = _only(collect("// @Log\nfunction foo() {}\n"))

    assert record.declaration == _qualified((), "foo")
    assert record.shape == "function"


def test_exported_function_declaration_resolves() -> None:
    record = _only(collect("// @Log\nexport function boot() {}\n"))

    assert record.declaration == _qualified((), "boot")


def test_chained_member_assignment_resolves_full_path() -> None:
    source = "var A = {}; A.b = {}; // @Log\nA.b.c = function(){};\n"

    record = _only(collect(source))

    assert record.line == 2
    assert record.declaration == _qualified(("A", "b"), "c")
    assert record.declaration.dotted == "A.b.c"
    assert record.shape == "member"


def test_string_subscript_is_part_of_member_chain() -> None:
    source = 'var A = { b: {} };\n// @Log\nA["b"].c = function () {};\n'

    record = _only(collect(source))

    assert record.declaration == _qualified(("A", "b"), "c")


def test_member_assignment_on_host_object_resolves() -> None:
    record = _only(collect("// @Log\nexports.handler = function () {};\n"))

    assert record.declaration == _qualified(("exports",), "handler")


def test_member_assignment_of_non_callable_stays_unresolved() -> None:
    record = _only(collect("var A = {};\n// @Log\nA.count = 5;\n"))

    assert record.declaration is None
    assert record.shape is None


def test_nested_object_literal_resolves_path_prefix() -> None:
    source = "var obj = { x: { /* @Log */\n  y: function(){} } };\n"

    record = _only(collect(source))

    assert record.declaration == _qualified(("obj", "x"), "y")
    assert record.shape == "variable"


def test_sibling_literal_branches_do_not_share_prefixes() -> None:
    source = (
        "var app = {\n"
        "  a: { one: function () {} },\n"
        "  b: {\n"
        "    // @Log\n"
        "    two: function () {}\n"
        "  }\n"
        "};\n"
    )

    record = _only(collect(source))

    assert record.declaration == _qualified(("app", "b"), "two")


def test_several_members_of_one_literal_resolve_independently() -> None:
    source = (
        "const api = {\n"
        "  // @Get\n"
        "  list: function () {},\n"
        "  nested: {\n"
        "    // @Post\n"
        "    create: () => {}\n"
        "  },\n"
        "  // @Delete\n"
        "  remove() {}\n"
        "};\n"
    )

    records = collect(source)

    assert [record.name for record in records] == ["Get", "Post", "Delete"]
    assert [record.declaration for record in records] == [
        _qualified(("api",), "list"),
        _qualified(("api", "nested"), "create"),
        _qualified(("api",), "remove"),
    ]


def test_variable_initialized_with_function_resolves_to_variable_name() -> None:
    record = _only(collect("// @Log\nvar handler = function () {};\n"))

    assert record.declaration == _qualified((), "handler")
    assert record.shape == "variable"


def test_bare_call_resolves_without_scope_check() -> None:
    record = _only(collect("// @Track\nstart();\n"))

    assert record.declaration == _qualified((), "start")
    assert record.shape == "call"


def test_member_call_resolves_when_callable() -> None:
    source = "var api = { load: function () {} };\n// @Trace\napi.load();\n"

    record = _only(collect(source))

    assert record.declaration == _qualified(("api",), "load")
    assert record.shape == "call"


def test_member_call_on_unknown_object_stays_unresolved() -> None:
    record = _only(collect("// @Trace\nconsole.log('x');\n"))

    assert record.declaration is None


def test_member_assignment_wins_over_trailing_call() -> None:
    source = "var A = {};\n// @Log\nA.run = function () {}; setup();\n"

    record = _only(collect(source))

    assert record.declaration == _qualified(("A",), "run")
    assert record.shape == "member"


def test_later_statement_on_same_line_does_not_overwrite() -> None:
    source = (
        "var A = {};\n"
        "// @Log\n"
        "A.first = function () {}; A.second = function () {};\n"
    )

    record = _only(collect(source))

    assert record.declaration == _qualified(("A",), "first")


def test_last_claim_within_one_statement_wins() -> None:
    source = "var A = {};\n// @Log\nA.x = A.y = function () {};\n"

    record = _only(collect(source))

    assert record.declaration == _qualified(("A",), "y")


def test_annotation_on_non_declaration_statement_fails_closed() -> None:
    source = "function f() {\n  // @Log\n  return 1;\n}\n"

    record = _only(collect(source))

    assert record.line == 3
    assert record.declaration is None


def test_unresolved_records_are_dropped_under_drop_policy() -> None:
    source = (
        "var A = {};\n"
        "// @Kept\n"
        "function f() {}\n"
        "// @Dropped\n"
        "A.count = 5;\n"
        "var obj = {\n"
        "  // @AlsoDropped\n"
        "  missing: 3\n"
        "};\n"
    )

    retained = collect(source)
    dropped = collect(source, config=RemarkConfig(unresolved="drop"))

    assert [record.name for record in retained] == ["Kept", "Dropped", "AlsoDropped"]
    assert [record.name for record in dropped] == ["Kept"]


def test_namespace_resolver_checks_python_objects() -> None:
    source = "// @Log\nservice.start = function () {};\n"
    resolver = NamespaceScopeResolver()

    callable_ns = {"service": SimpleNamespace(start=lambda: None)}
    value_ns = {"service": SimpleNamespace(start=5)}

    resolved = _only(collect(source, resolver=resolver, scope_root=callable_ns))
    unresolved = _only(collect(source, resolver=resolver, scope_root=value_ns))

    assert resolved.declaration == _qualified(("service",), "start")
    assert unresolved.declaration is None
