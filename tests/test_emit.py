from __future__ import annotations

from pymodgen.diagnostics import Span
from pymodgen.parse.declarations import Annotation
from pymodgen.pymodule.emit import (
    append_module_tail,
    render_module_tail,
    render_registration,
    strip_annotations,
)
from pymodgen.pymodule.items import Class, EvaluatedAttr, Function, Guard


def test_function_registration_wraps_named_callable() -> None:
    assert render_registration(Function("foo", "foo")) == [
        "vm.set_module_attr(module, 'foo', "
        "vm.ctx.new_function_named(foo, MODULE_NAME, 'foo'))"
    ]


def test_attr_registration_evaluates_with_runtime_handle() -> None:
    assert render_registration(EvaluatedAttr("answer", "ANSWER")) == [
        "vm.set_module_attr(module, 'ANSWER', vm.new_pyobj(answer(vm)))"
    ]


def test_class_registration_calls_make_class() -> None:
    assert render_registration(Class("StructTime", "struct_time")) == [
        "vm.set_module_attr(module, 'struct_time', StructTime.make_class(vm.ctx))"
    ]


def test_guards_are_reproduced_in_order() -> None:
    lines = render_registration(
        Class("Clock", "Clock"),
        [Guard('cfg(feature="clock")'), Guard("cfg(unix)")],
    )

    assert lines == [
        'if cfg(feature="clock") and cfg(unix):',
        "    vm.set_module_attr(module, 'Clock', Clock.make_class(vm.ctx))",
    ]


def test_non_call_guards_are_parenthesized() -> None:
    (condition, _) = render_registration(
        Function("f", "f"), [Guard("cfg := enabled"), Guard("cfg")]
    )

    assert condition == "if (cfg := enabled) and cfg:"


def test_module_tail_without_items_still_defines_routines() -> None:
    assert render_module_tail("empty", []) == (
        "MODULE_NAME = 'empty'\n"
        "\n"
        "\n"
        "def extend_module(vm, module):\n"
        "    pass\n"
        "\n"
        "\n"
        "def make_module(vm):\n"
        "    module = vm.new_module(MODULE_NAME, vm.ctx.new_dict())\n"
        "    extend_module(vm, module)\n"
        "    return module\n"
    )


def test_module_tail_runs_statements_in_sequence() -> None:
    tail = render_module_tail(
        "time",
        [
            render_registration(Function("sleep", "sleep")),
            render_registration(Class("Clock", "Clock"), [Guard("cfg(unix)")]),
        ],
    )

    assert (
        "def extend_module(vm, module):\n"
        "    vm.set_module_attr(module, 'sleep', "
        "vm.ctx.new_function_named(sleep, MODULE_NAME, 'sleep'))\n"
        "    if cfg(unix):\n"
        "        vm.set_module_attr(module, 'Clock', Clock.make_class(vm.ctx))\n"
    ) in tail


def _annotation(start_row: int, end_row: int) -> Annotation:
    return Annotation(
        name="pyfunction",
        meta=None,
        source="pyfunction",
        span=Span(line=start_row + 1),
        start_row=start_row,
        end_row=end_row,
    )


def test_strip_annotations_removes_only_consumed_rows() -> None:
    source = "# head\n@keep\n@pyfunction(\n    name='x',\n)\ndef f():\n    pass\n"

    stripped = strip_annotations(source, [_annotation(2, 4)])

    assert stripped == "# head\n@keep\ndef f():\n    pass\n"


def test_strip_annotations_without_removals_is_identity() -> None:
    source = "def f():\n    pass"

    assert strip_annotations(source, []) is source


def test_append_module_tail_separates_with_two_blank_lines() -> None:
    assert append_module_tail("x = 1\n\n", "TAIL\n") == "x = 1\n\n\nTAIL\n"
    assert append_module_tail("", "TAIL\n") == "TAIL\n"
