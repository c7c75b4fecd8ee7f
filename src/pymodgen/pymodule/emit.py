"""Rendering of registration code for a module body."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pymodgen.pymodule.items import Class, EvaluatedAttr, Function

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from pymodgen.parse.declarations import Annotation
    from pymodgen.pymodule.items import Guard, ModuleItem

INDENT = "    "


def _new_value(item: ModuleItem) -> str:
    if isinstance(item, Function):
        return (
            f"vm.ctx.new_function_named({item.item_ident}, MODULE_NAME, "
            f"{item.py_name!r})"
        )
    if isinstance(item, EvaluatedAttr):
        return f"vm.new_pyobj({item.item_ident}(vm))"
    if isinstance(item, Class):
        return f"{item.item_ident}.make_class(vm.ctx)"
    msg = f"Unknown module item: {item!r}"
    raise TypeError(msg)


def render_registration(item: ModuleItem, guards: Sequence[Guard] = ()) -> list[str]:
    """Return the lines registering ``item``, relative to the routine body.

    Guarded items are nested under a single ``if`` whose condition joins the
    guards with ``and`` in source order.
    """
    statement = f"vm.set_module_attr(module, {item.py_name!r}, {_new_value(item)})"
    if not guards:
        return [statement]
    condition = " and ".join(guard.render() for guard in guards)
    return [f"if {condition}:", f"{INDENT}{statement}"]


def render_module_tail(module_name: str, statements: Iterable[list[str]]) -> str:
    """Render the declarations appended to every expanded module body."""
    body = [f"{INDENT}{line}" for lines in statements for line in lines]
    if not body:
        body = [f"{INDENT}pass"]

    lines = [
        f"MODULE_NAME = {module_name!r}",
        "",
        "",
        "def extend_module(vm, module):",
        *body,
        "",
        "",
        "def make_module(vm):",
        f"{INDENT}module = vm.new_module(MODULE_NAME, vm.ctx.new_dict())",
        f"{INDENT}extend_module(vm, module)",
        f"{INDENT}return module",
    ]
    return "\n".join(lines) + "\n"


def strip_annotations(source: str, removed: Iterable[Annotation]) -> str:
    """Drop the source rows of consumed annotations, keeping everything else."""
    drop_rows: set[int] = set()
    for annotation in removed:
        drop_rows.update(range(annotation.start_row, annotation.end_row + 1))
    if not drop_rows:
        return source

    lines = source.split("\n")
    return "\n".join(line for row, line in enumerate(lines) if row not in drop_rows)


def append_module_tail(source: str, tail: str) -> str:
    body = source.rstrip("\n")
    if not body:
        return tail
    return f"{body}\n\n\n{tail}"


__all__ = [
    "append_module_tail",
    "render_module_tail",
    "render_registration",
    "strip_annotations",
]
