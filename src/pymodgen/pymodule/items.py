"""Bindable items and guards of a module body."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from typing import Literal

from pymodgen.diagnostics import Span

ItemKind = Literal["function", "attr", "class"]


@dataclass(frozen=True)
class Function:
    """A callable exposed as a named builtin function."""

    item_ident: str
    py_name: str

    @property
    def kind(self) -> ItemKind:
        return "function"


@dataclass(frozen=True)
class EvaluatedAttr:
    """A callable run once at registration; its result is the attribute."""

    item_ident: str
    py_name: str

    @property
    def kind(self) -> ItemKind:
        return "attr"


@dataclass(frozen=True)
class Class:
    """A type whose ``make_class`` result is the attribute.

    Used for both ``@pyclass`` and ``@pystruct_sequence``.
    """

    item_ident: str
    py_name: str

    @property
    def kind(self) -> ItemKind:
        return "class"


ModuleItem = Function | EvaluatedAttr | Class


def _structural_key(source: str) -> str:
    try:
        return ast.dump(ast.parse(f"({source})", mode="eval").body)
    except SyntaxError:
        return " ".join(source.split())


@dataclass(frozen=True)
class Guard:
    """An unevaluated ``@cfg`` predicate carried onto generated code.

    Two guards are equal when their expressions are structurally equal;
    formatting differences do not matter.
    """

    source: str = field(compare=False)
    key: str = ""
    span: Span = field(default=Span(), compare=False)

    def __post_init__(self) -> None:
        if not self.key:
            object.__setattr__(self, "key", _structural_key(self.source))

    def render(self) -> str:
        """Expression text usable as one operand of an ``and`` chain."""
        try:
            node = ast.parse(f"({self.source})", mode="eval").body
        except SyntaxError:
            return f"({self.source})"
        if "\n" in self.source:
            rendered = ast.unparse(node)
        else:
            rendered = self.source
        if isinstance(node, (ast.Call, ast.Name, ast.Attribute, ast.Subscript)):
            return rendered
        return f"({rendered})"


__all__ = ["Class", "EvaluatedAttr", "Function", "Guard", "ItemKind", "ModuleItem"]
