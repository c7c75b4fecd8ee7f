"""Decorator expressions parsed into structured annotations.

Three shapes are recognized, mirroring the attribute grammar the emitter
understands:

- path:        ``@pyfunction``
- list:        ``@pyfunction(name="bar")``
- name/value:  ``@pyfunction := "bar"`` (parsed so it can be rejected)

Anything else (subscripts, lambdas, star-args, dotted callees with calls
on them, ...) is not an annotation of this pass.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass

from pymodgen.diagnostics import Span


@dataclass(frozen=True)
class NestedMeta:
    """One argument of a list-form annotation.

    ``key`` is the keyword for ``key=value`` arguments and ``None`` for bare
    positional literals.
    """

    key: str | None
    value: object
    source: str
    span: Span
    is_literal: bool = True


@dataclass(frozen=True)
class MetaPath:
    path: str
    span: Span


@dataclass(frozen=True)
class MetaList:
    path: str
    nested: tuple[NestedMeta, ...]
    span: Span


@dataclass(frozen=True)
class MetaNameValue:
    path: str
    value: object
    source: str
    span: Span


Meta = MetaPath | MetaList | MetaNameValue


class NameValueMetaError(ValueError):
    """Raised by :func:`meta_to_vec` for the name/value shape."""

    def __init__(self, meta: MetaNameValue) -> None:
        self.meta = meta
        super().__init__(f"{meta.path} := {meta.source}")


def _dotted_name(node: ast.expr) -> str | None:
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        base = _dotted_name(node.value)
        if base is None:
            return None
        return f"{base}.{node.attr}"
    return None


def _child_span(base: Span, node: ast.AST) -> Span:
    """Translate a node position inside ``(<expr>)`` back to file coordinates."""
    lineno = getattr(node, "lineno", 1)
    col_offset = getattr(node, "col_offset", 0)
    line = base.line + lineno - 1 if base.line is not None else None
    if lineno == 1:
        # Account for the opening parenthesis wrapped around the expression.
        col = base.col + col_offset - 1 if base.col is not None else None
    else:
        col = col_offset + 1
    return Span(path=base.path, line=line, col=col)


def _nested_meta(key: str | None, node: ast.expr, span: Span) -> NestedMeta:
    source = ast.unparse(node)
    try:
        value = ast.literal_eval(node)
    except (ValueError, TypeError, SyntaxError):
        return NestedMeta(key=key, value=None, source=source, span=span, is_literal=False)
    return NestedMeta(key=key, value=value, source=source, span=span)


def _position(node: ast.AST) -> tuple[int, int]:
    return (getattr(node, "lineno", 0), getattr(node, "col_offset", 0))


def _list_meta(node: ast.Call, path: str, span: Span) -> MetaList | None:
    arguments: list[tuple[tuple[int, int], str | None, ast.expr, ast.AST]] = []
    for arg in node.args:
        if isinstance(arg, ast.Starred):
            return None
        arguments.append((_position(arg), None, arg, arg))
    for keyword in node.keywords:
        if keyword.arg is None:
            return None
        arguments.append((_position(keyword), keyword.arg, keyword.value, keyword))

    # ast keeps positional and keyword arguments apart; restore source order.
    arguments.sort(key=lambda entry: entry[0])
    nested = tuple(
        _nested_meta(key, value, _child_span(span, anchor))
        for _, key, value, anchor in arguments
    )
    return MetaList(path=path, nested=nested, span=span)


def parse_meta(expression: str, span: Span | None = None) -> Meta | None:
    """Parse the expression of a decorator (the text after ``@``).

    Returns ``None`` when the expression is not one of the annotation shapes.
    """
    span = span or Span()
    try:
        tree = ast.parse(f"({expression})", mode="eval")
    except SyntaxError:
        return None

    node = tree.body
    if isinstance(node, ast.NamedExpr):
        value_source = ast.unparse(node.value)
        try:
            value = ast.literal_eval(node.value)
        except (ValueError, TypeError, SyntaxError):
            value = None
        return MetaNameValue(
            path=node.target.id, value=value, source=value_source, span=span
        )

    if isinstance(node, ast.Call):
        path = _dotted_name(node.func)
        if path is None:
            return None
        return _list_meta(node, path, span)

    path = _dotted_name(node)
    if path is None:
        return None
    return MetaPath(path=path, span=span)


def meta_ident(meta: Meta) -> str | None:
    """Return the annotation name when its path is a single identifier."""
    if "." in meta.path:
        return None
    return meta.path


def meta_to_vec(meta: Meta) -> list[NestedMeta]:
    """Return the argument list of an annotation.

    Raises:
        NameValueMetaError: For the name/value shape, which is reserved to
            catch ``@kind := "..."`` written in place of ``@kind(name="...")``.
    """
    if isinstance(meta, MetaPath):
        return []
    if isinstance(meta, MetaList):
        return list(meta.nested)
    raise NameValueMetaError(meta)


def name_value_message(kind: str) -> str:
    return (
        f'@{kind} := "..." cannot be a name/value, you probably meant '
        f'@{kind}(name="...")'
    )


__all__ = [
    "Meta",
    "MetaList",
    "MetaNameValue",
    "MetaPath",
    "NameValueMetaError",
    "NestedMeta",
    "meta_ident",
    "meta_to_vec",
    "name_value_message",
    "parse_meta",
]
