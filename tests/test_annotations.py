from __future__ import annotations

import pytest

from pymodgen.diagnostics import Span
from pymodgen.parse.annotations import (
    MetaList,
    MetaNameValue,
    MetaPath,
    NameValueMetaError,
    meta_ident,
    meta_to_vec,
    name_value_message,
    parse_meta,
)


def test_bare_name_is_path_with_no_arguments() -> None:
    meta = parse_meta("pyfunction")

    assert isinstance(meta, MetaPath)
    assert meta_ident(meta) == "pyfunction"
    assert meta_to_vec(meta) == []


def test_call_form_yields_arguments_verbatim() -> None:
    meta = parse_meta('pyfunction(name="bar", extra=1)')

    assert isinstance(meta, MetaList)
    nested = meta_to_vec(meta)
    assert [(n.key, n.value) for n in nested] == [("name", "bar"), ("extra", 1)]


def test_positional_literals_keep_source_order() -> None:
    meta = parse_meta('pyclass("Foo", name="Bar")')

    assert isinstance(meta, MetaList)
    assert [(n.key, n.value) for n in meta.nested] == [(None, "Foo"), ("name", "Bar")]


def test_non_literal_argument_is_flagged() -> None:
    meta = parse_meta("pyfunction(name=NAME)")

    assert isinstance(meta, MetaList)
    (nested,) = meta.nested
    assert nested.is_literal is False
    assert nested.source == "NAME"


def test_name_value_form_is_rejected() -> None:
    meta = parse_meta('pyclass := "Foo"')

    assert isinstance(meta, MetaNameValue)
    assert meta.value == "Foo"
    with pytest.raises(NameValueMetaError):
        meta_to_vec(meta)


def test_name_value_message_names_the_annotation_kind() -> None:
    message = name_value_message("pystruct_sequence")

    assert '@pystruct_sequence := "..."' in message
    assert '@pystruct_sequence(name="...")' in message


@pytest.mark.parametrize(
    "expression",
    ["items[0]", "lambda f: f", "register(*names)", "register(**opts)", "(", "a + b"],
)
def test_other_expressions_are_not_annotations(expression: str) -> None:
    assert parse_meta(expression) is None


def test_dotted_path_has_no_ident() -> None:
    meta = parse_meta("functools.cache")

    assert isinstance(meta, MetaPath)
    assert meta.path == "functools.cache"
    assert meta_ident(meta) is None


def test_argument_spans_point_into_the_file() -> None:
    meta = parse_meta('pyfunction(name="bar")', Span(path="m.py", line=4, col=2))

    assert isinstance(meta, MetaList)
    (nested,) = meta.nested
    assert nested.span == Span(path="m.py", line=4, col=13)
