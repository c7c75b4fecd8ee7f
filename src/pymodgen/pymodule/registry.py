"""Classification of annotated declarations into module items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pymodgen.diagnostics import Diagnostic, DiagnosticError
from pymodgen.parse.annotations import (
    NameValueMetaError,
    NestedMeta,
    meta_to_vec,
    name_value_message,
)
from pymodgen.parse.declarations import DeclKind
from pymodgen.pymodule.items import Class, EvaluatedAttr, Function, Guard, ModuleItem
from pymodgen.util import ItemMeta

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from pymodgen.diagnostics import Span
    from pymodgen.parse.declarations import Annotation, Declaration

logger = logging.getLogger(__name__)

FUNCTION_ATTRS = frozenset({"pyfunction", "pyattr"})
CLASS_ATTRS = frozenset({"pyclass", "pystruct_sequence"})
BINDING_ATTRS = FUNCTION_ATTRS | CLASS_ATTRS
GUARD_ATTR = "cfg"

ItemKey = tuple[str, tuple[Guard, ...]]


def _expect_kind(decl: Declaration, kind: DeclKind, attr_name: str) -> None:
    if decl.kind is not kind:
        msg = (
            f"@{attr_name} on {decl.kind.value} '{decl.ident}', "
            f"expected a {kind.value} declaration"
        )
        raise AssertionError(msg)


def _nested_for(attr_name: str, annotation: Annotation) -> list[NestedMeta]:
    assert annotation.meta is not None
    try:
        return meta_to_vec(annotation.meta)
    except NameValueMetaError as exc:
        raise DiagnosticError.span_error(
            exc.meta.span, name_value_message(attr_name)
        ) from exc


class Module:
    """Items of one module body keyed by (external name, guards)."""

    def __init__(self) -> None:
        self.items: dict[ItemKey, ModuleItem] = {}

    def __len__(self) -> int:
        return len(self.items)

    def add_item(self, item: ModuleItem, guards: Sequence[Guard], span: Span) -> None:
        """Register ``item`` under its external name and guard list.

        Raises:
            DiagnosticError: If an item is already bound under the same key.
                The message names the item that was registered first.
        """
        key = (item.py_name, tuple(guards))
        existing = self.items.get(key)
        if existing is not None:
            raise DiagnosticError.span_error(
                span,
                f"Duplicate @py* annotation on pymodule: {existing.py_name} "
                f"(already bound to '{existing.item_ident}', "
                f"rebound by '{item.item_ident}')",
            )
        self.items[key] = item

    def registered(self) -> Iterator[tuple[ModuleItem, tuple[Guard, ...]]]:
        """Yield items with their guards in registration order."""
        for (_name, guards), item in self.items.items():
            yield item, guards

    @staticmethod
    def extract_function(decl: Declaration, annotation: Annotation) -> ModuleItem:
        nesteds = _nested_for("pyfunction", annotation)
        item_meta = ItemMeta.from_nested_meta(
            "pyfunction", decl.ident, nesteds, ItemMeta.SIMPLE_NAMES, annotation.span
        )
        return Function(item_ident=decl.ident, py_name=item_meta.simple_name())

    @staticmethod
    def extract_attr(decl: Declaration, annotation: Annotation) -> ModuleItem:
        nesteds = _nested_for("pyattr", annotation)
        item_meta = ItemMeta.from_nested_meta(
            "pyattr", decl.ident, nesteds, ItemMeta.SIMPLE_NAMES, annotation.span
        )
        return EvaluatedAttr(item_ident=decl.ident, py_name=item_meta.simple_name())

    @staticmethod
    def extract_class(decl: Declaration, annotation: Annotation) -> ModuleItem:
        nesteds = _nested_for("pyclass", annotation)
        item_meta = ItemMeta.from_nested_meta(
            "pyclass", decl.ident, nesteds, ItemMeta.SIMPLE_NAMES, annotation.span
        )
        return Class(item_ident=decl.ident, py_name=item_meta.simple_name())

    @staticmethod
    def extract_struct_sequence(decl: Declaration, annotation: Annotation) -> ModuleItem:
        nesteds = _nested_for("pystruct_sequence", annotation)
        item_meta = ItemMeta.from_nested_meta(
            "pystruct_sequence",
            decl.ident,
            nesteds,
            ItemMeta.STRUCT_SEQUENCE_NAMES,
            annotation.span,
        )
        return Class(item_ident=decl.ident, py_name=item_meta.simple_name())

    def _extract_one(self, decl: Declaration, annotation: Annotation) -> ModuleItem:
        name = annotation.name
        if name in FUNCTION_ATTRS:
            _expect_kind(decl, DeclKind.FUNCTION, name)
            if name == "pyfunction":
                return self.extract_function(decl, annotation)
            return self.extract_attr(decl, annotation)

        _expect_kind(decl, DeclKind.STRUCT, name)
        if name == "pyclass":
            return self.extract_class(decl, annotation)
        return self.extract_struct_sequence(decl, annotation)

    def extract_item(
        self, decl: Declaration, diagnostics: list[Diagnostic]
    ) -> list[Annotation]:
        """Classify the annotations of ``decl`` and register its items.

        Binding annotations are consumed: they are removed from
        ``decl.annotations`` and returned. ``@cfg`` guards stay on the
        declaration and are attached to every item it produces. Problems are
        appended to ``diagnostics``; the walk does not stop on them.
        """
        consumed: list[int] = []
        items: list[tuple[ModuleItem, Span]] = []
        guards: list[Guard] = []

        for i, annotation in enumerate(decl.annotations):
            if annotation.meta is None or annotation.name is None:
                continue
            if annotation.name == GUARD_ATTR:
                guards.append(Guard(source=annotation.source, span=annotation.span))
                continue
            if annotation.name not in BINDING_ATTRS:
                continue

            consumed.append(i)
            try:
                items.append((self._extract_one(decl, annotation), annotation.span))
            except DiagnosticError as exc:
                diagnostics.extend(exc.diagnostics)

        for item, span in items:
            try:
                self.add_item(item, guards, span)
            except DiagnosticError as exc:
                diagnostics.extend(exc.diagnostics)
            else:
                logger.debug(
                    "registered %s %s as %r (%d guards)",
                    item.kind,
                    item.item_ident,
                    item.py_name,
                    len(guards),
                )

        consumed_set = set(consumed)
        removed = [decl.annotations[i] for i in consumed]
        decl.annotations[:] = [
            annotation
            for i, annotation in enumerate(decl.annotations)
            if i not in consumed_set
        ]
        return removed


__all__ = [
    "BINDING_ATTRS",
    "CLASS_ATTRS",
    "FUNCTION_ATTRS",
    "GUARD_ATTR",
    "Module",
]
