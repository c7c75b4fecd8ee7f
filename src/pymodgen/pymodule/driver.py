"""Expansion of a whole module body."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pymodgen.diagnostics import Diagnostic, DiagnosticError
from pymodgen.parse.declarations import extract_declarations
from pymodgen.pymodule.emit import (
    append_module_tail,
    render_module_tail,
    render_registration,
    strip_annotations,
)
from pymodgen.pymodule.registry import Module
from pymodgen.util import def_to_name, default_module_name

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pymodgen.parse.declarations import Annotation, Declaration
    from pymodgen.pymodule.items import Guard, ModuleItem

logger = logging.getLogger(__name__)

DEFAULT_MODULE_IDENT = "module"


@dataclass
class ExpandedModule:
    module_name: str
    source: str
    items: list[tuple[ModuleItem, tuple[Guard, ...]]] = field(default_factory=list)
    declarations: list[Declaration] = field(default_factory=list)


def _module_ident(path: str | None) -> str:
    if not path:
        return DEFAULT_MODULE_IDENT
    try:
        return default_module_name(path)
    except ValueError:
        # e.g. a top-level __init__.py
        return DEFAULT_MODULE_IDENT


def extract_module_items(
    declarations: Sequence[Declaration], diagnostics: list[Diagnostic]
) -> tuple[Module, list[Annotation]]:
    """Walk ``declarations`` in order and register their items.

    Returns the populated module together with every consumed annotation.
    Problems are appended to ``diagnostics``.
    """
    module = Module()
    removed: list[Annotation] = []
    for decl in declarations:
        removed.extend(module.extract_item(decl, diagnostics))
    return module, removed


def impl_pymodule(
    source: str,
    *,
    path: str | None = None,
    module_name: str | None = None,
    declarations: Sequence[Declaration] | None = None,
) -> ExpandedModule:
    """Expand one module body into its registration glue.

    Args:
        source: Python source of the module body
        path: Path of the source, used for diagnostics and the default name
        module_name: Explicit external module name
        declarations: Already extracted declarations of ``source``; parsed
            from ``source`` when omitted

    Returns:
        ExpandedModule with consumed annotations stripped from the source and
        ``MODULE_NAME``/``extend_module``/``make_module`` appended.

    Raises:
        DiagnosticError: With every problem found in the body.
    """
    resolved_name = def_to_name(_module_ident(path), module_name)

    if declarations is None:
        declarations = extract_declarations(source, path)

    diagnostics: list[Diagnostic] = []
    module, removed = extract_module_items(declarations, diagnostics)
    DiagnosticError.from_list(diagnostics)

    registered = list(module.registered())
    tail = render_module_tail(
        resolved_name,
        (render_registration(item, guards) for item, guards in registered),
    )
    expanded = append_module_tail(strip_annotations(source, removed), tail)

    logger.debug(
        "expanded %s as %r with %d items",
        path or "<source>",
        resolved_name,
        len(registered),
    )
    return ExpandedModule(
        module_name=resolved_name,
        source=expanded,
        items=registered,
        declarations=list(declarations),
    )


__all__ = ["ExpandedModule", "extract_module_items", "impl_pymodule"]
