"""Name resolution and annotation argument validation."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from pymodgen.diagnostics import Diagnostic, DiagnosticError, Span

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pymodgen.parse.annotations import NestedMeta


def path_to_module(file_path: str | Path) -> str:
    """Convert a file path to a Python module name.

    Examples:
        >>> path_to_module("src/pkg/time.py")
        'pkg.time'
        >>> path_to_module("src/pkg/__init__.py")
        'pkg'
        >>> path_to_module(Path("foo/bar.py"))
        'foo.bar'
    """
    path_str = file_path.as_posix() if isinstance(file_path, Path) else str(file_path)
    normalized_parts = [part for part in path_str.replace("\\", "/").split("/") if part]

    # src/<package>/... maps to <package>.<submodules>
    module_parts = (
        normalized_parts[1:]
        if len(normalized_parts) >= 2 and normalized_parts[0] == "src"
        else normalized_parts
    )

    if module_parts and module_parts[-1].endswith(".py"):
        module_parts[-1] = module_parts[-1][:-3]

    if module_parts and module_parts[-1] == "__init__":
        module_parts = module_parts[:-1]

    if not module_parts:
        msg = f"path {path_str!r} does not map to a non-empty module name"
        raise ValueError(msg)

    return ".".join(module_parts)


def default_module_name(file_path: str | Path) -> str:
    """External module name used when no explicit name is configured."""
    return path_to_module(file_path).split(".")[-1]


def def_to_name(ident: str, explicit: str | None = None) -> str:
    """Resolve the external name of a declaration."""
    if explicit is not None:
        return explicit
    return ident


class ItemMeta:
    """Validated arguments of one binding annotation."""

    SIMPLE_NAMES: tuple[str, ...] = ("name",)
    STRUCT_SEQUENCE_NAMES: tuple[str, ...] = ("module", "name")

    def __init__(self, attr_name: str, ident: str, values: dict[str, str]) -> None:
        self.attr_name = attr_name
        self.ident = ident
        self.values = values

    @classmethod
    def from_nested_meta(
        cls,
        attr_name: str,
        ident: str,
        nesteds: Sequence[NestedMeta],
        allowed_names: Sequence[str],
        span: Span | None = None,
    ) -> ItemMeta:
        """Validate ``nesteds`` against ``allowed_names``.

        Every problem in the argument list is reported, not just the first.

        Raises:
            DiagnosticError: If any argument is not an allowed keyword with a
                non-empty string literal value.
        """
        diagnostics: list[Diagnostic] = []
        values: dict[str, str] = {}

        for nested in nesteds:
            nested_span = nested.span if nested.span.line is not None else span or Span()
            if nested.key is None:
                diagnostics.append(
                    Diagnostic(
                        f"@{attr_name} does not accept positional arguments, "
                        f"got {nested.source}",
                        nested_span,
                    )
                )
                continue
            if nested.key not in allowed_names:
                diagnostics.append(
                    Diagnostic(
                        f"@{attr_name} got unrecognized argument '{nested.key}', "
                        f"expected one of: {', '.join(allowed_names)}",
                        nested_span,
                    )
                )
                continue
            if not nested.is_literal or not isinstance(nested.value, str):
                diagnostics.append(
                    Diagnostic(
                        f"@{attr_name} argument '{nested.key}' must be a string "
                        f"literal, got {nested.source}",
                        nested_span,
                    )
                )
                continue
            if not nested.value:
                diagnostics.append(
                    Diagnostic(
                        f"@{attr_name} argument '{nested.key}' must not be empty",
                        nested_span,
                    )
                )
                continue
            values[nested.key] = nested.value

        DiagnosticError.from_list(diagnostics)
        return cls(attr_name, ident, values)

    def optional_str(self, key: str) -> str | None:
        return self.values.get(key)

    def simple_name(self) -> str:
        return def_to_name(self.ident, self.optional_str("name"))


__all__ = [
    "ItemMeta",
    "def_to_name",
    "default_module_name",
    "path_to_module",
]
