from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pymodgen.artifacts.contract import BINDINGS_JSONL, MANIFEST_FILES, MODULES_JSONL
from pymodgen.artifacts.models import BindingRecord, ModuleRecord
from pymodgen.artifacts.utils import _get_output_dir_name, _write_jsonl
from pymodgen.diagnostics import Diagnostic, DiagnosticError, Span
from pymodgen.parse.declarations import extract_declarations
from pymodgen.pymodule.driver import impl_pymodule
from pymodgen.pymodule.registry import BINDING_ATTRS
from pymodgen.rules.config import load_config, resolve_output_dir
from pymodgen.scan.files import find_source_files

if TYPE_CHECKING:
    from pymodgen.parse.declarations import Declaration
    from pymodgen.pymodule.driver import ExpandedModule
    from pymodgen.rules.config import PyModGenConfig

logger = logging.getLogger(__name__)


def _has_bindings(declarations: list[Declaration]) -> bool:
    return any(
        annotation.name in BINDING_ATTRS
        for decl in declarations
        for annotation in decl.annotations
    )


def _binding_records(relative_path: str, expanded: ExpandedModule) -> list[BindingRecord]:
    lines: dict[str, int | None] = {}
    for decl in expanded.declarations:
        lines.setdefault(decl.ident, decl.span.line)

    return [
        BindingRecord(
            path=relative_path,
            module=expanded.module_name,
            kind=item.kind,
            declaration=item.item_ident,
            py_name=item.py_name,
            guards=[guard.source for guard in guards],
            line=lines.get(item.item_ident),
        )
        for item, guards in expanded.items
    ]


def generate_all(
    *,
    root: Path,
    out_dir: Path | None = None,
    config: PyModGenConfig | None = None,
) -> dict[str, object]:
    """Expand every annotated module of a source tree.

    Diagnostics from all files are collected first; nothing is written
    unless the whole tree expands cleanly.

    Args:
        root: Root directory of the tree to expand
        out_dir: Optional output directory (default: config output_dir)
        config: Optional configuration (default: loaded from root)

    Returns:
        Dictionary with counts and the list of written paths.

    Raises:
        DiagnosticError: With the diagnostics of every failing file.
    """
    if config is None:
        config = load_config(root)

    if out_dir is None:
        out_dir = resolve_output_dir(root, config.output_dir)

    # A previous expansion under the configured output_dir is never input.
    skip_dir = _get_output_dir_name(out_dir, root)
    if not skip_dir:
        skip_dir = Path(config.output_dir).as_posix()

    diagnostics: list[Diagnostic] = []
    expanded_files: list[tuple[str, ExpandedModule]] = []

    for file_path in find_source_files(
        root,
        output_dir=skip_dir,
        include_patterns=config.include,
        exclude_patterns=config.exclude,
        nested_gitignore=config.nested_gitignore,
    ):
        relative_path = file_path.relative_to(root).as_posix()
        try:
            source = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            diagnostics.append(
                Diagnostic(f"cannot read source: {exc}", Span(path=relative_path))
            )
            continue

        try:
            # Plain modules are left alone.
            if not any(name in source for name in BINDING_ATTRS):
                continue
            declarations = extract_declarations(source, relative_path)
            if not _has_bindings(declarations):
                continue
            expanded = impl_pymodule(
                source,
                path=relative_path,
                module_name=config.module_names.get(relative_path),
                declarations=declarations,
            )
        except DiagnosticError as exc:
            diagnostics.extend(exc.diagnostics)
            continue

        logger.info(
            "expanded %s (%s, %d items)",
            relative_path,
            expanded.module_name,
            len(expanded.items),
        )
        expanded_files.append((relative_path, expanded))

    DiagnosticError.from_list(diagnostics)

    out_dir.mkdir(parents=True, exist_ok=True)

    bindings: list[BindingRecord] = []
    modules: list[ModuleRecord] = []
    written: list[str] = []
    for relative_path, expanded in expanded_files:
        target = out_dir / relative_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(expanded.source, encoding="utf-8")
        written.append(str(target))

        bindings.extend(_binding_records(relative_path, expanded))
        modules.append(
            ModuleRecord(
                path=relative_path,
                module=expanded.module_name,
                output=relative_path,
                binding_count=len(expanded.items),
            )
        )

    modules.sort(key=lambda record: record.path)

    _write_jsonl(out_dir / BINDINGS_JSONL, bindings)
    _write_jsonl(out_dir / MODULES_JSONL, modules)

    written.extend(str(out_dir / name) for name in MANIFEST_FILES)
    return {
        "module_count": len(modules),
        "binding_count": len(bindings),
        "artifacts": written,
    }


__all__ = ["generate_all"]
