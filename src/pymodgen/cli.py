"""Command-line interface for pymodgen."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pymodgen.artifacts.write import generate_all
from pymodgen.diagnostics import Diagnostic, DiagnosticError, Span
from pymodgen.pymodule.driver import impl_pymodule
from pymodgen.rules.config import ConfigError, load_config
from pymodgen.verify.verify import verify_determinism

LOG_LEVELS = tuple(
    logging.getLevelName(level)
    for level in (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR)
)


def _add_common_paths(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Source tree root (default: .)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="pymodgen")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=LOG_LEVELS,
        help="Logging level (default: WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    expand_parser = subparsers.add_parser("expand", help="Expand one module body")
    expand_parser.add_argument("file", help="Python source file to expand")
    expand_parser.add_argument(
        "--name",
        default=None,
        help="External module name (default: derived from the file name)",
    )
    expand_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the expanded module here instead of stdout",
    )

    generate_parser = subparsers.add_parser(
        "generate", help="Expand every annotated module of a tree"
    )
    _add_common_paths(generate_parser)
    generate_parser.add_argument(
        "--out-dir",
        default=None,
        help="Output directory for expanded modules (default: config output dir)",
    )

    verify_parser = subparsers.add_parser(
        "verify", help="Verify that an expanded tree is reproducible"
    )
    _add_common_paths(verify_parser)
    verify_parser.add_argument(
        "--artifacts-dir",
        default=None,
        help="Previously generated directory (default: config output dir)",
    )

    return parser


def _report(exc: DiagnosticError) -> int:
    for diagnostic in exc.diagnostics:
        sys.stderr.write(f"{diagnostic.render()}\n")
    return 1


def _resolve_artifacts_dir(root: Path, artifacts_dir: str | None) -> Path:
    if artifacts_dir is None:
        config = load_config(root)
        return (root / config.output_dir).resolve()
    return Path(artifacts_dir).expanduser().resolve()


def _handle_expand(file: str, name: str | None, output: str | None) -> int:
    path = Path(file)
    try:
        source = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        diagnostic = Diagnostic(f"cannot read source: {exc}", Span(path=path.as_posix()))
        sys.stderr.write(f"{diagnostic.render()}\n")
        return 2

    try:
        expanded = impl_pymodule(source, path=path.as_posix(), module_name=name)
    except DiagnosticError as exc:
        return _report(exc)

    if output is None:
        sys.stdout.write(expanded.source)
    else:
        Path(output).write_text(expanded.source, encoding="utf-8")
    return 0


def _handle_generate(root: Path, out_dir: str | None) -> int:
    resolved_out_dir = None if out_dir is None else Path(out_dir).expanduser().resolve()
    try:
        generate_all(root=root, out_dir=resolved_out_dir)
    except DiagnosticError as exc:
        return _report(exc)
    return 0


def _handle_verify(root: Path, artifacts_dir: str | None) -> int:
    resolved_artifacts_dir = _resolve_artifacts_dir(root, artifacts_dir)
    try:
        result = verify_determinism(root=root, artifacts_dir=resolved_artifacts_dir)
    except (FileNotFoundError, NotADirectoryError) as exc:
        sys.stderr.write(f"artifacts-dir: {resolved_artifacts_dir}\n")
        sys.stderr.write(f"error: {exc}\n")
        return 2
    except DiagnosticError as exc:
        return _report(exc)
    if not result.ok:
        for label, paths in (
            ("missing", result.missing),
            ("extra", result.extra),
            ("mismatches", result.mismatches),
        ):
            for path in paths:
                sys.stderr.write(f"{label}: {path}\n")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "expand":
        return _handle_expand(args.file, args.name, args.output)

    root = Path(args.root).expanduser().resolve()
    try:
        if args.command == "generate":
            return _handle_generate(root, args.out_dir)

        if args.command == "verify":
            return _handle_verify(root, args.artifacts_dir)
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
