"""Tree-sitter based declaration walk for module bodies."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from tree_sitter import Language, Node, Parser
from tree_sitter_python import language as get_python_language

from pymodgen.diagnostics import DiagnosticError, Span
from pymodgen.parse.annotations import Meta, meta_ident, parse_meta

_PARSER: Parser | None = None

ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})


class DeclKind(str, Enum):
    FUNCTION = "function"
    STRUCT = "struct"
    ENUM = "enum"


@dataclass(eq=False)
class Annotation:
    """A decorator attached to a declaration.

    ``start_row``/``end_row`` are the 0-based source rows the decorator
    occupies; they are what gets dropped when the annotation is consumed.
    """

    name: str | None
    meta: Meta | None
    source: str
    span: Span
    start_row: int
    end_row: int


@dataclass(eq=False)
class Declaration:
    kind: DeclKind
    ident: str
    span: Span
    annotations: list[Annotation] = field(default_factory=list)


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Python language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_python_language())
        _PARSER = Parser(lang)

    return _PARSER


def _node_span(node: Node, path: str | None) -> Span:
    return Span(path=path, line=node.start_point[0] + 1, col=node.start_point[1] + 1)


def _text(node: Node) -> str:
    return node.text.decode("utf8") if node.text else ""


def _extract_base_classes(node: Node) -> list[str]:
    """Return base class names as written in source, skipping keywords."""
    superclasses = node.child_by_field_name("superclasses")
    if superclasses is None:
        return []

    bases: list[str] = []
    for child in superclasses.named_children:
        if child.type in ("identifier", "attribute"):
            bases.append(_text(child))
        elif child.type == "subscript":
            # e.g. Generic[T]; keep the subscripted name
            value_node = child.child_by_field_name("value")
            if value_node is not None:
                bases.append(_text(value_node))
    return bases


def _is_enum_class(node: Node) -> bool:
    return any(base.split(".")[-1] in ENUM_BASES for base in _extract_base_classes(node))


def _decorator_expression(node: Node) -> Node | None:
    for child in node.named_children:
        if child.type != "comment":
            return child
    return None


def _build_annotation(node: Node, path: str | None) -> Annotation:
    expression = _decorator_expression(node)
    source = _text(expression) if expression is not None else ""
    meta = None
    if expression is not None:
        meta = parse_meta(source, _node_span(expression, path))

    end_node = expression if expression is not None else node
    return Annotation(
        name=meta_ident(meta) if meta is not None else None,
        meta=meta,
        source=source,
        span=_node_span(node, path),
        start_row=node.start_point[0],
        end_row=end_node.end_point[0],
    )


def _build_declaration(
    definition: Node, decorators: list[Node], path: str | None
) -> Declaration | None:
    name_node = definition.child_by_field_name("name")
    if name_node is None or not name_node.text:
        return None

    if definition.type == "function_definition":
        kind = DeclKind.FUNCTION
    elif _is_enum_class(definition):
        kind = DeclKind.ENUM
    else:
        kind = DeclKind.STRUCT

    return Declaration(
        kind=kind,
        ident=_text(name_node),
        span=_node_span(definition, path),
        annotations=[_build_annotation(d, path) for d in decorators],
    )


def _first_error(node: Node) -> Node | None:
    if node.type == "ERROR" or node.is_missing:
        return node
    for child in node.children:
        if child.has_error or child.is_missing:
            found = _first_error(child)
            if found is not None:
                return found
    return None


def extract_declarations(source: str, path: str | None = None) -> list[Declaration]:
    """Collect the top-level declarations of a module body in textual order.

    Args:
        source: Python source of the module body
        path: Path used in diagnostics spans

    Returns:
        One Declaration per top-level function or class.

    Raises:
        DiagnosticError: If the source does not parse.
    """
    tree = _get_parser().parse(source.encode("utf8"))
    root_node = tree.root_node

    if root_node.has_error:
        error_node = _first_error(root_node) or root_node
        raise DiagnosticError.span_error(
            _node_span(error_node, path),
            "module body has syntax errors and cannot be expanded",
        )

    declarations: list[Declaration] = []
    for child in root_node.named_children:
        if child.type == "decorated_definition":
            definition = child.child_by_field_name("definition")
            decorators = [c for c in child.named_children if c.type == "decorator"]
        elif child.type in ("function_definition", "class_definition"):
            definition = child
            decorators = []
        else:
            continue

        if definition is None:
            continue
        declaration = _build_declaration(definition, decorators, path)
        if declaration is not None:
            declarations.append(declaration)

    return declarations


__all__ = ["Annotation", "DeclKind", "Declaration", "extract_declarations"]
