"""Parsing utilities for module bodies and their annotations."""

from pymodgen.parse.annotations import meta_to_vec, parse_meta
from pymodgen.parse.declarations import (
    Annotation,
    DeclKind,
    Declaration,
    extract_declarations,
)

__all__ = [
    "Annotation",
    "DeclKind",
    "Declaration",
    "extract_declarations",
    "meta_to_vec",
    "parse_meta",
]
