"""Decorator-driven registration glue for Python extension modules."""

from pymodgen.diagnostics import Diagnostic, DiagnosticError, Span
from pymodgen.pymodule.driver import ExpandedModule, impl_pymodule

__all__ = [
    "Diagnostic",
    "DiagnosticError",
    "ExpandedModule",
    "Span",
    "impl_pymodule",
]
