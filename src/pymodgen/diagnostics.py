"""Diagnostics collected while expanding a module body."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True)
class Span:
    """Source location. Line and column are 1-based."""

    path: str | None = None
    line: int | None = None
    col: int | None = None

    def location(self) -> str:
        parts = [self.path or "<source>"]
        if self.line is not None:
            parts.append(str(self.line))
            if self.col is not None:
                parts.append(str(self.col))
        return ":".join(parts)


@dataclass(frozen=True)
class Diagnostic:
    message: str
    span: Span = Span()

    def location(self) -> str:
        return self.span.location()

    def render(self) -> str:
        return f"{self.location()}: error: {self.message}"

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.span.path,
            "line": self.span.line,
            "col": self.span.col,
            "message": self.message,
        }


class DiagnosticError(Exception):
    """Raised with every diagnostic a pass collected.

    A pass keeps walking after the first problem so that all of them are
    reported together; this exception is how the batch leaves the pass.
    """

    def __init__(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)
        if not self.diagnostics:
            msg = "DiagnosticError requires at least one diagnostic"
            raise ValueError(msg)
        super().__init__("\n".join(d.render() for d in self.diagnostics))

    @classmethod
    def span_error(cls, span: Span, message: str) -> DiagnosticError:
        return cls([Diagnostic(message=message, span=span)])

    @classmethod
    def from_list(cls, diagnostics: list[Diagnostic]) -> None:
        """Raise when ``diagnostics`` is non-empty."""
        if diagnostics:
            raise cls(diagnostics)


__all__ = ["Diagnostic", "DiagnosticError", "Span"]
