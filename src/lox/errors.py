"""Source positions and the error types shared by every pipeline stage."""
from __future__ import annotations

from dataclasses import dataclass


#describes a position captured during scanning; zero-based so editors can consume it directly
@dataclass(frozen=True, slots=True, order=True)
class SourceLocation:
    """A 0-based line/column location inside a source file."""

    line: int
    column: int

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.line}:{self.column}"


START_OF_FILE = SourceLocation(line=0, column=0)


#stores the start/end positions for highlighting user diagnostics
@dataclass(frozen=True, slots=True)
class SourceSpan:
    """Represents a source range from `start` to `end`."""

    start: SourceLocation
    end: SourceLocation

    def merge(self, other: "SourceSpan") -> "SourceSpan":
        """Return the minimal span that covers both spans."""

        return SourceSpan(start=min(self.start, other.start), end=max(self.end, other.end))

    def contains(self, location: SourceLocation) -> bool:
        """Inclusive at both ends, so a cursor just after a name still hits it."""

        return self.start <= location <= self.end

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.start} {self.end}"


#normalizes the base exception for all pipeline layers
class LoxError(Exception):
    """Base class for Lox-related errors."""

    def __init__(self, message: str, span: SourceSpan) -> None:
        super().__init__(message)
        self.span = span
        self.message = message


#parser raises this to abort the current production once the diagnostic is reported
class ParseError(LoxError):
    """Raised when the parser encounters an invalid construct."""


#interpreter failures unwind the current top-level statement through this
class LoxRuntimeError(LoxError):
    """Raised for runtime failures such as type mismatches or bad calls."""


#early `return` unwinds to the enclosing call boundary carrying its value
class ReturnUnwind(Exception):
    def __init__(self, value: object) -> None:
        super().__init__("return")
        self.value = value
